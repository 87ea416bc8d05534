from core.imports import Blueprint, jsonify, get_jwt_identity, jwt_required, request, get_jwt
from services import orderService

seller_orders = Blueprint("seller_orders", __name__)


def _is_seller():
    return get_jwt().get("role") == "seller"


@seller_orders.route('/api/seller/orders', methods=['GET'])
@jwt_required()
def get_seller_orders():
    if not _is_seller():
        return jsonify({"success": False, "error": "forbidden", "message": "Unauthorized"}), 403

    orders = orderService.list_orders_for_seller(get_jwt_identity())
    return jsonify([order.to_dict() for order in orders]), 200


@seller_orders.route('/api/seller/orders/<string:order_id>/status', methods=['PUT'])
@jwt_required()
def update_seller_order_status(order_id):
    if not _is_seller():
        return jsonify({"success": False, "error": "forbidden", "message": "Unauthorized"}), 403

    data = request.get_json(silent=True) or {}
    order = orderService.update_order_status_as_seller(order_id, get_jwt_identity(), data.get("status"))
    return jsonify({"message": f"Order status updated to {order.status}", "order": order.to_dict()}), 200
