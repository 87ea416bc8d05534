from core.imports import Blueprint, jwt_required, get_jwt_identity, jsonify, request
from services import orderService

buyer_orders = Blueprint("buyer_orders", __name__)


@buyer_orders.route('/api/orders', methods=['POST'])
@jwt_required()
def create_order():
    """
    Create a new order for the logged-in buyer
    ---
    tags:
      - Buyer Orders
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - name: Authorization
        in: header
        description: "JWT token as: Bearer <your_token>"
        required: true
        type: string
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - productId
            - address
          properties:
            productId:
              type: string
              example: "65f1c2a9e4b0a1b2c3d4e5f6"
            address:
              type: string
              example: "Forum Mall parking, Koramangala, Bengaluru"
            paymentMethod:
              type: string
              enum: [cash, online]
              example: "online"
            paymentStatus:
              type: string
              example: "pending"
    responses:
      201:
        description: Order created with the listing price snapshotted
      400:
        description: Missing productId or address, or invalid payment method
      404:
        description: Product not found
    """
    buyer_id = get_jwt_identity()
    data = request.get_json(silent=True) or {}

    order = orderService.create_order(
        buyer_id,
        data.get("productId"),
        data.get("address"),
        payment_method=data.get("paymentMethod"),
        payment_status=data.get("paymentStatus"),
    )
    return jsonify(order.to_dict()), 201


@buyer_orders.route('/api/orders', methods=['GET'])
@jwt_required()
def get_user_orders():
    """
    Get all orders of the logged-in buyer, newest first
    ---
    tags:
      - Buyer Orders
    security:
      - Bearer: []
    responses:
      200:
        description: List of the buyer's orders with product and seller expanded
    """
    buyer_id = get_jwt_identity()
    orders = orderService.list_orders_for_buyer(buyer_id)
    return jsonify([order.to_dict() for order in orders]), 200


@buyer_orders.route('/api/orders/<string:order_id>', methods=['GET'])
@jwt_required()
def get_user_order(order_id):
    """
    Get one order of the logged-in buyer
    ---
    tags:
      - Buyer Orders
    security:
      - Bearer: []
    parameters:
      - name: order_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: The order
      404:
        description: Order not found
    """
    order = orderService.get_order(order_id, get_jwt_identity())
    return jsonify(order.to_dict()), 200


@buyer_orders.route('/api/orders/<string:order_id>/payment', methods=['PUT'])
@jwt_required()
def update_payment_status(order_id):
    """
    Update the payment status of an order
    ---
    tags:
      - Buyer Orders
    security:
      - Bearer: []
    description: >
      Buyers may only move a payment between pending and failed. Completed
      and refunded are reached through /api/payments/verify and
      /api/payments/refund, cancelled through the cancel endpoint.
    parameters:
      - name: order_id
        in: path
        type: string
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            paymentStatus:
              type: string
              example: "failed"
    responses:
      200:
        description: Updated order
      400:
        description: Invalid payment status
      404:
        description: Order not found
      409:
        description: Payment status can no longer change
    """
    data = request.get_json(silent=True) or {}
    order = orderService.update_payment_status(order_id, get_jwt_identity(), data.get("paymentStatus"))
    return jsonify(order.to_dict()), 200


@buyer_orders.route('/api/orders/<string:order_id>/cancel', methods=['PUT'])
@jwt_required()
def cancel_order(order_id):
    """
    Cancel an order
    ---
    tags:
      - Buyer Orders
    security:
      - Bearer: []
    description: >
      A paid order ends up with paymentStatus "refunded" and refundOwed true
      until POST /api/payments/refund settles it with the gateway.
    parameters:
      - name: order_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Order cancelled
      400:
        description: Invalid order id
      404:
        description: Order not found
      409:
        description: Order is already completed, cancelled or rejected
    """
    order = orderService.cancel_order(order_id, get_jwt_identity())
    message = "Order cancelled successfully"
    if order.refund_owed:
        message = "Order cancelled successfully, a refund is pending"
    return jsonify({"message": message, "order": order.to_dict()}), 200
