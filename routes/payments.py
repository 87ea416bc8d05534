from core.imports import Blueprint, jsonify, get_jwt_identity, jwt_required, request
from services import paymentService

payments_bp = Blueprint("payments", __name__)


def _field(data, name, gateway_name):
    """Accept our camelCase key or the razorpay_* key the checkout widget posts back."""
    return data.get(name) or data.get(gateway_name)


@payments_bp.route('/api/payments/create-order', methods=['POST'])
@jwt_required()
def create_payment_order():
    """
    Create a gateway order for a local order
    ---
    tags:
      - Payments
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - amount
            - orderId
          properties:
            amount:
              type: number
              example: 500000
            currency:
              type: string
              example: "INR"
            orderId:
              type: string
              example: "65f1c2a9e4b0a1b2c3d4e5f6"
    responses:
      200:
        description: Gateway order created
      400:
        description: Missing or invalid amount/orderId
      404:
        description: Order not found
      409:
        description: Order is already paid or closed
      502:
        description: Payment gateway failure
    """
    data = request.get_json(silent=True) or {}
    gateway_order = paymentService.create_gateway_order(
        data.get("orderId"),
        get_jwt_identity(),
        data.get("amount"),
        currency=data.get("currency"),
    )
    return jsonify({"success": True, "data": gateway_order}), 200


@payments_bp.route('/api/payments/verify', methods=['POST'])
@jwt_required()
def verify_payment():
    """
    Verify the gateway signature of a completed checkout
    ---
    tags:
      - Payments
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            orderId:
              type: string
            gatewayPaymentId:
              type: string
              example: "pay_29QQoUBi66xm2f"
            gatewayOrderId:
              type: string
              example: "order_9A33XWu170gUtm"
            gatewaySignature:
              type: string
    responses:
      200:
        description: Payment verified, order is processing
      400:
        description: Missing payment details
      401:
        description: Signature mismatch or not this order's gateway order
      404:
        description: Order not found
      409:
        description: Order can no longer be paid or the payment is already used
    """
    data = request.get_json(silent=True) or {}
    order = paymentService.verify_payment(
        data.get("orderId"),
        get_jwt_identity(),
        _field(data, "gatewayPaymentId", "razorpay_payment_id"),
        _field(data, "gatewayOrderId", "razorpay_order_id"),
        _field(data, "gatewaySignature", "razorpay_signature"),
    )
    return jsonify({
        "success": True,
        "message": "Payment verified successfully",
        "data": order.to_dict()
    }), 200


@payments_bp.route('/api/payments/<string:order_id>', methods=['GET'])
@jwt_required()
def get_payment_details(order_id):
    """
    Payment details of an order
    ---
    tags:
      - Payments
    security:
      - Bearer: []
    parameters:
      - name: order_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Payment details; amount is always the order price
      404:
        description: Order not found
    """
    details = paymentService.get_payment_details(order_id, get_jwt_identity())
    return jsonify({"success": True, "data": details}), 200


@payments_bp.route('/api/payments/refund', methods=['POST'])
@jwt_required()
def refund_payment():
    """
    Refund the payment of an order
    ---
    tags:
      - Payments
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            orderId:
              type: string
            reason:
              type: string
              example: "Buyer changed their mind"
    responses:
      200:
        description: Refund processed
      404:
        description: Order not found
      409:
        description: Nothing to refund
      502:
        description: Payment gateway failure, order unchanged
    """
    data = request.get_json(silent=True) or {}
    refund = paymentService.refund_payment(data.get("orderId"), get_jwt_identity(), reason=data.get("reason"))
    return jsonify({
        "success": True,
        "message": "Refund processed successfully",
        "data": refund
    }), 200
