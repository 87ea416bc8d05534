from core.errors import Conflict, Unauthorized, ValidationError
from core.imports import current_app, datetime, Decimal, InvalidOperation, ROUND_HALF_UP, case, IntegrityError, SQLAlchemyError
from models.orderModels import Order, ORDER_TRANSITIONS, PAID_ORDER_SOURCES, TERMINAL_ORDER_STATUSES
from services.orderService import get_order
from services.orderStore import apply_transition, reload_order
from services.paymentGateway import get_payment_gateway

OPEN_ORDER_STATUSES = tuple(s for s in ORDER_TRANSITIONS if s not in TERMINAL_ORDER_STATUSES)
PAYABLE_PAYMENT_STATUSES = ("pending", "failed")


def to_minor_units(amount):
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_amount(value):
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError("Amount and Order ID are required")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("Amount must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be a positive number")
    return amount


def create_gateway_order(order_id, buyer_id, amount, currency=None):
    if not order_id:
        raise ValidationError("Amount and Order ID are required")
    amount = parse_amount(amount)

    order = get_order(order_id, buyer_id)
    if order.payment_status == "completed":
        raise Conflict("Order is already paid")
    if order.status in TERMINAL_ORDER_STATUSES or order.payment_status not in PAYABLE_PAYMENT_STATUSES:
        raise Conflict(f"Order is {order.status} and can no longer be paid")
    if amount != order.price:
        raise ValidationError(f"Amount must equal the order price of {order.price.normalize():f}")

    gateway = get_payment_gateway()
    config = gateway.config
    charged = amount
    if config.test_mode and amount > config.test_amount_ceiling:
        charged = config.test_amount_ceiling
        current_app.logger.info(
            "Test mode: order %s charged %s instead of %s", order.id, charged, amount
        )

    amount_minor = to_minor_units(charged)
    gateway_order = gateway.create_order(
        amount_minor,
        currency or config.default_currency,
        receipt=f"order_rcpt_{order.id}",
        notes={"orderId": order.id, "buyerId": buyer_id, "amount": str(amount)},
    )

    updated = apply_transition(
        order.id,
        {"gateway_order_id": gateway_order["id"], "gateway_amount": amount_minor},
        payment_status=PAYABLE_PAYMENT_STATUSES,
        status=OPEN_ORDER_STATUSES,
    )
    if not updated:
        raise Conflict("Order was modified by another request, please retry")

    current_app.logger.info("Gateway order %s created for order %s", gateway_order["id"], order.id)
    return dict(gateway_order, testMode=config.test_mode)


def verify_payment(order_id, buyer_id, gateway_payment_id, gateway_order_id, gateway_signature):
    """Confirm a payment from the checkout callback.

    The HMAC signature is the only proof that the gateway captured the
    money, so nothing on the order changes unless it verifies. Replaying an
    already applied verification returns the order untouched.
    """
    if not all([gateway_payment_id, gateway_order_id, gateway_signature, order_id]):
        raise ValidationError("All payment details are required")

    order = get_order(order_id, buyer_id)
    gateway = get_payment_gateway()

    # the signature only binds the two gateway ids, so the gateway order must be this order's own
    if not order.gateway_order_id or order.gateway_order_id != gateway_order_id:
        current_app.logger.warning("Gateway order id mismatch while verifying order %s", order.id)
        raise Unauthorized("Payment verification failed")
    if not gateway.verify_signature(gateway_order_id, gateway_payment_id, gateway_signature):
        current_app.logger.warning("Invalid payment signature for order %s", order.id)
        raise Unauthorized("Payment verification failed")

    if order.gateway_payment_id == gateway_payment_id:
        return order
    if order.payment_status == "completed" or order.gateway_payment_id:
        raise Conflict("Order is already paid")
    if Order.query.filter(Order.gateway_payment_id == gateway_payment_id, Order.id != order.id).first():
        current_app.logger.warning(
            "Payment %s is already recorded on another order, refusing it for order %s",
            gateway_payment_id, order.id,
        )
        raise Conflict("Payment has already been applied to another order")

    try:
        updated = apply_transition(
            order.id,
            {
                "payment_status": "completed",
                "status": "processing",
                "gateway_payment_id": gateway_payment_id,
                "gateway_signature": gateway_signature,
                "paid_at": datetime.utcnow(),
            },
            payment_status=PAYABLE_PAYMENT_STATUSES,
            status=PAID_ORDER_SOURCES,
            gateway_order_id=(gateway_order_id,),
            gateway_payment_id=(None,),
        )
    except IntegrityError:
        raise Conflict("Payment has already been applied to another order")
    current = reload_order(order.id)
    if not updated:
        if current.gateway_payment_id == gateway_payment_id:
            return current
        if current.gateway_payment_id:
            raise Conflict("Order is already paid")
        current_app.logger.error(
            "Verified payment %s arrived for order %s in state %s/%s; needs manual refund",
            gateway_payment_id, order.id, current.status, current.payment_status,
        )
        raise Conflict(f"Order is {current.status} and can no longer be paid")

    current_app.logger.info("Payment verified for order %s", order.id)
    return current


def get_payment_details(order_id, buyer_id):
    order = get_order(order_id, buyer_id)
    return {
        "orderId": order.id,
        "amount": float(order.price),
        "currency": get_payment_gateway().config.default_currency,
        "paymentStatus": order.payment_status,
        "paymentMethod": order.payment_method,
        "gatewayOrderId": order.gateway_order_id,
        "gatewayPaymentId": order.gateway_payment_id,
        "gatewayAmount": order.gateway_amount,
        "paidAt": order.paid_at.isoformat() if order.paid_at else None,
        "refundId": order.refund_id,
        "refundedAt": order.refunded_at.isoformat() if order.refunded_at else None,
        "refundOwed": order.refund_owed,
        "product": order.product.to_dict() if order.product else None,
        "seller": order.seller.to_public_dict() if order.seller else None,
    }


def refund_payment(order_id, buyer_id, reason=None):
    """Refund a captured payment in full.

    Works on a paid order and on one cancelled while paid (refund owed).
    The order is claimed first so a second refund request cannot reach the
    gateway; if the gateway call fails the claim is dropped and the order
    stays as it was.
    """
    if not order_id:
        raise ValidationError("Order ID is required")

    order = get_order(order_id, buyer_id)
    if not order.gateway_payment_id or not (order.payment_status == "completed" or order.refund_owed):
        raise Conflict("Order is not paid or payment ID not found")
    if order.refund_requested_at is not None:
        raise Conflict("A refund for this order is already in progress")

    claimed = apply_transition(
        order.id,
        {"refund_requested_at": datetime.utcnow(), "updated_at": order.updated_at},
        refund_requested_at=(None,),
        refund_id=(None,),
        payment_status=(order.payment_status,),
    )
    if not claimed:
        raise Conflict("Order was modified by another request, please retry")

    gateway = get_payment_gateway()
    amount_minor = order.gateway_amount or to_minor_units(order.price)
    try:
        refund = gateway.refund(
            order.gateway_payment_id,
            amount_minor,
            notes={"reason": reason or "Customer requested refund", "orderId": order.id},
        )
    except Exception:
        try:
            apply_transition(
                order.id,
                {"refund_requested_at": None, "updated_at": order.updated_at},
                refund_id=(None,),
            )
        except SQLAlchemyError:
            current_app.logger.exception("Could not release the refund claim on order %s", order.id)
        raise

    # a seller-rejected order stays rejected, anything else ends cancelled
    settled = apply_transition(
        order.id,
        {
            "payment_status": "refunded",
            "status": case((Order.status == "rejected", Order.status), else_="cancelled"),
            "refund_id": refund["id"],
            "refunded_at": datetime.utcnow(),
        },
        refund_id=(None,),
        payment_status=("completed", "refunded"),
    )
    if not settled:
        current_app.logger.critical(
            "Refund %s succeeded at the gateway but order %s could not be updated", refund["id"], order.id
        )
        raise Conflict("Refund was issued but the order could not be updated")

    current_app.logger.info("Refund %s issued for order %s", refund["id"], order.id)
    refund_amount = refund.get("amount")
    if refund_amount is None:
        refund_amount = amount_minor
    return {
        "refundId": refund["id"],
        "amount": float(Decimal(refund_amount) / 100),
        "status": refund.get("status"),
    }
