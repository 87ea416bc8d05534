from core.errors import Conflict, InvalidArgument, NotFound, ValidationError
from core.imports import current_app, datetime, SQLAlchemyError
from core.models import is_valid_object_id
from core.extensions import db
from models.orderModels import (
    Order,
    ORDER_TRANSITIONS,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    TERMINAL_ORDER_STATUSES,
    can_transition,
)
from services.catalog import lookup_product
from services.orderStore import apply_transition, find_order_for_buyer, find_order_for_seller, reload_order

# statuses a buyer may set directly; the rest belong to verify, refund and cancel
BUYER_PAYMENT_STATUSES = ("pending", "failed")
SELLER_ORDER_STATUSES = ("accepted", "processing", "rejected", "completed")


def create_order(buyer_id, product_id, meeting_location, payment_method=None, payment_status=None):
    if not product_id:
        raise ValidationError("productId is required")
    if not meeting_location or not str(meeting_location).strip():
        raise ValidationError("Meeting location (address) is required")

    payment_method = payment_method or "cash"
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"paymentMethod must be one of: {', '.join(PAYMENT_METHODS)}")

    payment_status = payment_status or "pending"
    if payment_status != "pending":
        raise ValidationError("New orders always start with paymentStatus 'pending'")

    product = lookup_product(product_id)
    if product.listed_by == buyer_id:
        raise ValidationError("You cannot order your own listing")

    order = Order(
        buyer_id=buyer_id,
        seller_id=product.listed_by,
        product_id=product.id,
        price=product.price,
        status="pending",
        payment_status=payment_status,
        payment_method=payment_method,
        meeting_location=str(meeting_location).strip(),
        meeting_date=datetime.utcnow(),
    )
    db.session.add(order)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    current_app.logger.info("Order %s created for product %s", order.id, product.id)
    return order


def list_orders_for_buyer(buyer_id):
    return (
        Order.query.filter_by(buyer_id=buyer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def list_orders_for_seller(seller_id):
    return (
        Order.query.filter_by(seller_id=seller_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_order(order_id, buyer_id):
    order = find_order_for_buyer(order_id, buyer_id)
    if not order:
        raise NotFound("Order not found")
    return order


def update_payment_status(order_id, buyer_id, new_payment_status):
    if new_payment_status not in PAYMENT_STATUSES:
        raise ValidationError(f"paymentStatus must be one of: {', '.join(PAYMENT_STATUSES)}")
    if new_payment_status not in BUYER_PAYMENT_STATUSES:
        raise ValidationError(
            f"paymentStatus '{new_payment_status}' can only be set through payment verification, refund or cancellation"
        )

    order = get_order(order_id, buyer_id)
    if order.payment_status == new_payment_status:
        return order
    if order.payment_status not in BUYER_PAYMENT_STATUSES or order.status in TERMINAL_ORDER_STATUSES:
        raise Conflict(f"Payment status cannot change from '{order.payment_status}'")

    updated = apply_transition(
        order.id,
        {"payment_status": new_payment_status},
        payment_status=(order.payment_status,),
        status=tuple(s for s in ORDER_TRANSITIONS if s not in TERMINAL_ORDER_STATUSES),
    )
    if not updated:
        raise Conflict("Order was modified by another request, please retry")

    current_app.logger.info("Order %s payment status set to %s", order.id, new_payment_status)
    return reload_order(order.id)


def cancel_order(order_id, buyer_id):
    """Cancel a buyer's order.

    A paid order is left as ``cancelled``/``refunded`` with no refund id: the
    refund is owed and has to be settled through the payment refund endpoint.
    The gateway is not contacted here.
    """
    if not is_valid_object_id(order_id):
        raise InvalidArgument("Invalid order id")

    order = get_order(order_id, buyer_id)
    if order.status in TERMINAL_ORDER_STATUSES:
        raise Conflict(f"Order is already {order.status} and cannot be cancelled")

    previous_payment_status = order.payment_status
    new_payment_status = "refunded" if previous_payment_status == "completed" else "cancelled"

    updated = apply_transition(
        order.id,
        {"status": "cancelled", "payment_status": new_payment_status},
        status=(order.status,),
        payment_status=(previous_payment_status,),
    )
    if not updated:
        raise Conflict("Order was modified by another request, please retry")

    if new_payment_status == "refunded":
        current_app.logger.warning("Order %s cancelled after payment; refund is owed", order.id)
    else:
        current_app.logger.info("Order %s cancelled", order.id)
    return reload_order(order.id)


def update_order_status_as_seller(order_id, seller_id, new_status):
    if new_status not in SELLER_ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(SELLER_ORDER_STATUSES)}")

    order = find_order_for_seller(order_id, seller_id)
    if not order:
        raise NotFound("Order not found")
    if not can_transition(order.status, new_status):
        raise Conflict(f"Order cannot move from '{order.status}' to '{new_status}'")

    values = {"status": new_status}
    if new_status == "rejected":
        values["payment_status"] = "refunded" if order.payment_status == "completed" else "cancelled"

    updated = apply_transition(
        order.id,
        values,
        status=(order.status,),
        payment_status=(order.payment_status,),
    )
    if not updated:
        raise Conflict("Order was modified by another request, please retry")

    current_app.logger.info("Order %s moved to %s by seller", order.id, new_status)
    return reload_order(order.id)
