from core.extensions import db
from core.imports import datetime
from core.models import generate_object_id

ORDER_STATUSES = ("pending", "accepted", "processing", "rejected", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded", "cancelled")
PAYMENT_METHODS = ("cash", "online")

TERMINAL_ORDER_STATUSES = ("completed", "cancelled", "rejected")

# allowed edges of the order state machine for seller and buyer actions
ORDER_TRANSITIONS = {
    "pending": ("accepted", "rejected", "cancelled"),
    "accepted": ("processing", "rejected", "cancelled"),
    "processing": ("completed", "rejected", "cancelled"),
    "completed": (),
    "cancelled": (),
    "rejected": (),
}

# a verified payment moves an open order to processing, skipping acceptance
PAID_ORDER_SOURCES = ("pending", "accepted")


def can_transition(current, new):
    return new in ORDER_TRANSITIONS.get(current, ())


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.String(24), primary_key=True, default=generate_object_id)
    buyer_id = db.Column(db.String(24), db.ForeignKey("users.id"), nullable=False, index=True)
    seller_id = db.Column(db.String(24), db.ForeignKey("users.id"), nullable=False, index=True)
    product_id = db.Column(db.String(24), db.ForeignKey("products.id"), nullable=False)

    price = db.Column(db.Numeric(12, 2), nullable=False)  # snapshot of the listing price
    status = db.Column(db.String(20), nullable=False, default="pending")
    payment_status = db.Column(db.String(20), nullable=False, default="pending")
    payment_method = db.Column(db.String(20), nullable=False, default="cash")

    meeting_location = db.Column(db.String(500), nullable=False)
    meeting_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    gateway_order_id = db.Column(db.String(100), nullable=True)
    gateway_amount = db.Column(db.BigInteger, nullable=True)  # minor units actually charged
    gateway_payment_id = db.Column(db.String(100), nullable=True, unique=True)
    gateway_signature = db.Column(db.String(200), nullable=True)
    paid_at = db.Column(db.DateTime, nullable=True)

    refund_id = db.Column(db.String(100), nullable=True)
    refund_requested_at = db.Column(db.DateTime, nullable=True)
    refunded_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    buyer = db.relationship("Users", foreign_keys=[buyer_id], backref="orders")
    seller = db.relationship("Users", foreign_keys=[seller_id])
    product = db.relationship("Products")

    @property
    def refund_owed(self):
        """Cancelled after payment but the gateway refund has not gone through yet."""
        return self.payment_status == "refunded" and self.refund_id is None

    def to_dict(self):
        return {
            "id": self.id,
            "buyer": self.buyer_id,
            "seller": self.seller.to_public_dict() if self.seller else self.seller_id,
            "product": self.product.to_dict() if self.product else self.product_id,
            "price": float(self.price),
            "status": self.status,
            "paymentStatus": self.payment_status,
            "paymentMethod": self.payment_method,
            "meetingLocation": self.meeting_location,
            "meetingDate": _isoformat(self.meeting_date),
            "gatewayOrderId": self.gateway_order_id,
            "gatewayPaymentId": self.gateway_payment_id,
            "paidAt": _isoformat(self.paid_at),
            "refundId": self.refund_id,
            "refundedAt": _isoformat(self.refunded_at),
            "refundOwed": self.refund_owed,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }


def _isoformat(value):
    return value.isoformat() if value else None
