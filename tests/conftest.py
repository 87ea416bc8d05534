"""Pytest fixtures for the marketplace tests."""

import hashlib
import hmac
from decimal import Decimal

import pytest
import requests
from flask_jwt_extended import create_access_token

from core.config import Config
from core.errors import UpstreamError
from core.extensions import db, bcrypt
from main import create_app
from models.productModels import Products
from models.userModel import Users
from services.paymentGateway import GatewayConfig, RazorpayGateway

GATEWAY_SECRET = "test_gateway_secret"


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-key-that-is-long-enough-for-hs256"
    RAZORPAY_KEY_ID = "rzp_test_key"
    RAZORPAY_KEY_SECRET = GATEWAY_SECRET
    RAZORPAY_TEST_MODE = False
    RAZORPAY_TEST_AMOUNT_CEILING = "50000"
    PAYMENT_DEFAULT_CURRENCY = "INR"


class FakeGateway(RazorpayGateway):
    """Razorpay adapter with the HTTP layer replaced by canned responses.

    Signature checks run the real HMAC code. ``failure`` makes the next calls
    raise, ``on_call`` runs before a response is produced.
    """

    def __init__(self, config):
        super().__init__(config, session=requests.Session())
        self.calls = []
        self.failure = None
        self.on_call = None

    def _post(self, path, payload):
        self.calls.append((path, payload))
        if self.on_call:
            self.on_call(path, payload)
        if self.failure:
            raise self.failure
        if path == "/orders":
            return {
                "id": f"order_GW{len(self.calls):06d}",
                "amount": payload["amount"],
                "currency": payload["currency"],
                "receipt": payload["receipt"],
                "status": "created",
            }
        return {"id": f"rfnd_GW{len(self.calls):06d}", "amount": payload["amount"], "status": "processed"}

    def fail_with(self, message="Payment gateway rejected the request"):
        self.failure = UpstreamError(message)


def sign(gateway_order_id, gateway_payment_id, secret=GATEWAY_SECRET):
    body = f"{gateway_order_id}|{gateway_payment_id}"
    return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()


def _build_app(test_mode=False, ceiling="50000"):
    gateway = FakeGateway(GatewayConfig(
        key_id="rzp_test_key",
        key_secret=GATEWAY_SECRET,
        test_mode=test_mode,
        test_amount_ceiling=Decimal(ceiling),
    ))
    return create_app(TestConfig, payment_gateway=gateway)


@pytest.fixture
def app_factory():
    """Build an app with its own in-memory database; contexts are pushed and popped for you."""
    contexts = []

    def factory(**kwargs):
        app = _build_app(**kwargs)
        ctx = app.app_context()
        ctx.push()
        db.create_all()
        contexts.append(ctx)
        return app

    yield factory

    while contexts:
        ctx = contexts.pop()
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest.fixture
def gateway(app):
    return app.extensions["payment_gateway"]


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(name, email, role="buyer"):
    user = Users(
        name=name,
        email=email,
        phone="9000000000",
        password=bcrypt.generate_password_hash("password123").decode("utf-8"),
        role=role,
    )
    db.session.add(user)
    db.session.commit()
    return user


def make_product(seller, price=500000, **overrides):
    fields = dict(
        make="Maruti Suzuki",
        model="Swift",
        year=2019,
        price=Decimal(str(price)),
        location="Bengaluru",
        contact_number="9876543210",
        listed_by=seller.id,
    )
    fields.update(overrides)
    product = Products(**fields)
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def seller(app):
    return make_user("Ravi Seller", "seller@example.com", role="seller")


@pytest.fixture
def buyer(app):
    return make_user("Asha Buyer", "buyer@example.com")


@pytest.fixture
def other_buyer(app):
    return make_user("Other Buyer", "other@example.com")


@pytest.fixture
def product(seller):
    return make_product(seller)


@pytest.fixture
def order(buyer, product):
    from services.orderService import create_order

    return create_order(buyer.id, product.id, "Forum Mall parking")


def auth_headers(user):
    token = create_access_token(identity=user.id, additional_claims={"role": user.role})
    return {"Authorization": f"Bearer {token}"}
