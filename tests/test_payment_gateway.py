"""Tests for the Razorpay adapter's HTTP handling and signature checks."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from conftest import GATEWAY_SECRET, sign
from core.errors import UpstreamError
from services.paymentGateway import GatewayConfig, RazorpayGateway


def response(status=200, body=None, json_error=False):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    if json_error:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = body if body is not None else {}
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def razorpay(app, session):
    config = GatewayConfig(key_id="rzp_test_key", key_secret=GATEWAY_SECRET, timeout=3.5)
    return RazorpayGateway(config, session=session)


class TestGatewayConfig:
    def test_from_app_config(self):
        config = GatewayConfig.from_app_config({
            "RAZORPAY_KEY_ID": "rzp_live_x",
            "RAZORPAY_KEY_SECRET": "s3cret",
            "RAZORPAY_API_URL": "https://gateway.example/v1/",
            "RAZORPAY_TIMEOUT": "4",
            "RAZORPAY_TEST_MODE": True,
            "RAZORPAY_TEST_AMOUNT_CEILING": "50000",
        })

        assert config.api_url == "https://gateway.example/v1"
        assert config.timeout == 4.0
        assert config.test_mode is True
        assert config.test_amount_ceiling == Decimal("50000")
        assert config.default_currency == "INR"

    def test_secret_not_in_repr(self):
        config = GatewayConfig(key_id="rzp_test_key", key_secret="very-secret-value")
        assert "very-secret-value" not in repr(config)


class TestCreateOrder:
    def test_posts_order(self, razorpay, session):
        session.post.return_value = response(body={
            "id": "order_1", "amount": 1000, "currency": "INR", "receipt": "r", "status": "created",
        })

        result = razorpay.create_order(1000, "INR", "r", {"orderId": "abc"})

        assert result == {"id": "order_1", "amount": 1000, "currency": "INR", "receipt": "r", "status": "created"}
        session.post.assert_called_once_with(
            "https://api.razorpay.com/v1/orders",
            json={"amount": 1000, "currency": "INR", "receipt": "r", "notes": {"orderId": "abc"}},
            timeout=3.5,
        )
        assert session.auth == ("rzp_test_key", GATEWAY_SECRET)

    def test_timeout(self, razorpay, session):
        session.post.side_effect = requests.Timeout("read timed out")
        with pytest.raises(UpstreamError):
            razorpay.create_order(1000, "INR", "r", {})

    def test_connection_error(self, razorpay, session):
        session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(UpstreamError):
            razorpay.create_order(1000, "INR", "r", {})

    def test_rejected_call_hides_provider_details(self, razorpay, session):
        session.post.return_value = response(status=400, body={
            "error": {"code": "BAD_REQUEST_ERROR", "description": "Authentication failed"},
        })

        with pytest.raises(UpstreamError) as exc_info:
            razorpay.create_order(1000, "INR", "r", {})

        message = exc_info.value.message
        assert "Authentication failed" not in message
        assert "400" not in message
        assert GATEWAY_SECRET not in message

    def test_unreadable_body(self, razorpay, session):
        session.post.return_value = response(json_error=True)
        with pytest.raises(UpstreamError):
            razorpay.create_order(1000, "INR", "r", {})

    def test_body_without_id(self, razorpay, session):
        session.post.return_value = response(body={"status": "created"})
        with pytest.raises(UpstreamError):
            razorpay.create_order(1000, "INR", "r", {})


class TestRefund:
    def test_posts_refund(self, razorpay, session):
        session.post.return_value = response(body={"id": "rfnd_1", "amount": 5000, "status": "processed"})

        result = razorpay.refund("pay_1", 5000, {"reason": "x"})

        assert result == {"id": "rfnd_1", "amount": 5000, "status": "processed"}
        assert session.post.call_args[0][0] == "https://api.razorpay.com/v1/payments/pay_1/refund"

    def test_gateway_down(self, razorpay, session):
        session.post.return_value = response(status=503)
        with pytest.raises(UpstreamError):
            razorpay.refund("pay_1", 5000, {})


class TestVerifySignature:
    def test_valid(self, razorpay):
        assert razorpay.verify_signature("order_1", "pay_1", sign("order_1", "pay_1"))

    def test_known_vector(self, razorpay):
        # hex HMAC-SHA256 of "order_1|pay_1" under the test secret
        assert razorpay.expected_signature("order_1", "pay_1") == sign("order_1", "pay_1")
        assert len(razorpay.expected_signature("order_1", "pay_1")) == 64

    @pytest.mark.parametrize("signature", [
        sign("pay_1", "order_1"),
        sign("order_1", "pay_1", secret="other"),
        "",
        None,
        12345,
        "ü" * 64,
    ])
    def test_invalid(self, razorpay, signature):
        assert razorpay.verify_signature("order_1", "pay_1", signature) is False

    def test_missing_secret_never_verifies(self, app):
        unconfigured = RazorpayGateway(GatewayConfig(key_id="", key_secret=""), session=MagicMock())
        assert unconfigured.verify_signature("order_1", "pay_1", sign("order_1", "pay_1", secret="")) is False
