"""Razorpay adapter.

Talks to the Razorpay REST API with ``requests``. It holds no state besides
its configuration and HTTP session, so the app keeps a single instance in
``app.extensions["payment_gateway"]``.
"""
from dataclasses import dataclass, field

from core.errors import UpstreamError
from core.imports import current_app, requests, hmac, hashlib, Decimal


@dataclass(frozen=True)
class GatewayConfig:
    key_id: str
    key_secret: str = field(repr=False)
    api_url: str = "https://api.razorpay.com/v1"
    timeout: float = 10.0
    test_mode: bool = False
    test_amount_ceiling: Decimal = Decimal("50000")
    default_currency: str = "INR"

    @classmethod
    def from_app_config(cls, config):
        return cls(
            key_id=config.get("RAZORPAY_KEY_ID") or "",
            key_secret=config.get("RAZORPAY_KEY_SECRET") or "",
            api_url=(config.get("RAZORPAY_API_URL") or cls.api_url).rstrip("/"),
            timeout=float(config.get("RAZORPAY_TIMEOUT") or cls.timeout),
            test_mode=bool(config.get("RAZORPAY_TEST_MODE")),
            test_amount_ceiling=Decimal(str(config.get("RAZORPAY_TEST_AMOUNT_CEILING") or cls.test_amount_ceiling)),
            default_currency=config.get("PAYMENT_DEFAULT_CURRENCY") or cls.default_currency,
        )


class RazorpayGateway:
    def __init__(self, config, session=None):
        self.config = config
        self.session = session or requests.Session()
        self.session.auth = (config.key_id, config.key_secret)

    def create_order(self, amount_minor, currency, receipt, notes):
        payload = {
            "amount": int(amount_minor),
            "currency": currency,
            "receipt": receipt,
            "notes": {key: str(value) for key, value in notes.items()},
        }
        data = self._post("/orders", payload)
        return {
            "id": data.get("id"),
            "amount": data.get("amount"),
            "currency": data.get("currency"),
            "receipt": data.get("receipt"),
            "status": data.get("status"),
        }

    def refund(self, payment_id, amount_minor, notes):
        payload = {
            "amount": int(amount_minor),
            "notes": {key: str(value) for key, value in notes.items()},
        }
        data = self._post(f"/payments/{payment_id}/refund", payload)
        return {
            "id": data.get("id"),
            "amount": data.get("amount"),
            "status": data.get("status"),
        }

    def expected_signature(self, gateway_order_id, gateway_payment_id):
        body = f"{gateway_order_id}|{gateway_payment_id}"
        return hmac.new(
            self.config.key_secret.encode("utf-8"),
            body.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def verify_signature(self, gateway_order_id, gateway_payment_id, signature):
        if not all(isinstance(value, str) for value in (gateway_order_id, gateway_payment_id, signature)):
            return False
        if not self.config.key_secret:
            current_app.logger.error("Payment signature check attempted without a gateway secret configured")
            return False
        expected = self.expected_signature(gateway_order_id, gateway_payment_id)
        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))

    def _post(self, path, payload):
        url = f"{self.config.api_url}{path}"
        try:
            response = self.session.post(url, json=payload, timeout=self.config.timeout)
        except requests.Timeout:
            current_app.logger.error("Payment gateway timed out on %s", path)
            raise UpstreamError("Payment gateway did not respond, please try again")
        except requests.RequestException as e:
            current_app.logger.error("Payment gateway request to %s failed: %s", path, type(e).__name__)
            raise UpstreamError("Payment gateway is unavailable, please try again")

        if not response.ok:
            current_app.logger.error("Payment gateway rejected %s with HTTP %s", path, response.status_code)
            raise UpstreamError("Payment gateway rejected the request")

        try:
            data = response.json()
        except ValueError:
            current_app.logger.error("Payment gateway returned an unreadable body for %s", path)
            raise UpstreamError("Payment gateway returned an invalid response")
        if not isinstance(data, dict) or not data.get("id"):
            current_app.logger.error("Payment gateway response for %s has no id", path)
            raise UpstreamError("Payment gateway returned an invalid response")
        return data


def get_payment_gateway():
    return current_app.extensions["payment_gateway"]
