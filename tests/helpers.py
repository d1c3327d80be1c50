import hashlib
import hmac
import json
import time

from skillsync.config import settings
from skillsync.services.gateway import PaymentGateway, PaymentGatewayError
from skillsync.utils.token import create_access_token

WEBHOOK_SECRET = settings.stripe_webhook_secret


class FakeGateway(PaymentGateway):
    """Real signature verification, recorded checkout calls, no network."""

    def __init__(self):
        super().__init__(
            api_key="sk_test_dummy",
            webhook_secret=WEBHOOK_SECRET,
            currency="usd",
        )
        self.checkouts = []
        self.fail_checkout = False

    def create_checkout_session(self, **kwargs):
        if self.fail_checkout:
            raise PaymentGatewayError("card network down")

        self.checkouts.append(kwargs)
        session_id = f"cs_test_{len(self.checkouts)}"
        return {"id": session_id, "url": f"https://checkout.test/{session_id}"}


def auth_headers(user_id, email=None, role="student", name=None):
    token = create_access_token({
        "sub": user_id,
        "email": email or f"{user_id.lower()}@example.com",
        "name": name or user_id,
        "role": role,
    })
    return {"Authorization": f"Bearer {token}"}


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    timestamp = int(timestamp or time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def gateway_event(event_type, obj, event_id="evt_test_1"):
    return json.dumps({
        "id": event_id,
        "type": event_type,
        "data": {"object": obj},
    })
