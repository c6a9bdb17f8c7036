"""
Helpers for faking the Stripe side of checkout and webhooks.
"""

import hashlib
import hmac
import json
import time
from itertools import count

from core.stripe_integration.gateway import HostedSession

WEBHOOK_SECRET = "whsec_test_secret"


def sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    """Build a ``Stripe-Signature`` header the way Stripe signs deliveries."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_completed(session_id, user_id, order_ids, payment_status="paid", event_type="checkout.session.completed", metadata=None):
    if metadata is None:
        metadata = {
            "userId": str(user_id),
            "orderIds": ",".join(str(order_id) for order_id in order_ids),
        }
    return json.dumps(
        {
            "id": f"evt_{session_id}",
            "object": "event",
            "type": event_type,
            "data": {
                "object": {
                    "id": session_id,
                    "object": "checkout.session",
                    "payment_status": payment_status,
                    "payment_intent": "pi_test_123",
                    "metadata": metadata,
                }
            },
        }
    )


class FakeGateway:
    """Records checkout sessions instead of calling Stripe."""

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.sessions = []
        self._ids = count(1)

    def create_checkout_session(self, **params):
        if self.fail_with is not None:
            raise self.fail_with
        session_id = f"cs_test_{next(self._ids)}"
        self.sessions.append(dict(params, id=session_id))
        return HostedSession(id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}")

    @property
    def last(self):
        return self.sessions[-1]
