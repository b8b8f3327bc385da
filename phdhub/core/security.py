import base64
import hashlib
import hmac
import time
from typing import Optional, Dict, Any

from jose import JWTError, jwt

from phdhub.core.config import settings
from phdhub.core.exceptions import UnauthorizedError, InvalidRequestError

WEBHOOK_SECRET_PREFIX = "whsec_"


def decode_session_token(token: str) -> Dict[str, Any]:
    """Verify an identity-provider session token and return its claims"""
    if not settings.IDENTITY_JWT_KEY:
        raise UnauthorizedError("Session verification is not configured")

    try:
        payload = jwt.decode(
            token,
            settings.IDENTITY_JWT_KEY,
            algorithms=[settings.IDENTITY_JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError:
        raise UnauthorizedError("Could not validate session")

    if not payload.get("sub"):
        raise UnauthorizedError("Invalid session payload")

    return payload


def _webhook_key(secret: str) -> bytes:
    if secret.startswith(WEBHOOK_SECRET_PREFIX):
        return base64.b64decode(secret[len(WEBHOOK_SECRET_PREFIX):])
    return secret.encode()


def sign_webhook(payload: bytes, msg_id: str, timestamp: str, secret: str) -> str:
    """Compute the ``v1,<base64>`` signature for a webhook delivery"""
    signed_content = f"{msg_id}.{timestamp}.".encode() + payload
    digest = hmac.new(_webhook_key(secret), signed_content, hashlib.sha256).digest()
    return f"v1,{base64.b64encode(digest).decode()}"


def verify_webhook_signature(
    payload: bytes,
    msg_id: Optional[str],
    timestamp: Optional[str],
    signature_header: Optional[str],
    secret: str,
    tolerance_seconds: int = 300,
    now: Optional[float] = None,
) -> None:
    """
    Verify a user-change webhook delivery.

    The signature header may carry several space-separated ``v1,<sig>``
    entries (secret rotation); any match is accepted. Raises
    InvalidRequestError on missing headers, a stale timestamp or a bad
    signature.
    """
    if not msg_id or not timestamp or not signature_header:
        raise InvalidRequestError("Missing webhook signature headers")

    try:
        sent_at = int(timestamp)
    except ValueError:
        raise InvalidRequestError("Invalid webhook timestamp")

    current = time.time() if now is None else now
    if abs(current - sent_at) > tolerance_seconds:
        raise InvalidRequestError("Webhook timestamp outside tolerance")

    expected = sign_webhook(payload, msg_id, timestamp, secret)
    for candidate in signature_header.split():
        if hmac.compare_digest(expected, candidate):
            return

    raise InvalidRequestError("Invalid webhook signature")
