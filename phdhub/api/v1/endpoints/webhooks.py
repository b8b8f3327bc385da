"""
Identity Provider Webhooks

Keeps the local users table in step with the identity provider.
Configure this URL in the provider dashboard: /api/webhooks/identity
"""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
from typing import Optional, Dict, Any
import json

from phdhub.core.config import settings
from phdhub.core.database import get_db
from phdhub.core.exceptions import InvalidRequestError
from phdhub.core.logging_config import logger
from phdhub.core.security import verify_webhook_signature
from phdhub.models.user import User


router = APIRouter()

USER_UPSERT_EVENTS = ("user.created", "user.updated")
USER_DELETE_EVENT = "user.deleted"


def mirrored_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map a provider user object onto the mirrored User columns"""
    emails = data.get("email_addresses") or []
    return {
        "email": emails[0].get("email_address") if emails else None,
        "first_name": data.get("first_name"),
        "last_name": data.get("last_name"),
        "username": data.get("username"),
        "external_accounts": data.get("external_accounts") or None,
    }


async def upsert_user(data: Dict[str, Any], db: AsyncSession) -> User:
    user = await db.get(User, data["id"])
    if user is None:
        user = User(id=data["id"])
        db.add(user)
    for field, value in mirrored_fields(data).items():
        setattr(user, field, value)
    await db.commit()
    return user


@router.post("/identity")
async def identity_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    svix_id: Optional[str] = Header(None, alias="svix-id"),
    svix_timestamp: Optional[str] = Header(None, alias="svix-timestamp"),
    svix_signature: Optional[str] = Header(None, alias="svix-signature"),
):
    """
    Handle user lifecycle events:
    - user.created / user.updated: upsert the mirrored fields
    - user.deleted: remove the local row
    Other event types are acknowledged and ignored.
    """
    if not settings.WEBHOOK_SECRET:
        logger.warning("[Webhook] Webhook secret not configured")
        return {"status": "skipped", "reason": "webhook not configured"}

    body = await request.body()
    try:
        verify_webhook_signature(
            body,
            svix_id,
            svix_timestamp,
            svix_signature,
            settings.WEBHOOK_SECRET,
            tolerance_seconds=settings.WEBHOOK_TOLERANCE_SECONDS,
        )
    except InvalidRequestError as e:
        logger.warning(f"[Webhook] Rejected delivery {svix_id}: {e.message}")
        raise

    try:
        payload = json.loads(body)
        event_type = payload["type"]
        data = payload["data"]
        user_id = data["id"]
    except (ValueError, KeyError, TypeError):
        raise InvalidRequestError("Malformed webhook payload")

    logger.info(f"[Webhook] Received {event_type} for user {user_id}")

    if event_type in USER_UPSERT_EVENTS:
        await upsert_user(data, db)
    elif event_type == USER_DELETE_EVENT:
        await db.execute(delete(User).where(User.id == user_id))
        await db.commit()
    else:
        return {"status": "ignored", "type": event_type}

    return {"status": "processed", "type": event_type}
