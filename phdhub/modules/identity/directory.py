"""Identity provider user directory: batched display-field lookups."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Any

import httpx

from phdhub.core.config import settings
from phdhub.core.exceptions import IdentityServiceError
from phdhub.core.logging_config import logger


@dataclass
class IdentityProfile:
    """Display fields the identity provider owns for one user"""
    id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    email: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def display_name(self, fallback: str = "User") -> str:
        return self.full_name or self.username or fallback

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "IdentityProfile":
        emails = data.get("email_addresses") or []
        return cls(
            id=data["id"],
            username=data.get("username"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            image_url=data.get("image_url") or data.get("profile_image_url"),
            email=emails[0].get("email_address") if emails else None,
        )


class IdentityDirectory:
    """
    Resolve user ids to display fields through the identity provider's
    user-list endpoint.

    One list view costs one HTTP round-trip per BATCH_SIZE distinct users,
    never one per row.
    """

    BATCH_SIZE = 100

    def __init__(
        self,
        api_url: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or settings.IDENTITY_API_URL).rstrip("/")
        self.secret_key = secret_key if secret_key is not None else settings.IDENTITY_SECRET_KEY
        self.timeout = timeout or settings.IDENTITY_TIMEOUT
        self.transport = transport

    async def fetch_users(self, user_ids: List[str]) -> List[Dict[str, Any]]:
        """Fetch raw user objects for one batch of ids"""
        params = [("user_id", uid) for uid in user_ids]
        params.append(("limit", str(len(user_ids))))

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(
                f"{self.api_url}/users",
                params=params,
                headers={"Authorization": f"Bearer {self.secret_key}"},
            )
            response.raise_for_status()
            return response.json()

    async def get_profiles(self, user_ids: Iterable[Optional[str]]) -> Dict[str, IdentityProfile]:
        """
        Resolve distinct ids to profiles.

        Ids the provider does not know (deleted users) map to an empty
        profile so callers can always index the result.
        """
        unique_ids = list(dict.fromkeys(uid for uid in user_ids if uid))
        profiles: Dict[str, IdentityProfile] = {uid: IdentityProfile(id=uid) for uid in unique_ids}
        if not unique_ids:
            return profiles

        if not self.secret_key:
            logger.warning("[Identity] IDENTITY_SECRET_KEY not set - author fields left empty")
            return profiles

        for start in range(0, len(unique_ids), self.BATCH_SIZE):
            batch = unique_ids[start:start + self.BATCH_SIZE]
            try:
                users = await self.fetch_users(batch)
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"[Identity] User lookup failed for {len(batch)} ids: {e}")
                raise IdentityServiceError()

            for user in users:
                if user.get("id") in profiles:
                    profiles[user["id"]] = IdentityProfile.from_api(user)

        logger.debug(f"[Identity] Resolved {len(unique_ids)} users")
        return profiles

    async def get_profile(self, user_id: str) -> IdentityProfile:
        profiles = await self.get_profiles([user_id])
        return profiles[user_id]


identity_directory = IdentityDirectory()
