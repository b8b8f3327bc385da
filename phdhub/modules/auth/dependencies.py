from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from phdhub.core.config import settings
from phdhub.core.exceptions import UnauthorizedError
from phdhub.core.logging_config import logger, user_id_var
from phdhub.core.security import decode_session_token
from phdhub.modules.identity import IdentityDirectory, identity_directory
from phdhub.utils.storage_client import StorageClient, storage_client

security = HTTPBearer(auto_error=False)


def _session_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.IDENTITY_SESSION_COOKIE)


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Get the authenticated caller's identity-provider user id"""
    token = _session_token(request, credentials)
    if not token:
        raise UnauthorizedError()

    try:
        payload = decode_session_token(token)
    except UnauthorizedError as e:
        logger.log_auth_event("session", success=False, reason=e.message)
        raise

    user_id = payload["sub"]
    user_id_var.set(user_id)
    return user_id


def get_identity_directory() -> IdentityDirectory:
    """Identity provider directory (overridable in tests)"""
    return identity_directory


def get_storage_client() -> StorageClient:
    """Object storage client (overridable in tests)"""
    return storage_client
