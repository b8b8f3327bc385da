"""
PhD Hub client view state.

Per-community feed state with optimistic like toggles, lazily loaded
comment threads and post editing, reconciled against the server's
authoritative responses.
"""

from .config import ClientConfig
from .api import HubApiClient, ApiError
from .feed import CommunityFeed, PostView, CommentThread, PendingOperation

__all__ = [
    "ClientConfig",
    "HubApiClient",
    "ApiError",
    "CommunityFeed",
    "PostView",
    "CommentThread",
    "PendingOperation",
]
