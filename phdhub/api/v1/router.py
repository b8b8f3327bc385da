from fastapi import APIRouter
from phdhub.api.v1.endpoints import posts, comments, likes, communities, events, search, webhooks, users, research

api_router = APIRouter()

# Forum
api_router.include_router(communities.router, prefix="/communities", tags=["Communities"])
api_router.include_router(posts.router, prefix="/posts", tags=["Posts"])
api_router.include_router(comments.router, prefix="/comments", tags=["Comments"])
api_router.include_router(likes.router, prefix="/likes", tags=["Likes"])

# Calendar, search, profiles
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(search.router, prefix="/search", tags=["Search"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Research groups
api_router.include_router(research.router, prefix="/research", tags=["Research"])

# Identity provider callbacks
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
