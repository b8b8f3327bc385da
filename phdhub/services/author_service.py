"""
Author Service - attaches identity-provider display fields to rows

Every list view resolves all of its distinct authors with one batched
directory call instead of one call per row.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from phdhub.core.exceptions import IdentityServiceError
from phdhub.core.logging_config import logger
from phdhub.modules.identity import IdentityDirectory, IdentityProfile
from phdhub.models.post import Post, Comment
from phdhub.schemas.post import PostResponse, CommentResponse


def _author_fields(profile: Optional[IdentityProfile]) -> Dict[str, Optional[str]]:
    if profile is None:
        return {"author_username": None, "author_profile_image_url": None}
    return {
        "author_username": profile.username,
        "author_profile_image_url": profile.image_url,
    }


def post_response(post: Post, profile: Optional[IdentityProfile]) -> PostResponse:
    data = PostResponse.model_validate(post).model_dump()
    data.update(_author_fields(profile))
    return PostResponse(**data)


def comment_response(comment: Comment, profile: Optional[IdentityProfile]) -> CommentResponse:
    data = CommentResponse.model_validate(comment).model_dump()
    data.update(_author_fields(profile))
    return CommentResponse(**data)


class AuthorService:
    """Batch author enrichment for posts and comments"""

    def __init__(self, directory: IdentityDirectory):
        self.directory = directory

    async def profiles_for(self, user_ids: Iterable[Optional[str]]) -> Dict[str, IdentityProfile]:
        return await self.directory.get_profiles(user_ids)

    async def enrich_posts(self, posts: Sequence[Post]) -> List[PostResponse]:
        profiles = await self.profiles_for(p.author_id for p in posts)
        return [post_response(p, profiles.get(p.author_id)) for p in posts]

    async def enrich_post(self, post: Post) -> PostResponse:
        return (await self.enrich_posts([post]))[0]

    async def enrich_comments(self, comments: Sequence[Comment]) -> List[CommentResponse]:
        profiles = await self.profiles_for(c.author_id for c in comments)
        return [comment_response(c, profiles.get(c.author_id)) for c in comments]

    # ==================== Committed writes ====================

    async def author_after_write(self, author_id: str) -> Optional[IdentityProfile]:
        """
        Author profile for a row that is already committed.

        The write stands whether or not the provider answers, so a failed
        lookup leaves the author fields empty instead of failing the request.
        """
        try:
            return await self.directory.get_profile(author_id)
        except IdentityServiceError as e:
            logger.warning(f"[Authors] Returning {author_id}'s row without author fields: {e.message}")
            return None

    async def enrich_written_post(self, post: Post) -> PostResponse:
        return post_response(post, await self.author_after_write(post.author_id))

    async def enrich_written_comment(self, comment: Comment) -> CommentResponse:
        return comment_response(comment, await self.author_after_write(comment.author_id))
