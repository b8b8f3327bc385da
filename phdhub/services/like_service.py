"""
Like Service - atomic like toggle

A toggle is one transaction built from conditional statements, never a
read-then-write:

1. DELETE the caller's like row, if any.
2. If a row was deleted, decrement posts.like_count in place.
3. Otherwise increment posts.like_count in place (no row means no post),
   then INSERT the like. The (user_id, post_id) unique constraint rejects a
   concurrent duplicate insert, which rolls the increment back with it.

Any failure rolls back the whole unit, so like_count always equals the
number of like rows for the post.
"""

from dataclasses import dataclass
from typing import List

from sqlalchemy import select, delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from phdhub.core.exceptions import InternalError, NotFoundError
from phdhub.core.logging_config import logger
from phdhub.models.post import Post, Like


@dataclass
class ToggleResult:
    liked: bool
    like_count: int


class LikeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def toggle(self, user_id: str, post_id: str) -> ToggleResult:
        try:
            deleted = await self.db.execute(
                delete(Like)
                .where(Like.user_id == user_id, Like.post_id == post_id)
                .execution_options(synchronize_session=False)
            )

            if deleted.rowcount:
                liked = False
                await self.db.execute(
                    update(Post)
                    .where(Post.id == post_id)
                    .values(like_count=Post.like_count - 1)
                    .execution_options(synchronize_session=False)
                )
            else:
                liked = True
                bumped = await self.db.execute(
                    update(Post)
                    .where(Post.id == post_id)
                    .values(like_count=Post.like_count + 1)
                    .execution_options(synchronize_session=False)
                )
                if not bumped.rowcount:
                    await self.db.rollback()
                    raise NotFoundError("Post", post_id)

                self.db.add(Like(user_id=user_id, post_id=post_id))
                await self.db.flush()

            result = await self.db.execute(
                select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
            )
            like_count = result.scalar_one().like_count
            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"[Likes] Toggle failed for post {post_id} by {user_id}: {e}")
            raise InternalError("Failed to toggle like")

        logger.info(f"[Likes] {user_id} {'liked' if liked else 'unliked'} post {post_id} (count={like_count})")
        return ToggleResult(liked=liked, like_count=like_count)

    async def list_for_user(self, user_id: str) -> List[Like]:
        result = await self.db.execute(
            select(Like).where(Like.user_id == user_id).order_by(Like.created_at.desc())
        )
        return list(result.scalars().all())
