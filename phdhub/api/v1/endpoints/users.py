"""User profiles API"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from phdhub.core.database import get_db
from phdhub.core.exceptions import NotFoundError
from phdhub.core.logging_config import logger
from phdhub.models.user import User
from phdhub.modules.auth.dependencies import get_current_user_id
from phdhub.schemas.user import ProfileUpdate, UserProfileResponse


router = APIRouter()


async def get_user_or_404(user_id: str, db: AsyncSession) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


@router.put("/me", response_model=UserProfileResponse)
async def update_my_profile(
    data: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Update the caller's locally owned profile fields.

    Identity fields (email, names, username) belong to the identity
    provider and only change through its webhook.
    """
    user = await get_user_or_404(user_id, db)

    changes = data.model_dump(exclude_unset=True)
    for field in User.PROFILE_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])

    await db.commit()
    await db.refresh(user)

    logger.info(f"[Profile] {user_id} updated {sorted(changes)}")
    return user


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_profile(user_id: str, db: AsyncSession = Depends(get_db)):
    return await get_user_or_404(user_id, db)
