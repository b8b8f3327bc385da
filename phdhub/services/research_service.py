"""
Research Service - research group membership and activity feed

Membership lives in two string arrays on the group row (admins, members).
Every membership change bumps last_active and appends an activity entry in
the same commit. Changes are conditional on membership_version, so two
concurrent joins cannot overwrite each other.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple, Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from phdhub.core.config import settings
from phdhub.core.exceptions import InternalError, InvalidRequestError, NotFoundError
from phdhub.core.logging_config import logger
from phdhub.models.research import (
    ResearchGroup, ResearchGroupActivity, ActivityType
)
from phdhub.modules.identity import IdentityDirectory, IdentityProfile
from phdhub.schemas.research import MemberInfo


def ordered_members(group: ResearchGroup) -> List[str]:
    """Admins first, then the remaining members"""
    admins = list(group.admins or [])
    return admins + [m for m in (group.members or []) if m not in admins]


def member_info(user_id: str, profile: Optional[IdentityProfile], fallback: str) -> MemberInfo:
    if profile is None:
        return MemberInfo(id=user_id, name=fallback)
    return MemberInfo(id=user_id, name=profile.display_name(fallback), image_url=profile.image_url)


class ResearchService:
    def __init__(self, db: AsyncSession, directory: IdentityDirectory):
        self.db = db
        self.directory = directory

    async def get_group_or_404(self, group_id: str) -> ResearchGroup:
        result = await self.db.execute(
            select(ResearchGroup)
            .where(ResearchGroup.id == group_id)
            .execution_options(populate_existing=True)
        )
        group = result.scalar_one_or_none()
        if not group:
            raise NotFoundError("Research group", group_id)
        return group

    def log_activity(
        self,
        group: ResearchGroup,
        user_id: str,
        activity_type: ActivityType,
        details: Optional[Dict[str, Any]] = None,
    ) -> ResearchGroupActivity:
        """Stage an activity row and bump the group's last_active (caller commits)"""
        activity = ResearchGroupActivity(
            group_id=group.id,
            user_id=user_id,
            activity_type=activity_type.value,
            details=details,
        )
        self.db.add(activity)
        group.touch()
        return activity

    # ==================== Membership ====================

    async def _update_membership(
        self,
        group_id: str,
        change: Callable[[ResearchGroup], Tuple[List[str], List[str]]],
    ) -> ResearchGroup:
        """
        Apply a membership change as a compare-and-set on membership_version.

        `change` validates the group as read and returns the new
        (members, admins). When another join or leave commits first the
        update matches no row, so the group is re-read and `change` runs
        again against the fresh arrays.
        """
        for attempt in range(settings.MEMBERSHIP_UPDATE_ATTEMPTS):
            group = await self.get_group_or_404(group_id)
            members, admins = change(group)

            result = await self.db.execute(
                update(ResearchGroup)
                .where(
                    ResearchGroup.id == group.id,
                    ResearchGroup.membership_version == group.membership_version,
                )
                .values(
                    members=members,
                    admins=admins,
                    membership_version=ResearchGroup.membership_version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                return await self.get_group_or_404(group_id)

            await self.db.rollback()
            logger.info(f"[Research] Membership of group {group_id} changed concurrently (attempt {attempt + 1})")

        raise InternalError("Group membership is changing too quickly, try again")

    async def join(self, group_id: str, user_id: str) -> ResearchGroup:
        def add_member(group: ResearchGroup) -> Tuple[List[str], List[str]]:
            if group.is_member(user_id):
                raise InvalidRequestError("User is already a member of this group")
            return list(group.members or []) + [user_id], list(group.admins or [])

        group = await self._update_membership(group_id, add_member)
        self.log_activity(group, user_id, ActivityType.JOIN_GROUP)
        await self.db.commit()

        logger.info(f"[Research] {user_id} joined group {group_id}")
        return group

    async def leave(self, group_id: str, user_id: str) -> ResearchGroup:
        def remove_member(group: ResearchGroup) -> Tuple[List[str], List[str]]:
            if not group.is_member(user_id):
                raise InvalidRequestError("User is not a member of this group")
            if group.is_admin(user_id) and len(group.admins) == 1:
                raise InvalidRequestError("The last admin cannot leave the group")
            return (
                [m for m in group.members if m != user_id],
                [a for a in group.admins if a != user_id],
            )

        group = await self._update_membership(group_id, remove_member)
        self.log_activity(group, user_id, ActivityType.LEAVE_GROUP)
        await self.db.commit()

        logger.info(f"[Research] {user_id} left group {group_id}")
        return group

    # ==================== Display data ====================

    async def member_images(self, groups: Sequence[ResearchGroup]) -> Dict[str, List[str]]:
        """Up to GROUP_PREVIEW_IMAGES avatar URLs per group, one lookup for all groups"""
        limit = settings.GROUP_PREVIEW_IMAGES
        previews = {g.id: ordered_members(g)[:limit] for g in groups}
        profiles = await self.directory.get_profiles(
            uid for ids in previews.values() for uid in ids
        )
        return {
            group_id: [profiles[uid].image_url for uid in ids if profiles[uid].image_url]
            for group_id, ids in previews.items()
        }

    async def roster(self, group: ResearchGroup) -> Dict[str, List[MemberInfo]]:
        """Admin and non-admin member display info for one group"""
        profiles = await self.directory.get_profiles(ordered_members(group))
        admins = list(group.admins or [])
        return {
            "admin_info": [member_info(uid, profiles.get(uid), "Admin") for uid in admins],
            "member_info": [
                member_info(uid, profiles.get(uid), "Member")
                for uid in group.members or [] if uid not in admins
            ],
        }

    async def recent_activity(self, group_id: str) -> List[ResearchGroupActivity]:
        result = await self.db.execute(
            select(ResearchGroupActivity)
            .where(ResearchGroupActivity.group_id == group_id)
            .order_by(ResearchGroupActivity.created_at.desc())
            .limit(settings.ACTIVITY_FEED_LIMIT)
        )
        return list(result.scalars().all())
