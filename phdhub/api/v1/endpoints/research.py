"""
Research Groups API

Groups, membership, activity feed, discussions and file resources.
File bytes never pass through the API: uploads and downloads use
presigned object-storage URLs.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Optional, List

from phdhub.core.database import get_db
from phdhub.core.exceptions import InvalidRequestError, NotFoundError
from phdhub.core.logging_config import logger
from phdhub.models.research import (
    ResearchGroup, ResearchGroupDiscussion, DiscussionComment, ResearchGroupResource, ActivityType
)
from phdhub.modules.auth.dependencies import (
    get_current_user_id, get_identity_directory, get_storage_client
)
from phdhub.modules.identity import IdentityDirectory
from phdhub.schemas.research import (
    ResearchGroupCreate, ResearchGroupResponse, ResearchGroupListItem, ResearchGroupDetail,
    MembershipResponse, ActivityResponse,
    DiscussionCreate, DiscussionResponse, DiscussionCommentCreate, DiscussionCommentResponse,
    ResourceCreate, ResourceResponse,
    PresignedUploadRequest, PresignedUploadResponse, DownloadRequest, DownloadResponse,
)
from phdhub.services.research_service import ResearchService
from phdhub.utils.storage_client import StorageClient


router = APIRouter()


def get_research_service(
    db: AsyncSession = Depends(get_db),
    directory: IdentityDirectory = Depends(get_identity_directory),
) -> ResearchService:
    return ResearchService(db, directory)


def check_resource_key(group_id: str, file_key: str) -> None:
    """Download keys must live under the group's own prefix"""
    if not file_key.startswith(f"resources/{group_id}/"):
        raise InvalidRequestError("File key does not belong to this group", field="fileKey")


# ==================== Groups ====================

@router.get("", response_model=List[ResearchGroupListItem])
async def list_groups(
    keyword: Optional[str] = Query(None),
    service: ResearchService = Depends(get_research_service),
):
    """Groups ordered by most recent activity, optionally filtered by title"""
    query = select(ResearchGroup).order_by(ResearchGroup.last_active.desc())
    if keyword and keyword.strip():
        query = query.where(ResearchGroup.title.ilike(f"%{keyword.strip()}%"))

    groups = (await service.db.execute(query)).scalars().all()
    images = await service.member_images(groups)

    return [
        ResearchGroupListItem(
            **ResearchGroupResponse.model_validate(g).model_dump(),
            member_count=len(g.members or []),
            member_images=images[g.id],
        )
        for g in groups
    ]


@router.post("", response_model=ResearchGroupResponse, status_code=201)
async def create_group(
    data: ResearchGroupCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Create a group; the creator becomes its first admin and member"""
    group = ResearchGroup(
        title=data.title,
        description=data.description,
        image_url=data.image_url,
        group_status=data.group_status.value,
        admins=[user_id],
        members=[user_id],
    )
    db.add(group)
    await db.commit()
    await db.refresh(group)

    logger.info(f"[Research] {user_id} created group {group.id}")
    return group


@router.get("/{group_id}", response_model=ResearchGroupDetail)
async def get_group(group_id: str, service: ResearchService = Depends(get_research_service)):
    group = await service.get_group_or_404(group_id)
    roster = await service.roster(group)
    return ResearchGroupDetail(**ResearchGroupResponse.model_validate(group).model_dump(), **roster)


# ==================== Membership ====================

@router.post("/{group_id}/membership", response_model=MembershipResponse)
async def join_group(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ResearchService = Depends(get_research_service),
):
    group = await service.join(group_id, user_id)
    return MembershipResponse(group_id=group.id, is_member=True, member_count=len(group.members))


@router.delete("/{group_id}/membership", response_model=MembershipResponse)
async def leave_group(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ResearchService = Depends(get_research_service),
):
    group = await service.leave(group_id, user_id)
    return MembershipResponse(group_id=group.id, is_member=False, member_count=len(group.members))


# ==================== Activity ====================

@router.get("/{group_id}/activity", response_model=List[ActivityResponse])
async def list_activity(group_id: str, service: ResearchService = Depends(get_research_service)):
    await service.get_group_or_404(group_id)
    activities = await service.recent_activity(group_id)
    profiles = await service.directory.get_profiles(a.user_id for a in activities)

    return [
        ActivityResponse(
            **ActivityResponse.model_validate(a).model_dump(exclude={"user_name", "user_image_url"}),
            user_name=profiles[a.user_id].display_name(),
            user_image_url=profiles[a.user_id].image_url,
        )
        for a in activities
    ]


# ==================== Discussions ====================

@router.get("/{group_id}/discussions", response_model=List[DiscussionResponse])
async def list_discussions(
    group_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ResearchService = Depends(get_research_service),
):
    await service.get_group_or_404(group_id)

    comment_counts = (
        select(DiscussionComment.discussion_id, func.count(DiscussionComment.id).label("n"))
        .group_by(DiscussionComment.discussion_id)
        .subquery()
    )
    rows = (await service.db.execute(
        select(ResearchGroupDiscussion, func.coalesce(comment_counts.c.n, 0))
        .outerjoin(comment_counts, comment_counts.c.discussion_id == ResearchGroupDiscussion.id)
        .where(ResearchGroupDiscussion.group_id == group_id)
        .order_by(ResearchGroupDiscussion.created_at.desc())
    )).all()
    profiles = await service.directory.get_profiles(d.user_id for d, _ in rows)

    return [
        DiscussionResponse(
            **DiscussionResponse.model_validate(d).model_dump(
                exclude={"author_name", "author_image_url", "comment_count"}
            ),
            author_name=profiles[d.user_id].display_name(),
            author_image_url=profiles[d.user_id].image_url,
            comment_count=count,
        )
        for d, count in rows
    ]


@router.post("/{group_id}/discussions", response_model=DiscussionResponse, status_code=201)
async def create_discussion(
    group_id: str,
    data: DiscussionCreate,
    user_id: str = Depends(get_current_user_id),
    service: ResearchService = Depends(get_research_service),
):
    group = await service.get_group_or_404(group_id)

    discussion = ResearchGroupDiscussion(
        group_id=group.id, user_id=user_id, title=data.title, content=data.content
    )
    service.db.add(discussion)
    await service.db.flush()
    service.log_activity(group, user_id, ActivityType.CREATE_DISCUSSION, {"discussion_id": discussion.id})
    await service.db.commit()
    await service.db.refresh(discussion)

    logger.info(f"[Research] {user_id} opened discussion {discussion.id} in group {group_id}")
    return DiscussionResponse.model_validate(discussion)


async def get_discussion_or_404(group_id: str, discussion_id: str, db: AsyncSession) -> ResearchGroupDiscussion:
    discussion = await db.get(ResearchGroupDiscussion, discussion_id)
    if not discussion or discussion.group_id != group_id:
        raise NotFoundError("Discussion", discussion_id)
    return discussion


@router.get(
    "/{group_id}/discussions/{discussion_id}/comments",
    response_model=List[DiscussionCommentResponse],
)
async def list_discussion_comments(
    group_id: str,
    discussion_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ResearchService = Depends(get_research_service),
):
    await get_discussion_or_404(group_id, discussion_id, service.db)

    comments = (await service.db.execute(
        select(DiscussionComment)
        .where(DiscussionComment.discussion_id == discussion_id)
        .order_by(DiscussionComment.created_at.asc())
    )).scalars().all()
    profiles = await service.directory.get_profiles(c.user_id for c in comments)

    return [
        DiscussionCommentResponse(
            **DiscussionCommentResponse.model_validate(c).model_dump(
                exclude={"author_name", "author_image_url"}
            ),
            author_name=profiles[c.user_id].display_name(),
            author_image_url=profiles[c.user_id].image_url,
        )
        for c in comments
    ]


@router.post(
    "/{group_id}/discussions/{discussion_id}/comments",
    response_model=DiscussionCommentResponse,
    status_code=201,
)
async def create_discussion_comment(
    group_id: str,
    discussion_id: str,
    data: DiscussionCommentCreate,
    user_id: str = Depends(get_current_user_id),
    service: ResearchService = Depends(get_research_service),
):
    content = data.content.strip()
    if not content:
        raise InvalidRequestError("Comment content cannot be empty", field="content")

    discussion = await get_discussion_or_404(group_id, discussion_id, service.db)
    group = await service.get_group_or_404(group_id)

    comment = DiscussionComment(discussion_id=discussion.id, user_id=user_id, content=content)
    service.db.add(comment)
    await service.db.flush()
    service.log_activity(
        group, user_id, ActivityType.ADD_DISCUSSION_COMMENT,
        {"discussion_id": discussion.id, "comment_id": comment.id},
    )
    await service.db.commit()
    await service.db.refresh(comment)

    return DiscussionCommentResponse.model_validate(comment)


# ==================== Resources ====================

@router.get("/{group_id}/resources", response_model=List[ResourceResponse])
async def list_resources(group_id: str, service: ResearchService = Depends(get_research_service)):
    await service.get_group_or_404(group_id)

    resources = (await service.db.execute(
        select(ResearchGroupResource)
        .where(ResearchGroupResource.group_id == group_id)
        .order_by(ResearchGroupResource.created_at.desc())
    )).scalars().all()
    profiles = await service.directory.get_profiles(r.user_id for r in resources)

    return [
        ResourceResponse(
            **ResourceResponse.model_validate(r).model_dump(exclude={"uploader_name"}),
            uploader_name=profiles[r.user_id].display_name(),
        )
        for r in resources
    ]


@router.post("/{group_id}/resources", response_model=ResourceResponse, status_code=201)
async def create_resource(
    group_id: str,
    data: ResourceCreate,
    user_id: str = Depends(get_current_user_id),
    service: ResearchService = Depends(get_research_service),
):
    """Record metadata for a file already uploaded through a presigned URL"""
    group = await service.get_group_or_404(group_id)
    check_resource_key(group_id, data.file_key)

    resource = ResearchGroupResource(
        group_id=group.id,
        user_id=user_id,
        title=data.title,
        description=data.description,
        file_key=data.file_key,
        file_name=data.file_name,
        file_type=data.file_type,
        file_size=data.file_size,
    )
    service.db.add(resource)
    await service.db.flush()
    service.log_activity(group, user_id, ActivityType.CREATE_RESOURCE, {"resource_id": resource.id})
    await service.db.commit()
    await service.db.refresh(resource)

    logger.info(f"[Research] {user_id} added resource {resource.id} to group {group_id}")
    return ResourceResponse.model_validate(resource)


@router.post("/{group_id}/resources/presigned-url", response_model=PresignedUploadResponse)
async def create_upload_url(
    group_id: str,
    data: PresignedUploadRequest,
    user_id: str = Depends(get_current_user_id),
    service: ResearchService = Depends(get_research_service),
    storage: StorageClient = Depends(get_storage_client),
):
    await service.get_group_or_404(group_id)
    key = storage.resource_key(group_id, data.file_name)
    return PresignedUploadResponse(url=storage.generate_upload_url(key, data.file_type), key=key)


@router.post("/{group_id}/resources/download", response_model=DownloadResponse)
async def create_download_url(
    group_id: str,
    data: DownloadRequest,
    user_id: str = Depends(get_current_user_id),
    storage: StorageClient = Depends(get_storage_client),
):
    check_resource_key(group_id, data.file_key)
    return DownloadResponse(url=storage.generate_download_url(data.file_key))


@router.get("/{group_id}/resources/{resource_id}/download")
async def download_resource(
    group_id: str,
    resource_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    storage: StorageClient = Depends(get_storage_client),
):
    """Redirect to a short-lived download URL for a stored resource"""
    resource = await db.get(ResearchGroupResource, resource_id)
    if not resource or resource.group_id != group_id:
        raise NotFoundError("Resource", resource_id)
    return RedirectResponse(storage.generate_download_url(resource.file_key), status_code=307)
