"""Events calendar API"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from phdhub.core.database import get_db
from phdhub.core.logging_config import logger
from phdhub.models.event import Event
from phdhub.modules.auth.dependencies import get_current_user_id
from phdhub.schemas.event import EventCreate, EventResponse


router = APIRouter()


@router.get("", response_model=List[EventResponse])
async def list_events(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Event).order_by(Event.start_time.asc()))
    return result.scalars().all()


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    data: EventCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    event = Event(
        title=data.title,
        description=data.description,
        link=data.link,
        start_time=data.start_time,
        end_time=data.end_time,
        user_id=user_id,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)

    logger.info(f"[Events] {user_id} created event {event.id}")
    return event
