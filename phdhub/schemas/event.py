"""Pydantic schemas for calendar events"""
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional
from datetime import datetime, timezone


class EventCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    link: str = Field(..., min_length=1, max_length=1024)
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime = Field(..., alias="endTime")

    @field_validator("start_time", "end_time")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        # Stored timestamps are naive UTC
        if v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def check_time_range(self):
        if self.end_time < self.start_time:
            raise ValueError("endTime must not be earlier than startTime")
        return self


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    link: str
    start_time: datetime
    end_time: datetime
    user_id: str
    created_at: datetime
