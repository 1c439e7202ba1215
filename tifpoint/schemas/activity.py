from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tifpoint.models.activity import ActivityStatus
from tifpoint.schemas.progress import PointValidationOut


class VerifyStatus(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ActivityCreateIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    competency_id: int
    activity_type_id: int
    document_url: str = Field(..., min_length=1)
    recognized_course_id: Optional[int] = None
    event_id: Optional[int] = None


class ActivityUpdateIn(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    competency_id: Optional[int] = None
    activity_type_id: Optional[int] = None
    document_url: Optional[str] = Field(default=None, min_length=1)
    recognized_course_id: Optional[int] = None
    event_id: Optional[int] = None


class ActivityVerifyIn(BaseModel):
    status: VerifyStatus
    point: Optional[int] = Field(default=None, ge=0)
    comment: Optional[str] = Field(default=None, max_length=1000)


class NamedRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ActivityUserRef(BaseModel):
    id: int
    username: str
    name: str
    nim: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    user_id: int
    competency_id: int
    activity_type_id: int
    recognized_course_id: Optional[int] = None
    event_id: Optional[int] = None
    document_url: str
    point: Optional[int] = None
    status: ActivityStatus
    comment: Optional[str] = None
    verified_by_id: Optional[int] = None
    verified_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityDetailOut(ActivityOut):
    user: Optional[ActivityUserRef] = None
    competency: Optional[NamedRef] = None
    activity_type: Optional[NamedRef] = None


class ActivityMessageOut(BaseModel):
    message: str
    activity: ActivityOut


class ActivityVerifyOut(ActivityMessageOut):
    # advisory only, verification is never blocked by it
    point_validation: Optional[PointValidationOut] = None


class PaginationOut(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool


class ActivityPageOut(BaseModel):
    activities: List[ActivityDetailOut]
    pagination: PaginationOut
