from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CompetencyOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityTypeOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class RecognizedCourseOut(BaseModel):
    id: int
    name: str
    provider: str
    duration: int
    point_value: int
    url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class EventOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    date: datetime
    location: Optional[str] = None
    organizer: Optional[str] = None
    point_value: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
