from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class StudentProgressOut(BaseModel):
    total_points: int
    target_points: int
    completion_percentage: float
    remaining_points: int
    is_completed: bool

    model_config = {"from_attributes": True}


class CompetencyPointsOut(BaseModel):
    competency: str
    competency_id: int
    points: int

    model_config = {"from_attributes": True}


class ValidatePointsIn(BaseModel):
    activity_type_id: int
    competency_id: int
    points: int


class PointValidationOut(BaseModel):
    is_valid: bool
    message: Optional[str] = None
    suggested_points: Optional[int] = None

    model_config = {"from_attributes": True}


class CompetencyRecommendationOut(BaseModel):
    competency: str
    competency_id: int
    current_points: int
    recommended_additional_points: int
    priority: str = Field(description="High, Medium or Low")

    model_config = {"from_attributes": True}


class RecommendedCourseOut(BaseModel):
    id: int
    name: str
    provider: str
    duration: int
    point_value: int
    url: Optional[str] = None

    model_config = {"from_attributes": True}


class UpcomingEventOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    date: datetime
    location: Optional[str] = None
    organizer: Optional[str] = None
    point_value: Optional[int] = None

    model_config = {"from_attributes": True}


class RecommendationsOut(BaseModel):
    progress: StudentProgressOut
    competency_recommendations: List[CompetencyRecommendationOut]
    recommended_courses: List[RecommendedCourseOut]
    upcoming_events: List[UpcomingEventOut]

    model_config = {"from_attributes": True}
