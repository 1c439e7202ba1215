from typing import Dict, List, Optional

from pydantic import BaseModel

from tifpoint.schemas.activity import ActivityDetailOut
from tifpoint.schemas.auth import UserInfo
from tifpoint.schemas.progress import CompetencyPointsOut, StudentProgressOut


class StudentDashboardOut(StudentProgressOut):
    pending_activities_count: int
    approved_activities_count: int
    activity_history: List[ActivityDetailOut]
    points_by_competency: List[CompetencyPointsOut]
    recent_approved_activities: List[ActivityDetailOut]


class StudentStandingOut(StudentProgressOut):
    id: int
    name: str
    nim: Optional[str] = None
    email: str


class AdminOverviewOut(BaseModel):
    total_students: int
    total_activities: int
    pending_activities: int
    approved_activities: int
    rejected_activities: int
    completed_students: int
    in_progress_students: int
    not_started_students: int


class CompetencyStatOut(BaseModel):
    competency: str
    total_points: int
    activities_count: int


class AdminDashboardOut(BaseModel):
    overview: AdminOverviewOut
    student_progress: List[StudentStandingOut]
    recent_pending_activities: List[ActivityDetailOut]
    competency_stats: List[CompetencyStatOut]
    target_points: int


class ActivitiesByStatusOut(BaseModel):
    pending: int
    approved: int
    rejected: int


class StudentStatisticsOut(BaseModel):
    student: UserInfo
    statistics: StudentProgressOut
    activities_by_status: ActivitiesByStatusOut
    points_by_competency: Dict[str, int]
    activities: List[ActivityDetailOut]


class LeaderboardEntryOut(BaseModel):
    rank: int
    id: int
    name: str
    nim: Optional[str] = None
    total_points: int
    completion_percentage: float
    is_completed: bool


class LeaderboardOut(BaseModel):
    leaderboard: List[LeaderboardEntryOut]
    target_points: int


class StatusCountsOut(BaseModel):
    total_activities: int
    pending_activities: int
    approved_activities: int
    rejected_activities: int


class TypeStatOut(BaseModel):
    type: str
    count: int
    total_points: int


class CompetencyCountOut(BaseModel):
    competency: str
    count: int
    total_points: int


class MonthlyTrendOut(BaseModel):
    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0


class ActivityStatisticsOut(BaseModel):
    overview: StatusCountsOut
    activities_by_type: List[TypeStatOut]
    activities_by_competency: List[CompetencyCountOut]
    monthly_trends: Dict[str, MonthlyTrendOut]
