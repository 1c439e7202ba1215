"""
Point calculation for student competency progress.

Everything here is a read-only aggregation over approved activities:
progress toward the target, points per competency, the advisory point-range
check used before an admin awards points, and per-competency recommendations.

Query results are mapped into the frozen records below before they leave this
module; routes and controllers never see ORM rows from here.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tifpoint.core.config import settings
from tifpoint.models.activity import Activity, ActivityStatus
from tifpoint.models.activity_type import ActivityType
from tifpoint.models.competency import Competency
from tifpoint.models.event import Event
from tifpoint.models.recognized_course import RecognizedCourse
from tifpoint.models.user import User, UserRole

UNKNOWN_NAME = "Unknown"
INVALID_REFERENCE_MESSAGE = "Invalid activity type or competency"

# Allowed points per activity type name, inclusive
POINT_RANGES = {
    "Seminar": (1, 3),
    "Course": (2, 8),
    "Program": (3, 10),
    "Research": (5, 15),
    "Achievement": (2, 20),
}
DEFAULT_POINT_RANGE = (1, 10)

PRIORITY_HIGH = "High"
PRIORITY_MEDIUM = "Medium"
PRIORITY_LOW = "Low"
_PRIORITY_RANK = {PRIORITY_HIGH: 0, PRIORITY_MEDIUM: 1, PRIORITY_LOW: 2}

RECOMMENDED_COURSES_LIMIT = 5
UPCOMING_EVENTS_LIMIT = 5


# ─────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class StudentProgress:
    total_points: int
    target_points: int
    completion_percentage: float
    remaining_points: int
    is_completed: bool


@dataclass(frozen=True)
class CompetencyPoints:
    competency: str
    competency_id: int
    points: int


@dataclass(frozen=True)
class PointValidation:
    is_valid: bool
    message: Optional[str] = None
    suggested_points: Optional[int] = None


@dataclass(frozen=True)
class CompetencyRecommendation:
    competency: str
    competency_id: int
    current_points: int
    recommended_additional_points: int
    priority: str


@dataclass(frozen=True)
class CourseRecord:
    id: int
    name: str
    provider: str
    duration: int
    point_value: int
    url: Optional[str]


@dataclass(frozen=True)
class EventRecord:
    id: int
    title: str
    description: Optional[str]
    date: datetime
    location: Optional[str]
    organizer: Optional[str]
    point_value: Optional[int]


@dataclass(frozen=True)
class Recommendations:
    progress: StudentProgress
    competency_recommendations: List[CompetencyRecommendation] = field(default_factory=list)
    recommended_courses: List[CourseRecord] = field(default_factory=list)
    upcoming_events: List[EventRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ActivitySummary:
    pending: int
    approved: int
    rejected: int
    total: int


@dataclass(frozen=True)
class StudentStanding:
    id: int
    name: str
    nim: Optional[str]
    email: str
    total_points: int
    target_points: int
    completion_percentage: float
    remaining_points: int
    is_completed: bool


# ─────────────────────────────────────────────────────────────
# Pure helpers
# ─────────────────────────────────────────────────────────────
def points_or_zero(point: Optional[int]) -> int:
    return int(point) if point is not None else 0


def build_progress(total_points: int, target_points: int) -> StudentProgress:
    percent = 0.0 if target_points <= 0 else min(100.0, (total_points / target_points) * 100.0)
    return StudentProgress(
        total_points=total_points,
        target_points=target_points,
        completion_percentage=round(percent, 2),
        remaining_points=max(target_points - total_points, 0),
        is_completed=total_points >= target_points,
    )


def check_point_range(activity_type_name: str, proposed_points: int) -> PointValidation:
    """Advisory range check for a resolved activity type name."""
    bounds = POINT_RANGES.get(activity_type_name)
    if bounds is None:
        low, high = DEFAULT_POINT_RANGE
        message = f"Points should be between {low} and {high}"
    else:
        low, high = bounds
        message = f"Points for {activity_type_name} should be between {low} and {high}"

    if low <= proposed_points <= high:
        return PointValidation(is_valid=True)

    return PointValidation(
        is_valid=False,
        message=message,
        suggested_points=min(max(proposed_points, low), high),
    )


def classify_priority(needed: float, target_per_competency: float) -> str:
    if needed > target_per_competency * 0.5:
        return PRIORITY_HIGH
    if needed > 0:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def recommend_for_competencies(
    competencies: List[tuple],
    points_by_id: dict,
    target_points: int,
) -> List[CompetencyRecommendation]:
    """
    `competencies` is a list of (id, name). The target is split evenly across
    all competencies. Result is ordered High → Medium → Low, then by points
    still needed (most first), then by competency name.
    """
    if not competencies:
        return []

    target_per_competency = target_points / len(competencies)
    ranked = []
    for competency_id, name in competencies:
        current = points_by_id.get(competency_id, 0)
        needed = max(target_per_competency - current, 0)
        priority = classify_priority(needed, target_per_competency)
        rec = CompetencyRecommendation(
            competency=name,
            competency_id=competency_id,
            current_points=current,
            recommended_additional_points=math.ceil(needed),
            priority=priority,
        )
        ranked.append(((_PRIORITY_RANK[priority], -needed, name), rec))

    ranked.sort(key=lambda item: item[0])
    return [rec for _, rec in ranked]


# ─────────────────────────────────────────────────────────────
# Calculator
# ─────────────────────────────────────────────────────────────
class PointCalculator:
    def __init__(self, db: AsyncSession, target_points: int | None = None):
        self.db = db
        self.target_points = settings.TARGET_POINTS if target_points is None else target_points

    async def compute_progress(self, user_id: int) -> StudentProgress:
        res = await self.db.execute(
            select(Activity.point).where(
                Activity.user_id == user_id,
                Activity.status == ActivityStatus.APPROVED,
            )
        )
        total = sum(points_or_zero(p) for p in res.scalars().all())
        return build_progress(total, self.target_points)

    async def points_by_competency(self, user_id: int) -> List[CompetencyPoints]:
        stmt = (
            select(
                Activity.competency_id.label("competency_id"),
                func.sum(Activity.point).label("points"),
            )
            .where(
                Activity.user_id == user_id,
                Activity.status == ActivityStatus.APPROVED,
            )
            .group_by(Activity.competency_id)
        )
        rows = (await self.db.execute(stmt)).all()

        out = []
        for r in rows:
            competency = await self.db.get(Competency, r.competency_id)
            out.append(
                CompetencyPoints(
                    competency=competency.name if competency else UNKNOWN_NAME,
                    competency_id=r.competency_id,
                    points=points_or_zero(r.points),
                )
            )
        return out

    async def validate_point_assignment(
        self,
        activity_type_id: int,
        competency_id: int,
        proposed_points: int,
    ) -> PointValidation:
        activity_type = await self.db.get(ActivityType, activity_type_id)
        competency = await self.db.get(Competency, competency_id)

        if not activity_type or not competency:
            return PointValidation(is_valid=False, message=INVALID_REFERENCE_MESSAGE)

        return check_point_range(activity_type.name, proposed_points)

    async def get_recommended_activities(
        self,
        user_id: int,
        now: datetime | None = None,
    ) -> Recommendations:
        now = now or datetime.now(timezone.utc)

        progress = await self.compute_progress(user_id)
        earned = await self.points_by_competency(user_id)
        points_by_id = {c.competency_id: c.points for c in earned}

        comp_rows = (
            await self.db.execute(
                select(Competency.id, Competency.name).order_by(Competency.name.asc(), Competency.id.asc())
            )
        ).all()
        recommendations = recommend_for_competencies(
            [(r.id, r.name) for r in comp_rows],
            points_by_id,
            self.target_points,
        )

        courses = (
            await self.db.execute(
                select(RecognizedCourse)
                .order_by(RecognizedCourse.point_value.desc(), RecognizedCourse.id.asc())
                .limit(RECOMMENDED_COURSES_LIMIT)
            )
        ).scalars().all()

        events = (
            await self.db.execute(
                select(Event)
                .where(Event.date >= now)
                .order_by(Event.date.asc(), Event.id.asc())
                .limit(UPCOMING_EVENTS_LIMIT)
            )
        ).scalars().all()

        return Recommendations(
            progress=progress,
            competency_recommendations=recommendations,
            recommended_courses=[_course_record(c) for c in courses],
            upcoming_events=[_event_record(e) for e in events],
        )

    async def activity_summary(self, user_id: int) -> ActivitySummary:
        rows = (
            await self.db.execute(
                select(Activity.status, func.count(Activity.id))
                .where(Activity.user_id == user_id)
                .group_by(Activity.status)
            )
        ).all()
        counts = {status: int(n or 0) for status, n in rows}
        return ActivitySummary(
            pending=counts.get(ActivityStatus.PENDING, 0),
            approved=counts.get(ActivityStatus.APPROVED, 0),
            rejected=counts.get(ActivityStatus.REJECTED, 0),
            total=sum(counts.values()),
        )

    async def all_students_progress(self) -> List[StudentStanding]:
        stmt = (
            select(
                User.id,
                User.name,
                User.nim,
                User.email,
                func.coalesce(func.sum(Activity.point), 0).label("total_points"),
            )
            .select_from(User)
            .join(
                Activity,
                and_(
                    Activity.user_id == User.id,
                    Activity.status == ActivityStatus.APPROVED,
                ),
                isouter=True,
            )
            .where(User.role == UserRole.MAHASISWA)
            .group_by(User.id, User.name, User.nim, User.email)
            .order_by(User.id.asc())
        )
        rows = (await self.db.execute(stmt)).all()

        standings = []
        for r in rows:
            progress = build_progress(int(r.total_points or 0), self.target_points)
            standings.append(
                StudentStanding(
                    id=r.id,
                    name=r.name,
                    nim=r.nim,
                    email=r.email,
                    total_points=progress.total_points,
                    target_points=progress.target_points,
                    completion_percentage=progress.completion_percentage,
                    remaining_points=progress.remaining_points,
                    is_completed=progress.is_completed,
                )
            )
        return standings


def _course_record(c: RecognizedCourse) -> CourseRecord:
    return CourseRecord(
        id=c.id,
        name=c.name,
        provider=c.provider,
        duration=int(c.duration or 0),
        point_value=int(c.point_value or 0),
        url=c.url,
    )


def _event_record(e: Event) -> EventRecord:
    return EventRecord(
        id=e.id,
        title=e.title,
        description=e.description,
        date=e.date,
        location=e.location,
        organizer=e.organizer,
        point_value=e.point_value,
    )
