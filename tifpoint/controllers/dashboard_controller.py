from dataclasses import asdict
from datetime import datetime, timezone
from typing import List

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tifpoint.controllers.activity_controller import with_refs
from tifpoint.models.activity import Activity, ActivityStatus
from tifpoint.models.activity_type import ActivityType
from tifpoint.models.competency import Competency
from tifpoint.models.user import User, UserRole
from tifpoint.services.point_calculation import (
    UNKNOWN_NAME,
    PointCalculator,
    StudentStanding,
    points_or_zero,
)

HISTORY_LIMIT = 10
RECENT_APPROVED_LIMIT = 5
RECENT_PENDING_LIMIT = 10
TREND_MONTHS = 6


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────
def _months_ago(now: datetime, months: int) -> datetime:
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    return now.replace(year=year, month=month + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


async def _status_counts(db: AsyncSession) -> dict:
    rows = (
        await db.execute(select(Activity.status, func.count(Activity.id)).group_by(Activity.status))
    ).all()
    counts = {status: int(n or 0) for status, n in rows}
    return {
        "total_activities": sum(counts.values()),
        "pending_activities": counts.get(ActivityStatus.PENDING, 0),
        "approved_activities": counts.get(ActivityStatus.APPROVED, 0),
        "rejected_activities": counts.get(ActivityStatus.REJECTED, 0),
    }


async def _named_group_stats(db: AsyncSession, key_col, model, approved_only: bool) -> list:
    """Count + point sum per foreign key, with the referenced row's name ("Unknown" if gone)."""
    stmt = select(
        key_col.label("key"),
        func.count(Activity.id).label("count"),
        func.sum(Activity.point).label("points"),
    ).group_by(key_col)
    if approved_only:
        stmt = stmt.where(Activity.status == ActivityStatus.APPROVED)

    out = []
    for r in (await db.execute(stmt)).all():
        ref = await db.get(model, r.key)
        out.append(
            {
                "name": ref.name if ref else UNKNOWN_NAME,
                "count": int(r.count or 0),
                "total_points": points_or_zero(r.points),
            }
        )
    return out


# ─────────────────────────────────────────────────────────────
# Student
# ─────────────────────────────────────────────────────────────
async def get_student_dashboard(db: AsyncSession, user: User) -> dict:
    calc = PointCalculator(db)
    progress = await calc.compute_progress(user.id)
    summary = await calc.activity_summary(user.id)
    by_competency = await calc.points_by_competency(user.id)

    history = (
        await db.execute(
            with_refs(select(Activity))
            .where(Activity.user_id == user.id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(HISTORY_LIMIT)
        )
    ).scalars().all()

    recent_approved = (
        await db.execute(
            with_refs(select(Activity))
            .where(Activity.user_id == user.id, Activity.status == ActivityStatus.APPROVED)
            .order_by(Activity.verified_at.desc(), Activity.id.desc())
            .limit(RECENT_APPROVED_LIMIT)
        )
    ).scalars().all()

    return {
        **asdict(progress),
        "pending_activities_count": summary.pending,
        "approved_activities_count": summary.approved,
        "activity_history": history,
        "points_by_competency": [asdict(c) for c in by_competency],
        "recent_approved_activities": recent_approved,
    }


async def get_student_recommendations(db: AsyncSession, user: User) -> dict:
    recommendations = await PointCalculator(db).get_recommended_activities(user.id)
    return asdict(recommendations)


# ─────────────────────────────────────────────────────────────
# Admin
# ─────────────────────────────────────────────────────────────
async def get_admin_dashboard(db: AsyncSession, nim: str | None = None) -> dict:
    calc = PointCalculator(db)
    standings: List[StudentStanding] = await calc.all_students_progress()

    completed = sum(1 for s in standings if s.is_completed)
    in_progress = sum(1 for s in standings if not s.is_completed and s.total_points > 0)
    not_started = sum(1 for s in standings if s.total_points == 0)

    filtered = standings
    if nim:
        needle = nim.strip().lower()
        filtered = [s for s in standings if s.nim and needle in s.nim.lower()]
    filtered = sorted(filtered, key=lambda s: s.completion_percentage, reverse=True)

    recent_pending = (
        await db.execute(
            with_refs(select(Activity))
            .where(Activity.status == ActivityStatus.PENDING)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(RECENT_PENDING_LIMIT)
        )
    ).scalars().all()

    competency_stats = await _named_group_stats(db, Activity.competency_id, Competency, approved_only=True)

    return {
        "overview": {
            "total_students": len(standings),
            **await _status_counts(db),
            "completed_students": completed,
            "in_progress_students": in_progress,
            "not_started_students": not_started,
        },
        "student_progress": [asdict(s) for s in filtered],
        "recent_pending_activities": recent_pending,
        "competency_stats": [
            {"competency": c["name"], "total_points": c["total_points"], "activities_count": c["count"]}
            for c in competency_stats
        ],
        "target_points": calc.target_points,
    }


async def get_student_statistics(db: AsyncSession, student_id: int) -> dict:
    student = await db.get(User, student_id)
    if not student or student.role != UserRole.MAHASISWA:
        raise HTTPException(status_code=404, detail="Student not found")

    calc = PointCalculator(db)
    progress = await calc.compute_progress(student.id)
    summary = await calc.activity_summary(student.id)

    activities = (
        await db.execute(
            with_refs(select(Activity))
            .where(Activity.user_id == student.id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
        )
    ).scalars().all()

    points_by_name: dict = {}
    for a in activities:
        if a.status != ActivityStatus.APPROVED:
            continue
        name = a.competency.name if a.competency else UNKNOWN_NAME
        points_by_name[name] = points_by_name.get(name, 0) + points_or_zero(a.point)

    return {
        "student": student,
        "statistics": asdict(progress),
        "activities_by_status": {
            "pending": summary.pending,
            "approved": summary.approved,
            "rejected": summary.rejected,
        },
        "points_by_competency": points_by_name,
        "activities": activities,
    }


async def get_leaderboard(db: AsyncSession, limit: int = 10) -> dict:
    calc = PointCalculator(db)
    standings = await calc.all_students_progress()
    ranked = sorted(standings, key=lambda s: (-s.total_points, s.name))[:limit]

    return {
        "leaderboard": [
            {
                "rank": i,
                "id": s.id,
                "name": s.name,
                "nim": s.nim,
                "total_points": s.total_points,
                "completion_percentage": s.completion_percentage,
                "is_completed": s.is_completed,
            }
            for i, s in enumerate(ranked, start=1)
        ],
        "target_points": calc.target_points,
    }


async def get_activity_statistics(db: AsyncSession, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)

    by_type = await _named_group_stats(db, Activity.activity_type_id, ActivityType, approved_only=False)
    by_competency = await _named_group_stats(db, Activity.competency_id, Competency, approved_only=True)

    since = _months_ago(now, TREND_MONTHS)
    rows = (
        await db.execute(
            select(Activity.created_at, Activity.status).where(Activity.created_at >= since)
        )
    ).all()

    trends: dict = {}
    for created_at, status in rows:
        month = created_at.strftime("%Y-%m")
        bucket = trends.setdefault(month, {"total": 0, "approved": 0, "pending": 0, "rejected": 0})
        bucket["total"] += 1
        bucket[status.value.lower()] += 1

    return {
        "overview": await _status_counts(db),
        "activities_by_type": [
            {"type": t["name"], "count": t["count"], "total_points": t["total_points"]} for t in by_type
        ],
        "activities_by_competency": [
            {"competency": c["name"], "count": c["count"], "total_points": c["total_points"]}
            for c in by_competency
        ],
        "monthly_trends": dict(sorted(trends.items())),
    }
