from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tifpoint.controllers.dashboard_controller import (
    get_activity_statistics,
    get_admin_dashboard,
    get_leaderboard,
    get_student_dashboard,
    get_student_recommendations,
    get_student_statistics,
)
from tifpoint.core.database import get_db
from tifpoint.core.dependencies import get_current_admin, get_current_student, get_current_user
from tifpoint.models.user import User
from tifpoint.schemas.dashboard import (
    ActivityStatisticsOut,
    AdminDashboardOut,
    LeaderboardOut,
    StudentDashboardOut,
    StudentStatisticsOut,
)
from tifpoint.schemas.progress import RecommendationsOut

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


# ─────────────────────────────────────────────────────────────
# Student
# ─────────────────────────────────────────────────────────────
@router.get("/student", response_model=StudentDashboardOut)
async def student_dashboard(
    db: AsyncSession = Depends(get_db),
    student: User = Depends(get_current_student),
):
    return await get_student_dashboard(db, student)


@router.get("/recommendations", response_model=RecommendationsOut)
async def recommendations(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await get_student_recommendations(db, user)


@router.get("/leaderboard", response_model=LeaderboardOut)
async def leaderboard(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await get_leaderboard(db, limit)


# ─────────────────────────────────────────────────────────────
# Admin
# ─────────────────────────────────────────────────────────────
@router.get("/admin", response_model=AdminDashboardOut)
async def admin_dashboard(
    nim: str | None = Query(None, description="Filter student progress by NIM"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return await get_admin_dashboard(db, nim)


@router.get("/student/{student_id}/statistics", response_model=StudentStatisticsOut)
async def student_statistics(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return await get_student_statistics(db, student_id)


@router.get("/statistics", response_model=ActivityStatisticsOut)
async def activity_statistics(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return await get_activity_statistics(db)
