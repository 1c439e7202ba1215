from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tifpoint.core.database import get_db
from tifpoint.models.activity_type import ActivityType
from tifpoint.models.competency import Competency
from tifpoint.models.event import Event
from tifpoint.models.recognized_course import RecognizedCourse
from tifpoint.schemas.reference import (
    ActivityTypeOut,
    CompetencyOut,
    EventOut,
    RecognizedCourseOut,
)

# ─────────────────────────────────────────────────────────────
# Public reference data (frontend dropdowns)
# ─────────────────────────────────────────────────────────────
router = APIRouter(tags=["Reference Data"])


@router.get("/competencies", response_model=list[CompetencyOut])
async def list_competencies(db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(Competency).order_by(Competency.name.asc()))
    return res.scalars().all()


@router.get("/activity-types", response_model=list[ActivityTypeOut])
async def list_activity_types(db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(ActivityType).order_by(ActivityType.name.asc()))
    return res.scalars().all()


@router.get("/recognized-courses", response_model=list[RecognizedCourseOut])
async def list_recognized_courses(db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(RecognizedCourse).order_by(RecognizedCourse.name.asc()))
    return res.scalars().all()


@router.get("/events", response_model=list[EventOut])
async def list_events(
    upcoming_only: bool = Query(False, description="If true, only events from now on"),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Event)
    if upcoming_only:
        stmt = stmt.where(Event.date >= datetime.now(timezone.utc))
    res = await db.execute(stmt.order_by(Event.date.asc()))
    return res.scalars().all()
