import logging
import math
from datetime import datetime, timezone

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tifpoint.models.activity import Activity, ActivityStatus
from tifpoint.models.activity_type import ActivityType
from tifpoint.models.competency import Competency
from tifpoint.models.event import Event
from tifpoint.models.recognized_course import RecognizedCourse
from tifpoint.models.user import User, UserRole
from tifpoint.schemas.activity import ActivityCreateIn, ActivityUpdateIn, ActivityVerifyIn, VerifyStatus
from tifpoint.services.point_calculation import PointCalculator, PointValidation

logger = logging.getLogger(__name__)


def with_refs(stmt):
    """Eager-load the relations rendered by ActivityDetailOut."""
    return stmt.options(
        selectinload(Activity.user),
        selectinload(Activity.competency),
        selectinload(Activity.activity_type),
    )


def _is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


async def _get_activity_or_404(db: AsyncSession, activity_id: int, load_refs: bool = False) -> Activity:
    stmt = select(Activity).where(Activity.id == activity_id)
    if load_refs:
        stmt = with_refs(stmt)
    activity = (await db.execute(stmt)).scalar_one_or_none()
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity


async def _check_references(
    db: AsyncSession,
    competency_id: int | None = None,
    activity_type_id: int | None = None,
    recognized_course_id: int | None = None,
    event_id: int | None = None,
) -> None:
    """400 for any given id that does not resolve; None means not given."""
    if competency_id is not None and not await db.get(Competency, competency_id):
        raise HTTPException(status_code=400, detail="Invalid competency ID")

    if activity_type_id is not None and not await db.get(ActivityType, activity_type_id):
        raise HTTPException(status_code=400, detail="Invalid activity type ID")

    if recognized_course_id is not None and not await db.get(RecognizedCourse, recognized_course_id):
        raise HTTPException(status_code=400, detail="Invalid recognized course ID")

    if event_id is not None and not await db.get(Event, event_id):
        raise HTTPException(status_code=400, detail="Invalid event ID")


async def list_activities(
    db: AsyncSession,
    user: User,
    status: ActivityStatus | None = None,
    competency_id: int | None = None,
    activity_type_id: int | None = None,
    nim: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    filters = []

    # students only ever see their own activities
    if not _is_admin(user):
        filters.append(Activity.user_id == user.id)

    if status is not None:
        filters.append(Activity.status == status)
    if competency_id is not None:
        filters.append(Activity.competency_id == competency_id)
    if activity_type_id is not None:
        filters.append(Activity.activity_type_id == activity_type_id)

    stmt = select(Activity)
    count_stmt = select(func.count(Activity.id))

    if nim and _is_admin(user):
        stmt = stmt.join(User, User.id == Activity.user_id)
        count_stmt = count_stmt.join(User, User.id == Activity.user_id)
        filters.append(User.nim.ilike(f"%{nim.strip()}%"))

    if filters:
        stmt = stmt.where(*filters)
        count_stmt = count_stmt.where(*filters)

    total_count = int((await db.execute(count_stmt)).scalar() or 0)

    stmt = (
        with_refs(stmt)
        .order_by(Activity.created_at.desc(), Activity.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    activities = (await db.execute(stmt)).scalars().all()

    total_pages = math.ceil(total_count / limit) if limit else 0

    return {
        "activities": activities,
        "pagination": {
            "current_page": page,
            "total_pages": total_pages,
            "total_count": total_count,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


async def get_activity(db: AsyncSession, user: User, activity_id: int) -> Activity:
    activity = await _get_activity_or_404(db, activity_id, load_refs=True)

    if activity.user_id != user.id and not _is_admin(user):
        raise HTTPException(status_code=403, detail="Unauthorized access to this activity")

    return activity


async def create_activity(db: AsyncSession, user: User, payload: ActivityCreateIn) -> Activity:
    title = payload.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title cannot be empty")

    await _check_references(
        db,
        competency_id=payload.competency_id,
        activity_type_id=payload.activity_type_id,
        recognized_course_id=payload.recognized_course_id,
        event_id=payload.event_id,
    )

    activity = Activity(
        title=title,
        description=payload.description,
        user_id=user.id,
        competency_id=payload.competency_id,
        activity_type_id=payload.activity_type_id,
        recognized_course_id=payload.recognized_course_id,
        event_id=payload.event_id,
        document_url=payload.document_url.strip(),
        status=ActivityStatus.PENDING,
    )
    db.add(activity)
    await db.commit()
    await db.refresh(activity)
    return activity


async def update_activity(
    db: AsyncSession,
    user: User,
    activity_id: int,
    payload: ActivityUpdateIn,
) -> Activity:
    """Owner may edit while PENDING; admins may edit at any time. Points and status are not editable here."""
    activity = await _get_activity_or_404(db, activity_id)

    if activity.user_id != user.id and not _is_admin(user):
        raise HTTPException(status_code=403, detail="Unauthorized to update this activity")

    if not _is_admin(user) and activity.status != ActivityStatus.PENDING:
        raise HTTPException(status_code=403, detail="Cannot update a processed activity")

    data = payload.model_dump(exclude_unset=True)

    if "title" in data and data["title"] is not None:
        data["title"] = data["title"].strip()
        if not data["title"]:
            raise HTTPException(status_code=400, detail="Title cannot be empty")
    if "document_url" in data and data["document_url"] is not None:
        data["document_url"] = data["document_url"].strip()

    await _check_references(
        db,
        competency_id=data.get("competency_id"),
        activity_type_id=data.get("activity_type_id"),
        recognized_course_id=data.get("recognized_course_id"),
        event_id=data.get("event_id"),
    )

    # course and event links can be cleared with an explicit null
    nullable = {"description", "recognized_course_id", "event_id"}
    for k, v in data.items():
        if v is None and k not in nullable:
            continue
        setattr(activity, k, v)

    await db.commit()
    await db.refresh(activity)

    logger.info("Activity id=%s updated by user id=%s", activity.id, user.id)
    return activity


async def delete_activity(db: AsyncSession, user: User, activity_id: int) -> None:
    activity = await _get_activity_or_404(db, activity_id)

    if activity.user_id != user.id and not _is_admin(user):
        raise HTTPException(status_code=403, detail="Unauthorized to delete this activity")

    if not _is_admin(user) and activity.status != ActivityStatus.PENDING:
        raise HTTPException(status_code=403, detail="Cannot delete a processed activity")

    await db.delete(activity)
    await db.commit()


async def verify_activity(
    db: AsyncSession,
    admin: User,
    activity_id: int,
    payload: ActivityVerifyIn,
) -> tuple[Activity, PointValidation | None]:
    """
    Approve or reject a PENDING activity. Any point value is accepted; the
    range check result is returned alongside for the admin UI. A processed
    activity cannot be verified again.
    """
    activity = await _get_activity_or_404(db, activity_id)

    if activity.status != ActivityStatus.PENDING:
        raise HTTPException(status_code=400, detail="Activity has already been verified")

    validation = None
    if payload.status == VerifyStatus.APPROVED and payload.point is not None:
        validation = await PointCalculator(db).validate_point_assignment(
            activity.activity_type_id,
            activity.competency_id,
            payload.point,
        )
        if not validation.is_valid:
            logger.warning(
                "Activity id=%s approved with out-of-range points=%s (%s)",
                activity.id, payload.point, validation.message,
            )

    activity.status = ActivityStatus(payload.status.value)
    activity.point = payload.point
    activity.comment = payload.comment
    activity.verified_by_id = admin.id
    activity.verified_at = datetime.now(timezone.utc)

    await db.commit()
    await db.refresh(activity)

    logger.info(
        "Activity id=%s %s by admin id=%s points=%s",
        activity.id, activity.status.value, admin.id, activity.point,
    )
    return activity, validation


async def validate_points(
    db: AsyncSession,
    activity_type_id: int,
    competency_id: int,
    points: int,
) -> PointValidation:
    return await PointCalculator(db).validate_point_assignment(activity_type_id, competency_id, points)
