from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tifpoint.controllers.activity_controller import (
    create_activity,
    delete_activity,
    get_activity,
    list_activities,
    update_activity,
    validate_points,
    verify_activity,
)
from tifpoint.core.database import get_db
from tifpoint.core.dependencies import get_current_admin, get_current_user
from tifpoint.models.activity import ActivityStatus
from tifpoint.models.user import User
from tifpoint.schemas.activity import (
    ActivityCreateIn,
    ActivityDetailOut,
    ActivityMessageOut,
    ActivityOut,
    ActivityPageOut,
    ActivityUpdateIn,
    ActivityVerifyIn,
    ActivityVerifyOut,
)
from tifpoint.schemas.progress import PointValidationOut, ValidatePointsIn

# mounted under /api in main.py
router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("", response_model=ActivityPageOut)
async def list_my_or_all_activities(
    status: ActivityStatus | None = Query(None),
    competency_id: int | None = Query(None),
    activity_type_id: int | None = Query(None),
    nim: str | None = Query(None, description="Admin only: filter by student NIM"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await list_activities(
        db,
        user,
        status=status,
        competency_id=competency_id,
        activity_type_id=activity_type_id,
        nim=nim,
        page=page,
        limit=limit,
    )


# ─────────────────────────────────────────────────────────────
# Admin: advisory point check
# ─────────────────────────────────────────────────────────────
@router.post("/validate-points", response_model=PointValidationOut)
async def validate_point_assignment(
    payload: ValidatePointsIn,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    result = await validate_points(db, payload.activity_type_id, payload.competency_id, payload.points)
    return PointValidationOut.model_validate(result)


@router.get("/{activity_id}", response_model=ActivityDetailOut)
async def get_one_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await get_activity(db, user, activity_id)


@router.post("", response_model=ActivityMessageOut, status_code=201)
async def submit_activity(
    payload: ActivityCreateIn,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    activity = await create_activity(db, user, payload)
    return ActivityMessageOut(
        message="Activity created successfully",
        activity=ActivityOut.model_validate(activity),
    )


@router.put("/{activity_id}", response_model=ActivityMessageOut)
async def edit_activity(
    activity_id: int,
    payload: ActivityUpdateIn,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    activity = await update_activity(db, user, activity_id, payload)
    return ActivityMessageOut(
        message="Activity updated successfully",
        activity=ActivityOut.model_validate(activity),
    )


@router.delete("/{activity_id}")
async def remove_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await delete_activity(db, user, activity_id)
    return {"message": "Activity deleted successfully"}


@router.patch("/{activity_id}/verify", response_model=ActivityVerifyOut)
async def verify(
    activity_id: int,
    payload: ActivityVerifyIn,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    activity, validation = await verify_activity(db, admin, activity_id, payload)
    return ActivityVerifyOut(
        message=f"Activity {activity.status.value.lower()} successfully",
        activity=ActivityOut.model_validate(activity),
        point_validation=PointValidationOut.model_validate(validation) if validation else None,
    )
