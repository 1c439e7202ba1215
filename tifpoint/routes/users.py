from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tifpoint.controllers.user_controller import delete_user, get_user, list_users, update_user
from tifpoint.core.database import get_db
from tifpoint.core.dependencies import get_current_admin, get_current_user
from tifpoint.models.user import User, UserRole
from tifpoint.schemas.user import UserMessageOut, UserOut, UserUpdateIn

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=list[UserOut], summary="List users (Admin only)")
async def list_all_users(
    nim: str | None = Query(None, description="Partial NIM match"),
    role: UserRole | None = Query(None),
    search: str | None = Query(None, description="Matches name, username or email"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    return await list_users(db, nim=nim, role=role, search=search)


@router.get("/{user_id}", response_model=UserOut)
async def get_one_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await get_user(db, current_user, user_id)


@router.patch("/{user_id}", response_model=UserMessageOut)
async def edit_user(
    user_id: int,
    payload: UserUpdateIn,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = await update_user(db, current_user, user_id, payload)
    return UserMessageOut(message="User updated successfully", user=UserOut.model_validate(user))


@router.delete("/{user_id}", summary="Delete user (Admin only)")
async def remove_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(get_current_admin),
):
    await delete_user(db, admin, user_id)
    return {"message": "User deleted successfully"}
