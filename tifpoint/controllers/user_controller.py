import logging

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tifpoint.core.security import hash_password
from tifpoint.models.user import User, UserRole
from tifpoint.schemas.user import UserUpdateIn

logger = logging.getLogger(__name__)


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _taken_by_other(db: AsyncSession, column, value, user_id: int) -> bool:
    res = await db.execute(select(User.id).where(column == value, User.id != user_id))
    return res.scalar_one_or_none() is not None


async def list_users(
    db: AsyncSession,
    nim: str | None = None,
    role: UserRole | None = None,
    search: str | None = None,
) -> list[User]:
    stmt = select(User)

    if nim:
        stmt = stmt.where(User.nim.ilike(f"%{nim.strip()}%"))
    if role is not None:
        stmt = stmt.where(User.role == role)
    if search:
        like = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                User.name.ilike(like),
                User.username.ilike(like),
                User.email.ilike(like),
            )
        )

    res = await db.execute(stmt.order_by(User.created_at.desc(), User.id.desc()))
    return list(res.scalars().all())


async def get_user(db: AsyncSession, current: User, user_id: int) -> User:
    if current.id != user_id and current.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Unauthorized to view this user")
    return await _get_user_or_404(db, user_id)


async def update_user(db: AsyncSession, current: User, user_id: int, payload: UserUpdateIn) -> User:
    """
    A user may edit their own account, an admin may edit any account.
    Role changes are ignored unless made by an admin.
    """
    user = await _get_user_or_404(db, user_id)

    is_admin = current.role == UserRole.ADMIN
    if current.id != user.id and not is_admin:
        raise HTTPException(status_code=403, detail="Unauthorized to update this user")

    data = payload.model_dump(exclude_unset=True)

    if data.get("username"):
        data["username"] = data["username"].strip()
    if data.get("email"):
        data["email"] = str(data["email"]).strip().lower()
    if data.get("name"):
        data["name"] = data["name"].strip()
    if data.get("nim"):
        data["nim"] = data["nim"].strip()

    if data.get("email") and await _taken_by_other(db, User.email, data["email"], user.id):
        raise HTTPException(status_code=400, detail="Email already in use")
    if data.get("username") and await _taken_by_other(db, User.username, data["username"], user.id):
        raise HTTPException(status_code=400, detail="Username already in use")
    if data.get("nim") and await _taken_by_other(db, User.nim, data["nim"], user.id):
        raise HTTPException(status_code=400, detail="NIM already in use")

    password = data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)

    role = data.pop("role", None)
    if role is not None and is_admin:
        user.role = role

    for k, v in data.items():
        if v is None:
            continue
        setattr(user, k, v)

    await db.commit()
    await db.refresh(user)

    logger.info("User id=%s updated by user id=%s", user.id, current.id)
    return user


async def delete_user(db: AsyncSession, admin: User, user_id: int) -> None:
    # activities are deleted with the user, load them so the ORM cascade can run
    res = await db.execute(
        select(User).options(selectinload(User.activities)).where(User.id == user_id)
    )
    user = res.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    await db.delete(user)
    await db.commit()

    logger.info("User id=%s deleted by admin id=%s", user_id, admin.id)
