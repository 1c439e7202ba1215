import logging
from datetime import datetime, timezone

import httpx
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tifpoint.core.config import settings
from tifpoint.core.email_service import send_password_reset_email
from tifpoint.core.reset_tokens import (
    generate_reset_token,
    hash_token,
    is_reset_token_valid,
    reset_expiry_dt,
)
from tifpoint.core.security import create_access_token, hash_password, verify_password
from tifpoint.models.user import User, UserRole
from tifpoint.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    UserInfo,
)
from tifpoint.schemas.progress import StudentProgressOut
from tifpoint.services.point_calculation import PointCalculator

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If your email is registered, you will receive a password reset link"
INVALID_RESET_TOKEN = "Invalid or expired reset token"


async def _exists(db: AsyncSession, column, value) -> bool:
    res = await db.execute(select(User.id).where(column == value))
    return res.scalar_one_or_none() is not None


async def register(payload: RegisterRequest, db: AsyncSession) -> RegisterResponse:
    email = payload.email.lower()
    username = payload.username.strip()
    nim = payload.nim.strip() if payload.nim else None

    if await _exists(db, User.email, email):
        raise HTTPException(status_code=400, detail="Email already in use")
    if await _exists(db, User.username, username):
        raise HTTPException(status_code=400, detail="Username already in use")
    if nim and await _exists(db, User.nim, nim):
        raise HTTPException(status_code=400, detail="NIM already in use")

    user = User(
        username=username,
        email=email,
        name=payload.name.strip(),
        nim=nim,
        password_hash=hash_password(payload.password),
        role=UserRole.MAHASISWA,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Registered student id=%s username=%s", user.id, user.username)
    return RegisterResponse(
        message="User registered successfully",
        user=UserInfo.model_validate(user),
    )


async def login(payload: LoginRequest, db: AsyncSession) -> LoginResponse:
    """
    Login: the same error for unknown email and wrong password, and the
    password check always runs so timing does not reveal which one it was.
    """
    result = await db.execute(select(User).where(User.email == payload.email.lower()))
    user = result.scalar_one_or_none()

    password_ok = verify_password(payload.password, user.password_hash if user else None)

    if not user or not password_ok:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid credentials",
        )

    token = create_access_token(user.id, user.username, user.email, user.role.value)

    return LoginResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserInfo.model_validate(user),
    )


async def get_profile(user: User, db: AsyncSession) -> ProfileResponse:
    """Students get their point statistics along with the profile."""
    statistics = None
    if user.role == UserRole.MAHASISWA:
        progress = await PointCalculator(db).compute_progress(user.id)
        statistics = StudentProgressOut.model_validate(progress)

    return ProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        name=user.name,
        nim=user.nim,
        role=user.role,
        created_at=user.created_at,
        statistics=statistics,
    )


async def forgot_password(payload: ForgotPasswordRequest, db: AsyncSession) -> ForgotPasswordResponse:
    result = await db.execute(select(User).where(User.email == payload.email.lower()))
    user = result.scalar_one_or_none()

    if not user:
        # Same answer as the success path, does not reveal registered emails
        return ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE)

    reset_token = generate_reset_token()
    user.reset_password_token = hash_token(reset_token)
    user.reset_password_expires = reset_expiry_dt()
    await db.commit()

    logger.info("Password reset requested for user id=%s", user.id)

    if not settings.email_configured:
        logger.warning("Email service not configured, returning reset token in response")
        return ForgotPasswordResponse(
            message="Email service not configured. Here is your reset token for development:",
            reset_token=reset_token,
            note="Configure BREVO_API_KEY in .env to enable email sending",
        )

    try:
        await send_password_reset_email(user.email, user.name, reset_token)
    except (httpx.HTTPError, RuntimeError) as exc:
        logger.error("Password reset email failed for user id=%s: %s", user.id, exc)
        return ForgotPasswordResponse(
            message="Email service error. Here is your reset token for development:",
            reset_token=reset_token,
            note="Email sending failed, but token is still valid",
        )

    return ForgotPasswordResponse(message="Password reset link has been sent to your email")


async def reset_password(payload: ResetPasswordRequest, db: AsyncSession) -> MessageResponse:
    now = datetime.now(timezone.utc)
    result = await db.execute(
        select(User).where(User.reset_password_token == hash_token(payload.token))
    )
    user = result.scalar_one_or_none()

    if not user or not is_reset_token_valid(
        payload.token,
        user.reset_password_token,
        user.reset_password_expires,
        now=now,
    ):
        logger.info("Rejected invalid or expired reset token")
        raise HTTPException(status_code=400, detail=INVALID_RESET_TOKEN)

    user.password_hash = hash_password(payload.new_password)
    user.reset_password_token = None
    user.reset_password_expires = None
    await db.commit()

    logger.info("Password reset completed for user id=%s", user.id)
    return MessageResponse(message="Password has been reset successfully")
