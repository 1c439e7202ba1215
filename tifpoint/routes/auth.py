from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tifpoint.controllers.auth_controller import (
    forgot_password,
    get_profile,
    login,
    register,
    reset_password,
)
from tifpoint.core.database import get_db
from tifpoint.core.dependencies import get_current_user
from tifpoint.models.user import User
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
)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=201,
    summary="Register Student",
)
async def register_student(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> RegisterResponse:
    return await register(payload, db)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login",
    description="""
Authenticate with email + password.
Returns a JWT Bearer token to use in all other requests.

**How to use the token:**
Add to request headers: `Authorization: Bearer <your_token>`
    """,
)
async def user_login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    return await login(payload, db)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get Current User",
    description="Returns the authenticated user's profile. Students also get their point statistics.",
)
async def profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    return await get_profile(current_user, db)


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordResponse,
    summary="Request Password Reset",
)
async def request_password_reset(
    payload: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> ForgotPasswordResponse:
    return await forgot_password(payload, db)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset Password With Token",
)
async def confirm_password_reset(
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    return await reset_password(payload, db)
