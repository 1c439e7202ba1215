from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from tifpoint.models.user import UserRole
from tifpoint.schemas.progress import StudentProgressOut


# ── Request Bodies ────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=80)
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=120)
    nim: Optional[str] = Field(default=None, max_length=30)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "admin@tifpoint.com",
                "password": "admin123",
            }
        }
    }


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


# ── Response Bodies ───────────────────────────────────────────────────
class UserInfo(BaseModel):
    """
    Safe user info sent to the frontend.
    password_hash and reset token fields are never included here.
    """
    id: int
    username: str
    email: str
    name: str
    nim: Optional[str] = None
    role: UserRole

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str
    user: UserInfo


class LoginResponse(BaseModel):
    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserInfo


class ProfileResponse(UserInfo):
    created_at: datetime
    statistics: Optional[StudentProgressOut] = None


class ForgotPasswordResponse(BaseModel):
    message: str
    # only filled when email delivery is unavailable (development fallback)
    reset_token: Optional[str] = None
    note: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
