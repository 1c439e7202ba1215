from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from tifpoint.models.user import UserRole


class UserOut(BaseModel):
    id: int
    username: str
    email: str
    name: str
    nim: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserUpdateIn(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=80)
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    nim: Optional[str] = Field(default=None, max_length=30)
    # applied only when an admin makes the change
    role: Optional[UserRole] = None
    password: Optional[str] = Field(default=None, min_length=6)


class UserMessageOut(BaseModel):
    message: str
    user: UserOut
