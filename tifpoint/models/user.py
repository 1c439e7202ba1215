from __future__ import annotations

from enum import Enum
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, Text, func, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tifpoint.core.database import Base

if TYPE_CHECKING:
    from tifpoint.models.activity import Activity


# --------------------------------------------------
# ENUM
# --------------------------------------------------

class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MAHASISWA = "MAHASISWA"


# --------------------------------------------------
# MODEL
# --------------------------------------------------

class User(Base):
    """
    Admins and students share one table; `role` decides which routes apply.
    Only MAHASISWA users accrue progress toward the target points.
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)

    username: Mapped[str] = mapped_column(String(80), unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    # student number, admins have none
    nim: Mapped[Optional[str]] = mapped_column(String(30), unique=True, index=True, nullable=True)

    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="user_role_enum"),
        nullable=False,
        default=UserRole.MAHASISWA,
        server_default=UserRole.MAHASISWA.value,
    )

    # --------------------------------------------------
    # PASSWORD RESET (sha256 of the emailed token)
    # --------------------------------------------------

    reset_password_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    reset_password_expires: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # --------------------------------------------------
    # RELATIONSHIPS
    # --------------------------------------------------

    activities: Mapped[List["Activity"]] = relationship(
        "Activity",
        back_populates="user",
        foreign_keys="Activity.user_id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"
