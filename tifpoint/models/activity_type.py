from sqlalchemy import Column, Integer, String, DateTime, func

from tifpoint.core.database import Base


class ActivityType(Base):
    __tablename__ = "activity_types"

    id = Column(Integer, primary_key=True, index=True)

    # name is the lookup key into the point-range table
    name = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
