from sqlalchemy import Column, Integer, String, Text, DateTime, func

from tifpoint.core.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    date = Column(DateTime(timezone=True), nullable=False, index=True)
    location = Column(String(200), nullable=True)
    organizer = Column(String(200), nullable=True)
    point_value = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
