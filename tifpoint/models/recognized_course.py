from sqlalchemy import Column, Integer, String, Text, DateTime, func

from tifpoint.core.database import Base


class RecognizedCourse(Base):
    __tablename__ = "recognized_courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    provider = Column(String(120), nullable=False)
    duration = Column(Integer, nullable=False, default=0)  # hours
    point_value = Column(Integer, nullable=False, default=0, index=True)
    url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
