# Import every model so Base.metadata sees all tables (Alembic, create_all).
from tifpoint.models.user import User, UserRole
from tifpoint.models.competency import Competency
from tifpoint.models.activity_type import ActivityType
from tifpoint.models.recognized_course import RecognizedCourse
from tifpoint.models.event import Event
from tifpoint.models.activity import Activity, ActivityStatus

__all__ = [
    "User",
    "UserRole",
    "Competency",
    "ActivityType",
    "RecognizedCourse",
    "Event",
    "Activity",
    "ActivityStatus",
]
