from models.account import Account, Role, StudentProfile, TeacherProfile
from models.class_session import ClassSession, SessionFields, SessionUpdate
from models.context import UserContext
from models.time_window import TimeWindow

__all__ = [
    "Account",
    "Role",
    "StudentProfile",
    "TeacherProfile",
    "ClassSession",
    "SessionFields",
    "SessionUpdate",
    "UserContext",
    "TimeWindow",
]
