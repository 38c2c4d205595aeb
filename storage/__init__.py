"""Persistence layer (SQLAlchemy)."""

from storage.database import Base, Database, ScheduleRow, StudentRow, TeacherRow

__all__ = ["Base", "Database", "ScheduleRow", "StudentRow", "TeacherRow"]
