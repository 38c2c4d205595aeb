"""Data models for scheduled classes (Pydantic v2).

A ``ClassSession`` is one scheduled class occurrence. It has nothing to do
with a login session or a database session.
"""

from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from models.time_window import TimeWindow


class ClassSession(BaseModel):
    """A stored class as returned by the repository.

    Every Schedule column is nullable in legacy databases. NULL text reads
    as "", a NULL owner as ``None`` (no teacher may change such a class).
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    teacher_id: Optional[int] = None   # owner; only this teacher may edit or cancel
    teacher_name: str
    department: str
    batch: str
    course: str
    room: str
    start_time: str          # "HH:MM"
    class_date: str          # "YYYY-MM-DD"
    end_time: str            # "HH:MM"

    @field_validator(
        "teacher_name", "department", "batch", "course", "room",
        "start_time", "class_date", "end_time",
        mode="before",
    )
    @classmethod
    def _null_as_empty(cls, v):
        return "" if v is None else v

    @property
    def window(self) -> TimeWindow:
        """Parsed time window. Raises ValueError for malformed legacy rows."""
        return TimeWindow.parse(self.class_date, self.start_time, self.end_time)

    @property
    def audience(self) -> tuple[str, str]:
        return self.batch, self.department


class SessionFields(BaseModel):
    """Input of the Assign operation. Trimmed here, validated by the repository."""

    model_config = ConfigDict(str_strip_whitespace=True)

    teacher_name: str = ""
    department: str = ""
    batch: str = ""
    course: str = ""
    room: str = ""
    start_time: str = ""
    class_date: str = ""
    end_time: str = ""


class SessionUpdate(BaseModel):
    """Partial update of a class. ``None`` means "keep the current value"."""

    model_config = ConfigDict(str_strip_whitespace=True)

    department: Optional[str] = None
    batch: Optional[str] = None
    course: Optional[str] = None
    room: Optional[str] = None
    start_time: Optional[str] = None
    class_date: Optional[str] = None
    end_time: Optional[str] = None

    TEMPORAL: ClassVar[tuple[str, ...]] = ("start_time", "class_date", "end_time")

    def supplied(self) -> dict[str, str]:
        """Only the fields that were actually given."""
        return self.model_dump(exclude_none=True)

    @property
    def touches_time(self) -> bool:
        return any(getattr(self, f) is not None for f in self.TEMPORAL)
