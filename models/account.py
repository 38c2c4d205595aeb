"""Data models for teacher and student accounts (Pydantic v2)."""

from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


class TeacherProfile(BaseModel):
    """Registration input of a teacher. Fields are trimmed, not yet validated."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    surname: str = ""
    email: str = ""

    # Fields that must be non-empty at registration
    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "surname", "email")

    def missing_fields(self) -> list[str]:
        return [f for f in self.REQUIRED if not getattr(self, f)]


class StudentProfile(TeacherProfile):
    """Registration input of a student: teacher fields plus the audience key."""

    batch: str = ""
    department: str = ""

    REQUIRED: ClassVar[tuple[str, ...]] = ("name", "surname", "email", "batch", "department")


class Account(BaseModel):
    """A stored account as returned by the credential store. Never holds the hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    role: Role
    name: str
    surname: Optional[str] = None
    email: str
    batch: Optional[str] = None        # students only
    department: Optional[str] = None   # students only

    @property
    def display_name(self) -> str:
        return f"{self.name} {self.surname}".strip() if self.surname else self.name
