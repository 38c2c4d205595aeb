"""The logged-in user, passed explicitly to every core operation."""

from dataclasses import dataclass
from typing import Optional

from models.account import Account, Role


@dataclass(frozen=True)
class UserContext:
    """Identity established by a successful login.

    Immutable (frozen=True): a new login yields a new context, logout drops it.
    """

    role: Role
    account_id: int
    display_name: str
    # Audience key, students only
    batch: Optional[str] = None
    department: Optional[str] = None

    @classmethod
    def from_account(cls, account: Account) -> "UserContext":
        return cls(
            role=account.role,
            account_id=account.id,
            display_name=account.display_name,
            batch=account.batch,
            department=account.department,
        )

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    def __str__(self) -> str:
        return f"{self.role.value} #{self.account_id} ({self.display_name})"
