"""Access policy: who may change or see which class.

Stateless predicates, consumed by the repository and the CLI.
"""

import hmac
import logging

from config.schema import AuthConfig
from models.class_session import ClassSession
from models.context import UserContext
from services.errors import Forbidden

logger = logging.getLogger(__name__)


class AccessPolicy:
    """Ownership, audience and registration rules."""

    def __init__(self, auth: AuthConfig) -> None:
        self._auth = auth

    # ─── Mutation ───

    @staticmethod
    def can_mutate(requester_id: int, session: ClassSession) -> bool:
        """Only the creating teacher may edit or cancel a class."""
        return requester_id == session.teacher_id

    # ─── Visibility ───

    @staticmethod
    def audience_match(student: UserContext, session: ClassSession) -> bool:
        return (
            student.batch == session.batch
            and student.department == session.department
        )

    # ─── Registration ───

    def can_register_as_teacher(self, supplied_secret: str) -> bool:
        """Checks the shared teacher registration secret.

        The secret is the same for every teacher and ships with the default
        configuration. It keeps the teacher form out of casual reach and must
        not be relied upon as an authorization boundary.
        """
        ok = hmac.compare_digest(
            supplied_secret.encode("utf-8"),
            self._auth.teacher_registration_secret.encode("utf-8"),
        )
        if not ok:
            logger.warning("Teacher registration gate: wrong secret supplied")
        return ok

    @property
    def teacher_email_suffix(self) -> str:
        return self._auth.teacher_email_suffix

    def teacher_email_allowed(self, email: str) -> bool:
        return email.endswith(self.teacher_email_suffix)

    # ─── Role guards ───

    @staticmethod
    def require_teacher(context: UserContext) -> None:
        if not context.is_teacher:
            raise Forbidden("Only teachers can manage classes.")

    @staticmethod
    def require_student(context: UserContext) -> None:
        if not context.is_student:
            raise Forbidden("Only students have a class audience.")
