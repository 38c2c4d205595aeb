"""Credential store: registration and login for teachers and students.

Passwords are stored as salted hashes (werkzeug.security); the plaintext
never reaches the database.
"""

import logging
from typing import Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from models.account import Account, Role, StudentProfile, TeacherProfile
from models.context import UserContext
from services.errors import (
    DuplicateEmail,
    InvalidCredential,
    NotFound,
    StorageError,
    ValidationError,
)
from services.policy import AccessPolicy
from storage.database import Database, StudentRow, TeacherRow

logger = logging.getLogger(__name__)

Profile = Union[TeacherProfile, StudentProfile]

_ROW_TYPES = {Role.TEACHER: TeacherRow, Role.STUDENT: StudentRow}


def _to_account(role: Role, row) -> Account:
    return Account(
        id=row.id,
        role=role,
        name=row.name,
        surname=row.surname,
        email=row.email,
        batch=getattr(row, "batch", None),
        department=getattr(row, "department", None),
    )


class CredentialStore:
    """Sole owner of the Teachers and Students tables."""

    def __init__(self, db: Database, policy: AccessPolicy) -> None:
        self.db = db
        self.policy = policy

    # ─── Registration ───

    def register(self, role: Role, profile: Profile, password: str) -> int:
        """Creates an account and returns its id.

        Raises:
            ValidationError: required field empty, wrong profile type, or a
                teacher e-mail outside the institutional domain.
            DuplicateEmail: e-mail already registered for this role.
        """
        self._validate_profile(role, profile, password)
        row_type = _ROW_TYPES[role]
        values = profile.model_dump()

        try:
            with self.db.session_scope() as s:
                exists = s.scalar(select(row_type.id).where(row_type.email == profile.email))
                if exists is not None:
                    raise DuplicateEmail(f"E-mail already in use: {profile.email}")
                row = row_type(**values, password=generate_password_hash(password))
                s.add(row)
                s.flush()
                new_id = row.id
        except IntegrityError as e:
            # Lost a race against a concurrent registration of the same address
            raise DuplicateEmail(f"E-mail already in use: {profile.email}") from e
        except SQLAlchemyError as e:
            logger.exception("Registration failed")
            raise StorageError("Registration failed due to a database error.") from e

        logger.info(f"Registered {role.value} #{new_id} <{profile.email}>")
        return new_id

    def _validate_profile(self, role: Role, profile: Profile, password: str) -> None:
        expected = StudentProfile if role == Role.STUDENT else TeacherProfile
        if type(profile) is not expected:
            raise ValidationError(
                f"{role.value} registration needs a {expected.__name__}"
            )
        missing = profile.missing_fields()
        if not password:
            missing.append("password")
        if missing:
            raise ValidationError(f"Please fill in all required fields: {', '.join(missing)}")
        if role == Role.TEACHER and not self.policy.teacher_email_allowed(profile.email):
            raise ValidationError(
                f"Teacher e-mail must end with '{self.policy.teacher_email_suffix}'"
            )

    # ─── Authentication ───

    def authenticate(self, role: Role, email: str, password: str) -> int:
        """Checks the password and returns the account id.

        Raises:
            NotFound: no account with this e-mail.
            InvalidCredential: password does not match.
        """
        row_type = _ROW_TYPES[role]
        email = email.strip()
        try:
            with self.db.session_scope() as s:
                row = s.execute(
                    select(row_type.id, row_type.password).where(row_type.email == email)
                ).first()
        except SQLAlchemyError as e:
            logger.exception("Login lookup failed")
            raise StorageError("Login failed due to a database error.") from e

        if row is None:
            logger.warning(f"Login failed: unknown {role.value} e-mail <{email}>")
            raise NotFound("E-mail not found.")
        if not check_password_hash(row.password, password):
            logger.warning(f"Login failed: wrong password for {role.value} #{row.id}")
            raise InvalidCredential("Incorrect password.")
        return row.id

    def login(self, role: Role, email: str, password: str) -> UserContext:
        """authenticate() plus the context object used by all later calls."""
        account_id = self.authenticate(role, email, password)
        context = UserContext.from_account(self.get_account(role, account_id))
        logger.info(f"Logged in: {context}")
        return context

    # ─── Lookup ───

    def get_account(self, role: Role, account_id: int) -> Account:
        row_type = _ROW_TYPES[role]
        try:
            with self.db.session_scope() as s:
                row = s.get(row_type, account_id)
                account = _to_account(role, row) if row is not None else None
        except SQLAlchemyError as e:
            logger.exception("Account lookup failed")
            raise StorageError("Account lookup failed due to a database error.") from e
        if account is None:
            raise NotFound(f"No {role.value} with id {account_id}.")
        return account

    def get_teacher(self, teacher_id: int) -> Account:
        return self.get_account(Role.TEACHER, teacher_id)

    def get_student(self, student_id: int) -> Account:
        return self.get_account(Role.STUDENT, student_id)
