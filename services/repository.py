"""Session repository: create, edit, cancel and list scheduled classes.

Every mutation is a single conditional statement
(``... WHERE id = ? AND teacher_id = ?``). When it touches no row, a second
lookup tells "does not exist" apart from "belongs to someone else".
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import delete, select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.defaults import DATE_FORMAT, TIME_FORMAT
from models.class_session import ClassSession, SessionFields, SessionUpdate
from models.context import UserContext
from models.time_window import TimeWindow
from services.errors import Forbidden, NotFound, StorageError, ValidationError
from services.policy import AccessPolicy
from storage.database import Database, ScheduleRow

logger = logging.getLogger(__name__)


def _check_window(class_date: str, start_time: str, end_time: str) -> dict[str, str]:
    """Validates the three temporal fields and returns them in canonical form."""
    try:
        window = TimeWindow.parse(class_date, start_time, end_time)
    except ValueError as e:
        raise ValidationError(
            f"Invalid date/time (expected YYYY-MM-DD and HH:MM): {e}"
        ) from e
    return {
        "class_date": window.class_date.strftime(DATE_FORMAT),
        "start_time": window.start.strftime(TIME_FORMAT),
        "end_time": window.end.strftime(TIME_FORMAT),
    }


class SessionRepository:
    """CRUD over the Schedule table, scoped by owner and by audience."""

    def __init__(self, db: Database, policy: AccessPolicy) -> None:
        self.db = db
        self.policy = policy

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        try:
            with self.db.session_scope() as s:
                yield s
        except SQLAlchemyError as e:
            logger.exception(f"{action} failed")
            raise StorageError(f"{action} failed due to a database error.") from e

    # ─── Create ───

    def create(self, owner_teacher_id: int, fields: SessionFields) -> int:
        """Stores a new class owned by ``owner_teacher_id`` and returns its id.

        All fields are required. Date and times must parse and the end must
        lie after the start.
        """
        values = fields.model_dump()
        missing = [k for k, v in values.items() if not v]
        if missing:
            raise ValidationError(f"Please fill in all fields: {', '.join(missing)}")
        values.update(_check_window(values["class_date"], values["start_time"],
                                    values["end_time"]))

        with self._transaction("Assign class") as s:
            row = ScheduleRow(teacher_id=owner_teacher_id, **values)
            s.add(row)
            s.flush()
            new_id = row.id

        logger.info(
            f"Class #{new_id} assigned by teacher #{owner_teacher_id}: "
            f"{values['course']} {values['class_date']} {values['start_time']}"
        )
        return new_id

    def assign(self, context: UserContext, fields: SessionFields) -> int:
        """create() for the logged-in teacher. An empty teacher name defaults to theirs."""
        self.policy.require_teacher(context)
        if not fields.teacher_name:
            fields = fields.model_copy(update={"teacher_name": context.display_name})
        return self.create(context.account_id, fields)

    # ─── Cancel ───

    def cancel(self, requester_teacher_id: int, session_id: int) -> None:
        """Deletes a class owned by the requester.

        Raises:
            NotFound: no class with this id (also on a repeated cancel).
            Forbidden: the class belongs to another teacher.
        """
        with self._transaction("Cancel class") as s:
            result = s.execute(
                delete(ScheduleRow).where(
                    ScheduleRow.id == session_id,
                    ScheduleRow.teacher_id == requester_teacher_id,
                )
            )
            if result.rowcount == 0:
                self._raise_missing_or_forbidden(s, session_id, requester_teacher_id)
        logger.info(f"Class #{session_id} canceled by teacher #{requester_teacher_id}")

    # ─── Update ───

    def update(self, requester_teacher_id: int, session_id: int,
               changes: SessionUpdate) -> None:
        """Partial update: only the supplied fields change.

        Whenever a temporal field is supplied, the merged record (new values
        plus the stored ones) must still form a valid window.
        """
        values = changes.supplied()
        if not values:
            raise ValidationError("Supply at least one field to update.")
        empty = [k for k, v in values.items() if not v]
        if empty:
            raise ValidationError(f"Fields must not be empty: {', '.join(empty)}")

        with self._transaction("Edit class") as s:
            if changes.touches_time:
                row = s.get(ScheduleRow, session_id)
                if row is None:
                    raise NotFound(f"Class ID {session_id} not found.")
                current = ClassSession.model_validate(row)
                if not self.policy.can_mutate(requester_teacher_id, current):
                    raise Forbidden("You can only edit your own classes.")
                merged = {f: values.get(f, getattr(current, f))
                          for f in SessionUpdate.TEMPORAL}
                values.update(_check_window(**merged))

            result = s.execute(
                sql_update(ScheduleRow)
                .where(
                    ScheduleRow.id == session_id,
                    ScheduleRow.teacher_id == requester_teacher_id,
                )
                .values({getattr(ScheduleRow, k): v for k, v in values.items()})
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self._raise_missing_or_forbidden(s, session_id, requester_teacher_id)

        logger.info(
            f"Class #{session_id} edited by teacher #{requester_teacher_id}: "
            f"{', '.join(sorted(values))}"
        )

    def _raise_missing_or_forbidden(self, s: Session, session_id: int,
                                    requester_id: int) -> None:
        row = s.get(ScheduleRow, session_id)
        if row is None:
            raise NotFound(f"Class ID {session_id} not found.")
        logger.warning(
            f"Teacher #{requester_id} tried to change class #{session_id} "
            f"owned by teacher #{row.teacher_id}"
        )
        raise Forbidden("You can only change your own classes.")

    # ─── Read ───

    def get(self, session_id: int) -> ClassSession:
        with self._transaction("Load class") as s:
            row = s.get(ScheduleRow, session_id)
            result = ClassSession.model_validate(row) if row is not None else None
        if result is None:
            raise NotFound(f"Class ID {session_id} not found.")
        return result

    def _list(self, stmt) -> list[ClassSession]:
        with self._transaction("Load classes") as s:
            return [ClassSession.model_validate(r) for r in s.scalars(stmt)]

    def list_all(self) -> list[ClassSession]:
        """Every class, ascending by id."""
        return self._list(select(ScheduleRow).order_by(ScheduleRow.id))

    def list_by_owner(self, teacher_id: int) -> list[ClassSession]:
        """Classes created by ``teacher_id``, ascending by id."""
        return self._list(
            select(ScheduleRow)
            .where(ScheduleRow.teacher_id == teacher_id)
            .order_by(ScheduleRow.id)
        )

    def list_for_audience(self, batch: str, department: str) -> list[ClassSession]:
        """Classes of one batch and department in chronological order.

        Stored dates and times are zero-padded, so text order is time order.
        """
        return self._list(
            select(ScheduleRow)
            .where(ScheduleRow.batch == batch, ScheduleRow.department == department)
            .order_by(ScheduleRow.class_date, ScheduleRow.start_time, ScheduleRow.id)
        )

    def list_for_student(self, context: UserContext) -> list[ClassSession]:
        self.policy.require_student(context)
        sessions = self.list_for_audience(context.batch or "", context.department or "")
        return [s for s in sessions if self.policy.audience_match(context, s)]

    # ─── Expiry ───

    def delete_expired(self, now: Optional[datetime] = None) -> int:
        """Deletes every class whose end instant lies strictly before ``now``.

        Each row is deleted in its own transaction; an interrupted purge
        leaves the remaining rows for the next run. Rows whose date or time
        does not parse are skipped.
        """
        now = now or datetime.now()
        with self._transaction("Scan for expired classes") as s:
            candidates = s.execute(
                select(ScheduleRow.id, ScheduleRow.class_date,
                       ScheduleRow.start_time, ScheduleRow.end_time)
            ).all()

        deleted = 0
        for row in candidates:
            try:
                window = TimeWindow.read(row.class_date or "", row.start_time or "",
                                         row.end_time or "")
            except ValueError as e:
                logger.warning(f"Class #{row.id} has an unreadable date or time, skipped: {e}")
                continue
            if not window.is_expired(now):
                continue
            with self._transaction(f"Delete expired class #{row.id}") as s:
                result = s.execute(delete(ScheduleRow).where(ScheduleRow.id == row.id))
                deleted += result.rowcount
        return deleted
