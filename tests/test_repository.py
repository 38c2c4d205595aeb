"""Tests for the session repository: assign, edit, cancel and listings."""

import json
from datetime import datetime

import pytest

from config.defaults import memory_app_config
from export.json_export import load_sessions_json, save_sessions_json
from export.tui_renderer import STUDENT_COLUMNS, build_session_table, render_session_rows
from models.account import Role
from models.class_session import SessionFields, SessionUpdate
from models.context import UserContext
from services.app import SchedulerApp, build_app
from services.errors import Forbidden, NotFound, ValidationError
from storage.database import ScheduleRow


# ─── Helpers ──────────────────────────────────────────────────────────────────

def make_fields(**overrides) -> SessionFields:
    """The reference class: Algorithms for CS/B21 on 2024-01-10, 09:00–10:30."""
    data = dict(
        teacher_name="Dr. Rahman",
        department="CS",
        batch="B21",
        course="Algorithms",
        room="101",
        start_time="09:00",
        class_date="2024-01-10",
        end_time="10:30",
    )
    data.update(overrides)
    return SessionFields(**data)


def teacher_ctx(teacher_id: int = 5, name: str = "Anisur Rahman") -> UserContext:
    return UserContext(role=Role.TEACHER, account_id=teacher_id, display_name=name)


def student_ctx(batch: str = "B21", department: str = "CS") -> UserContext:
    return UserContext(role=Role.STUDENT, account_id=1, display_name="Nadia",
                       batch=batch, department=department)


@pytest.fixture
def app() -> SchedulerApp:
    app = build_app(memory_app_config())
    yield app
    app.shutdown()


# ─── SCENARIO ─────────────────────────────────────────────────────────────────

class TestOwnershipScenario:
    def test_create_list_cancel(self, app):
        repo = app.sessions
        sid = repo.create(5, make_fields())
        assert sid == 1

        owned = repo.list_by_owner(5)
        assert [s.id for s in owned] == [1]
        assert owned[0].course == "Algorithms"
        assert owned[0].teacher_id == 5

        with pytest.raises(Forbidden):
            repo.cancel(6, 1)
        assert [s.id for s in repo.list_by_owner(5)] == [1]

        repo.cancel(5, 1)
        assert repo.list_by_owner(5) == []


# ─── CREATE ───────────────────────────────────────────────────────────────────

class TestCreate:
    def test_stores_every_field(self, app):
        sid = app.sessions.create(5, make_fields())
        s = app.sessions.get(sid)
        assert (s.department, s.batch, s.course, s.room) == ("CS", "B21", "Algorithms", "101")
        assert (s.class_date, s.start_time, s.end_time) == ("2024-01-10", "09:00", "10:30")

    @pytest.mark.parametrize("field", [
        "teacher_name", "department", "batch", "course", "room",
        "start_time", "class_date", "end_time",
    ])
    def test_missing_field_rejected(self, app, field):
        with pytest.raises(ValidationError):
            app.sessions.create(5, make_fields(**{field: "   "}))
        assert app.sessions.list_all() == []

    @pytest.mark.parametrize("overrides", [
        {"class_date": "10.01.2024"},
        {"class_date": "2024-02-30"},
        {"start_time": "9 am"},
        {"end_time": "25:00"},
        {"start_time": "11:00", "end_time": "10:30"},
        {"start_time": "10:30", "end_time": "10:30"},
    ])
    def test_bad_time_window_rejected(self, app, overrides):
        with pytest.raises(ValidationError):
            app.sessions.create(5, make_fields(**overrides))

    def test_times_stored_zero_padded(self, app):
        sid = app.sessions.create(5, make_fields(start_time="9:05", end_time="10:30"))
        assert app.sessions.get(sid).start_time == "09:05"

    def test_assign_defaults_teacher_name(self, app):
        sid = app.sessions.assign(teacher_ctx(), make_fields(teacher_name=""))
        s = app.sessions.get(sid)
        assert s.teacher_name == "Anisur Rahman"
        assert s.teacher_id == 5

    def test_assign_requires_teacher(self, app):
        with pytest.raises(Forbidden):
            app.sessions.assign(student_ctx(), make_fields())


# ─── CANCEL ───────────────────────────────────────────────────────────────────

class TestCancel:
    def test_unknown_id_not_found(self, app):
        with pytest.raises(NotFound):
            app.sessions.cancel(5, 42)

    def test_repeated_cancel_not_found(self, app):
        sid = app.sessions.create(5, make_fields())
        app.sessions.cancel(5, sid)
        with pytest.raises(NotFound):
            app.sessions.cancel(5, sid)

    def test_cancelled_class_never_listed(self, app):
        keep = app.sessions.create(5, make_fields(course="Compilers"))
        gone = app.sessions.create(5, make_fields())
        app.sessions.cancel(5, gone)
        for listing in (
            app.sessions.list_all(),
            app.sessions.list_by_owner(5),
            app.sessions.list_for_audience("B21", "CS"),
        ):
            ids = [s.id for s in listing]
            assert gone not in ids
            assert keep in ids


# ─── UPDATE ───────────────────────────────────────────────────────────────────

class TestUpdate:
    def test_room_only(self, app):
        sid = app.sessions.create(5, make_fields())
        before = app.sessions.get(sid)
        app.sessions.update(5, sid, SessionUpdate(room="202"))
        after = app.sessions.get(sid)
        assert after.room == "202"
        assert after.model_dump(exclude={"room"}) == before.model_dump(exclude={"room"})

    def test_empty_update_rejected(self, app):
        sid = app.sessions.create(5, make_fields())
        with pytest.raises(ValidationError):
            app.sessions.update(5, sid, SessionUpdate())

    def test_blank_value_rejected(self, app):
        sid = app.sessions.create(5, make_fields())
        with pytest.raises(ValidationError):
            app.sessions.update(5, sid, SessionUpdate(course="  "))

    def test_other_teacher_forbidden(self, app):
        sid = app.sessions.create(5, make_fields())
        with pytest.raises(Forbidden):
            app.sessions.update(6, sid, SessionUpdate(room="202"))
        assert app.sessions.get(sid).room == "101"

    def test_other_teacher_forbidden_on_time_change(self, app):
        sid = app.sessions.create(5, make_fields())
        with pytest.raises(Forbidden):
            app.sessions.update(6, sid, SessionUpdate(start_time="08:00"))

    def test_unknown_id_not_found(self, app):
        with pytest.raises(NotFound):
            app.sessions.update(5, 42, SessionUpdate(room="202"))
        with pytest.raises(NotFound):
            app.sessions.update(5, 42, SessionUpdate(class_date="2024-02-01"))

    def test_single_time_field_validated(self, app):
        sid = app.sessions.create(5, make_fields())
        with pytest.raises(ValidationError):
            app.sessions.update(5, sid, SessionUpdate(end_time="half past ten"))

    def test_partial_time_change_checked_against_stored_values(self, app):
        """New start after the stored end leaves an invalid window."""
        sid = app.sessions.create(5, make_fields())
        with pytest.raises(ValidationError):
            app.sessions.update(5, sid, SessionUpdate(start_time="11:00"))
        assert app.sessions.get(sid).start_time == "09:00"

    def test_valid_partial_time_change(self, app):
        sid = app.sessions.create(5, make_fields())
        app.sessions.update(5, sid, SessionUpdate(start_time="8:30", class_date="2024-01-11"))
        s = app.sessions.get(sid)
        assert (s.class_date, s.start_time, s.end_time) == ("2024-01-11", "08:30", "10:30")

    def test_owner_cannot_be_changed(self):
        assert "teacher_id" not in SessionUpdate.model_fields
        assert "id" not in SessionUpdate.model_fields


# ─── LISTINGS ─────────────────────────────────────────────────────────────────

class TestListings:
    def test_list_all_by_id(self, app):
        ids = [app.sessions.create(t, make_fields()) for t in (7, 5, 6)]
        assert [s.id for s in app.sessions.list_all()] == sorted(ids)

    def test_list_by_owner_filters(self, app):
        app.sessions.create(5, make_fields())
        app.sessions.create(6, make_fields())
        app.sessions.create(5, make_fields())
        owned = app.sessions.list_by_owner(5)
        assert [s.teacher_id for s in owned] == [5, 5]
        assert owned[0].id < owned[1].id

    def test_audience_sorted_chronologically_not_by_id(self, app):
        late = app.sessions.create(5, make_fields(class_date="2024-01-12"))
        early_pm = app.sessions.create(5, make_fields(start_time="14:00", end_time="15:00"))
        early_am = app.sessions.create(6, make_fields(start_time="08:00", end_time="08:50"))
        listed = [s.id for s in app.sessions.list_for_audience("B21", "CS")]
        assert listed == [early_am, early_pm, late]

    def test_audience_needs_both_keys(self, app):
        match = app.sessions.create(5, make_fields())
        app.sessions.create(5, make_fields(batch="B22"))
        app.sessions.create(5, make_fields(department="EEE"))
        assert [s.id for s in app.sessions.list_for_audience("B21", "CS")] == [match]

    def test_list_for_student_uses_context(self, app):
        sid = app.sessions.create(5, make_fields())
        assert [s.id for s in app.sessions.list_for_student(student_ctx())] == [sid]
        assert app.sessions.list_for_student(student_ctx(batch="B22")) == []

    def test_list_for_student_rejects_teacher(self, app):
        with pytest.raises(Forbidden):
            app.sessions.list_for_student(teacher_ctx())

    def test_get_unknown(self, app):
        with pytest.raises(NotFound):
            app.sessions.get(1)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

class TestExport:
    def test_render_rows(self, app):
        app.sessions.create(5, make_fields())
        rows = render_session_rows(app.sessions.list_all())
        assert rows == [["1", "5", "Dr. Rahman", "CS", "B21", "Algorithms", "101",
                         "2024-01-10", "09:00", "10:30"]]

    def test_student_columns_hide_owner(self, app):
        app.sessions.create(5, make_fields())
        rows = render_session_rows(app.sessions.list_all(), STUDENT_COLUMNS)
        assert "teacher_id" not in [attr for _, attr in STUDENT_COLUMNS]
        assert rows[0][:3] == ["1", "Dr. Rahman", "CS"]

    def test_empty_table_has_placeholder(self):
        table = build_session_table([], "Empty")
        assert table.row_count == 1

    def test_json_export(self, app, tmp_path):
        app.sessions.create(5, make_fields())
        out = save_sessions_json(app.sessions.list_all(), tmp_path / "out" / "classes.json")
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["count"] == 1
        assert data["classes"][0]["course"] == "Algorithms"
        assert load_sessions_json(out)[0].room == "101"

    def test_json_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_sessions_json(tmp_path / "missing.json")


# ─── LEGACY ROWS ──────────────────────────────────────────────────────────────

class TestLegacyRows:
    def test_window_of_malformed_row_raises(self, app):
        with app.db.session_scope() as s:
            s.add(ScheduleRow(
                teacher_id=5, teacher_name="X", department="CS", batch="B21",
                course="Old", room="1", start_time="morning", class_date="2024-01-10",
                end_time="10:30",
            ))
        (s,) = app.sessions.list_all()
        with pytest.raises(ValueError):
            s.window

    def test_null_columns_still_listed(self, app):
        with app.db.session_scope() as s:
            s.add(ScheduleRow(
                teacher_id=None, teacher_name=None, department="CS", batch="B21",
                course=None, room=None, start_time="09:00", class_date="2024-01-10",
                end_time="10:30",
            ))
        (s,) = app.sessions.list_all()
        assert s.teacher_id is None
        assert (s.teacher_name, s.course, s.room) == ("", "", "")
        assert [x.id for x in app.sessions.list_for_student(student_ctx())] == [s.id]
        assert render_session_rows([s])[0][:3] == [str(s.id), "", ""]

    def test_ownerless_row_cannot_be_changed(self, app):
        with app.db.session_scope() as s:
            s.add(ScheduleRow(
                teacher_id=None, teacher_name="X", department="CS", batch="B21",
                course="Old", room="1", start_time="09:00", class_date="2024-01-10",
                end_time="10:30",
            ))
        (s,) = app.sessions.list_all()
        with pytest.raises(Forbidden):
            app.sessions.update(5, s.id, SessionUpdate(room="2"))
        with pytest.raises(Forbidden):
            app.sessions.update(5, s.id, SessionUpdate(end_time="11:00"))
        with pytest.raises(Forbidden):
            app.sessions.cancel(5, s.id)

    def test_row_ending_before_its_start_still_expires(self, app):
        with app.db.session_scope() as s:
            s.add(ScheduleRow(
                teacher_id=5, teacher_name="X", department="CS", batch="B21",
                course="Old", room="1", start_time="10:30", class_date="2024-01-10",
                end_time="09:00",
            ))
        assert app.sessions.delete_expired(datetime(2024, 1, 10, 9, 1)) == 1
        assert app.sessions.list_all() == []
