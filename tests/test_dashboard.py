"""Tests for the interactive dashboards, driven by scripted prompt answers."""

import io

import pytest
from rich.console import Console
from rich.prompt import IntPrompt, Prompt

from config.defaults import memory_app_config
from dashboard.interactive import InteractiveSession
from models.account import Role, StudentProfile, TeacherProfile
from models.class_session import SessionFields
from services.app import SchedulerApp, build_app


# ─── Helpers ──────────────────────────────────────────────────────────────────

def script(monkeypatch, answers: list) -> list:
    """Replaces rich prompts with a queue of answers (consumed in order)."""
    queue = list(answers)

    def ask(*args, **kwargs):
        return queue.pop(0)

    monkeypatch.setattr(Prompt, "ask", ask)
    monkeypatch.setattr(IntPrompt, "ask", ask)
    return queue


def make_session(app: SchedulerApp) -> tuple[InteractiveSession, io.StringIO]:
    out = io.StringIO()
    return InteractiveSession(app, Console(file=out, width=160)), out


@pytest.fixture
def app() -> SchedulerApp:
    app = build_app(memory_app_config())
    app.credentials.register(
        Role.TEACHER,
        TeacherProfile(name="Anisur", surname="Rahman", email="rahman@ustc.ac.bd"),
        "pw",
    )
    app.credentials.register(
        Role.STUDENT,
        StudentProfile(name="Nadia", surname="Islam", email="nadia@example.com",
                       batch="B21", department="CS"),
        "pw",
    )
    yield app
    app.shutdown()


# ─── TEACHER DASHBOARD ────────────────────────────────────────────────────────

class TestTeacherDashboard:
    def test_assign_view_edit_cancel(self, app, monkeypatch):
        queue = script(monkeypatch, [
            "1", "rahman@ustc.ac.bd", "pw",                      # teacher login
            "1", "", "CS", "B21", "Algorithms", "101",            # assign
            "2030-01-10", "09:00", "10:30",
            "5",                                                  # view mine
            "3", 1, "", "", "", "202", "", "", "",                # edit room
            "2", 1,                                               # cancel
            "0",                                                  # logout
            "0",                                                  # exit
        ])
        session, out = make_session(app)
        session.run()

        text = out.getvalue()
        assert queue == []
        assert "Class assigned successfully. Class ID: 1" in text
        assert "Algorithms" in text
        assert "Class updated successfully." in text
        assert "Class canceled successfully." in text
        assert app.sessions.list_all() == []
        assert session.context is None

    def test_cancel_foreign_class_reports_error(self, app, monkeypatch):
        other = app.sessions.create(99, SessionFields(
            teacher_name="Other", department="CS", batch="B21", course="Physics",
            room="7", start_time="09:00", class_date="2030-01-10", end_time="10:00",
        ))
        script(monkeypatch, ["1", "rahman@ustc.ac.bd", "pw", "2", other, "0", "0"])
        session, out = make_session(app)
        session.run()
        assert "only change your own classes" in out.getvalue()
        assert [s.id for s in app.sessions.list_all()] == [other]

    def test_invalid_class_input_reported(self, app, monkeypatch):
        script(monkeypatch, [
            "1", "rahman@ustc.ac.bd", "pw",
            "1", "", "CS", "B21", "Algorithms", "101", "2030-01-10", "11:00", "10:00",
            "0", "0",
        ])
        session, out = make_session(app)
        session.run()
        assert "Invalid date/time" in out.getvalue()
        assert app.sessions.list_all() == []


# ─── STUDENT DASHBOARD ────────────────────────────────────────────────────────

class TestStudentDashboard:
    def test_sees_own_audience_only(self, app, monkeypatch):
        for batch, course in [("B21", "Algorithms"), ("B22", "Compilers")]:
            app.sessions.create(1, SessionFields(
                teacher_name="Dr. Rahman", department="CS", batch=batch, course=course,
                room="101", start_time="09:00", class_date="2030-01-10", end_time="10:30",
            ))
        script(monkeypatch, ["2", "nadia@example.com", "pw", "0", "0"])
        session, out = make_session(app)
        session.run()
        text = out.getvalue()
        assert "Welcome, Nadia Islam!" in text
        assert "Algorithms" in text
        assert "Compilers" not in text


# ─── WELCOME MENU ─────────────────────────────────────────────────────────────

class TestWelcome:
    def test_wrong_password_stays_logged_out(self, app, monkeypatch):
        script(monkeypatch, ["1", "rahman@ustc.ac.bd", "nope", "0"])
        session, out = make_session(app)
        session.run()
        assert "Incorrect password." in out.getvalue()
        assert session.context is None

    def test_teacher_registration_needs_secret(self, app, monkeypatch):
        queue = script(monkeypatch, ["3", "guess", "0"])
        session, out = make_session(app)
        session.run()
        assert "Access denied" in out.getvalue()
        assert queue == []

    def test_student_registration(self, app, monkeypatch):
        script(monkeypatch, [
            "4", "Rafi", "Ahmed", "rafi@example.com", "B21", "CS", "pw", "0",
        ])
        session, out = make_session(app)
        session.run()
        assert "Student ID: 2" in out.getvalue()
