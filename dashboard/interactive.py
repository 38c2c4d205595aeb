"""Interactive terminal front-end: welcome menu, login and both dashboards.

Holds no state of its own beyond the current ``UserContext``; every action
goes through the credential store or the session repository.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt

from export.tui_renderer import STUDENT_COLUMNS, build_session_table
from models.account import Role, StudentProfile, TeacherProfile
from models.class_session import SessionFields, SessionUpdate
from models.context import UserContext
from services.app import SchedulerApp
from services.errors import SchedulerError

logger = logging.getLogger(__name__)


def _success(console: Console, text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _error(console: Console, text: str) -> None:
    console.print(f"[red]✗ {text}[/red]")


class InteractiveSession:
    """Menu loop for one seat. One user is logged in at a time."""

    def __init__(self, app: SchedulerApp, console: Optional[Console] = None) -> None:
        self.app = app
        self.console = console or Console()
        self.context: Optional[UserContext] = None

    # ─── Welcome ───

    def run(self) -> None:
        while True:
            self.console.print()
            self.console.print(Panel(
                f"[bold]Welcome to the University Class Scheduler[/bold]\n"
                f"[dim]{self.app.config.institution_name}[/dim]",
                border_style="cyan",
            ))
            self.console.print("  [bold]1.[/bold] Teacher login")
            self.console.print("  [bold]2.[/bold] Student login")
            self.console.print("  [bold]3.[/bold] Register as teacher")
            self.console.print("  [bold]4.[/bold] Register as student")
            self.console.print("  [bold]0.[/bold] Exit")

            choice = Prompt.ask("\nChoice", default="0")
            if choice == "1":
                self._login(Role.TEACHER)
            elif choice == "2":
                self._login(Role.STUDENT)
            elif choice == "3":
                self._register_teacher()
            elif choice == "4":
                self._register_student()
            elif choice == "0":
                break
            else:
                self.console.print("[yellow]Invalid choice.[/yellow]")

    def _attempt(self, action, *args):
        """Runs one core operation; reports a failure and returns None."""
        try:
            return action(*args)
        except SchedulerError as e:
            _error(self.console, str(e))
            return None

    # ─── Registration ───

    def _register_teacher(self) -> None:
        secret = Prompt.ask("What is the teachers' password?", password=True)
        if not self.app.policy.can_register_as_teacher(secret):
            _error(self.console, "Incorrect answer. Access denied.")
            return
        profile = TeacherProfile(
            name=Prompt.ask("Name"),
            surname=Prompt.ask("Surname"),
            email=Prompt.ask(f"E-mail (…{self.app.policy.teacher_email_suffix})"),
        )
        password = Prompt.ask("Password", password=True)
        new_id = self._attempt(self.app.credentials.register, Role.TEACHER, profile, password)
        if new_id is not None:
            _success(self.console, f"Registration successful! Teacher ID: {new_id}")

    def _register_student(self) -> None:
        profile = StudentProfile(
            name=Prompt.ask("Name"),
            surname=Prompt.ask("Surname"),
            email=Prompt.ask("E-mail"),
            batch=Prompt.ask("Batch"),
            department=Prompt.ask("Department"),
        )
        password = Prompt.ask("Password", password=True)
        new_id = self._attempt(self.app.credentials.register, Role.STUDENT, profile, password)
        if new_id is not None:
            _success(self.console, f"Registration successful! Student ID: {new_id}")

    # ─── Login ───

    def _login(self, role: Role) -> None:
        email = Prompt.ask("E-mail")
        password = Prompt.ask("Password", password=True)
        context = self._attempt(self.app.credentials.login, role, email, password)
        if context is None:
            return
        self.context = context
        _success(self.console, f"Welcome, {context.display_name}!")
        try:
            if context.is_teacher:
                self._teacher_dashboard()
            else:
                self._student_dashboard()
        finally:
            self.context = None

    # ─── Teacher dashboard ───

    def _teacher_dashboard(self) -> None:
        while True:
            self.console.print()
            self.console.print(Panel("[bold]Teacher Dashboard[/bold]", border_style="cyan"))
            self.console.print("  [bold]1.[/bold] Assign class")
            self.console.print("  [bold]2.[/bold] Cancel class")
            self.console.print("  [bold]3.[/bold] Edit class")
            self.console.print("  [bold]4.[/bold] View all classes")
            self.console.print("  [bold]5.[/bold] View my classes")
            self.console.print("  [bold]0.[/bold] Logout")

            choice = Prompt.ask("\nChoice", default="0")
            if choice == "1":
                self._assign_class()
            elif choice == "2":
                self._cancel_class()
            elif choice == "3":
                self._edit_class()
            elif choice == "4":
                sessions = self._attempt(self.app.sessions.list_all)
                if sessions is not None:
                    self.console.print(build_session_table(sessions, "All scheduled classes"))
            elif choice == "5":
                sessions = self._attempt(self.app.sessions.list_by_owner,
                                         self.context.account_id)
                if sessions is not None:
                    self.console.print(build_session_table(sessions, "My classes"))
            elif choice == "0":
                logger.info(f"Logged out: {self.context}")
                break
            else:
                self.console.print("[yellow]Invalid choice.[/yellow]")

    def _assign_class(self) -> None:
        fields = SessionFields(
            teacher_name=Prompt.ask("Teacher name", default=self.context.display_name),
            department=Prompt.ask("Department"),
            batch=Prompt.ask("Batch"),
            course=Prompt.ask("Course"),
            room=Prompt.ask("Room"),
            class_date=Prompt.ask("Date (YYYY-MM-DD)"),
            start_time=Prompt.ask("Start time (HH:MM)"),
            end_time=Prompt.ask("End time (HH:MM)"),
        )
        new_id = self._attempt(self.app.sessions.assign, self.context, fields)
        if new_id is not None:
            _success(self.console, f"Class assigned successfully. Class ID: {new_id}")

    def _cancel_class(self) -> None:
        class_id = IntPrompt.ask("Class ID to cancel")
        self.app.policy.require_teacher(self.context)
        try:
            self.app.sessions.cancel(self.context.account_id, class_id)
        except SchedulerError as e:
            _error(self.console, str(e))
            return
        _success(self.console, "Class canceled successfully.")

    def _edit_class(self) -> None:
        class_id = IntPrompt.ask("Class ID to edit")
        self.console.print("[dim]Leave a field empty to keep its current value.[/dim]")
        answers = {
            field: Prompt.ask(label, default="")
            for field, label in [
                ("department", "Department"),
                ("batch", "Batch"),
                ("course", "Course"),
                ("room", "Room"),
                ("class_date", "Date (YYYY-MM-DD)"),
                ("start_time", "Start time (HH:MM)"),
                ("end_time", "End time (HH:MM)"),
            ]
        }
        changes = SessionUpdate(**{k: v for k, v in answers.items() if v.strip()})
        self.app.policy.require_teacher(self.context)
        try:
            self.app.sessions.update(self.context.account_id, class_id, changes)
        except SchedulerError as e:
            _error(self.console, str(e))
            return
        _success(self.console, "Class updated successfully.")

    # ─── Student dashboard ───

    def _student_dashboard(self) -> None:
        while True:
            sessions = self._attempt(self.app.sessions.list_for_student, self.context)
            if sessions is not None:
                self.console.print(build_session_table(
                    sessions,
                    f"Classes for batch {self.context.batch} · {self.context.department}",
                    STUDENT_COLUMNS,
                ))
            self.console.print("  [bold]1.[/bold] Refresh   [bold]0.[/bold] Logout")
            if Prompt.ask("Choice", default="0") != "1":
                logger.info(f"Logged out: {self.context}")
                break
