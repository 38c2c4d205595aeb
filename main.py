"""University Class Scheduler — main CLI.

Usage:
  python main.py setup                          First-run wizard
  python main.py config show                    Show configuration
  python main.py init-db                        Create tables
  python main.py register teacher               Register a teacher (secret required)
  python main.py register student               Register a student
  python main.py classes list                   List all classes
  python main.py classes list --owner 5         Classes of one teacher
  python main.py classes list --batch B21 --department CS
  python main.py sweep                          Delete expired classes once
  python main.py run                            Interactive dashboards + sweeper
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

console = Console()


def _setup_logging(cfg) -> None:
    """Root logger: rich console handler plus an optional plain file handler."""
    from rich.logging import RichHandler

    handlers: list[logging.Handler] = [
        RichHandler(console=console, show_path=False, rich_tracebacks=True)
    ]
    if cfg.file:
        Path(cfg.file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(cfg.file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
        handlers.append(file_handler)
    logging.basicConfig(level=cfg.level, format="%(message)s", datefmt="[%X]",
                        handlers=handlers, force=True)


def _load_config_or_abort():
    """Loads the configuration (defaults if none exists) or aborts on an invalid file."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        config = mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    _setup_logging(config.logging)
    return mgr, config


def _open_app_or_abort():
    """Builds the application. Without its tables the scheduler cannot run."""
    from services.app import build_app
    from services.errors import StorageError

    mgr, config = _load_config_or_abort()
    try:
        return build_app(config)
    except StorageError as e:
        console.print(f"[red bold]Database unavailable:[/red bold] {e}")
        sys.exit(1)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """First-run setup: create the configuration with the wizard."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print(
            "[yellow]A configuration already exists.[/yellow]\n"
            "Use [bold]python main.py config show[/bold] to inspect it."
        )
        if not click.confirm("Set up again anyway?", default=False):
            return

    config = run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Setup complete![/bold green]")
        console.print("Now run [bold]python main.py run[/bold].")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Show the configuration."""


@cmd_config.command("show")
def config_show():
    """Shows the current configuration."""
    from config.wizard import show_summary

    mgr, config = _load_config_or_abort()
    source = "defaults" if mgr.first_run_check() else str(mgr.DEFAULT_CONFIG)
    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]  |  source: {source}",
        title="Configuration",
        border_style="cyan",
    ))
    show_summary(config)


@cmd_config.command("path")
def config_path():
    """Prints the path of the configuration file."""
    from config.manager import ConfigManager
    click.echo(str(ConfigManager().DEFAULT_CONFIG))


# ─── DATABASE ─────────────────────────────────────────────────────────────────

@click.command("init-db")
def cmd_init_db():
    """Creates missing tables (existing data stays untouched)."""
    app = _open_app_or_abort()
    console.print(f"[green]✓[/green] Tables ready: {app.db.url}")
    app.shutdown()


# ─── REGISTER ─────────────────────────────────────────────────────────────────

@click.group("register")
def cmd_register():
    """Register a teacher or student account."""


def _check_teacher_secret(ctx, param, value):
    """Rejects a wrong registration secret before the form is shown."""
    from services.policy import AccessPolicy

    if ctx.resilient_parsing:
        return value
    _, config = _load_config_or_abort()
    if not AccessPolicy(config.auth).can_register_as_teacher(value):
        console.print("[red]Incorrect answer. Access denied.[/red]")
        ctx.exit(1)
    return value


@cmd_register.command("teacher")
@click.option("--secret", prompt="What is the teachers' password?", hide_input=True,
              is_eager=True, callback=_check_teacher_secret,
              help="Shared teacher registration secret.")
@click.option("--name", prompt=True)
@click.option("--surname", prompt=True)
@click.option("--email", prompt="E-mail")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def register_teacher(secret: str, name: str, surname: str, email: str, password: str):
    """Registers a teacher. Requires the shared registration secret."""
    from models.account import Role, TeacherProfile
    from services.errors import SchedulerError

    app = _open_app_or_abort()
    try:
        profile = TeacherProfile(name=name, surname=surname, email=email)
        try:
            new_id = app.credentials.register(Role.TEACHER, profile, password)
        except SchedulerError as e:
            console.print(f"[red]Registration failed:[/red] {e}")
            sys.exit(1)
        console.print(f"[green]✓[/green] Registration successful! Teacher ID: {new_id}")
    finally:
        app.shutdown()


@cmd_register.command("student")
@click.option("--name", prompt=True)
@click.option("--surname", prompt=True)
@click.option("--email", prompt="E-mail")
@click.option("--batch", prompt=True)
@click.option("--department", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def register_student(name: str, surname: str, email: str, batch: str,
                     department: str, password: str):
    """Registers a student with batch and department."""
    from models.account import Role, StudentProfile
    from services.errors import SchedulerError

    app = _open_app_or_abort()
    try:
        profile = StudentProfile(name=name, surname=surname, email=email,
                                 batch=batch, department=department)
        try:
            new_id = app.credentials.register(Role.STUDENT, profile, password)
        except SchedulerError as e:
            console.print(f"[red]Registration failed:[/red] {e}")
            sys.exit(1)
        console.print(f"[green]✓[/green] Registration successful! Student ID: {new_id}")
    finally:
        app.shutdown()


# ─── CLASSES ──────────────────────────────────────────────────────────────────

@click.group("classes")
def cmd_classes():
    """Read-only class listings."""


@cmd_classes.command("list")
@click.option("--owner", type=int, default=None, help="Only classes of this teacher ID.")
@click.option("--batch", default=None, help="Audience batch (needs --department).")
@click.option("--department", default=None, help="Audience department (needs --batch).")
@click.option("--json", "json_path", type=click.Path(path_type=Path), default=None,
              help="Also write the listing as JSON.")
def classes_list(owner: Optional[int], batch: Optional[str], department: Optional[str],
                 json_path: Optional[Path]):
    """Lists classes: all, by owner, or by audience (chronological)."""
    from export.json_export import save_sessions_json
    from export.tui_renderer import build_session_table
    from services.errors import SchedulerError

    if (batch is None) != (department is None):
        raise click.UsageError("--batch and --department must be given together.")
    if owner is not None and batch is not None:
        raise click.UsageError("--owner cannot be combined with --batch/--department.")

    app = _open_app_or_abort()
    try:
        if owner is not None:
            sessions = app.sessions.list_by_owner(owner)
            title = f"Classes of teacher #{owner}"
        elif batch is not None:
            sessions = app.sessions.list_for_audience(batch, department)
            title = f"Classes for batch {batch} · {department}"
        else:
            sessions = app.sessions.list_all()
            title = "All scheduled classes"
    except SchedulerError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    finally:
        app.shutdown()

    console.print(build_session_table(sessions, title))
    if json_path is not None:
        out = save_sessions_json(sessions, json_path)
        console.print(f"[green]✓[/green] JSON saved: {out}")


# ─── SWEEP ────────────────────────────────────────────────────────────────────

@click.command("sweep")
@click.option("--now", "now", type=click.DateTime(formats=["%Y-%m-%d %H:%M"]),
              default=None, help="Reference time instead of the local clock.")
def cmd_sweep(now: Optional[datetime]):
    """Deletes every class whose end time has passed (one sweep)."""
    from services.errors import SchedulerError

    app = _open_app_or_abort()
    try:
        deleted = app.sweeper.sweep_once(now)
    except SchedulerError as e:
        console.print(f"[red]Sweep failed:[/red] {e}")
        sys.exit(1)
    finally:
        app.shutdown()
    console.print(f"[green]✓[/green] {deleted} expired class(es) deleted.")


# ─── RUN ──────────────────────────────────────────────────────────────────────

@click.command("run")
def cmd_run():
    """Starts the interactive dashboards with the expiry sweeper in the background."""
    from dashboard.interactive import InteractiveSession

    app = _open_app_or_abort()
    if app.config.sweeper.enabled:
        app.sweeper.start()
    try:
        InteractiveSession(app, console).run()
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Interrupted.[/yellow]")
    finally:
        app.shutdown()
    console.print("[dim]Goodbye.[/dim]")


# ─── MAIN CLI ─────────────────────────────────────────────────────────────────

@click.group()
def cli():
    """University Class Scheduler.

    Start with: python main.py setup
    """


def main():
    """Entry point. Without arguments the interactive dashboards start."""
    if len(sys.argv) == 1:
        sys.argv.append("run")
    cli()


# Register commands
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_init_db)
cli.add_command(cmd_register)
cli.add_command(cmd_classes)
cli.add_command(cmd_sweep)
cli.add_command(cmd_run)


if __name__ == "__main__":
    main()
