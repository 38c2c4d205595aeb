"""Interactive first-run wizard for the class scheduler.

Walks the user through every configuration section step by step.
Uses rich for console output.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    LoggingConfig,
    SweeperConfig,
)
from config.defaults import default_app_config

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


# ─── STEP 1: Institution & database ───

def _wizard_database(defaults: AppConfig) -> tuple[str, DatabaseConfig]:
    _header("Step 1 — Institution & database")
    name = Prompt.ask("Institution name", default=defaults.institution_name)
    _info("SQLite is used unless another SQLAlchemy URL is entered.")
    url = Prompt.ask("Database URL", default=defaults.database.url)
    return name, DatabaseConfig(url=url)


# ─── STEP 2: Registration rules ───

def _wizard_auth(defaults: AuthConfig) -> AuthConfig:
    _header("Step 2 — Registration rules")
    _info(
        "The registration secret is shared by all teachers. It only hides the\n"
        "teacher sign-up form from students; it is not an access control."
    )
    suffix = Prompt.ask("Teacher e-mail suffix", default=defaults.teacher_email_suffix)
    secret = Prompt.ask("Teacher registration secret",
                        default=defaults.teacher_registration_secret,
                        password=True)
    return AuthConfig(teacher_email_suffix=suffix, teacher_registration_secret=secret)


# ─── STEP 3: Sweeper & logging ───

def _wizard_sweeper(defaults: SweeperConfig) -> SweeperConfig:
    _header("Step 3 — Expiry sweeper")
    _info("Classes whose end time has passed are deleted periodically.")
    if Confirm.ask("Use default sweep settings (every 5 minutes)?", default=True):
        _success("Default sweep settings applied.")
        return defaults
    enabled = Confirm.ask("Enable the sweeper?", default=True)
    interval = IntPrompt.ask("Sweep interval (seconds)", default=defaults.interval_seconds)
    return SweeperConfig(enabled=enabled, interval_seconds=interval,
                         shutdown_timeout_seconds=defaults.shutdown_timeout_seconds)


def _wizard_logging(defaults: LoggingConfig) -> LoggingConfig:
    level = Prompt.ask("Log level", default=defaults.level,
                       choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    log_file = Prompt.ask("Log file (empty = console only)", default="")
    return LoggingConfig(level=level, file=log_file or None)


# ─── SUMMARY ───

def show_summary(config: AppConfig) -> None:
    table = Table(box=box.ROUNDED, title="Configuration overview")
    table.add_column("Section", style="bold cyan")
    table.add_column("Value")

    table.add_row("Institution", config.institution_name)
    table.add_row("Database", config.database.url)
    table.add_row("Teacher e-mail suffix", config.auth.teacher_email_suffix)
    table.add_row("Registration secret", "*" * len(config.auth.teacher_registration_secret))
    table.add_row(
        "Sweeper",
        f"{'✓' if config.sweeper.enabled else '✗'} every "
        f"{config.sweeper.interval_seconds}s",
    )
    table.add_row("Log level", config.logging.level)
    table.add_row("Log file", config.logging.file or "-")
    console.print(table)


# ─── MAIN WIZARD ───

def run_wizard() -> Optional[AppConfig]:
    """Runs the complete interactive setup wizard.

    Returns:
        Finished AppConfig, or None if the user aborts.
    """
    console.print()
    console.print(Panel(
        "[bold]Welcome to the University Class Scheduler![/bold]\n\n"
        "The wizard walks you through every configuration section.\n"
        "[dim]Press Enter to accept a default value.[/dim]",
        title="[bold cyan]Class Scheduler setup[/bold cyan]",
        border_style="cyan",
    ))

    if not Confirm.ask("\nSet up the scheduler now?", default=True):
        console.print("[yellow]Setup aborted.[/yellow]")
        return None

    defaults = default_app_config()
    try:
        name, database = _wizard_database(defaults)
        auth = _wizard_auth(defaults.auth)
        sweeper = _wizard_sweeper(defaults.sweeper)
        logging_cfg = _wizard_logging(defaults.logging)

        config = AppConfig(
            institution_name=name,
            database=database,
            auth=auth,
            sweeper=sweeper,
            logging=logging_cfg,
        )

        _header("Summary")
        show_summary(config)

        if not Confirm.ask("\nSave configuration?", default=True):
            console.print("[yellow]Configuration not saved.[/yellow]")
            return None

        return config

    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard aborted.[/yellow]")
        return None
    except ValueError as e:
        _warn(f"Validation error: {e}")
        return None
