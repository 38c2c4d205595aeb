from pydantic import BaseModel, Field, field_validator
from typing import Optional


# ─── DATABASE ───

class DatabaseConfig(BaseModel):
    """Where the schedule database lives."""
    # SQLAlchemy URL, e.g. "sqlite:///university.db"
    url: str = Field("sqlite:///university.db",
        description="SQLAlchemy database URL")
    # Echo every SQL statement (debugging only)
    echo: bool = Field(False,
        description="Log SQL statements")


# ─── AUTHENTICATION ───

class AuthConfig(BaseModel):
    """Registration rules for both account roles.

    The registration secret is a single value shared by every teacher.
    It keeps students out of the teacher sign-up screen, nothing more:
    anyone who knows it can register as a teacher.
    """
    # Teacher e-mail addresses must end with this suffix
    teacher_email_suffix: str = Field("ustc.ac.bd",
        description="Institutional e-mail suffix for teachers")
    # Shared secret asked before the teacher registration form
    teacher_registration_secret: str = Field("UsTc1989@05102004",
        description="Shared teacher registration secret (not a security control)")

    @field_validator("teacher_email_suffix")
    @classmethod
    def _suffix_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("teacher_email_suffix must not be empty")
        return v


# ─── EXPIRY SWEEPER ───

class SweeperConfig(BaseModel):
    """Background purge of classes whose end time has passed."""
    # Run the sweeper during interactive sessions
    enabled: bool = Field(True,
        description="Sweeper active")
    # Seconds between two sweeps
    interval_seconds: int = Field(300, ge=1,
        description="Sweep period (seconds)")
    # Upper bound for waiting on an in-flight sweep at shutdown
    shutdown_timeout_seconds: float = Field(10.0, gt=0,
        description="Shutdown wait for a running sweep (seconds)")


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Log level and optional log file."""
    level: str = Field("INFO",
        description="Root log level")
    # Additional plain-text log file; None = console only
    file: Optional[str] = Field(None,
        description="Optional log file path")

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v


# ─── COMPLETE CONFIG ───

class AppConfig(BaseModel):
    """Complete application configuration."""
    # Name shown in panels and headers
    institution_name: str = Field("University of Science and Technology Chittagong",
        description="Institution name")
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    sweeper: SweeperConfig = Field(default_factory=SweeperConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
