from config.schema import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    LoggingConfig,
    SweeperConfig,
)


# Text formats of the temporal schedule columns
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

# Legacy sweep period of the desktop application
DEFAULT_SWEEP_INTERVAL = 300


def default_app_config() -> AppConfig:
    """Default configuration of a fresh installation.

    Database:  sqlite:///university.db (next to the working directory)
    Teachers:  e-mail must end with "ustc.ac.bd"
    Sweeper:   every 5 minutes, 10 s shutdown grace period
    """
    return AppConfig(
        database=DatabaseConfig(),
        auth=AuthConfig(),
        sweeper=SweeperConfig(interval_seconds=DEFAULT_SWEEP_INTERVAL),
        logging=LoggingConfig(),
    )


def memory_app_config() -> AppConfig:
    """In-memory database, sweeper disabled. Useful for tests and dry runs."""
    return AppConfig(
        database=DatabaseConfig(url="sqlite://"),
        sweeper=SweeperConfig(enabled=False),
    )
