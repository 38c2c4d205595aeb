"""Wires database, policy, stores and sweeper from one AppConfig."""

import logging
from dataclasses import dataclass

from config.schema import AppConfig
from services.credentials import CredentialStore
from services.policy import AccessPolicy
from services.repository import SessionRepository
from services.sweeper import ExpirySweeper
from storage.database import Database

logger = logging.getLogger(__name__)


@dataclass
class SchedulerApp:
    config: AppConfig
    db: Database
    policy: AccessPolicy
    credentials: CredentialStore
    sessions: SessionRepository
    sweeper: ExpirySweeper

    def shutdown(self) -> None:
        """Stops the sweeper (bounded wait) and releases the engine."""
        self.sweeper.stop()
        self.db.dispose()


def build_app(config: AppConfig) -> SchedulerApp:
    """Creates all components and the tables.

    Raises StorageError if the schema cannot be created; nothing else may
    run in that case.
    """
    db = Database(config.database)
    db.init_schema()
    policy = AccessPolicy(config.auth)
    sessions = SessionRepository(db, policy)
    return SchedulerApp(
        config=config,
        db=db,
        policy=policy,
        credentials=CredentialStore(db, policy),
        sessions=sessions,
        sweeper=ExpirySweeper(sessions, config.sweeper),
    )
