"""SQLAlchemy engine, table definitions and the unit-of-work helper."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Column, Integer, String, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from config.schema import DatabaseConfig
from services.errors import StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()


# ─── TABLES ───

class TeacherRow(Base):
    __tablename__ = "Teachers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    surname = Column(String)
    email = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)   # salted hash


class StudentRow(Base):
    __tablename__ = "Students"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    surname = Column(String)
    email = Column(String, unique=True, nullable=False)
    password = Column(String, nullable=False)   # salted hash
    batch = Column(String)
    department = Column(String)


class ScheduleRow(Base):
    __tablename__ = "Schedule"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Integer, index=True)
    teacher_name = Column(String)
    department = Column(String)
    batch = Column(String)
    course = Column(String)
    room = Column(String)
    start_time = Column("time", String)             # "HH:MM"
    class_date = Column(String)                     # "YYYY-MM-DD"
    end_time = Column("class_end_time", String)     # "HH:MM"


# ─── DATABASE ───

class Database:
    """Owns the engine and hands out short-lived sessions.

    One ``session_scope()`` is one transaction: committed on success,
    rolled back on any exception.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self.url = config.url
        kwargs: dict = {"echo": config.echo, "future": True}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every session sees an empty database
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(self.url, **kwargs)
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    def init_schema(self) -> None:
        """Creates all tables that do not exist yet. Safe to call repeatedly."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            logger.critical(f"Schema creation failed for {self.url}: {e}")
            raise StorageError(f"Could not create tables: {e}") from e
        logger.info(f"Schema ready ({self.url})")

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
