from __future__ import annotations

import sqlite3
from pathlib import Path

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import sessionmaker

from ..config import DatabaseConfig
from .tables import metadata


def _database_file(config: DatabaseConfig) -> Path:
    directory = Path(config.path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory / config.name


def _enable_wal(dbapi_connection, _connection_record) -> None:  # type: ignore[override]
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def create_database_engine(config: DatabaseConfig, *, echo: bool = False) -> Engine:
    if (config.engine or "sqlite").lower() != "sqlite":
        raise ValueError(f"Unsupported database engine '{config.engine}'")

    engine = create_engine(
        f"sqlite:///{_database_file(config)}",
        echo=echo,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _enable_wal)
    return engine


def initialize_database(config: DatabaseConfig, *, echo: bool = False) -> sessionmaker:
    """Create the preference schema if needed and return a session factory bound to it."""
    engine = create_database_engine(config, echo=echo)
    metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
