"""Database connection and session management.

This module handles the SQLite connection backing the durable store using
SQLAlchemy.
"""

from pathlib import Path
from typing import Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from config import STATE_DB_PATH
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401

_session_factories: Dict[str, sessionmaker] = {}


def create_sqlite_engine(db_path: Path) -> Engine:
    """Create an engine for the given SQLite file, creating its directory."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def get_session_factory(db_path: Optional[Path] = None) -> sessionmaker:
    """Get the session factory for a database file, initializing it once.

    Args:
        db_path: SQLite file. Defaults to STATE_DB_PATH.

    Returns:
        A sessionmaker bound to the file's engine.
    """
    path = Path(db_path or STATE_DB_PATH).resolve()
    cache_key = str(path)
    if cache_key not in _session_factories:
        engine = create_sqlite_engine(path)
        init_db(engine)
        _session_factories[cache_key] = sessionmaker(
            autocommit=False, autoflush=False, bind=engine
        )
    return _session_factories[cache_key]
