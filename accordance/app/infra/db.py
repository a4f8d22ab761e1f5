"""Database session utilities."""
from contextlib import contextmanager
import logging
import time
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, Session

from .. import config
from ..domain import models  # noqa: F401  registers tables on SQLModel.metadata

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(config.DATABASE_URL, echo=False, future=True, connect_args=connect_args)
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    class_=Session,
)


def init_db(
    bind_engine: Optional[Engine] = None,
    attempts: Optional[int] = None,
    delay: float = 1.0,
) -> None:
    """Create tables if they do not exist.

    Retries on startup to wait for a database service that is still booting.
    """
    target_engine = bind_engine or engine
    max_attempts = attempts or config.DB_INIT_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        try:
            SQLModel.metadata.create_all(target_engine)
            return
        except Exception as exc:
            if attempt == max_attempts:
                raise
            logger.warning(
                "waiting for database... (%d/%d) %s", attempt, max_attempts, exc
            )
            time.sleep(delay)


@contextmanager
def get_session() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
