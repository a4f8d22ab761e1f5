"""Module-level API wiring the SQL-backed collaborators.

Each call runs in its own database session: committed when the call
succeeds, rolled back when it raises. A permission denial is the exception:
its access-log row is committed before the error propagates.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List

from sqlmodel import Session

from .app.config import configure_logging
from .app.domain.models import InsertResult
from .app.errors import PermissionDeniedError
from .app.infra.db import get_session, init_db
from .app.services.agreements import AcceptanceQuery, AcceptanceRecorder, Agreements
from .app.services.event_log import SqlEventLog
from .app.services.permissions import RolePermissionChecker


def init() -> None:
    """Configure logging and create the event log tables."""
    configure_logging()
    init_db()


@contextmanager
def _unit_of_work() -> Iterator[Session]:
    with get_session() as session:
        try:
            yield session
        except PermissionDeniedError:
            # authorization runs before any write, so only the denial row is pending
            session.commit()
            raise


def accept(actor: Any, agreements: Agreements) -> InsertResult:
    """Record that ``actor`` accepted ``agreements`` (a string or a list of strings)."""
    with _unit_of_work() as session:
        recorder = AcceptanceRecorder(SqlEventLog(session), RolePermissionChecker(session))
        return recorder.accept(actor, agreements)


def get_accepted(actor: Any, subject_id: str) -> List[str]:
    """Return the distinct agreements ``subject_id`` has accepted."""
    with _unit_of_work() as session:
        query = AcceptanceQuery(SqlEventLog(session), RolePermissionChecker(session))
        return query.get_accepted(actor, subject_id)
