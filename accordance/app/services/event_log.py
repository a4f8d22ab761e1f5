"""Event log service: append-only storage of domain events."""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..domain.hashing import subject_key
from ..domain.models import (
    AcceptanceEvent,
    EventFilter,
    EventRecord,
    InsertResult,
    StoredEvent,
    new_event_id,
)
from ..domain.policy import EVENT_TYPES
from ..errors import CollaboratorError, ValidationError

logger = logging.getLogger(__name__)


class EventLog(Protocol):
    def append(self, event: AcceptanceEvent) -> InsertResult: ...

    def query(self, event_filter: EventFilter) -> List[StoredEvent]: ...


class SqlEventLog:
    """Append-only event log backed by SQLModel."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def append(self, event: AcceptanceEvent) -> InsertResult:
        stored = event.model_copy(update={"id": new_event_id()})
        key = self._index_key(stored)
        record = EventRecord(
            event_id=stored.id,
            type=stored.type,
            subject_key=key,
            payload=stored.model_dump(),
        )
        try:
            self.session.add(record)
            self.session.flush()
        except SQLAlchemyError as exc:
            raise CollaboratorError(f"failed to append {stored.type} event") from exc
        logger.debug("appended %s event %s", stored.type, stored.id)
        return InsertResult(event=stored, subject_key=key)

    def query(self, event_filter: EventFilter) -> List[StoredEvent]:
        stmt = select(EventRecord).where(EventRecord.type == event_filter.type)
        if event_filter.subject_key is not None:
            stmt = stmt.where(EventRecord.subject_key == event_filter.subject_key)
        stmt = stmt.order_by(EventRecord.sequence)
        try:
            records = self.session.exec(stmt).all()
        except SQLAlchemyError as exc:
            raise CollaboratorError(f"failed to query {event_filter.type} events") from exc
        return [
            StoredEvent(
                sequence=record.sequence,
                subject_key=record.subject_key,
                event=AcceptanceEvent.model_validate(record.payload),
            )
            for record in records
        ]

    @staticmethod
    def _index_key(event: AcceptanceEvent) -> Optional[str]:
        settings = EVENT_TYPES.get(event.type)
        if settings is None:
            raise ValidationError(f"unknown event type: {event.type}")
        field = settings.get("index")
        if not field:
            return None
        return subject_key(getattr(event, field))
