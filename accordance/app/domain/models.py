"""Domain models shared between the service and persistence layers."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import JSON
from sqlmodel import Column, Field as SQLField, SQLModel

AGREEMENT_ACCEPT_EVENT = "AgreementAccept"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or _utcnow()
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def new_event_id() -> str:
    return f"urn:uuid:{uuid4()}"


class AcceptanceEvent(BaseModel):
    """A principal accepted one or more agreements in a single call."""

    model_config = ConfigDict(frozen=True)

    type: Literal["AgreementAccept"] = AGREEMENT_ACCEPT_EVENT
    date: str
    resource: List[str] = Field(min_length=1)
    actor: str
    id: Optional[str] = None


class ResourceRole(BaseModel):
    """A role held by an actor, scoped to a set of resources.

    ``generate_resource="id"`` scopes the role to the actor's own id.
    A role without resources applies to every resource.
    """

    role: str
    resources: List[str] = Field(default_factory=list)
    generate_resource: Optional[Literal["id"]] = None


class Actor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    resource_roles: List[ResourceRole] = Field(default_factory=list)


class ResourceDescriptor(BaseModel):
    """What an authorization check is about.

    ``resource`` is either a bare subject id or an event-shaped object;
    ``translate`` names the event field holding the subject.
    """

    resource: Union[str, AcceptanceEvent]
    translate: Optional[str] = None


class EventFilter(BaseModel):
    type: str
    subject_key: Optional[str] = None


class StoredEvent(BaseModel):
    sequence: int
    subject_key: Optional[str]
    event: AcceptanceEvent


class InsertResult(BaseModel):
    event: AcceptanceEvent
    subject_key: Optional[str] = None


class EventRecord(SQLModel, table=True):
    """Immutable event-log row."""

    __tablename__ = "event_log"

    sequence: Optional[int] = SQLField(default=None, primary_key=True)
    event_id: str = SQLField(index=True, unique=True)
    type: str = SQLField(index=True)
    subject_key: Optional[str] = SQLField(default=None, index=True)
    payload: Dict[str, Any] = SQLField(sa_column=Column(JSON, nullable=False))
    created_at: datetime = SQLField(default_factory=_utcnow, nullable=False, index=True)


class AccessLog(SQLModel, table=True):
    __tablename__ = "access_logs"

    id: str = SQLField(default_factory=lambda: str(uuid4()), primary_key=True, index=True)
    actor_id: str = SQLField(index=True)
    permission: str = SQLField(index=True)
    resource: str
    allowed: bool = SQLField(default=True)
    created_at: datetime = SQLField(default_factory=_utcnow, nullable=False, index=True)

