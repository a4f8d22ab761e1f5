"""Agreement acceptance: record acceptances and query what a subject accepted."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, List, Sequence, Union

import pydantic

from ..domain.hashing import subject_key
from ..domain.models import (
    AGREEMENT_ACCEPT_EVENT,
    AcceptanceEvent,
    Actor,
    EventFilter,
    InsertResult,
    ResourceDescriptor,
    iso_timestamp,
)
from ..domain.policy import AGREEMENT_ACCEPT, AGREEMENT_ACCESS
from ..errors import ValidationError
from .event_log import EventLog
from .permissions import PermissionChecker

logger = logging.getLogger(__name__)

Agreements = Union[str, Sequence[str]]

_ACTOR_MESSAGE = "actor must be an object with an id"
_AGREEMENTS_MESSAGE = "agreements must be a string or an array"


def validate_actor(actor: Any) -> Actor:
    """Coerce ``actor`` into an :class:`Actor` or raise ValidationError."""
    if isinstance(actor, Actor):
        return actor
    if isinstance(actor, Mapping):
        if "id" not in actor:
            raise ValidationError(_ACTOR_MESSAGE)
        actor = dict(actor)
    elif isinstance(actor, str) or not hasattr(actor, "id"):
        raise ValidationError(_ACTOR_MESSAGE)
    try:
        return Actor.model_validate(actor, from_attributes=True)
    except pydantic.ValidationError as exc:
        raise ValidationError(_ACTOR_MESSAGE) from exc


def normalize_agreements(agreements: Any) -> List[str]:
    """Return agreements as a list, wrapping a single string.

    Duplicates are kept as given.
    """
    if isinstance(agreements, str):
        if not agreements:
            raise ValidationError(_AGREEMENTS_MESSAGE)
        return [agreements]
    if not isinstance(agreements, (list, tuple)) or not agreements:
        raise ValidationError(_AGREEMENTS_MESSAGE)
    if not all(isinstance(item, str) and item for item in agreements):
        raise ValidationError(_AGREEMENTS_MESSAGE)
    return list(agreements)


def distinct_agreements(events: Sequence[AcceptanceEvent]) -> List[str]:
    """Flatten every event's agreements, keeping the first occurrence of each."""
    flattened = [agreement for event in events for agreement in event.resource]
    return list(dict.fromkeys(flattened))


class AcceptanceRecorder:
    """Writes one AgreementAccept event per authorized call."""

    def __init__(self, event_log: EventLog, permissions: PermissionChecker) -> None:
        self.event_log = event_log
        self.permissions = permissions

    def accept(self, actor: Any, agreements: Agreements) -> InsertResult:
        principal = validate_actor(actor)
        resource = normalize_agreements(agreements)
        event = AcceptanceEvent(
            type=AGREEMENT_ACCEPT_EVENT,
            date=iso_timestamp(),
            resource=resource,
            actor=principal.id,
        )
        # the subject is the event's actor, so principals only record for themselves
        self.permissions.authorize(
            principal,
            AGREEMENT_ACCEPT,
            ResourceDescriptor(resource=event, translate="actor"),
        )
        result = self.event_log.append(event)
        logger.debug(
            "%s accepted %d agreement(s) in %s",
            principal.id,
            len(resource),
            result.event.id,
        )
        return result


class AcceptanceQuery:
    """Reduces a subject's AgreementAccept history into distinct agreements."""

    def __init__(self, event_log: EventLog, permissions: PermissionChecker) -> None:
        self.event_log = event_log
        self.permissions = permissions

    def get_accepted(self, actor: Any, subject_id: str) -> List[str]:
        principal = validate_actor(actor)
        if not isinstance(subject_id, str) or not subject_id:
            raise ValidationError("subject_id must be a non-empty string")
        self.permissions.authorize(
            principal, AGREEMENT_ACCESS, ResourceDescriptor(resource=subject_id)
        )
        records = self.event_log.query(
            EventFilter(type=AGREEMENT_ACCEPT_EVENT, subject_key=subject_key(subject_id))
        )
        return distinct_agreements([record.event for record in records])
