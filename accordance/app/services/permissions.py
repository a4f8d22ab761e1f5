"""Role-based permission checker with access logging."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Protocol

from sqlmodel import Session

from ..domain.models import AccessLog, AcceptanceEvent, Actor, ResourceDescriptor
from ..domain.policy import PERMISSIONS, ROLES, is_allowed
from ..errors import PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)


class PermissionChecker(Protocol):
    def authorize(
        self, actor: Actor, permission: str, descriptor: ResourceDescriptor
    ) -> None: ...


def resolve_subject(descriptor: ResourceDescriptor) -> Optional[str]:
    """Return the subject id an authorization check is about."""
    resource = descriptor.resource
    if isinstance(resource, AcceptanceEvent):
        field = descriptor.translate or "actor"
        value = getattr(resource, field, None)
        if value is None:
            raise ValidationError(f"resource has no {field!r} field to authorize against")
        return value
    return resource


class RolePermissionChecker:
    def __init__(
        self,
        session: Optional[Session] = None,
        roles: Dict[str, Iterable[str]] = ROLES,
    ) -> None:
        self.session = session
        self.roles = roles

    def authorize(
        self, actor: Actor, permission: str, descriptor: ResourceDescriptor
    ) -> None:
        if permission not in PERMISSIONS:
            raise ValidationError(f"unknown permission: {permission}")
        subject = resolve_subject(descriptor)
        allowed = is_allowed(actor, permission, subject, self.roles)
        if self.session is not None:
            self.session.add(
                AccessLog(
                    actor_id=actor.id,
                    permission=permission,
                    resource=subject or "",
                    allowed=allowed,
                )
            )
        if not allowed:
            logger.info("denied %s to %s on %s", permission, actor.id, subject)
            raise PermissionDeniedError(permission, subject)
