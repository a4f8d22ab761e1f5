"""Permission, role and event-type tables."""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional

from .models import AGREEMENT_ACCEPT_EVENT, Actor


@dataclass(frozen=True)
class Permission:
    id: str
    label: str
    comment: str


AGREEMENT_ACCESS = "AGREEMENT_ACCESS"
AGREEMENT_ACCEPT = "AGREEMENT_ACCEPT"

PERMISSIONS: Dict[str, Permission] = {
    AGREEMENT_ACCESS: Permission(
        id=AGREEMENT_ACCESS,
        label="Access Agreement",
        comment="Required to access an Agreement.",
    ),
    AGREEMENT_ACCEPT: Permission(
        id=AGREEMENT_ACCEPT,
        label="Accept Agreement",
        comment="Required to accept an Agreement.",
    ),
}

ROLES: Dict[str, FrozenSet[str]] = {
    "agreement.user": frozenset({AGREEMENT_ACCESS, AGREEMENT_ACCEPT}),
    "agreement.auditor": frozenset({AGREEMENT_ACCESS}),
}

# event type -> field whose value is hashed into the subject index
EVENT_TYPES: Dict[str, Dict[str, str]] = {
    AGREEMENT_ACCEPT_EVENT: {"index": "actor"},
}


def is_allowed(
    actor: Actor,
    permission: str,
    subject: Optional[str],
    roles: Dict[str, Iterable[str]] = ROLES,
) -> bool:
    for assignment in actor.resource_roles:
        if permission not in roles.get(assignment.role, ()):
            continue
        scope = list(assignment.resources)
        if assignment.generate_resource == "id":
            scope.append(actor.id)
        if not scope or subject in scope:
            return True
    return False
