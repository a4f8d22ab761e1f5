"""Error types raised by the agreement service and its collaborators."""
from __future__ import annotations

from typing import Any, Dict, Optional


class AgreementError(Exception):
    """Base class for every error raised by Accordance."""


class ValidationError(AgreementError, TypeError):
    """Malformed input, detected before any collaborator is called."""


class PermissionDeniedError(AgreementError):
    """Authorization refused; carries the requested permission name."""

    def __init__(self, permission: str, resource: Optional[str] = None) -> None:
        super().__init__(f"Permission denied: {permission}")
        self.permission = permission
        self.resource = resource

    @property
    def details(self) -> Dict[str, Any]:
        return {"permission": self.permission, "resource": self.resource}


class CollaboratorError(AgreementError):
    """A storage or authorization backend failed."""
