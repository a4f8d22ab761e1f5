"""Index key derivation for the event log."""
from __future__ import annotations

import hashlib


def subject_key(identifier: str) -> str:
    """Return the indexed lookup key for a subject identifier.

    The event log stores this value instead of the raw identifier, so
    writers and readers must both derive it here.
    """
    return hashlib.sha256(identifier.encode("utf-8")).hexdigest()
