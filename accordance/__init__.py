"""
Accordance: records that principals accepted named agreements (terms of
service and the like) and answers which agreements a subject has accepted.

Acceptances are stored as append-only events; the distinct set is derived
at query time. Both operations are gated by named permissions.
"""

__all__ = [
    "accept",
    "get_accepted",
    "init",
]

from .api import accept, get_accepted, init

__version__ = "0.1.0"
