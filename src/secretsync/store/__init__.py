"""
Revision stores -- where the secrets history lives.

The engine only talks to ``RevisionStore``. ``GitRevisionStore`` is the
production implementation; anything exposing the same log, fetch and
checkout operations can stand in for it.
"""

from .base import Checkout, RevisionStore, distance_between, parse_repo_status
from .git import GitRevisionStore

__all__ = [
    "Checkout",
    "GitRevisionStore",
    "RevisionStore",
    "distance_between",
    "parse_repo_status",
]
