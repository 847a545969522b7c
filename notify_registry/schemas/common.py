"""Opaque identifier types and the shared decode steps for stored values."""

from __future__ import annotations

import uuid
from typing import Iterable, NewType

import structlog

log = structlog.get_logger()

# Validated upstream; stored and compared as plain strings.
AccountId = NewType("AccountId", str)
Topic = NewType("Topic", str)


def parse_scopes_and_ignore_invalid(names: Iterable[str | None]) -> set[uuid.UUID]:
    """Decode stored scope names into a set of UUIDs.

    Values that do not parse as a UUID are dropped rather than failing the
    whole read. Rows written by this package always hold valid UUIDs, so a
    dropped value means the table was written by something else; it is logged
    so that the corruption stays visible.
    """
    scope: set[uuid.UUID] = set()
    for name in names:
        if name is None:
            continue
        try:
            scope.add(uuid.UUID(name))
        except (ValueError, TypeError, AttributeError):
            log.warning("scope.invalid_dropped", value=name)
    return scope
