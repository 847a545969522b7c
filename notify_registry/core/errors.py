"""
Error types raised by the registry stores.

Store operations never leak SQLAlchemy exceptions; they are translated into:
- NotFound: a single-row lookup or an update matched nothing
- Conflict: a unique or foreign-key constraint was violated
- TransientStoreError: connectivity trouble, safe for the caller to retry
- FatalStoreError: anything else the store rejected

The underlying exception is always chained as ``__cause__``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import exc as sa_exc


class RegistryError(Exception):
    """Base exception for all registry store errors."""

    code = "REGISTRY_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(RegistryError):
    code = "NOT_FOUND"


class Conflict(RegistryError):
    code = "CONFLICT"


class TransientStoreError(RegistryError):
    code = "TRANSIENT_STORE_ERROR"


class FatalStoreError(RegistryError):
    code = "FATAL_STORE_ERROR"


_TRANSIENT = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.TimeoutError,
    sa_exc.DisconnectionError,
    OSError,
)


def translate(error: BaseException) -> RegistryError | None:
    """Map a store exception onto the registry taxonomy (None if not a store error)."""
    if isinstance(error, RegistryError):
        return error
    if isinstance(error, sa_exc.NoResultFound):
        return NotFound("No matching row")
    if isinstance(error, sa_exc.IntegrityError):
        return Conflict(str(error.orig) if error.orig is not None else str(error))
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return TransientStoreError(str(error))
    if isinstance(error, _TRANSIENT):
        return TransientStoreError(str(error))
    if isinstance(error, sa_exc.SQLAlchemyError):
        return FatalStoreError(str(error))
    return None


@contextmanager
def store_errors() -> Iterator[None]:
    """Re-raise store exceptions from the wrapped block as RegistryError."""
    try:
        yield
    except RegistryError:
        raise
    except Exception as exc:
        mapped = translate(exc)
        if mapped is None:
            raise
        raise mapped from exc
