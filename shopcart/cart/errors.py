"""
shopcart/cart/errors.py
-----------------------
Failure signals for cart operations.

Business failures (bad input, limits, missing items) come back as a
CartResult and never raise. Only a broken persistence slot raises,
because the caller cannot continue without it.
"""
from dataclasses import dataclass
from enum import Enum


class Reason(str, Enum):
    VALIDATION_ERROR = 'validation_error'
    LIMIT_EXCEEDED   = 'limit_exceeded'
    NOT_FOUND        = 'not_found'


@dataclass(frozen=True)
class CartResult:
    """Outcome of a mutating cart operation. Truthy on success."""
    ok:      bool
    reason:  Reason | None = None
    message: str = ''

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> 'CartResult':
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: Reason, message: str) -> 'CartResult':
        return cls(ok=False, reason=reason, message=message)


class CartError(Exception):
    """Base class for cart exceptions."""


class PersistenceError(CartError):
    """The host persistence slot could not be read or written."""
