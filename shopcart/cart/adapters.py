"""
shopcart/cart/adapters.py
-------------------------
Persisted slots the cart engine reads from and writes to.

The engine never touches Flask globals itself; the host hands it one of
these. Anything that can store a string under a key can back a cart
(a database table included) by subclassing PersistenceAdapter.
"""
from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from datetime import timedelta

from flask import after_this_request, request, session

from shopcart.cart.errors import PersistenceError
from shopcart.cart.models import DEFAULT_COOKIE_MAX_AGE

logger = logging.getLogger(__name__)


class PersistenceAdapter(ABC):

    @abstractmethod
    def read_raw(self, key: str) -> str | None:
        """Payload stored under `key`, or None if the slot is empty."""

    @abstractmethod
    def write_raw(self, key: str, payload: str) -> None:
        """Store `payload` under `key`, replacing any previous value."""

    @abstractmethod
    def delete_raw(self, key: str) -> None:
        """Remove the slot entirely."""


class MemoryAdapter(PersistenceAdapter):
    """Dict-backed slots. Used by tests and non-web callers."""

    def __init__(self, initial: dict | None = None):
        self.slots: dict[str, str] = dict(initial or {})

    def read_raw(self, key):
        return self.slots.get(key)

    def write_raw(self, key, payload):
        self.slots[key] = payload

    def delete_raw(self, key):
        self.slots.pop(key, None)


class SessionAdapter(PersistenceAdapter):
    """Slots stored in the Flask session."""

    def read_raw(self, key):
        try:
            return session.get(key)
        except RuntimeError as e:
            raise PersistenceError(f'Session unavailable: {e}') from e

    def write_raw(self, key, payload):
        try:
            session[key]     = payload
            session.modified = True
        except RuntimeError as e:
            raise PersistenceError(f'Session unavailable: {e}') from e

    def delete_raw(self, key):
        try:
            session.pop(key, None)
            session.modified = True
        except RuntimeError as e:
            raise PersistenceError(f'Session unavailable: {e}') from e


class CookieAdapter(PersistenceAdapter):
    """
    Slots stored in response cookies.

    Writes are staged on the adapter so later reads in the same request see
    them, and a single after_this_request hook copies the staged values onto
    the outgoing response (set with max_age/path, or deleted).
    """

    def __init__(self, max_age: timedelta = DEFAULT_COOKIE_MAX_AGE, path: str = '/'):
        self.max_age = max_age
        self.path    = path
        self._staged: dict[str, str | None] = {}   # None = delete
        self._hooked = False

    def read_raw(self, key):
        if key in self._staged:
            return self._staged[key]
        try:
            return request.cookies.get(key)
        except RuntimeError as e:
            raise PersistenceError(f'Request cookies unavailable: {e}') from e

    def write_raw(self, key, payload):
        self._stage(key, payload)

    def delete_raw(self, key):
        self._stage(key, None)

    def _stage(self, key, payload):
        if not self._hooked:
            try:
                after_this_request(self._apply)
            except RuntimeError as e:
                raise PersistenceError(f'No response to attach cart cookie to: {e}') from e
            self._hooked = True
        self._staged[key] = payload

    def _apply(self, response):
        for key, payload in self._staged.items():
            if payload is None:
                response.delete_cookie(key, path=self.path)
            else:
                response.set_cookie(
                    key, payload,
                    max_age=self.max_age,
                    path=self.path,
                    httponly=True,
                    samesite='Lax',
                )
        logger.debug('Applied %d cart cookie(s) to response', len(self._staged))
        self._staged = {}
        self._hooked = False
        return response
