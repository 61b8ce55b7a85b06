"""
Identity/session collaborator.

Authentication happens elsewhere; this service only reads who is signed in
and asks the session to end.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    email: str


class AbstractSession(abc.ABC):
    @abc.abstractmethod
    def current_user(self) -> SessionUser | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def logout(self) -> None:
        raise NotImplementedError


class StaticSession(AbstractSession):
    """Session whose user is fixed at startup (``SESSION_USER_EMAIL``)."""

    def __init__(self, email: str | None = None):
        self._user = SessionUser(email=email) if email else None

    def current_user(self) -> SessionUser | None:
        return self._user

    async def logout(self) -> None:
        if self._user is not None:
            logger.info("Session for %s ended", self._user.email)
        self._user = None
