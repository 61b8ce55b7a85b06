"""
Confirmation gate – turns a yes/no prompt click into an awaitable decision.

Each call to ``request_confirmation`` creates a ``ConfirmationRequest`` with
its own id and an ``asyncio.Future[bool]``. Clicks are routed back by id.
Only one prompt is shown at a time: a new request supersedes the active one,
which is resolved to ``False`` before the new prompt takes its place.

Every future handed out settles exactly once (confirm -> True; cancel,
dismiss or supersede -> False), unless the awaiting caller cancels it
first, in which case the prompt is dropped. There is no built-in timeout.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Confirm Deletion"


class Decision(str, Enum):
    CONFIRM = "confirm"
    CANCEL = "cancel"
    DISMISS = "dismiss"
    SUPERSEDED = "superseded"


@dataclass
class ConfirmationRequest:
    """One outstanding yes/no decision."""

    title: str
    message: str
    future: asyncio.Future
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    decision: Decision | None = None

    @property
    def settled(self) -> bool:
        return self.future.done()

    def resolve(self, decision: Decision) -> bool:
        """Settle the request once; later calls are no-ops returning False."""
        if self.future.done():
            return False
        self.decision = decision
        self.future.set_result(decision is Decision.CONFIRM)
        return True


class ConfirmationGate:
    def __init__(self):
        self._active: ConfirmationRequest | None = None

    @property
    def active(self) -> ConfirmationRequest | None:
        """The prompt currently shown, if any."""
        if self._active is not None and self._active.settled:
            return None
        return self._active

    def request_confirmation(self, message: str, title: str = DEFAULT_TITLE) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        request = ConfirmationRequest(title=title, message=message, future=loop.create_future())

        stale = self._active
        if stale is not None and stale.resolve(Decision.SUPERSEDED):
            logger.info("Confirmation %s superseded by %s", stale.id, request.id)

        self._active = request
        request.future.add_done_callback(lambda _: self._release(request))
        logger.info("Confirmation %s requested: %s", request.id, title)
        return request.future

    def confirm(self, request_id: str) -> bool:
        return self._settle(request_id, Decision.CONFIRM)

    def cancel(self, request_id: str) -> bool:
        return self._settle(request_id, Decision.CANCEL)

    def dismiss(self, request_id: str) -> bool:
        return self._settle(request_id, Decision.DISMISS)

    def decide(self, request_id: str, decision: Decision) -> bool:
        if decision is Decision.SUPERSEDED:
            raise ValueError("Supersede is reserved for the gate itself")
        return self._settle(request_id, decision)

    def _settle(self, request_id: str, decision: Decision) -> bool:
        request = self._active
        if request is None or request.id != request_id:
            logger.warning("Ignoring %s for unknown or stale confirmation %s", decision.value, request_id)
            return False
        if not request.resolve(decision):
            return False
        self._active = None
        logger.info("Confirmation %s resolved: %s", request_id, decision.value)
        return True

    def _release(self, request: ConfirmationRequest) -> None:
        # Runs for every settlement path, including caller-side cancellation.
        if self._active is request:
            self._active = None
        if request.future.cancelled():
            logger.info("Confirmation %s abandoned by its caller", request.id)
