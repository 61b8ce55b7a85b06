"""Live patient-detail screens, keyed by screen id."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from patient_details.services.confirmation import ConfirmationGate
from patient_details.services.navigation import Navigator
from patient_details.services.notifications import Notifier
from patient_details.services.store import AbstractRecordStore
from patient_details.services.view_state import PatientDetailView
from patient_details.services.workflow import DeletionWorkflow

logger = logging.getLogger(__name__)


def patient_route(record_id: str) -> str:
    return f"/patients/{record_id}"


class PatientDetailScreen:
    """One mounted detail screen: its view, workflow and collaborators."""

    def __init__(
        self,
        record_id: str,
        store: AbstractRecordStore,
        gate: ConfirmationGate,
        listing_route: str,
    ):
        self.id = uuid.uuid4().hex
        self.listing_route = listing_route
        self.gate = gate
        self.notifier = Notifier()
        self.navigator = Navigator(patient_route(record_id))
        self.view = PatientDetailView(record_id, store, self.notifier)
        self.workflow = DeletionWorkflow(
            self.view, store, gate, self.notifier, self.navigator, listing_route
        )
        self._prompt_id: str | None = None

    async def mount(self) -> None:
        await self.view.mount()

    def unmount(self) -> None:
        self.view.unmount()

    def back(self) -> None:
        self.navigator.navigate_to(self.listing_route)

    def click_delete(self) -> bool:
        accepted = self.workflow.trigger_delete()
        if accepted and self.gate.active is not None:
            self._prompt_id = self.gate.active.id
        return accepted

    def owns_prompt(self, request_id: str) -> bool:
        return self._prompt_id == request_id

    def render(self) -> dict[str, Any]:
        prompt = self.gate.active
        if prompt is not None and self.owns_prompt(prompt.id):
            shown = {"request_id": prompt.id, "title": prompt.title, "message": prompt.message}
        else:
            shown = None
        return {
            "screen_id": self.id,
            "view": self.view.render(),
            "workflow_state": self.workflow.state.value,
            "route": self.navigator.current_route,
            "prompt": shown,
        }


class ScreenRegistry:
    """Open screens, oldest first; beyond ``max_screens`` the oldest is closed."""

    def __init__(
        self,
        store: AbstractRecordStore,
        gate: ConfirmationGate,
        listing_route: str,
        max_screens: int = 500,
    ):
        self.store = store
        self.gate = gate
        self.listing_route = listing_route
        self.max_screens = max_screens
        self._screens: dict[str, PatientDetailScreen] = {}

    def __len__(self) -> int:
        return len(self._screens)

    async def open(self, record_id: str) -> PatientDetailScreen:
        while self._screens and len(self._screens) >= self.max_screens:
            oldest = next(iter(self._screens))
            logger.info("Evicting screen %s, registry holds %d", oldest, len(self._screens))
            self.close(oldest)
        screen = PatientDetailScreen(record_id, self.store, self.gate, self.listing_route)
        self._screens[screen.id] = screen
        logger.info("Opened screen %s for patient %s", screen.id, record_id)
        await screen.mount()
        return screen

    def get(self, screen_id: str) -> PatientDetailScreen | None:
        return self._screens.get(screen_id)

    def close(self, screen_id: str) -> bool:
        screen = self._screens.pop(screen_id, None)
        if screen is None:
            return False
        screen.unmount()
        logger.info("Closed screen %s", screen_id)
        return True
