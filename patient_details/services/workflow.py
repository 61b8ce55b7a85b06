"""
Deletion workflow for the record shown on a patient-detail screen.

    IDLE -> AWAITING_CONFIRMATION -> CANCELLED -> IDLE
                                  -> DELETING -> DELETED
                                              -> DELETE_FAILED -> IDLE

A trigger is accepted only from IDLE and only while a record is loaded;
anything else is ignored. The confirmation prompt is requested in the same
step as the IDLE -> AWAITING_CONFIRMATION transition, so two triggers
queued on the event loop can never both pass the idle check.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from patient_details.services.confirmation import ConfirmationGate
from patient_details.services.navigation import Navigator
from patient_details.services.notifications import Notifier
from patient_details.services.store import AbstractRecordStore, StoreError
from patient_details.services.view_state import PatientDetailView

logger = logging.getLogger(__name__)

CONFIRM_TITLE = "Confirm Deletion"
CONFIRM_MESSAGE = "Are you sure you want to delete this patient record? This action cannot be undone."
DELETED_MESSAGE = "Patient record deleted successfully."
DELETE_FAILED_MESSAGE = "Failed to delete patient record."


class WorkflowState(str, Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    DELETING = "deleting"
    DELETED = "deleted"


class WorkflowOutcome(str, Enum):
    IGNORED = "ignored"
    CANCELLED = "cancelled"
    DELETED = "deleted"
    FAILED = "failed"


class DeletionWorkflow:
    def __init__(
        self,
        view: PatientDetailView,
        store: AbstractRecordStore,
        gate: ConfirmationGate,
        notifier: Notifier,
        navigator: Navigator,
        listing_route: str,
    ):
        self.view = view
        self.store = store
        self.gate = gate
        self.notifier = notifier
        self.navigator = navigator
        self.listing_route = listing_route
        self.state = WorkflowState.IDLE
        self._task: asyncio.Task | None = None

    def trigger_delete(self) -> bool:
        """Start the workflow in the background. Returns False if the trigger was ignored."""
        begun = self._begin()
        if begun is None:
            return False
        record_id, decision = begun
        self._task = asyncio.get_running_loop().create_task(self._run(record_id, decision))
        return True

    async def handle_delete(self) -> WorkflowOutcome:
        """Run the whole workflow inline and return how it ended."""
        begun = self._begin()
        if begun is None:
            return WorkflowOutcome.IGNORED
        return await self._run(*begun)

    async def wait(self) -> WorkflowOutcome | None:
        """Wait for a workflow started by ``trigger_delete`` to settle."""
        if self._task is None:
            return None
        return await asyncio.shield(self._task)

    def _begin(self) -> tuple[str, asyncio.Future] | None:
        if self.state is not WorkflowState.IDLE:
            logger.info("Delete ignored for patient %s: workflow is %s", self.view.record_id, self.state.value)
            return None
        record = self.view.record
        if record is None:
            logger.info("Delete ignored for patient %s: no record loaded", self.view.record_id)
            return None
        self.state = WorkflowState.AWAITING_CONFIRMATION
        decision = self.gate.request_confirmation(CONFIRM_MESSAGE, title=CONFIRM_TITLE)
        return record.id, decision

    async def _run(self, record_id: str, decision: asyncio.Future) -> WorkflowOutcome:
        try:
            confirmed = await decision
        except asyncio.CancelledError:
            self.state = WorkflowState.IDLE
            raise

        if not confirmed:
            logger.info("Deletion of patient %s cancelled", record_id)
            self.state = WorkflowState.IDLE
            return WorkflowOutcome.CANCELLED

        self.state = WorkflowState.DELETING
        try:
            await self.store.delete(record_id)
        except StoreError as exc:
            logger.error("Error deleting patient record %s: %s", record_id, exc)
            self.notifier.error(DELETE_FAILED_MESSAGE)
            self.state = WorkflowState.IDLE
            return WorkflowOutcome.FAILED

        self.state = WorkflowState.DELETED
        self.notifier.success(DELETED_MESSAGE)
        self.navigator.navigate_to(self.listing_route)
        return WorkflowOutcome.DELETED
