"""Tests for the deletion workflow state machine – no database required."""

import asyncio

from patient_details.services.confirmation import ConfirmationGate
from patient_details.services.navigation import Navigator
from patient_details.services.notifications import Notifier, NotificationKind
from patient_details.services.store import Record
from patient_details.services.view_state import PatientDetailView, ViewStatus
from patient_details.services.workflow import (
    DELETED_MESSAGE,
    DELETE_FAILED_MESSAGE,
    DeletionWorkflow,
    WorkflowOutcome,
    WorkflowState,
)

LISTING = "/prediction-table"


def _build(store, record_id="p42", gate=None):
    notifier = Notifier()
    navigator = Navigator(f"/patients/{record_id}")
    view = PatientDetailView(record_id, store, notifier)
    gate = gate or ConfirmationGate()
    workflow = DeletionWorkflow(view, store, gate, notifier, navigator, LISTING)
    return workflow, view, gate, notifier, navigator


def test_confirmed_delete_notifies_and_navigates(fake_store):
    """Scenario: loaded record, user confirms, store delete succeeds."""

    async def scenario():
        workflow, view, gate, notifier, navigator = _build(fake_store)
        await view.mount()
        assert view.status is ViewStatus.LOADED

        assert workflow.trigger_delete() is True
        assert workflow.state is WorkflowState.AWAITING_CONFIRMATION
        gate.confirm(gate.active.id)
        outcome = await workflow.wait()
        return outcome, workflow, notifier, navigator

    outcome, workflow, notifier, navigator = asyncio.run(scenario())

    assert outcome is WorkflowOutcome.DELETED
    assert workflow.state is WorkflowState.DELETED
    assert fake_store.delete_calls == ["p42"]
    notes = notifier.drain()
    assert [(n.kind, n.message) for n in notes] == [(NotificationKind.SUCCESS, DELETED_MESSAGE)]
    assert DELETED_MESSAGE == "Patient record deleted successfully."
    assert navigator.history == ["/patients/p42", LISTING]


def test_cancel_is_silent(fake_store):
    """Scenario: user cancels – no delete, no notification, record still shown."""

    async def scenario():
        workflow, view, gate, notifier, navigator = _build(fake_store)
        await view.mount()
        notifier.drain()
        workflow.trigger_delete()
        gate.cancel(gate.active.id)
        outcome = await workflow.wait()
        return outcome, workflow, view, notifier, navigator

    outcome, workflow, view, notifier, navigator = asyncio.run(scenario())

    assert outcome is WorkflowOutcome.CANCELLED
    assert workflow.state is WorkflowState.IDLE
    assert fake_store.delete_calls == []
    assert notifier.drain() == []
    assert navigator.history == ["/patients/p42"]
    assert view.status is ViewStatus.LOADED
    assert view.record.id == "p42"


def test_failed_delete_keeps_record_and_returns_to_idle(fake_store):
    fake_store.fail_delete = True

    async def scenario():
        workflow, view, gate, notifier, navigator = _build(fake_store)
        await view.mount()
        workflow.trigger_delete()
        gate.confirm(gate.active.id)
        outcome = await workflow.wait()
        return outcome, workflow, view, notifier, navigator

    outcome, workflow, view, notifier, navigator = asyncio.run(scenario())

    assert outcome is WorkflowOutcome.FAILED
    assert workflow.state is WorkflowState.IDLE
    assert fake_store.delete_calls == ["p42"]
    notes = notifier.drain()
    assert [(n.kind, n.message) for n in notes] == [(NotificationKind.ERROR, DELETE_FAILED_MESSAGE)]
    assert navigator.history == ["/patients/p42"]
    assert view.record is not None


def test_retry_after_failure_is_user_driven(fake_store):
    fake_store.fail_delete = True

    async def scenario():
        workflow, view, gate, notifier, navigator = _build(fake_store)
        await view.mount()
        workflow.trigger_delete()
        gate.confirm(gate.active.id)
        await workflow.wait()
        assert len(fake_store.delete_calls) == 1

        fake_store.fail_delete = False
        assert workflow.trigger_delete() is True
        gate.confirm(gate.active.id)
        return await workflow.wait()

    assert asyncio.run(scenario()) is WorkflowOutcome.DELETED
    assert fake_store.delete_calls == ["p42", "p42"]


def test_double_trigger_shows_one_prompt(fake_store):
    """Rapid double click while awaiting confirmation is ignored."""

    async def scenario():
        workflow, view, gate, notifier, navigator = _build(fake_store)
        await view.mount()
        assert workflow.trigger_delete() is True
        first_prompt = gate.active
        assert workflow.trigger_delete() is False
        assert gate.active is first_prompt
        assert not first_prompt.settled
        gate.confirm(first_prompt.id)
        await workflow.wait()

    asyncio.run(scenario())
    assert fake_store.delete_calls == ["p42"]


def test_trigger_while_deleting_is_ignored(fake_store):
    async def scenario():
        workflow, view, gate, notifier, navigator = _build(fake_store)
        await view.mount()
        workflow.trigger_delete()
        gate.confirm(gate.active.id)
        await asyncio.sleep(0)
        assert workflow.state in (WorkflowState.DELETING, WorkflowState.DELETED)
        assert workflow.trigger_delete() is False
        assert gate.active is None
        await workflow.wait()

    asyncio.run(scenario())
    assert fake_store.delete_calls == ["p42"]


def test_delete_without_loaded_record_is_noop(fake_store):
    """Not found (or still loading): the trigger never reaches the gate or the store."""

    async def scenario():
        workflow, view, gate, notifier, navigator = _build(fake_store, record_id="missing")
        assert await workflow.handle_delete() is WorkflowOutcome.IGNORED  # still loading
        await view.mount()
        assert view.status is ViewStatus.NOT_FOUND
        assert workflow.trigger_delete() is False
        assert await workflow.handle_delete() is WorkflowOutcome.IGNORED
        return gate

    gate = asyncio.run(scenario())
    assert gate.active is None
    assert fake_store.delete_calls == []


def test_handle_delete_runs_inline(fake_store):
    async def scenario():
        workflow, view, gate, notifier, navigator = _build(fake_store)
        await view.mount()
        running = asyncio.ensure_future(workflow.handle_delete())
        await asyncio.sleep(0)
        gate.confirm(gate.active.id)
        return await running

    assert asyncio.run(scenario()) is WorkflowOutcome.DELETED


def test_superseded_workflow_cancels_quietly(fake_store, jane):
    """Two screens share one gate: the older prompt is superseded and resolves as a cancel."""
    fake_store.records["p43"] = Record(id="p43", fields=dict(jane.fields))

    async def scenario():
        gate = ConfirmationGate()
        first, first_view, _, first_notes, _ = _build(fake_store, "p42", gate)
        second, second_view, _, _, _ = _build(fake_store, "p43", gate)
        await first_view.mount()
        await second_view.mount()
        first_notes.drain()

        first.trigger_delete()
        second.trigger_delete()
        first_outcome = await first.wait()

        gate.confirm(gate.active.id)
        second_outcome = await second.wait()
        return first_outcome, second_outcome, first, first_notes

    first_outcome, second_outcome, first, first_notes = asyncio.run(scenario())

    assert first_outcome is WorkflowOutcome.CANCELLED
    assert first.state is WorkflowState.IDLE
    assert first_notes.drain() == []
    assert second_outcome is WorkflowOutcome.DELETED
    assert fake_store.delete_calls == ["p43"]
