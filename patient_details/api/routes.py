"""
FastAPI routes – the patient-detail screen and navigation chrome.

A client mounts a screen for one patient, renders it, clicks Delete, answers
the confirmation prompt and drains the notifications the screen produced.
Screen and prompt state lives on the event loop; only the chrome's
preference reads touch the database from route handlers directly.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import text
from sqlalchemy.orm import Session

from patient_details.config import settings
from patient_details.schemas.api import (
    ChromeResponse,
    DecisionRequest,
    DecisionResponse,
    DeleteTriggerResponse,
    HealthResponse,
    NotificationResponse,
    PromptDecisionResponse,
    PromptResponse,
    ScreenResponse,
)
from patient_details.services.chrome import NavigationChrome
from patient_details.services.confirmation import ConfirmationGate, Decision
from patient_details.services.notifications import Notification
from patient_details.services.screens import PatientDetailScreen, ScreenRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_db(request: Request):
    """FastAPI dependency that yields a database session."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_registry(request: Request) -> ScreenRegistry:
    return request.app.state.registry


def get_gate(request: Request) -> ConfirmationGate:
    return request.app.state.gate


def get_chrome(request: Request) -> NavigationChrome:
    return request.app.state.chrome


def _screen_or_404(registry: ScreenRegistry, screen_id: str) -> PatientDetailScreen:
    screen = registry.get(screen_id)
    if screen is None:
        raise HTTPException(status_code=404, detail="Screen not found")
    return screen


def _notifications(items: list[Notification]) -> list[NotificationResponse]:
    return [
        NotificationResponse(kind=n.kind.value, message=n.message, created_at=n.created_at)
        for n in items
    ]


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Basic health endpoint – verifies DB connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.exception("Database health check failed")
        db_status = "disconnected"
    return HealthResponse(
        status="healthy",
        environment=settings.ENVIRONMENT,
        database=db_status,
    )


# ---------------------------------------------------------------------------
# Patient detail screen
# ---------------------------------------------------------------------------

@router.post("/patients/{record_id}/screens", response_model=ScreenResponse, status_code=201)
async def open_screen(record_id: str, registry: ScreenRegistry = Depends(get_registry)):
    """Mount a detail screen; the record fetch completes before responding."""
    screen = await registry.open(record_id)
    return screen.render()


@router.get("/screens/{screen_id}", response_model=ScreenResponse)
async def render_screen(screen_id: str, registry: ScreenRegistry = Depends(get_registry)):
    return _screen_or_404(registry, screen_id).render()


@router.delete("/screens/{screen_id}", status_code=204)
async def close_screen(screen_id: str, registry: ScreenRegistry = Depends(get_registry)):
    if not registry.close(screen_id):
        raise HTTPException(status_code=404, detail="Screen not found")


@router.post("/screens/{screen_id}/back", response_model=ScreenResponse)
async def go_back(screen_id: str, registry: ScreenRegistry = Depends(get_registry)):
    screen = _screen_or_404(registry, screen_id)
    screen.back()
    return screen.render()


@router.post("/screens/{screen_id}/delete", response_model=DeleteTriggerResponse)
async def click_delete(screen_id: str, registry: ScreenRegistry = Depends(get_registry)):
    """
    User clicked Delete. The response carries the confirmation prompt when
    the click was accepted; repeated clicks while a deletion is in progress
    are ignored.
    """
    screen = _screen_or_404(registry, screen_id)
    accepted = screen.click_delete()
    return DeleteTriggerResponse(accepted=accepted, screen=screen.render())


@router.post(
    "/screens/{screen_id}/confirmations/{request_id}",
    response_model=DecisionResponse,
)
async def answer_confirmation(
    screen_id: str,
    request_id: str,
    body: DecisionRequest,
    registry: ScreenRegistry = Depends(get_registry),
):
    """Route a prompt click to its pending decision and wait for the workflow to settle."""
    screen = _screen_or_404(registry, screen_id)
    if not screen.owns_prompt(request_id) or not screen.gate.decide(
        request_id, Decision(body.decision.value)
    ):
        raise HTTPException(status_code=409, detail="Confirmation is no longer pending")
    outcome = await screen.workflow.wait()
    return DecisionResponse(
        outcome=outcome.value if outcome is not None else None,
        screen=screen.render(),
    )


@router.get("/screens/{screen_id}/notifications", response_model=list[NotificationResponse])
async def drain_screen_notifications(
    screen_id: str, registry: ScreenRegistry = Depends(get_registry)
):
    return _notifications(_screen_or_404(registry, screen_id).notifier.drain())


@router.get("/confirmations/active", response_model=PromptResponse)
async def active_confirmation(gate: ConfirmationGate = Depends(get_gate)):
    prompt = gate.active
    if prompt is None:
        raise HTTPException(status_code=404, detail="No confirmation pending")
    return PromptResponse(request_id=prompt.id, title=prompt.title, message=prompt.message)


@router.post("/confirmations/{request_id}", response_model=PromptDecisionResponse)
async def answer_active_confirmation(
    request_id: str,
    body: DecisionRequest,
    gate: ConfirmationGate = Depends(get_gate),
):
    """
    Answer the shown prompt without going through a screen. The prompt
    outlives the screen that opened it, so this stays reachable after a
    close; the workflow settles in the background.
    """
    if not gate.decide(request_id, Decision(body.decision.value)):
        raise HTTPException(status_code=409, detail="Confirmation is no longer pending")
    return PromptDecisionResponse(request_id=request_id, decision=body.decision)


# ---------------------------------------------------------------------------
# Navigation chrome
# ---------------------------------------------------------------------------

@router.get("/chrome", response_model=ChromeResponse)
def render_chrome(chrome: NavigationChrome = Depends(get_chrome)):
    return chrome.render()


@router.post("/chrome/tooltip/dismiss", response_model=ChromeResponse)
def dismiss_tooltip(chrome: NavigationChrome = Depends(get_chrome)):
    chrome.dismiss_tooltip()
    return chrome.render()


@router.post("/chrome/logout", response_model=ChromeResponse)
async def logout(chrome: NavigationChrome = Depends(get_chrome)):
    await chrome.logout()
    return await run_in_threadpool(chrome.render)


@router.get("/chrome/notifications", response_model=list[NotificationResponse])
async def drain_chrome_notifications(chrome: NavigationChrome = Depends(get_chrome)):
    return _notifications(chrome.notifier.drain())
