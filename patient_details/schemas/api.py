"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Patient detail screen
# ---------------------------------------------------------------------------

class PatientDisplay(BaseModel):
    """Record as shown on the detail screen; extra stored fields are dropped."""
    id: str
    patientID: str | None = None
    firstname: Any = None
    lastname: Any = None
    timestamp: str | None = Field(None, description="MM/DD/YYYY")
    sex: Any = None
    blood_pressure: Any = None
    cholesterol_level: Any = None
    history_of_stroke: Any = None
    history_of_diabetes: Any = None
    smoker: Any = None
    risk_result: Any = None

    model_config = ConfigDict(extra="ignore")


class ViewStateResponse(BaseModel):
    status: str
    record: PatientDisplay | None = None


class PromptResponse(BaseModel):
    request_id: str
    title: str
    message: str


class ScreenResponse(BaseModel):
    screen_id: str
    view: ViewStateResponse
    workflow_state: str
    route: str
    prompt: PromptResponse | None = None


class DeleteTriggerResponse(BaseModel):
    accepted: bool
    screen: ScreenResponse


class DecisionChoice(str, Enum):
    confirm = "confirm"
    cancel = "cancel"
    dismiss = "dismiss"


class DecisionRequest(BaseModel):
    decision: DecisionChoice


class DecisionResponse(BaseModel):
    outcome: str | None
    screen: ScreenResponse


class PromptDecisionResponse(BaseModel):
    request_id: str
    decision: DecisionChoice


class NotificationResponse(BaseModel):
    kind: str
    message: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Navigation chrome
# ---------------------------------------------------------------------------

class MenuLinkResponse(BaseModel):
    label: str
    route: str


class ChromeResponse(BaseModel):
    user_email: str | None
    menu: list[MenuLinkResponse]
    show_tooltip: bool
    tooltip: str
    route: str


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
    database: str = "connected"
