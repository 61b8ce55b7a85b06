"""
View state of one patient-detail screen.

``mount`` fetches the record and settles the view to ``loaded`` or
``not_found``. A store failure also settles to ``not_found``: the rendered
state is the same as for a missing record, only the logged cause differs.
Once the view is unmounted, results of an in-flight fetch are dropped.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo

from patient_details.config import settings
from patient_details.schemas.record import DISPLAY_FIELDS
from patient_details.services.notifications import Notifier
from patient_details.services.store import AbstractRecordStore, Record, StoreUnavailable
from patient_details.services.validation import missing_display_fields

logger = logging.getLogger(__name__)

DATE_FORMAT = "%m/%d/%Y"


class ViewStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    NOT_FOUND = "not_found"


class NotFoundCause(str, Enum):
    MISSING = "missing"
    STORE_UNAVAILABLE = "store_unavailable"


def pad_patient_id(value: Any) -> str:
    return str(value).rjust(4, "0")


def display_zone(name: str | None = None) -> tzinfo:
    """Zone dates are shown in (``DISPLAY_TIMEZONE``, UTC by default)."""
    name = settings.DISPLAY_TIMEZONE if name is None else name
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def format_timestamp(value: Any, tz: tzinfo | None = None) -> str | None:
    """
    Render a stored timestamp (datetime, ISO string, epoch seconds or a
    ``{"seconds": ...}`` document timestamp) as MM/DD/YYYY in the display
    zone. Naive values are taken as already local to that zone.
    """
    if value is None:
        return None
    tz = tz or display_zone()
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, (int, float)):
        moment = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, dict) and "seconds" in value:
        moment = datetime.fromtimestamp(value["seconds"], tz=timezone.utc)
    else:
        moment = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.strftime(DATE_FORMAT)


def present_record(record: Record) -> dict[str, Any]:
    """Map a stored record onto the fields shown on the detail screen."""
    data = record.fields
    shown: dict[str, Any] = {"id": record.id}
    for name in DISPLAY_FIELDS:
        shown[name] = data.get(name)
    if data.get("patientID") is not None:
        shown["patientID"] = pad_patient_id(data["patientID"])
    try:
        shown["timestamp"] = format_timestamp(data.get("timestamp"))
    except (TypeError, ValueError, OverflowError):
        logger.warning("Unreadable timestamp on record %s: %r", record.id, data.get("timestamp"))
        shown["timestamp"] = None
    if data.get("risk_result"):
        shown["risk_result"] = data["risk_result"]
    return shown


class PatientDetailView:
    def __init__(self, record_id: str, store: AbstractRecordStore, notifier: Notifier):
        self.record_id = record_id
        self.store = store
        self.notifier = notifier
        self.status = ViewStatus.LOADING
        self.record: Record | None = None
        self.cause: NotFoundCause | None = None
        self._generation = 0
        self._mounted = False

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def mount(self) -> ViewStatus:
        self._generation += 1
        generation = self._generation
        self._mounted = True
        self.status = ViewStatus.LOADING
        self.record = None
        self.cause = None

        try:
            record = await self.store.fetch_by_id(self.record_id)
        except StoreUnavailable as exc:
            logger.error("Error fetching patient %s: %s", self.record_id, exc)
            if self._settle(generation, ViewStatus.NOT_FOUND, cause=NotFoundCause.STORE_UNAVAILABLE):
                self.notifier.error("Failed to fetch patient details.")
            return self.status

        if record is None:
            if self._settle(generation, ViewStatus.NOT_FOUND, cause=NotFoundCause.MISSING):
                self.notifier.error("Patient not found.")
            return self.status

        missing = missing_display_fields(record.fields)
        if missing:
            logger.warning("Patient %s is missing display fields: %s", record.id, ", ".join(missing))
        self._settle(generation, ViewStatus.LOADED, record=record)
        return self.status

    def unmount(self) -> None:
        self._generation += 1
        self._mounted = False

    def _settle(
        self,
        generation: int,
        status: ViewStatus,
        record: Record | None = None,
        cause: NotFoundCause | None = None,
    ) -> bool:
        if generation != self._generation:
            logger.debug("Dropping stale update for patient %s", self.record_id)
            return False
        self.status = status
        self.record = record
        self.cause = cause
        return True

    def render(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "record": present_record(self.record) if self.record is not None else None,
        }
