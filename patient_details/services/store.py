"""
Record store client – async access to the patient document table.

Only two operations exist here: fetch one document by id and delete it.
Records are created and updated elsewhere (the intake workflow).

A missing document on fetch is a normal result (``None``), not an error.
Driver failures and timeouts surface as ``StoreUnavailable`` on fetch and
``DeleteFailed`` on delete. Blocking SQLAlchemy calls run in a worker thread
so the event loop stays responsive while they are in flight. A call that
outlives ``timeout`` is abandoned; a delete abandoned before its commit
is rolled back, one that already committed is reported as done.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from patient_details.models.patient import PatientDocument
from patient_details.services.audit import log_action

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for record store failures."""


class StoreUnavailable(StoreError):
    """Transport, driver or timeout failure while talking to the store."""


class DeleteFailed(StoreError):
    """The store did not delete the record."""


@dataclass(frozen=True)
class Record:
    """One patient document. Only ``id`` has meaning to this service."""

    id: str
    fields: dict[str, Any] = field(default_factory=dict)


class AbstractRecordStore(abc.ABC):
    @abc.abstractmethod
    async def fetch_by_id(self, record_id: str) -> Record | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def delete(self, record_id: str) -> None:
        raise NotImplementedError


class _DeleteAttempt:
    """Commit handshake between a delete worker thread and its timed-out caller."""

    def __init__(self):
        self.lock = threading.Lock()
        self.abandoned = False
        self.committed = False

    def abandon(self) -> bool:
        """Stop a pending commit; returns True if the commit had already happened."""
        with self.lock:
            self.abandoned = True
            return self.committed


class SqlAlchemyRecordStore(AbstractRecordStore):
    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        timeout: float | None = None,
        actor: str = "patient_details_ui",
    ):
        self.session_factory = session_factory
        self.timeout = timeout
        self.actor = actor

    async def _call(self, fn: Callable, *args):
        return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self.timeout)

    async def fetch_by_id(self, record_id: str) -> Record | None:
        try:
            return await self._call(self._fetch, record_id)
        except asyncio.TimeoutError as exc:
            raise StoreUnavailable(f"Timed out fetching record {record_id}") from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Store error fetching record {record_id}: {exc}") from exc

    async def delete(self, record_id: str) -> None:
        attempt = _DeleteAttempt()
        try:
            await self._call(self._delete, record_id, attempt)
        except asyncio.TimeoutError as exc:
            if await asyncio.to_thread(attempt.abandon):
                logger.warning("Delete of %s committed as its timeout fired", record_id)
                return
            raise DeleteFailed(f"Timed out deleting record {record_id}") from exc
        except SQLAlchemyError as exc:
            raise DeleteFailed(f"Store error deleting record {record_id}: {exc}") from exc

    def _fetch(self, record_id: str) -> Record | None:
        with self.session_factory() as db:
            document = db.get(PatientDocument, record_id)
            if document is None:
                logger.info("No patient document with id %s", record_id)
                return None
            payload = document.fields if document.fields is not None else {}
            if not isinstance(payload, Mapping):
                logger.error(
                    "Patient document %s holds a %s payload, expected an object",
                    record_id,
                    type(payload).__name__,
                )
                raise StoreUnavailable(f"Malformed payload for record {record_id}")
            record = Record(id=document.id, fields=dict(payload))
            log_action(db, actor=self.actor, action="read", resource_id=record.id)
            db.commit()
        return record

    def _delete(self, record_id: str, attempt: _DeleteAttempt) -> None:
        with self.session_factory() as db:
            document = db.get(PatientDocument, record_id)
            if document is None:
                raise DeleteFailed(f"No patient document with id {record_id}")
            db.delete(document)
            log_action(db, actor=self.actor, action="delete", resource_id=record_id)
            db.flush()
            with attempt.lock:
                if attempt.abandoned:
                    db.rollback()
                    logger.info("Delete of %s rolled back after its caller timed out", record_id)
                    return
                db.commit()
                attempt.committed = True
        logger.info("Deleted patient document %s", record_id)
