"""Persistent per-user key/value preferences."""

from __future__ import annotations

import abc
import logging
from typing import Callable

from sqlalchemy.orm import Session

from patient_details.models.patient import UserPreference

logger = logging.getLogger(__name__)


class AbstractPreferenceStore(abc.ABC):
    @abc.abstractmethod
    def get(self, owner: str, key: str) -> str | None:
        raise NotImplementedError

    @abc.abstractmethod
    def set(self, owner: str, key: str, value: str) -> None:
        raise NotImplementedError


class SqlAlchemyPreferenceStore(AbstractPreferenceStore):
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, owner: str, key: str) -> str | None:
        with self.session_factory() as db:
            preference = db.get(UserPreference, (owner, key))
            return preference.value if preference else None

    def set(self, owner: str, key: str, value: str) -> None:
        with self.session_factory() as db:
            preference = db.get(UserPreference, (owner, key))
            if preference is None:
                db.add(UserPreference(owner=owner, key=key, value=value))
            else:
                preference.value = value
            db.commit()
        logger.info("Preference %s set for %s", key, owner or "anonymous")
