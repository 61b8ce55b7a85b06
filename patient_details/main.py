"""
FastAPI application entrypoint.

Run locally:  uvicorn patient_details.main:app --reload
"""

import logging

from fastapi import FastAPI
from sqlalchemy.orm import sessionmaker

from patient_details.api.routes import router
from patient_details.config import settings
from patient_details.models.database import Base, SessionLocal, engine
from patient_details.services.chrome import NavigationChrome
from patient_details.services.confirmation import ConfirmationGate
from patient_details.services.preferences import SqlAlchemyPreferenceStore
from patient_details.services.screens import ScreenRegistry
from patient_details.services.session import AbstractSession, StaticSession
from patient_details.services.store import SqlAlchemyRecordStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(levelname)s | %(name)s | %(message)s",
)


def create_app(bind=None, session: AbstractSession | None = None) -> FastAPI:
    """Build the app; ``bind`` swaps the configured engine (tests use SQLite)."""
    bind = bind if bind is not None else engine
    session_factory = (
        SessionLocal
        if bind is engine
        else sessionmaker(bind=bind, autocommit=False, autoflush=False)
    )

    app = FastAPI(
        title="Patient Details API",
        description=(
            "Patient-detail screen backend: fetch one patient record, confirm "
            "and delete it, and drive navigation and notifications."
        ),
        version="1.0.0",
    )

    store = SqlAlchemyRecordStore(
        session_factory,
        timeout=settings.STORE_TIMEOUT_SECONDS,
        actor=settings.AUDIT_ACTOR,
    )
    gate = ConfirmationGate()

    app.state.session_factory = session_factory
    app.state.gate = gate
    app.state.registry = ScreenRegistry(
        store, gate, settings.LISTING_ROUTE, max_screens=settings.MAX_SCREENS
    )
    app.state.chrome = NavigationChrome(
        session or StaticSession(settings.SESSION_USER_EMAIL),
        SqlAlchemyPreferenceStore(session_factory),
        settings.HOME_ROUTE,
    )

    app.include_router(router, prefix="/api/v1")

    @app.on_event("startup")
    def on_startup():
        Base.metadata.create_all(bind=bind)

    return app


app = create_app()
