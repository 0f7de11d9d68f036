# tests/conftest.py
"""
Shared fixtures for MedIntake tests.

Engines run with processing_delay=0 and seeded random sources so results are
reproducible; collaborators are the in-memory implementations.
"""

import asyncio
import random
from typing import Any, Dict

import pytest

from medintake.core.config import Settings
from medintake.core.flow_engine import WorkflowEngine, build_evaluators
from medintake.core.orchestrator import WorkflowOrchestrator
from medintake.models.session_state import SessionStore
from medintake.services.document_service import InMemoryDocumentStore
from medintake.services.geolocation_service import StaticGeolocationProvider
from medintake.services.localization_service import Localizer
from medintake.services.notification_service import LoggingNotificationSink


@pytest.fixture
def test_settings():
    """Settings with no processing delay and a fixed seed"""
    return Settings(
        PROCESSING_DELAY_SECONDS=0,
        RANDOM_SEED=42,
        TRIAGE_CONFIDENCE_MODE="random",
        _env_file=None,
    )


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def fast_sleep():
    """Sleep replacement that only yields to the event loop"""
    async def _sleep(seconds: float) -> None:
        await asyncio.sleep(0)
    return _sleep


@pytest.fixture
def engine(test_settings, rng):
    """Engine that evaluates immediately; the ETA countdown keeps real 60s ticks"""
    return WorkflowEngine(
        evaluators=build_evaluators(test_settings, rng),
        processing_delay=0,
    )


@pytest.fixture
def sink():
    return LoggingNotificationSink(history_size=50)


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def orchestrator(session_store, engine, sink, test_settings):
    orchestrator = WorkflowOrchestrator(
        session_store=session_store,
        workflow_engine=engine,
        geolocation=StaticGeolocationProvider(40.7128, -74.0060),
        documents=InMemoryDocumentStore(),
        notifications=sink,
        localizer=Localizer("en"),
        config=test_settings,
    )
    yield orchestrator
    orchestrator.shutdown()


@pytest.fixture
def triage_values() -> Dict[str, Any]:
    return {
        "symptoms": "Mild headache since this morning",
        "severity": "low",
        "duration": "hours",
    }


@pytest.fixture
def dispatch_values() -> Dict[str, Any]:
    return {
        "location": {"latitude": 40.7128, "longitude": -74.0060, "address": "1 Main St"},
        "emergency_tier": "critical",
    }


@pytest.fixture
def verification_values() -> Dict[str, Any]:
    return {
        "first_name": "Ada",
        "last_name": "Okafor",
        "email": "ada.okafor@example.org",
        "phone": "+1 555 0100",
        "license_number": "MD-448812",
        "specialization": "Cardiology",
        "hospital_affiliation": "St. Mary's Hospital",
        "years_of_experience": "6-10",
        "medical_license": "uploads/license.pdf",
        "government_id": "uploads/id.png",
        "hospital_letter": "uploads/letter.pdf",
    }


@pytest.fixture
def notification_titles(sink):
    """Titles of the notifications a session received, oldest first"""
    def _titles(session_id: str):
        return [n.title for n in sink.history(session_id)]
    return _titles


def pytest_configure(config):
    """Configure custom pytest markers"""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (full workflow through the API)"
    )
