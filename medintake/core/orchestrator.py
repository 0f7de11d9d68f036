# medintake/core/orchestrator.py
"""
Workflow Orchestrator - the single entry point for intake sessions.

Coordinates the session store, the workflow engine and the external
collaborators (geolocation, document store, notification sink, localization).
Callers never mutate a WorkflowState directly; every change goes through
here and, for stage changes, through the engine's transitions.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from medintake.core.config import Settings, settings
from medintake.core.exceptions import (
    AcquisitionFailure,
    EvaluationFailure,
    ValidationError,
    validation_error,
    workflow_error,
)
from medintake.core.flow_engine import WorkflowEngine, create_workflow_engine
from medintake.models.fields import GeoLocation
from medintake.models.flow_models import (
    NotificationSeverity,
    Stage,
    VerificationStatus,
    WorkflowKind,
)
from medintake.models.results import DispatchResult
from medintake.models.session_state import SessionStore, WorkflowState
from medintake.services.document_service import DocumentStore, InMemoryDocumentStore
from medintake.services.geolocation_service import (
    GeolocationProvider,
    UnsupportedGeolocationProvider,
)
from medintake.services.localization_service import Localizer
from medintake.services.notification_service import (
    LoggingNotificationSink,
    NotificationSink,
    send_notification,
)

logger = logging.getLogger(__name__)

# Display label key for each upload slot
DOCUMENT_LABEL_KEYS = {
    "medical_license": "doctor.upload_license",
    "government_id": "doctor.upload_id",
    "hospital_letter": "doctor.upload_hospital_letter",
    "photo": "patient.photo_label",
}


class WorkflowOrchestrator:
    """
    Main interface for intake workflow sessions.

    This orchestrator:
    1. Creates, restarts and discards sessions
    2. Routes field input and uploads into the Field Store
    3. Submits sessions to the engine and reports outcomes
    4. Surfaces every recoverable error through the notification sink
    """

    def __init__(
        self,
        session_store: Optional[SessionStore] = None,
        workflow_engine: Optional[WorkflowEngine] = None,
        geolocation: Optional[GeolocationProvider] = None,
        documents: Optional[DocumentStore] = None,
        notifications: Optional[NotificationSink] = None,
        localizer: Optional[Localizer] = None,
        config: Optional[Settings] = None
    ):
        self.config = config or settings
        self.session_store = session_store or SessionStore()
        self.workflow_engine = workflow_engine or create_workflow_engine(self.config)
        self.geolocation = geolocation or UnsupportedGeolocationProvider()
        self.documents = documents or InMemoryDocumentStore()
        self.notifications = notifications or LoggingNotificationSink(self.config.NOTIFICATION_HISTORY_SIZE)
        self.localizer = localizer or Localizer(self.config.DEFAULT_LOCALE)

        self.workflow_engine.on_resolved = self._on_resolved
        self.workflow_engine.on_failed = self._on_failed
        self.workflow_engine.on_eta_tick = self._on_eta_tick

        logger.info("Workflow orchestrator initialized")

    # ===========================================
    # SESSION LIFECYCLE
    # ===========================================

    def start_workflow(self, kind: WorkflowKind) -> WorkflowState:
        try:
            kind = WorkflowKind(kind)
        except ValueError as e:
            raise validation_error(f"Unknown workflow '{kind}'", field="kind", value=kind) from e
        return self.session_store.create(kind)

    def get_state(self, session_id: str) -> WorkflowState:
        return self.session_store.get(session_id)

    def restart(self, session_id: str) -> WorkflowState:
        """Replace the session with a fresh one of the same kind"""
        state = self.session_store.replace(session_id)
        logger.info(f"Restarted session {session_id} as {state.session_id}")
        return state

    def discard(self, session_id: str) -> bool:
        return self.session_store.discard(session_id)

    def shutdown(self) -> int:
        count = self.session_store.discard_all()
        logger.info(f"Orchestrator shut down, {count} sessions discarded")
        return count

    def get_session_info(self, session_id: str) -> Dict[str, Any]:
        state = self.session_store.get(session_id)
        info = state.to_public_dict()
        info["valid_events"] = [
            t.event.value for t in self.workflow_engine.get_valid_transitions(state.stage)
        ]
        return info

    # ===========================================
    # INPUT COLLECTION
    # ===========================================

    def _collecting_state(self, session_id: str) -> WorkflowState:
        state = self.session_store.get(session_id)
        if state.stage != Stage.COLLECTING:
            raise workflow_error("Input can only change while collecting", state.stage.value)
        return state

    def set_field(self, session_id: str, name: str, value: Any) -> WorkflowState:
        state = self._collecting_state(session_id)
        with self._reporting_invalid_input(state):
            state.fields.set_field(name, value)
        return state

    def set_fields(self, session_id: str, values: Dict[str, Any]) -> WorkflowState:
        state = self._collecting_state(session_id)

        with self._reporting_invalid_input(state):
            unknown = [name for name in values if name not in state.fields.field_names]
            if unknown:
                raise ValidationError(f"Unknown fields: {', '.join(unknown)}", field=unknown[0])

            for name, value in values.items():
                state.fields.set_field(name, value)
        return state

    async def acquire_location(self, session_id: str) -> GeoLocation:
        """
        Ask the geolocation provider for the requester's position.

        Raises:
            AcquisitionFailure: Location unsupported or denied; retry or enter manually
        """
        state = self._collecting_state(session_id)
        self._require_kind(state, WorkflowKind.DISPATCH)

        try:
            location = await self.geolocation.acquire_location()
        except AcquisitionFailure as e:
            logger.warning(f"Location acquisition failed for {session_id}: {e.reason}")
            prefix = "notify.location_unsupported" if e.reason == AcquisitionFailure.UNSUPPORTED \
                else "notify.location_denied"
            self._notify(state, prefix, NotificationSeverity.DESTRUCTIVE)
            raise

        state.fields.set_field("location", location)
        self._notify(state, "notify.location_found", NotificationSeverity.SUCCESS)
        return location

    def set_manual_location(
        self,
        session_id: str,
        address: str,
        latitude: float,
        longitude: float
    ) -> GeoLocation:
        """Fallback when the provider failed: the caller supplies the position"""
        state = self._collecting_state(session_id)
        self._require_kind(state, WorkflowKind.DISPATCH)

        with self._reporting_invalid_input(state):
            if not address or not address.strip():
                raise validation_error("Address must not be empty", field="address", value=address)

            state.fields.set_field(
                "location",
                {"latitude": latitude, "longitude": longitude, "address": address.strip()}
            )
        return state.fields.get_field("location")

    async def upload_document(self, session_id: str, slot: str, reference: str) -> WorkflowState:
        state = self._collecting_state(session_id)

        if slot not in state.fields.document_slots:
            error = validation_error(
                f"'{slot}' is not an upload slot of the {state.kind.value} workflow",
                field=slot
            )
            self._notify_invalid(state, error)
            raise error

        label = self.localizer.t(DOCUMENT_LABEL_KEYS.get(slot, slot))

        try:
            await self.documents.accept(state.session_id, slot, reference)
        except AcquisitionFailure:
            self._notify(state, "notify.upload_failed", NotificationSeverity.DESTRUCTIVE, slot=label)
            raise

        state.fields.set_field(slot, reference)

        if slot == "photo":
            self._notify(state, "notify.photo_uploaded", NotificationSeverity.SUCCESS)
        else:
            self._notify(state, "notify.document_uploaded", NotificationSeverity.SUCCESS, slot=label)
        return state

    # ===========================================
    # SUBMISSION AND OUTCOMES
    # ===========================================

    async def submit(self, session_id: str) -> WorkflowState:
        """
        Submit a session. Returns once it is processing.

        Raises:
            ValidationError: Required sections incomplete (session stays collecting)
            WorkflowError: Session is already processing or resolved
        """
        state = self.session_store.get(session_id)

        try:
            await self.workflow_engine.submit(state)
        except ValidationError as e:
            logger.info(f"Submission of {session_id} rejected: {e.sections}")
            self._notify_missing(state, e.sections)
            raise

        title = self.localizer.t("notify.submitted.title")
        description = self.localizer.t("notify.submitted.description", request_id=state.request_id)
        send_notification(self.notifications, title, description, NotificationSeverity.INFO, state.session_id)
        return state

    async def wait_for_resolution(self, session_id: str, timeout: Optional[float] = None) -> WorkflowState:
        state = self.session_store.get(session_id)
        return await self.workflow_engine.wait_for_resolution(state, timeout)

    async def record_review_decision(
        self,
        session_id: str,
        status: VerificationStatus,
        note: Optional[str] = None
    ) -> WorkflowState:
        """Accept an external reviewer's decision for a submitted registration"""
        state = self.session_store.get(session_id)
        await self.workflow_engine.apply_review_decision(state, status, note)

        severity = {
            VerificationStatus.APPROVED: NotificationSeverity.SUCCESS,
            VerificationStatus.REJECTED: NotificationSeverity.DESTRUCTIVE,
        }.get(state.result.status, NotificationSeverity.INFO)
        status_text = self.localizer.t(f"doctor.verification_{state.result.status.value}")
        self._notify(state, "notify.review_decision", severity, status=status_text)
        return state

    def _notify_missing(self, state: WorkflowState, sections: List[str]) -> None:
        title = self.localizer.t("notify.missing_information.title")
        description = self.localizer.t(
            f"notify.missing_information.{state.kind.value}",
            sections=", ".join(sections)
        )
        send_notification(self.notifications, title, description, NotificationSeverity.DESTRUCTIVE, state.session_id)

    def _on_resolved(self, state: WorkflowState) -> None:
        result = state.result

        if state.kind == WorkflowKind.TRIAGE:
            self._notify(
                state, "notify.triage_complete", NotificationSeverity.INFO,
                recommendation=result.recommendation
            )
        elif state.kind == WorkflowKind.DISPATCH:
            self._notify(
                state, "notify.ambulance_dispatched", NotificationSeverity.SUCCESS,
                vehicle_number=result.vehicle_number
            )
        else:
            self._notify(state, "notify.registration_submitted", NotificationSeverity.SUCCESS)

    def _on_failed(self, state: WorkflowState, failure: EvaluationFailure) -> None:
        self._notify(state, "notify.evaluation_failed", NotificationSeverity.DESTRUCTIVE)

    def _on_eta_tick(self, state: WorkflowState, result: DispatchResult) -> None:
        if result.arrived:
            self._notify(
                state, "notify.ambulance_arrived", NotificationSeverity.SUCCESS,
                vehicle_number=result.vehicle_number
            )

    # ===========================================
    # HELPERS
    # ===========================================

    @contextmanager
    def _reporting_invalid_input(self, state: WorkflowState) -> Iterator[None]:
        """Send a notification for any ValidationError raised inside the block, then re-raise"""
        try:
            yield
        except ValidationError as e:
            self._notify_invalid(state, e)
            raise

    def _notify_invalid(self, state: WorkflowState, error: ValidationError) -> None:
        logger.info(f"Invalid input for {state.session_id}: {error.message}")
        self._notify(state, "notify.invalid_input", NotificationSeverity.DESTRUCTIVE, message=error.message)

    def _notify(self, state: WorkflowState, key_prefix: str, severity: NotificationSeverity, **kwargs) -> None:
        title = self.localizer.t(f"{key_prefix}.title")
        description = self.localizer.t(f"{key_prefix}.description", **kwargs)
        send_notification(self.notifications, title, description, severity, state.session_id)

    @staticmethod
    def _require_kind(state: WorkflowState, kind: WorkflowKind) -> None:
        if state.kind != kind:
            raise workflow_error(f"Operation only available for {kind.value} sessions", state.stage.value)


# Module-level instance managed by the application lifespan
orchestrator: Optional[WorkflowOrchestrator] = None


def init_orchestrator(**kwargs) -> WorkflowOrchestrator:
    global orchestrator
    orchestrator = WorkflowOrchestrator(**kwargs)
    return orchestrator


def get_orchestrator() -> WorkflowOrchestrator:
    if orchestrator is None:
        return init_orchestrator()
    return orchestrator
