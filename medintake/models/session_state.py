# medintake/models/session_state.py

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from medintake.core.exceptions import session_error
from medintake.models.fields import FieldStore, create_field_store
from medintake.models.flow_models import Stage, WorkflowKind
from medintake.models.results import WorkflowResult

logger = logging.getLogger(__name__)

REQUEST_ID_PREFIXES = {
    WorkflowKind.TRIAGE: "TRI",
    WorkflowKind.DISPATCH: "AMB",
    WorkflowKind.VERIFICATION: "REG",
}


class WorkflowState(BaseModel):
    """
    Holds everything one active workflow session owns: the stage, the Field
    Store, the frozen input once submitted, the result once resolved, and the
    handles of the pending evaluation task and ETA countdown.

    Only the WorkflowEngine moves a session between stages.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_id: str = Field(default_factory=lambda: str(uuid4()))
    kind: WorkflowKind
    stage: Stage = Stage.COLLECTING
    fields: FieldStore
    frozen_fields: Optional[Any] = None
    result: Optional[WorkflowResult] = None
    request_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    submitted_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    last_error: Optional[str] = None
    discarded: bool = False

    _evaluation_task: Optional[asyncio.Task] = PrivateAttr(default=None)
    _countdown: Optional[Any] = PrivateAttr(default=None)

    @classmethod
    def new(cls, kind: WorkflowKind) -> "WorkflowState":
        kind = WorkflowKind(kind)
        return cls(kind=kind, fields=create_field_store(kind))

    @property
    def flow_complete(self) -> bool:
        """Signal for the navigation layer; the core never routes itself"""
        return self.stage == Stage.RESOLVED

    @property
    def evaluation_task(self) -> Optional[asyncio.Task]:
        return self._evaluation_task

    @property
    def countdown(self) -> Optional[Any]:
        return self._countdown

    def assign_request_id(self) -> str:
        """Generate the request id on first submission; later calls keep it"""
        if self.request_id is None:
            prefix = REQUEST_ID_PREFIXES[self.kind]
            self.request_id = f"{prefix}-{int(time.time() * 1000)}-{uuid4().hex[:6]}"
        return self.request_id

    def attach_evaluation(self, task: asyncio.Task) -> None:
        self._evaluation_task = task

    def attach_countdown(self, countdown: Any) -> None:
        self._countdown = countdown

    def cancel_pending(self) -> None:
        """Stop every pending task and timer of this session. Idempotent."""
        task = self._evaluation_task
        if task is not None and not task.done():
            task.cancel()
            logger.debug(f"Cancelled evaluation for session {self.session_id}")

        if self._countdown is not None:
            self._countdown.cancel()

    def discard(self) -> None:
        """Mark the session discarded and stop its pending work. Idempotent."""
        self.discarded = True
        self.cancel_pending()

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "kind": self.kind.value,
            "stage": self.stage.value,
            "request_id": self.request_id,
            "fields": self.fields.to_dict(),
            "sections": self.fields.section_status(),
            "completeness": self.fields.completeness_percentage(),
            "result": self.result.model_dump(mode="json") if self.result is not None else None,
            "flow_complete": self.flow_complete,
            "last_error": self.last_error,
        }


class SessionStore:
    """
    In-memory registry of workflow sessions. Nothing here is persisted.
    """

    def __init__(self):
        self.sessions: Dict[str, WorkflowState] = {}

    def create(self, kind: WorkflowKind) -> WorkflowState:
        state = WorkflowState.new(kind)
        self.sessions[state.session_id] = state
        logger.info(f"Created {state.kind.value} session {state.session_id}")
        return state

    def get(self, session_id: str) -> WorkflowState:
        state = self.sessions.get(session_id)
        if state is None:
            raise session_error(f"Unknown session '{session_id}'", session_id)
        return state

    def replace(self, session_id: str) -> WorkflowState:
        """Restart: discard the session and open a fresh one of the same kind"""
        old = self.get(session_id)
        self.discard(session_id)
        return self.create(old.kind)

    def discard(self, session_id: str) -> bool:
        state = self.sessions.pop(session_id, None)
        if state is None:
            return False

        state.discard()
        logger.info(f"Discarded session {session_id}")
        return True

    def discard_all(self) -> int:
        session_ids = list(self.sessions)
        for session_id in session_ids:
            self.discard(session_id)
        return len(session_ids)

    def __len__(self) -> int:
        return len(self.sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self.sessions
