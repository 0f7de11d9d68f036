# medintake/core/flow_engine.py
"""
Workflow Engine - FSM-based stage control shared by all three workflows.

Every workflow runs the same small state machine:

    collecting --submit--> processing --evaluation_complete--> resolved
                               |
                               +--evaluation_failed--> collecting

Verification additionally accepts review decisions while resolved. Leaving
collecting is gated on the Field Store being complete; the evaluation itself
runs as an asyncio task so submit() returns as soon as the session is in
processing.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from medintake.core.config import Settings, settings
from medintake.core.countdown import EtaCountdown
from medintake.core.evaluators import (
    DispatchAssigner,
    KeywordConfidenceScorer,
    OutcomeEvaluator,
    RandomConfidenceScorer,
    TriageClassifier,
    VerificationReview,
)
from medintake.core.exceptions import (
    EvaluationFailure,
    SessionError,
    ValidationError,
    WorkflowError,
    config_error,
)
from medintake.models.flow_models import FlowEvent, Stage, VerificationStatus, WorkflowKind
from medintake.models.results import DispatchResult
from medintake.models.session_state import WorkflowState

logger = logging.getLogger(__name__)

# Type definitions for cleaner code
TransitionHandler = Callable[[WorkflowState, Dict[str, Any]], Awaitable[None]]
TransitionCondition = Callable[[WorkflowState, Dict[str, Any]], bool]
ResolvedCallback = Callable[[WorkflowState], None]
FailedCallback = Callable[[WorkflowState, EvaluationFailure], None]
TickCallback = Callable[[WorkflowState, DispatchResult], None]


@dataclass
class Transition:
    """Represents a stage transition"""
    from_state: Stage
    event: FlowEvent
    to_state: Stage
    condition: Optional[TransitionCondition] = None
    handler: Optional[TransitionHandler] = None
    description: str = ""


def build_evaluators(
    config: Optional[Settings] = None,
    rng: Optional[random.Random] = None
) -> Dict[WorkflowKind, OutcomeEvaluator]:
    """Create the default evaluator for each workflow from settings"""
    config = config or settings
    rng = rng or random.Random(config.RANDOM_SEED)

    if config.TRIAGE_CONFIDENCE_MODE == "keyword":
        scorer = KeywordConfidenceScorer()
    else:
        scorer = RandomConfidenceScorer(rng)

    try:
        dispatch = DispatchAssigner(
            rng=rng,
            eta_min_minutes=config.ETA_MIN_MINUTES,
            eta_max_minutes=config.ETA_MAX_MINUTES,
            jitter_degrees=config.POSITION_JITTER_DEGREES,
        )
    except ValueError as e:
        raise config_error(f"Invalid dispatch settings: {e}", component="dispatch") from e

    return {
        WorkflowKind.TRIAGE: TriageClassifier(scorer),
        WorkflowKind.DISPATCH: dispatch,
        WorkflowKind.VERIFICATION: VerificationReview(),
    }


class WorkflowEngine:
    """
    Stage controller for intake workflows.

    This engine:
    1. Defines all valid stage transitions explicitly
    2. Gates submission on Field Store completeness
    3. Runs one outcome evaluation per session in the background
    4. Starts the ETA countdown for resolved dispatch sessions
    """

    def __init__(
        self,
        evaluators: Optional[Dict[WorkflowKind, OutcomeEvaluator]] = None,
        processing_delay: float = 2.0,
        eta_tick_seconds: float = 60.0,
        on_resolved: Optional[ResolvedCallback] = None,
        on_failed: Optional[FailedCallback] = None,
        on_eta_tick: Optional[TickCallback] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize workflow engine.

        Args:
            evaluators: Outcome evaluator per workflow kind
            processing_delay: Simulated backend latency in seconds
            eta_tick_seconds: Period of the dispatch ETA countdown
            on_resolved: Called after a session reaches resolved
            on_failed: Called after an evaluation failed
            on_eta_tick: Called after every ETA decrement
            sleep: Awaitable sleep used for delay and countdown
        """
        self.evaluators = evaluators or build_evaluators()
        self.processing_delay = processing_delay
        self.eta_tick_seconds = eta_tick_seconds
        self.on_resolved = on_resolved
        self.on_failed = on_failed
        self.on_eta_tick = on_eta_tick
        self._sleep = sleep

        # Store all defined transitions
        self.transitions: List[Transition] = []

        # Quick lookup: {(state, event): Transition}
        self._transition_map: Dict[tuple, Transition] = {}

        self._setup_transitions()
        self._build_transition_map()

        logger.info("WorkflowEngine initialized")

    def _setup_transitions(self):
        """Define all stage transitions with their handlers"""

        self.add_transition(
            from_state=Stage.COLLECTING,
            event=FlowEvent.SUBMIT,
            to_state=Stage.PROCESSING,
            handler=self._handle_submit,
            description="Complete input -> freeze fields and start evaluation"
        )

        self.add_transition(
            from_state=Stage.PROCESSING,
            event=FlowEvent.EVALUATION_COMPLETE,
            to_state=Stage.RESOLVED,
            handler=self._handle_evaluation_complete,
            description="Evaluator finished -> store result"
        )

        self.add_transition(
            from_state=Stage.PROCESSING,
            event=FlowEvent.EVALUATION_FAILED,
            to_state=Stage.COLLECTING,
            handler=self._handle_evaluation_failed,
            description="Evaluator failed -> reopen input for another attempt"
        )

        self.add_transition(
            from_state=Stage.RESOLVED,
            event=FlowEvent.REVIEW_DECISION,
            to_state=Stage.RESOLVED,
            condition=lambda state, context: state.kind == WorkflowKind.VERIFICATION,
            handler=self._handle_review_decision,
            description="External reviewer decision on a submitted registration"
        )

    # ===========================================
    # TRANSITION HANDLERS
    # ===========================================

    async def _handle_submit(self, state: WorkflowState, context: Dict[str, Any]) -> None:
        # freeze() raises ValidationError before anything is touched
        state.frozen_fields = state.fields.freeze()
        state.assign_request_id()
        state.submitted_at = datetime.now(timezone.utc)
        state.last_error = None

    async def _handle_evaluation_complete(self, state: WorkflowState, context: Dict[str, Any]) -> None:
        state.result = context["result"]
        state.resolved_at = datetime.now(timezone.utc)

    async def _handle_evaluation_failed(self, state: WorkflowState, context: Dict[str, Any]) -> None:
        error = context.get("error")
        state.result = None
        state.frozen_fields = None
        state.fields.unfreeze()
        state.last_error = error.message if isinstance(error, EvaluationFailure) else str(error)

    async def _handle_review_decision(self, state: WorkflowState, context: Dict[str, Any]) -> None:
        status = VerificationStatus(context["status"])
        state.result.status = status
        state.result.reviewed_at = datetime.now(timezone.utc)
        state.result.review_note = context.get("note")

    # ===========================================
    # CORE FSM METHODS
    # ===========================================

    def add_transition(
        self,
        from_state: Stage,
        event: FlowEvent,
        to_state: Stage,
        condition: Optional[TransitionCondition] = None,
        handler: Optional[TransitionHandler] = None,
        description: str = ""
    ):
        """Add a new transition to the FSM"""
        transition = Transition(
            from_state=from_state,
            event=event,
            to_state=to_state,
            condition=condition,
            handler=handler,
            description=description
        )
        self.transitions.append(transition)

    def _build_transition_map(self):
        """Build fast lookup map for transitions"""
        self._transition_map.clear()

        for transition in self.transitions:
            key = (transition.from_state, transition.event)

            if key in self._transition_map:
                logger.warning(
                    f"Multiple transitions for {transition.from_state.value} + {transition.event.value}. "
                    f"Last definition wins."
                )

            self._transition_map[key] = transition

    def get_valid_transitions(self, current_state: Stage) -> List[Transition]:
        """Get all transitions leaving a stage"""
        return [t for t in self.transitions if t.from_state == current_state]

    def can_transition(
        self,
        current_state: Stage,
        event: FlowEvent,
        state: WorkflowState,
        context: Optional[Dict[str, Any]] = None
    ) -> bool:
        """Check if a transition is valid"""
        key = (current_state, event)

        if key not in self._transition_map:
            return False

        transition = self._transition_map[key]

        if transition.condition:
            return transition.condition(state, context or {})

        return True

    async def process_event(
        self,
        state: WorkflowState,
        event: FlowEvent,
        context: Optional[Dict[str, Any]] = None
    ) -> Stage:
        """
        Process an event and execute the matching transition.

        Args:
            state: Session to transition
            event: Event to process
            context: Event payload (result, error, review status)

        Returns:
            The new stage

        Raises:
            WorkflowError: If the event is not valid in the current stage
            ValidationError: If the handler rejected the session's input
        """
        current_state = state.stage
        context = context or {}

        logger.info(f"Processing event {event.value} from stage {current_state.value} ({state.session_id})")

        if not self.can_transition(current_state, event, state, context):
            valid_events = [t.event.value for t in self.get_valid_transitions(current_state)]
            logger.warning(f"Invalid transition: {current_state.value} + {event.value}. Valid events: {valid_events}")
            raise WorkflowError(
                current_state=current_state.value,
                message=f"Invalid transition: {current_state.value} + {event.value}. Valid events: {valid_events}"
            )

        transition = self._transition_map[(current_state, event)]

        try:
            if transition.handler:
                await transition.handler(state, context)

            state.stage = transition.to_state

            logger.info(
                f"Transition successful: {current_state.value} -> {transition.to_state.value}"
            )

            return transition.to_state

        except (ValidationError, WorkflowError):
            raise
        except Exception as e:
            logger.error(f"Transition handler failed: {e}")
            raise WorkflowError(
                current_state=current_state.value,
                message=f"Transition execution failed: {str(e)}"
            ) from e

    # ===========================================
    # WORKFLOW OPERATIONS
    # ===========================================

    async def submit(self, state: WorkflowState) -> WorkflowState:
        """
        Leave collecting and start the evaluation in the background.

        Returns as soon as the session is in processing.

        Raises:
            ValidationError: If a required section is incomplete (no state change)
            WorkflowError: If the session is not collecting (e.g. evaluation in flight)
        """
        if state.discarded:
            raise SessionError("Session has been discarded", session_id=state.session_id)

        await self.process_event(state, FlowEvent.SUBMIT)

        task = asyncio.get_running_loop().create_task(self._run_evaluation(state))
        state.attach_evaluation(task)
        return state

    async def _run_evaluation(self, state: WorkflowState) -> WorkflowState:
        evaluator = self.evaluators[state.kind]

        try:
            if self.processing_delay > 0:
                await self._sleep(self.processing_delay)
            result = await evaluator.evaluate(state.frozen_fields, state.request_id)
        except asyncio.CancelledError:
            logger.info(f"Evaluation for {state.request_id} abandoned")
            raise
        except Exception as e:
            failure = EvaluationFailure(
                f"Evaluation failed: {e}",
                workflow=state.kind.value,
                request_id=state.request_id
            )
            logger.error(str(failure), exc_info=True)

            if state.discarded:
                return state

            await self.process_event(state, FlowEvent.EVALUATION_FAILED, {"error": failure})
            self._call(self.on_failed, state, failure)
            return state

        if state.discarded:
            logger.info(f"Dropping result for discarded session {state.session_id}")
            return state

        await self.process_event(state, FlowEvent.EVALUATION_COMPLETE, {"result": result})

        if state.kind == WorkflowKind.DISPATCH:
            self._start_countdown(state)

        self._call(self.on_resolved, state)
        return state

    def _start_countdown(self, state: WorkflowState) -> None:
        def on_tick(result: DispatchResult) -> None:
            self._call(self.on_eta_tick, state, result)

        countdown = EtaCountdown(
            state.result,
            interval_seconds=self.eta_tick_seconds,
            on_tick=on_tick,
            sleep=self._sleep
        )
        state.attach_countdown(countdown)
        countdown.start()

    def _call(self, callback: Optional[Callable], *args) -> None:
        """Fire-and-forget hook call; a failing hook never affects the session"""
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            logger.warning(f"Workflow callback {getattr(callback, '__name__', callback)} failed: {e}")

    async def wait_for_resolution(
        self,
        state: WorkflowState,
        timeout: Optional[float] = None
    ) -> WorkflowState:
        """Wait for the in-flight evaluation, if any, to finish"""
        task = state.evaluation_task
        if task is None:
            return state

        try:
            await asyncio.wait_for(asyncio.shield(task), timeout)
        except asyncio.CancelledError:
            if task.cancelled():
                raise SessionError("Session was discarded during evaluation", session_id=state.session_id)
            raise
        return state

    async def apply_review_decision(
        self,
        state: WorkflowState,
        status: VerificationStatus,
        note: Optional[str] = None
    ) -> WorkflowState:
        """Record an external reviewer's decision on a resolved registration"""
        try:
            status = VerificationStatus(status)
        except ValueError as e:
            raise ValidationError(
                f"Unknown verification status '{status}'", field="status", value=status
            ) from e

        await self.process_event(
            state,
            FlowEvent.REVIEW_DECISION,
            {"status": status, "note": note}
        )
        return state

    # ===========================================
    # INTROSPECTION
    # ===========================================

    def get_flow_summary(self) -> Dict[str, Any]:
        """Get summary of the FSM for debugging/monitoring"""
        states = list(set([t.from_state for t in self.transitions] + [t.to_state for t in self.transitions]))
        events = list(set([t.event for t in self.transitions]))

        return {
            "total_states": len(states),
            "total_events": len(events),
            "total_transitions": len(self.transitions),
            "states": [s.value for s in states],
            "events": [e.value for e in events],
            "transitions": [
                {
                    "from": t.from_state.value,
                    "event": t.event.value,
                    "to": t.to_state.value,
                    "description": t.description,
                    "has_handler": t.handler is not None
                }
                for t in self.transitions
            ]
        }

    def validate_fsm(self) -> List[str]:
        """Validate the FSM for common issues"""
        issues = []

        reachable_states = {Stage.COLLECTING}
        changed = True
        while changed:
            changed = False
            for transition in self.transitions:
                if transition.from_state in reachable_states and transition.to_state not in reachable_states:
                    reachable_states.add(transition.to_state)
                    changed = True

        unreachable = set(Stage) - reachable_states
        if unreachable:
            issues.append(f"Unreachable states: {[s.value for s in unreachable]}")

        missing_evaluators = [kind.value for kind in WorkflowKind if kind not in self.evaluators]
        if missing_evaluators:
            issues.append(f"Workflows without evaluator: {missing_evaluators}")

        return issues


def create_workflow_engine(config: Optional[Settings] = None, **kwargs) -> WorkflowEngine:
    """Create an engine configured from settings"""
    config = config or settings
    return WorkflowEngine(
        evaluators=kwargs.pop("evaluators", None) or build_evaluators(config),
        processing_delay=config.PROCESSING_DELAY_SECONDS,
        eta_tick_seconds=config.ETA_TICK_SECONDS,
        **kwargs
    )
