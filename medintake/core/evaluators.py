# medintake/core/evaluators.py
"""
Outcome Evaluators - map frozen workflow input to a terminal result.

These are placeholders for real backend services (triage classifier,
dispatch centre, credential review). A real service replaces one by
implementing OutcomeEvaluator; the WorkflowEngine does not change.

Every source of randomness is an injected random.Random, so tests can seed
it and assert exact values.
"""

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from medintake.models.fields import DispatchFields, TriageFields, VerificationFields
from medintake.models.flow_models import SeverityRating, TriageTier, VerificationStatus
from medintake.models.results import DispatchResult, TriageResult, VerificationResult

logger = logging.getLogger(__name__)


class OutcomeEvaluator(ABC):
    """Base class: one evaluator per workflow kind"""

    @abstractmethod
    async def evaluate(self, fields, request_id: str):
        """Produce the workflow result from frozen fields"""
        pass


# ===========================================
# TRIAGE
# ===========================================

EMERGENCY_KEYWORDS: Tuple[str, ...] = ("chest pain", "difficulty breathing", "severe pain")
MODERATE_KEYWORDS: Tuple[str, ...] = ("moderate",)

TRIAGE_GUIDANCE: Dict[TriageTier, Tuple[str, List[str]]] = {
    TriageTier.EMERGENCY: (
        "Seek immediate emergency care",
        [
            "Call emergency services immediately",
            "Go to nearest emergency room",
            "Inform emergency contacts",
        ],
    ),
    TriageTier.MODERATE: (
        "Schedule appointment with healthcare provider within 24-48 hours",
        [
            "Book appointment with doctor",
            "Monitor symptoms closely",
            "Take prescribed medications if any",
        ],
    ),
    TriageTier.MILD: (
        "Monitor symptoms and consider telehealth consultation",
        [
            "Rest and monitor symptoms",
            "Stay hydrated",
            "Consider over-the-counter remedies",
        ],
    ),
}


def matched_keywords(text: str, keywords: Sequence[str]) -> List[str]:
    text_lower = text.lower()
    return [keyword for keyword in keywords if keyword in text_lower]


def classify_symptoms(symptoms: str, severity: Optional[SeverityRating]) -> TriageTier:
    """Keyword triage: emergency keywords win, then moderate keywords or a high rating"""
    if matched_keywords(symptoms, EMERGENCY_KEYWORDS):
        return TriageTier.EMERGENCY
    if matched_keywords(symptoms, MODERATE_KEYWORDS) or severity == SeverityRating.HIGH:
        return TriageTier.MODERATE
    return TriageTier.MILD


def guidance_for(tier: TriageTier) -> Tuple[str, List[str]]:
    # severe has no row of its own and is treated like emergency
    row = TRIAGE_GUIDANCE.get(tier, TRIAGE_GUIDANCE[TriageTier.EMERGENCY])
    return row[0], list(row[1])


class ConfidenceScorer(ABC):
    @abstractmethod
    def score(self, fields: TriageFields, tier: TriageTier) -> float:
        pass


class RandomConfidenceScorer(ConfidenceScorer):
    """Uniform 80-100 placeholder. Not a signal; assert the range only."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def score(self, fields: TriageFields, tier: TriageTier) -> float:
        return round(self.rng.uniform(80.0, 100.0), 1)


class KeywordConfidenceScorer(ConfidenceScorer):
    """
    Deterministic scoring: 80 base, +10 per keyword backing the tier,
    +5 when the user's own rating agrees with the tier, capped at 100.
    """

    AGREEING_RATINGS = {
        TriageTier.EMERGENCY: {SeverityRating.HIGH, SeverityRating.EXTREME},
        TriageTier.SEVERE: {SeverityRating.HIGH, SeverityRating.EXTREME},
        TriageTier.MODERATE: {SeverityRating.MODERATE, SeverityRating.HIGH},
        TriageTier.MILD: {SeverityRating.LOW},
    }

    def score(self, fields: TriageFields, tier: TriageTier) -> float:
        if tier in (TriageTier.EMERGENCY, TriageTier.SEVERE):
            hits = len(matched_keywords(fields.symptoms, EMERGENCY_KEYWORDS))
        elif tier == TriageTier.MODERATE:
            hits = len(matched_keywords(fields.symptoms, MODERATE_KEYWORDS))
        else:
            hits = 0

        score = 80.0 + 10.0 * hits
        if fields.severity in self.AGREEING_RATINGS[tier]:
            score += 5.0
        return min(100.0, score)


class TriageClassifier(OutcomeEvaluator):
    def __init__(self, scorer: Optional[ConfidenceScorer] = None):
        self.scorer = scorer or RandomConfidenceScorer()

    async def evaluate(self, fields: TriageFields, request_id: str) -> TriageResult:
        tier = classify_symptoms(fields.symptoms, fields.severity)
        recommendation, next_steps = guidance_for(tier)
        confidence = self.scorer.score(fields, tier)

        logger.info(f"Triage {request_id}: tier={tier.value} confidence={confidence:.1f}")
        return TriageResult(
            severity=tier,
            recommendation=recommendation,
            next_steps=next_steps,
            confidence=confidence,
        )


# ===========================================
# DISPATCH
# ===========================================

@dataclass(frozen=True)
class Responder:
    responder_id: str
    driver_name: str
    vehicle_number: str


DEFAULT_ROSTER: Tuple[Responder, ...] = (
    Responder("AMB001", "Dr. Sarah Johnson", "EMT-2024-001"),
)


class DispatchAssigner(OutcomeEvaluator):
    """Synthesizes one responder assignment per request; never re-queried"""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        roster: Sequence[Responder] = DEFAULT_ROSTER,
        eta_min_minutes: int = 5,
        eta_max_minutes: int = 20,
        jitter_degrees: float = 0.01
    ):
        if not roster:
            raise ValueError("Dispatch roster must not be empty")
        if eta_min_minutes > eta_max_minutes:
            raise ValueError("eta_min_minutes must not exceed eta_max_minutes")

        self.rng = rng or random.Random()
        self.roster = tuple(roster)
        self.eta_min_minutes = eta_min_minutes
        self.eta_max_minutes = eta_max_minutes
        self.jitter_degrees = jitter_degrees

    @property
    def max_offset(self) -> float:
        """Largest per-axis distance between requester and responder"""
        return self.jitter_degrees / 2

    def _jitter(self, coordinate: float) -> float:
        return coordinate + (self.rng.random() - 0.5) * self.jitter_degrees

    async def evaluate(self, fields: DispatchFields, request_id: str) -> DispatchResult:
        responder = self.rng.choice(self.roster)
        eta = self.rng.randint(self.eta_min_minutes, self.eta_max_minutes)

        result = DispatchResult(
            responder_id=responder.responder_id,
            driver_name=responder.driver_name,
            vehicle_number=responder.vehicle_number,
            eta_minutes=eta,
            initial_eta_minutes=eta,
            responder_latitude=self._jitter(fields.location.latitude),
            responder_longitude=self._jitter(fields.location.longitude),
        )

        logger.info(
            f"Dispatch {request_id}: {responder.vehicle_number} assigned "
            f"({fields.emergency_tier.value}), ETA {eta} min"
        )
        return result


# ===========================================
# VERIFICATION
# ===========================================

class VerificationReview(OutcomeEvaluator):
    """Submission only: approval or rejection comes from a human reviewer later"""

    async def evaluate(self, fields: VerificationFields, request_id: str) -> VerificationResult:
        logger.info(f"Registration {request_id} queued for review ({fields.specialization})")
        return VerificationResult(status=VerificationStatus.PENDING)
