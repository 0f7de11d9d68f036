# medintake/models/results.py

from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from medintake.models.flow_models import TriageTier, VerificationStatus


class TriageResult(BaseModel):
    severity: TriageTier
    recommendation: str
    next_steps: List[str] = Field(default_factory=list)
    confidence: float

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(100.0, value))


class DispatchResult(BaseModel):
    """
    Responder assignment. eta_minutes is the only mutable part: the countdown
    lowers it once per tick and it never goes back up.
    """
    model_config = ConfigDict(validate_assignment=True)

    responder_id: str
    driver_name: str
    vehicle_number: str
    eta_minutes: int
    initial_eta_minutes: int
    responder_latitude: float
    responder_longitude: float

    @field_validator("eta_minutes", "initial_eta_minutes")
    @classmethod
    def clamp_eta(cls, value: int) -> int:
        return max(0, value)

    @property
    def arrived(self) -> bool:
        return self.eta_minutes == 0


class VerificationResult(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    status: VerificationStatus = VerificationStatus.PENDING
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reviewed_at: Optional[datetime] = None
    review_note: Optional[str] = None


WorkflowResult = Union[TriageResult, DispatchResult, VerificationResult]
