# medintake/models/flow_models.py

from enum import Enum


class WorkflowKind(str, Enum):
    TRIAGE = "triage"
    DISPATCH = "dispatch"
    VERIFICATION = "verification"


class Stage(str, Enum):
    COLLECTING = "collecting"
    PROCESSING = "processing"
    RESOLVED = "resolved"


class FlowEvent(str, Enum):
    """Events that can trigger stage transitions"""
    SUBMIT = "submit"
    EVALUATION_COMPLETE = "evaluation_complete"
    EVALUATION_FAILED = "evaluation_failed"
    REVIEW_DECISION = "review_decision"


class SeverityRating(str, Enum):
    LOW = "low"            # 1-3/10
    MODERATE = "moderate"  # 4-6/10
    HIGH = "high"          # 7-8/10
    EXTREME = "extreme"    # 9-10/10


class DurationBucket(str, Enum):
    MINUTES = "minutes"  # less than 1 hour
    HOURS = "hours"      # 1-24 hours
    DAYS = "days"        # 1-7 days
    WEEKS = "weeks"      # 1-4 weeks
    MONTHS = "months"    # more than 1 month


class TriageTier(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    EMERGENCY = "emergency"


class EmergencyTier(str, Enum):
    CRITICAL = "critical"
    URGENT = "urgent"
    MODERATE = "moderate"


class ExperienceBracket(str, Enum):
    YEARS_0_2 = "0-2"
    YEARS_3_5 = "3-5"
    YEARS_6_10 = "6-10"
    YEARS_11_15 = "11-15"
    YEARS_16_20 = "16-20"
    YEARS_20_PLUS = "20+"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationSeverity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    DESTRUCTIVE = "destructive"


# Offered by the registration form; specialization itself stays free text
SPECIALIZATIONS = (
    "General Medicine",
    "Cardiology",
    "Dermatology",
    "Emergency Medicine",
    "Endocrinology",
    "Gastroenterology",
    "Neurology",
    "Oncology",
    "Pediatrics",
    "Psychiatry",
    "Radiology",
    "Surgery",
    "Other",
)
