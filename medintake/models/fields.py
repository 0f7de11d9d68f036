# medintake/models/fields.py
"""
Field Stores - the mutable holders of a workflow's in-progress input.

Each workflow declares its fields, the logical section each required field
belongs to, and how much each section weighs in the completeness percentage.
Completion flags are never stored: every badge or percentage is computed from
the current values, so the indicator cannot drift from the data.

Once a session is submitted the store is frozen and a typed, immutable
snapshot (TriageFields, DispatchFields, VerificationFields) is handed to the
outcome evaluator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from medintake.core.exceptions import (
    ValidationError,
    WorkflowError,
    incomplete_sections_error,
    validation_error,
)
from medintake.models.flow_models import (
    DurationBucket,
    EmergencyTier,
    ExperienceBracket,
    SeverityRating,
    WorkflowKind,
)


class FieldKind(str, Enum):
    TEXT = "text"
    CHOICE = "choice"
    FILE = "file"
    LOCATION = "location"


@dataclass(frozen=True)
class FieldSpec:
    """Declares one input field. section=None marks the field optional."""
    name: str
    kind: FieldKind
    section: Optional[str] = None
    choices: Optional[Type[Enum]] = None


class GeoLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str


class TriageFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    symptoms: str
    severity: SeverityRating
    duration: DurationBucket
    photo: Optional[str] = None


class DispatchFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: GeoLocation
    emergency_tier: EmergencyTier


class VerificationFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Personal
    first_name: str
    last_name: str
    email: str
    phone: str

    # Professional
    license_number: str
    specialization: str
    hospital_affiliation: str
    years_of_experience: ExperienceBracket

    # Documents (artifact references)
    medical_license: str
    government_id: str
    hospital_letter: str


class FieldStore:
    """
    Base Field Store. Subclasses only declare FIELDS, SECTION_WEIGHTS and
    SNAPSHOT_MODEL; all behaviour lives here.
    """

    FIELDS: Tuple[FieldSpec, ...] = ()
    SECTION_WEIGHTS: Dict[str, int] = {}
    SNAPSHOT_MODEL: Type[BaseModel] = BaseModel

    def __init__(self, **initial: Any):
        self._specs: Dict[str, FieldSpec] = {spec.name: spec for spec in self.FIELDS}
        self._values: Dict[str, Any] = {name: None for name in self._specs}
        self._frozen = False

        for name, value in initial.items():
            self.set_field(name, value)

    # ===========================================
    # MUTATION
    # ===========================================

    def set_field(self, name: str, value: Any) -> None:
        """Overwrite a field. Only the Python type is checked; None clears."""
        if self._frozen:
            raise WorkflowError(f"Cannot change '{name}': fields are frozen after submission")

        spec = self._specs.get(name)
        if spec is None:
            raise validation_error(f"Unknown field '{name}'", field=name, value=value)

        self._values[name] = self._coerce(spec, value)

    def clear_field(self, name: str) -> None:
        self.set_field(name, None)

    def _coerce(self, spec: FieldSpec, value: Any) -> Any:
        if value is None:
            return None

        if spec.kind in (FieldKind.TEXT, FieldKind.FILE):
            if not isinstance(value, str):
                raise validation_error(
                    f"Field '{spec.name}' expects text", field=spec.name, value=value
                )
            return value

        if spec.kind == FieldKind.CHOICE:
            if not isinstance(value, str):
                raise validation_error(
                    f"Field '{spec.name}' expects a choice value", field=spec.name, value=value
                )
            try:
                return spec.choices(value)
            except ValueError:
                # Kept raw so the section simply reports incomplete
                return value

        if isinstance(value, GeoLocation):
            return value
        if isinstance(value, dict):
            try:
                return GeoLocation(**value)
            except PydanticValidationError as e:
                raise validation_error(
                    f"Field '{spec.name}' is not a valid location: {e.errors()[0]['msg']}",
                    field=spec.name,
                    value=value
                ) from e
        raise validation_error(
            f"Field '{spec.name}' expects a location", field=spec.name, value=value
        )

    # ===========================================
    # READ-ONLY PROJECTIONS
    # ===========================================

    def get_field(self, name: str) -> Any:
        if name not in self._specs:
            raise validation_error(f"Unknown field '{name}'", field=name)
        return self._values[name]

    @property
    def field_names(self) -> List[str]:
        return list(self._specs)

    @property
    def sections(self) -> List[str]:
        return list(self.SECTION_WEIGHTS)

    @property
    def document_slots(self) -> List[str]:
        return [spec.name for spec in self.FIELDS if spec.kind == FieldKind.FILE]

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _is_filled(self, spec: FieldSpec) -> bool:
        value = self._values[spec.name]
        if value is None:
            return False
        if spec.kind in (FieldKind.TEXT, FieldKind.FILE):
            return bool(value.strip())
        if spec.kind == FieldKind.CHOICE:
            return isinstance(value, spec.choices)
        return isinstance(value, GeoLocation)

    def _section_specs(self, section: str) -> List[FieldSpec]:
        if section not in self.SECTION_WEIGHTS:
            raise ValidationError(f"Unknown section '{section}'", sections=[section])
        return [spec for spec in self.FIELDS if spec.section == section]

    def is_section_complete(self, section: str) -> bool:
        return all(self._is_filled(spec) for spec in self._section_specs(section))

    def missing_fields(self, section: str) -> List[str]:
        return [spec.name for spec in self._section_specs(section) if not self._is_filled(spec)]

    def missing_sections(self) -> List[str]:
        return [section for section in self.sections if not self.is_section_complete(section)]

    def is_complete(self) -> bool:
        return not self.missing_sections()

    def section_status(self) -> Dict[str, bool]:
        """Badge projection: section -> complete"""
        return {section: self.is_section_complete(section) for section in self.sections}

    def completeness_percentage(self) -> int:
        total = sum(
            weight for section, weight in self.SECTION_WEIGHTS.items()
            if self.is_section_complete(section)
        )
        return max(0, min(100, total))

    def completeness_ratio(self) -> float:
        return self.completeness_percentage() / 100

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view of the current values"""
        result = {}
        for name, value in self._values.items():
            if isinstance(value, GeoLocation):
                result[name] = value.model_dump()
            elif isinstance(value, Enum):
                result[name] = value.value
            else:
                result[name] = value
        return result

    # ===========================================
    # FREEZING
    # ===========================================

    def freeze(self) -> BaseModel:
        """
        Freeze the store and return the typed snapshot for evaluation.

        Raises:
            ValidationError: If any required section is incomplete
        """
        missing = self.missing_sections()
        if missing:
            raise incomplete_sections_error(missing)

        values = {}
        for spec in self.FIELDS:
            value = self._values[spec.name]
            if spec.kind == FieldKind.FILE and value is not None and not value.strip():
                value = None
            values[spec.name] = value

        snapshot = self.SNAPSHOT_MODEL(**values)
        self._frozen = True
        return snapshot

    def unfreeze(self) -> None:
        """Reopen the store after a failed evaluation"""
        self._frozen = False


class TriageFieldStore(FieldStore):
    FIELDS = (
        FieldSpec("symptoms", FieldKind.TEXT, "symptoms"),
        FieldSpec("severity", FieldKind.CHOICE, "symptoms", SeverityRating),
        FieldSpec("duration", FieldKind.CHOICE, "symptoms", DurationBucket),
        FieldSpec("photo", FieldKind.FILE),
    )
    SECTION_WEIGHTS = {"symptoms": 100}
    SNAPSHOT_MODEL = TriageFields


class DispatchFieldStore(FieldStore):
    FIELDS = (
        FieldSpec("location", FieldKind.LOCATION, "location"),
        FieldSpec("emergency_tier", FieldKind.CHOICE, "emergency", EmergencyTier),
    )
    SECTION_WEIGHTS = {"location": 50, "emergency": 50}
    SNAPSHOT_MODEL = DispatchFields


class VerificationFieldStore(FieldStore):
    FIELDS = (
        FieldSpec("first_name", FieldKind.TEXT, "personal"),
        FieldSpec("last_name", FieldKind.TEXT, "personal"),
        FieldSpec("email", FieldKind.TEXT, "personal"),
        FieldSpec("phone", FieldKind.TEXT, "personal"),
        FieldSpec("license_number", FieldKind.TEXT, "professional"),
        FieldSpec("specialization", FieldKind.TEXT, "professional"),
        FieldSpec("hospital_affiliation", FieldKind.TEXT, "professional"),
        FieldSpec("years_of_experience", FieldKind.CHOICE, "professional", ExperienceBracket),
        FieldSpec("medical_license", FieldKind.FILE, "documents"),
        FieldSpec("government_id", FieldKind.FILE, "documents"),
        FieldSpec("hospital_letter", FieldKind.FILE, "documents"),
    )
    # 33/33/34 so the percentage only reaches 100 with every section done
    SECTION_WEIGHTS = {"personal": 33, "professional": 33, "documents": 34}
    SNAPSHOT_MODEL = VerificationFields


FIELD_STORES: Dict[WorkflowKind, Type[FieldStore]] = {
    WorkflowKind.TRIAGE: TriageFieldStore,
    WorkflowKind.DISPATCH: DispatchFieldStore,
    WorkflowKind.VERIFICATION: VerificationFieldStore,
}


def create_field_store(kind: WorkflowKind) -> FieldStore:
    return FIELD_STORES[WorkflowKind(kind)]()
