# medintake/core/exceptions.py
"""
Core Exceptions - standardized error handling for the intake workflows.

This module defines all custom exceptions used by the workflow engine,
providing consistent error handling and debugging information. None of these
errors is fatal to the process; every one is scoped to a single session.
"""

from typing import Optional, Dict, Any, List


class IntakeBaseException(Exception):
    """Base exception for all intake errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class WorkflowError(IntakeBaseException):
    """Errors in stage transitions (invalid event for the current stage)"""

    def __init__(
        self,
        message: str,
        current_state: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize workflow error.

        Args:
            message: Error description
            current_state: Stage where the error occurred
            details: Additional error context
        """
        super().__init__(message, details)
        self.current_state = current_state

        if current_state:
            self.details['current_state'] = current_state

    def __str__(self) -> str:
        """String representation including stage context"""
        base_msg = super().__str__()
        if self.current_state:
            return f"{base_msg} [State: {self.current_state}]"
        return base_msg


class ValidationError(IntakeBaseException):
    """Missing or invalid required field or section. Recoverable, no state change."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        sections: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize validation error.

        Args:
            message: Error description
            field: Field that failed validation
            value: Invalid value
            sections: Incomplete sections that blocked a submission
            details: Additional validation context
        """
        super().__init__(message, details)
        self.field = field
        self.value = value
        self.sections = list(sections or [])

        if field:
            self.details['field'] = field
        if value is not None:
            self.details['value'] = str(value)
        if self.sections:
            self.details['sections'] = self.sections


class AcquisitionFailure(IntakeBaseException):
    """Geolocation or upload acquisition failed. The session stays in Collecting."""

    UNSUPPORTED = "unsupported"
    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize acquisition failure.

        Args:
            message: Error description
            reason: Machine-readable reason (unsupported, permission_denied, ...)
            source: Collaborator that failed (geolocation, documents)
            details: Additional context
        """
        super().__init__(message, details)
        self.reason = reason
        self.source = source

        if reason:
            self.details['reason'] = reason
        if source:
            self.details['source'] = source


class EvaluationFailure(IntakeBaseException):
    """The outcome evaluator itself failed; the session returns to Collecting."""

    def __init__(
        self,
        message: str,
        workflow: Optional[str] = None,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.workflow = workflow
        self.request_id = request_id

        if workflow:
            self.details['workflow'] = workflow
        if request_id:
            self.details['request_id'] = request_id


class SessionError(IntakeBaseException):
    """Errors in session management (unknown or discarded session)"""

    def __init__(
        self,
        message: str,
        session_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize session error.

        Args:
            message: Error description
            session_id: Session that failed
            details: Additional session context
        """
        super().__init__(message, details)
        self.session_id = session_id

        if session_id:
            self.details['session_id'] = session_id


class ConfigurationError(IntakeBaseException):
    """Errors in system configuration and initialization"""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.component = component

        if component:
            self.details['component'] = component


# Convenience functions for creating common errors

def workflow_error(message: str, current_state: str) -> WorkflowError:
    """Create a workflow error with current stage context."""
    return WorkflowError(message, current_state=current_state)


def validation_error(message: str, field: str, value: Any = None) -> ValidationError:
    """Create a validation error with field context."""
    return ValidationError(message, field=field, value=value)


def incomplete_sections_error(sections: List[str]) -> ValidationError:
    """Create the validation error raised when a submission is attempted too early."""
    return ValidationError(
        f"Incomplete sections: {', '.join(sections)}",
        sections=sections
    )


def acquisition_failure(message: str, reason: str, source: str) -> AcquisitionFailure:
    """Create an acquisition failure with reason and source."""
    return AcquisitionFailure(message, reason=reason, source=source)


def session_error(message: str, session_id: str) -> SessionError:
    """Create a session error with session context."""
    return SessionError(message, session_id=session_id)


def config_error(message: str, component: str) -> ConfigurationError:
    """Create a configuration error with component context."""
    return ConfigurationError(message, component=component)
