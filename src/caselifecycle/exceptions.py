"""
Case Lifecycle Exception Hierarchy

Domain-specific exceptions for the case lifecycle rules engine.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: CL_<CATEGORY>_<SPECIFIC>

Two conditions are deliberately NOT exceptions:
- a rule whose secondary anchor is absent (the rule is skipped)
- a deadline kind with no matching task template (no task is produced)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class CaseLifecycleError(Exception):
    """
    Base exception for all case lifecycle errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (CL_*)
        details: Additional context about the error
        case_id: Associated case ID if applicable
    """
    message: str
    code: str = "CL_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    case_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.case_id:
            parts.append(f"(case: {self.case_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/caller display."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.case_id:
            result["case_id"] = self.case_id
        return result


# =============================================================================
# Input Errors
# =============================================================================

@dataclass
class InvalidArgumentError(CaseLifecycleError):
    """Caller supplied a malformed or out-of-range argument."""
    code: str = "CL_INVALID_ARGUMENT"


# =============================================================================
# Pack Errors
# =============================================================================

@dataclass
class PackLoadError(CaseLifecycleError):
    """Failed to load a rule/template pack from file."""
    code: str = "CL_PACK_LOAD_ERROR"


@dataclass
class PackValidationError(CaseLifecycleError):
    """Pack schema or reference integrity validation failed."""
    code: str = "CL_PACK_VALIDATION_ERROR"


@dataclass
class PackVersionMismatch(CaseLifecycleError):
    """Pack schema version is not compatible with this engine."""
    code: str = "CL_PACK_VERSION_MISMATCH"


# =============================================================================
# Timeline Errors
# =============================================================================

@dataclass
class TimelineCalculationError(CaseLifecycleError):
    """Timeline calculation failed."""
    code: str = "CL_TIMELINE_ERROR"


@dataclass
class InvalidCalendarError(CaseLifecycleError):
    """Holiday calendar configuration is invalid."""
    code: str = "CL_INVALID_CALENDAR"
