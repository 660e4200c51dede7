"""
ClaimCadence Exception Hierarchy

Domain-specific exceptions for the claim automation engine.
All exceptions include error codes for tracking and logging.

Exception codes follow the pattern: CC_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ClaimCadenceError(Exception):
    """
    Base exception for all ClaimCadence errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (CC_*)
        details: Additional context about the error
        claim_id: Associated claim ID if applicable
    """
    message: str
    code: str = "CC_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    claim_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.claim_id:
            parts.append(f"(claim: {self.claim_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.claim_id:
            result["claim_id"] = self.claim_id
        return result


# =============================================================================
# Configuration Errors
# =============================================================================

@dataclass
class ConfigurationError(ClaimCadenceError):
    """Required setting is missing or unreadable."""
    code: str = "CC_CONFIG_ERROR"


@dataclass
class ConfigValidationError(ClaimCadenceError):
    """Engine config file failed schema validation."""
    code: str = "CC_CONFIG_VALIDATION_ERROR"


# =============================================================================
# Trigger Errors
# =============================================================================

@dataclass
class UnauthorizedTriggerError(ClaimCadenceError):
    """Batch invocation did not present the shared cron secret."""
    code: str = "CC_TRIGGER_UNAUTHORIZED"


# =============================================================================
# Store Errors
# =============================================================================

@dataclass
class StoreError(ClaimCadenceError):
    """Relational store request failed."""
    code: str = "CC_STORE_ERROR"


@dataclass
class RecordNotFoundError(StoreError):
    """Requested record does not exist."""
    code: str = "CC_RECORD_NOT_FOUND"


@dataclass
class ConcurrentModificationError(StoreError):
    """Policy row changed since it was read (stale version token)."""
    code: str = "CC_CONCURRENT_MODIFICATION"


# =============================================================================
# Collaborator Errors
# =============================================================================

@dataclass
class CollaboratorError(ClaimCadenceError):
    """An external HTTP collaborator failed or timed out."""
    code: str = "CC_COLLABORATOR_ERROR"


@dataclass
class MailDeliveryError(CollaboratorError):
    """Mail collaborator rejected or failed to send a message."""
    code: str = "CC_MAIL_DELIVERY_FAILED"


@dataclass
class TextGenerationError(CollaboratorError):
    """AI text collaborator returned no usable text."""
    code: str = "CC_TEXT_GENERATION_FAILED"


@dataclass
class ClassificationError(CollaboratorError):
    """Document classification collaborator failed."""
    code: str = "CC_CLASSIFICATION_FAILED"


# =============================================================================
# Deadline Errors
# =============================================================================

@dataclass
class DeadlineCalculationError(ClaimCadenceError):
    """Deadline calculation failed."""
    code: str = "CC_DEADLINE_ERROR"


@dataclass
class UnknownDeadlineTypeError(DeadlineCalculationError):
    """No profile is configured for the requested deadline type."""
    code: str = "CC_UNKNOWN_DEADLINE_TYPE"
