"""
ClaimCadence Engine Config Schemas

Pydantic models for validating engine config YAML/JSON files.

An engine config file overrides the built-in rules: guardrail keywords,
follow-up task title patterns, escalation windows, recoverable
depreciation status strings, and deadline-type profiles. Every section
is optional; omitted sections keep their defaults.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check the major version only
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


SCHEMA_VERSION = "1.0.0"


class DeadlineProfileSchema(BaseModel):
    """One deadline-type profile."""
    label: str = ""
    offset_days: int = Field(..., ge=0)
    business_days: bool = False


class GuardrailSchema(BaseModel):
    """Outbound draft guardrail."""
    blocked_keywords: Optional[list[str]] = None

    @field_validator("blocked_keywords")
    @classmethod
    def _lower(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        cleaned = [kw.strip().lower() for kw in v if kw and kw.strip()]
        if not cleaned:
            raise ValueError("blocked_keywords must contain at least one phrase")
        return cleaned


class EscalationSchema(BaseModel):
    """Escalation detector windows."""
    stalled_after_days: Optional[int] = Field(default=None, ge=1)
    deadline_horizon_days: Optional[int] = Field(default=None, ge=0)


class TaskCompletionSchema(BaseModel):
    """Task auto-completer matching."""
    title_patterns: Optional[list[str]] = None


class RecoverableDepreciationSchema(BaseModel):
    """Claim status strings that drive the RD follow-up track."""
    request_statuses: Optional[list[str]] = None
    released_statuses: Optional[list[str]] = None


class EngineConfigSchema(BaseModel):
    """Top-level engine config file."""
    schema_version: str = SCHEMA_VERSION
    guardrail: GuardrailSchema = Field(default_factory=GuardrailSchema)
    escalation: EscalationSchema = Field(default_factory=EscalationSchema)
    task_completion: TaskCompletionSchema = Field(default_factory=TaskCompletionSchema)
    recoverable_depreciation: RecoverableDepreciationSchema = Field(
        default_factory=RecoverableDepreciationSchema
    )
    deadline_profiles: dict[str, DeadlineProfileSchema] = Field(default_factory=dict)
    document_batch_size: Optional[int] = Field(default=None, ge=1)

    model_config = {"extra": "forbid"}


def validate_engine_config(data: dict[str, Any]) -> EngineConfigSchema:
    """
    Validate an engine config dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return EngineConfigSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """Check the major version of a config file against SCHEMA_VERSION."""
    file_version = str(data.get("schema_version", SCHEMA_VERSION))
    return file_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
