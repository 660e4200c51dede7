"""
ClaimCadence Engine Config Loader

Loads and validates engine config files from YAML or JSON and converts
the Pydantic schema into EngineRules.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError, ConfigValidationError
from ..models import DEFAULT_DEADLINE_PROFILES, DeadlineProfile
from .rules import EngineRules
from .schema import (
    SCHEMA_VERSION,
    EngineConfigSchema,
    check_schema_version,
    validate_engine_config,
)


def rules_from_schema(schema: EngineConfigSchema) -> EngineRules:
    """Overlay a validated config on the default rules."""
    defaults = EngineRules()

    profiles = dict(DEFAULT_DEADLINE_PROFILES)
    for name, p in schema.deadline_profiles.items():
        profiles[name] = DeadlineProfile(
            deadline_type=name,
            offset_days=p.offset_days,
            is_business_days=p.business_days,
            label=p.label or name.replace("_", " ").title(),
        )

    def pick(value, default):
        return tuple(value) if value is not None else default

    return EngineRules(
        blocked_keywords=pick(schema.guardrail.blocked_keywords, defaults.blocked_keywords),
        follow_up_task_patterns=pick(
            schema.task_completion.title_patterns, defaults.follow_up_task_patterns
        ),
        stalled_after_days=(
            schema.escalation.stalled_after_days or defaults.stalled_after_days
        ),
        deadline_horizon_days=(
            schema.escalation.deadline_horizon_days
            if schema.escalation.deadline_horizon_days is not None
            else defaults.deadline_horizon_days
        ),
        rd_request_statuses=pick(
            schema.recoverable_depreciation.request_statuses, defaults.rd_request_statuses
        ),
        rd_released_statuses=pick(
            schema.recoverable_depreciation.released_statuses, defaults.rd_released_statuses
        ),
        deadline_profiles=profiles,
        document_batch_size=schema.document_batch_size or defaults.document_batch_size,
    )


def parse_rules(data: dict[str, Any], source: str = "<memory>") -> EngineRules:
    """
    Validate a config dictionary and build EngineRules.

    Raises:
        ConfigValidationError: Unsupported version or schema violation
    """
    if not check_schema_version(data):
        raise ConfigValidationError(
            message=f"Unsupported engine config version in {source}",
            details={
                "found": data.get("schema_version"),
                "supported": SCHEMA_VERSION,
            },
        )
    try:
        schema = validate_engine_config(data)
    except ValidationError as e:
        raise ConfigValidationError(
            message=f"Invalid engine config in {source}",
            details={"errors": e.errors(include_url=False)},
        ) from e
    return rules_from_schema(schema)


def load_rules(path: Union[str, Path]) -> EngineRules:
    """
    Load EngineRules from a YAML or JSON file.

    Raises:
        ConfigurationError: File missing or unparseable
        ConfigValidationError: Content fails validation
    """
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(
            message=f"Engine config not found: {p}",
            details={"path": str(p)},
        )

    try:
        text = p.read_text(encoding="utf-8")
        if p.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(
            message=f"Could not read engine config {p}: {e}",
            details={"path": str(p)},
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError(
            message=f"Engine config {p} must be a mapping",
            details={"path": str(p), "type": type(data).__name__},
        )

    return parse_rules(data, source=str(p))
