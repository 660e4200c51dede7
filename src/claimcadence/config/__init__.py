"""
ClaimCadence Configuration

Two layers:
- Settings: environment variables (endpoints, secrets, timeouts)
- EngineRules: guardrail and scheduling rules, optionally loaded from a
  YAML/JSON engine config file

Usage:
    from claimcadence.config import Settings, load_rules

    settings = Settings.from_env()
    rules = load_rules(settings.engine_config_path) if settings.engine_config_path else EngineRules()
"""
from __future__ import annotations

from .loader import load_rules, parse_rules, rules_from_schema
from .rules import (
    DEFAULT_BLOCKED_KEYWORDS,
    DEFAULT_FOLLOW_UP_TASK_PATTERNS,
    RD_RELEASED_STATUSES,
    RD_REQUEST_STATUSES,
    EngineRules,
    status_matches,
)
from .schema import SCHEMA_VERSION, EngineConfigSchema, validate_engine_config
from .settings import Settings

__all__ = [
    "Settings",
    "EngineRules",
    "DEFAULT_BLOCKED_KEYWORDS",
    "DEFAULT_FOLLOW_UP_TASK_PATTERNS",
    "RD_REQUEST_STATUSES",
    "RD_RELEASED_STATUSES",
    "status_matches",
    "SCHEMA_VERSION",
    "EngineConfigSchema",
    "validate_engine_config",
    "load_rules",
    "parse_rules",
    "rules_from_schema",
]
