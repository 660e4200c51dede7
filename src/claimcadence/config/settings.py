"""
ClaimCadence Runtime Settings

Environment-driven settings for the service, the CLI and the HTTP
collaborators. Every variable is prefixed CLAIMCADENCE_.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from ..exceptions import ConfigurationError


ENV_PREFIX = "CLAIMCADENCE_"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or value == "":
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(
            message=f"{ENV_PREFIX}{name} must be a number, got {raw!r}",
        ) from None


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings.

    Attributes:
        cron_secret: Shared secret expected in the x-cron-secret header
        store_url: Base URL of the PostgREST-compatible store
        store_key: Service key for the store
        mail_url: Mail collaborator endpoint
        ai_url: OpenAI-compatible base URL for text generation
        ai_api_key: Bearer key for the AI collaborator
        ai_model: Model name sent to the AI collaborator
        classifier_url: Document classification collaborator endpoint
        collaborator_key: Bearer key for the mail/classifier collaborators
        inbound_email_domain: Domain of the per-claim inbound aliases
        sender_signature: Sign-off used in generated follow-ups
        http_timeout_seconds: Per-call timeout for every outbound request
        tick_deadline_seconds: Budget for one batch tick
        engine_config_path: Optional YAML/JSON engine rules file
        log_level: Root log level
    """
    cron_secret: Optional[str] = None
    store_url: Optional[str] = None
    store_key: Optional[str] = None
    mail_url: Optional[str] = None
    ai_url: str = "https://api.openai.com/v1"
    ai_api_key: Optional[str] = None
    ai_model: str = "gpt-4o-mini"
    classifier_url: Optional[str] = None
    collaborator_key: Optional[str] = None
    inbound_email_domain: str = "claims.example.com"
    sender_signature: str = "Claims Team"
    http_timeout_seconds: float = 20.0
    tick_deadline_seconds: float = 240.0
    engine_config_path: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from CLAIMCADENCE_* environment variables."""
        return cls(
            cron_secret=_env("CRON_SECRET"),
            store_url=_env("STORE_URL"),
            store_key=_env("STORE_KEY"),
            mail_url=_env("MAIL_URL"),
            ai_url=_env("AI_URL", cls.ai_url),
            ai_api_key=_env("AI_API_KEY"),
            ai_model=_env("AI_MODEL", cls.ai_model),
            classifier_url=_env("CLASSIFIER_URL"),
            collaborator_key=_env("COLLABORATOR_KEY"),
            inbound_email_domain=_env("INBOUND_EMAIL_DOMAIN", cls.inbound_email_domain),
            sender_signature=_env("SENDER_SIGNATURE", cls.sender_signature),
            http_timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", cls.http_timeout_seconds),
            tick_deadline_seconds=_env_float("TICK_DEADLINE_SECONDS", cls.tick_deadline_seconds),
            engine_config_path=_env("ENGINE_CONFIG"),
            log_level=_env("LOG_LEVEL", cls.log_level).upper(),
        )

    def require(self, *names: str) -> None:
        """Raise ConfigurationError if any named setting is unset."""
        missing = [n for n in names if not getattr(self, n)]
        if missing:
            raise ConfigurationError(
                message="Missing required settings: "
                + ", ".join(ENV_PREFIX + n.upper() for n in missing),
                details={"missing": missing},
            )
