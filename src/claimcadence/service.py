"""
ClaimCadence Service Wiring

Builds the store, the collaborators and the engine entry points from
Settings. Shared by the HTTP service and the CLI.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .collaborators import (
    ChatCompletionsTextGenerator,
    DocumentClassifier,
    HttpDocumentClassifier,
    HttpMailSender,
    MailSender,
    TextGenerator,
)
from .config import EngineRules, Settings, load_rules
from .engine import AutomationRunner, FollowUpScheduler
from .exceptions import ConfigurationError
from .store import ClaimStore, PostgrestClaimStore

logger = logging.getLogger(__name__)


def load_engine_rules(settings: Settings) -> EngineRules:
    """Rules from the configured engine file, or the built-in defaults."""
    if not settings.engine_config_path:
        return EngineRules()
    rules = load_rules(settings.engine_config_path)
    logger.info("Loaded engine rules from %s", settings.engine_config_path)
    return rules


@dataclass
class EngineServices:
    """Everything one engine invocation needs."""
    settings: Settings
    store: ClaimStore
    mail: MailSender
    text_generator: Optional[TextGenerator] = None
    classifier: Optional[DocumentClassifier] = None
    rules: EngineRules = field(default_factory=EngineRules)

    def automation_runner(self) -> AutomationRunner:
        return AutomationRunner(
            self.store,
            self.mail,
            classifier=self.classifier,
            rules=self.rules,
            tick_deadline_seconds=self.settings.tick_deadline_seconds,
        )

    def follow_up_scheduler(self) -> FollowUpScheduler:
        if self.text_generator is None:
            raise ConfigurationError(
                message="Follow-ups need an AI text collaborator; set CLAIMCADENCE_AI_API_KEY",
            )
        return FollowUpScheduler(
            self.store,
            self.mail,
            self.text_generator,
            rules=self.rules,
            inbound_email_domain=self.settings.inbound_email_domain,
            sender_signature=self.settings.sender_signature,
        )


def build_services(settings: Settings) -> EngineServices:
    """
    Wire the hosted store and HTTP collaborators.

    The store and mail endpoints are required. The AI and classifier
    collaborators are optional: without them follow-ups are unavailable
    and only image files are classified.
    """
    settings.require("store_url", "store_key", "mail_url")
    timeout = settings.http_timeout_seconds

    store = PostgrestClaimStore(settings.store_url, settings.store_key, timeout=timeout)
    mail = HttpMailSender(settings.mail_url, settings.collaborator_key, timeout=timeout)

    text_generator = None
    if settings.ai_api_key:
        text_generator = ChatCompletionsTextGenerator(
            settings.ai_url,
            settings.ai_api_key,
            model=settings.ai_model,
            timeout=timeout,
        )
    else:
        logger.warning("No AI key configured; follow-ups are disabled")

    classifier = None
    if settings.classifier_url:
        classifier = HttpDocumentClassifier(
            settings.classifier_url, settings.collaborator_key, timeout=timeout
        )

    return EngineServices(
        settings=settings,
        store=store,
        mail=mail,
        text_generator=text_generator,
        classifier=classifier,
        rules=load_engine_rules(settings),
    )
