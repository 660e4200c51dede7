"""
ClaimCadence Collaborators

HTTP clients for the external services the engine consumes as opaque
collaborators. Each has a Protocol the engine depends on and an httpx
implementation with an explicit per-call timeout.
"""
from __future__ import annotations

from .ai_text import ChatCompletionsTextGenerator, TextGenerator
from .classifier import Classification, DocumentClassifier, HttpDocumentClassifier
from .mail import HttpMailSender, MailMessage, MailSender, Recipient

__all__ = [
    "TextGenerator",
    "ChatCompletionsTextGenerator",
    "Classification",
    "DocumentClassifier",
    "HttpDocumentClassifier",
    "MailMessage",
    "MailSender",
    "HttpMailSender",
    "Recipient",
]
