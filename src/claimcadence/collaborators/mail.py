"""Mail collaborator: sends claim email through the CRM's send-email endpoint."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from ..exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


@dataclass
class Recipient:
    email: str
    name: Optional[str] = None
    type: Optional[str] = None


@dataclass
class MailMessage:
    """One outbound claim email."""
    claim_id: str
    subject: str
    body: str
    recipients: list[Recipient] = field(default_factory=list)
    claim_email_cc: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "recipients": [
                {k: v for k, v in vars(r).items() if v is not None}
                for r in self.recipients
            ],
            "subject": self.subject,
            "body": self.body,
            "claimId": self.claim_id,
        }
        if self.claim_email_cc:
            payload["claimEmailCc"] = self.claim_email_cc
        return payload


@runtime_checkable
class MailSender(Protocol):
    def send(self, message: MailMessage) -> None:
        """Send a message; raise MailDeliveryError on any failure."""
        ...


class HttpMailSender:
    """Delivers claim email via an HTTP send-email endpoint."""

    def __init__(
        self,
        endpoint_url: str,
        api_key: Optional[str] = None,
        timeout: float = 20.0,
        client: Optional[httpx.Client] = None,
    ):
        self.endpoint_url = endpoint_url
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.Client(headers=headers, timeout=timeout)

    def send(self, message: MailMessage) -> None:
        try:
            response = self._client.post(self.endpoint_url, json=message.to_payload())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("Mail HTTP error for claim %s: %s", message.claim_id, e)
            raise MailDeliveryError(
                message=f"Mail collaborator returned HTTP {e.response.status_code}",
                details={"body": e.response.text[:500]},
                claim_id=message.claim_id,
            ) from e
        except httpx.RequestError as e:
            logger.error("Mail request error for claim %s: %s", message.claim_id, e)
            raise MailDeliveryError(
                message=f"Mail collaborator unreachable: {e}",
                claim_id=message.claim_id,
            ) from e

    def close(self) -> None:
        self._client.close()
