"""Document classification collaborator."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from ..exceptions import ClassificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    label: str
    confidence: float
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class DocumentClassifier(Protocol):
    def classify(self, file_id: str) -> Classification:
        """Classify one stored file; raise ClassificationError on failure."""
        ...


class HttpDocumentClassifier:
    """Posts {"fileId": ...} and reads {"classification", "confidence"}."""

    def __init__(
        self,
        endpoint_url: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        client: Optional[httpx.Client] = None,
    ):
        self.endpoint_url = endpoint_url
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.Client(headers=headers, timeout=timeout)

    def classify(self, file_id: str) -> Classification:
        try:
            response = self._client.post(self.endpoint_url, json={"fileId": file_id})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ClassificationError(
                message=f"Classifier returned HTTP {e.response.status_code} for {file_id}",
                details={"file_id": file_id},
            ) from e
        except httpx.RequestError as e:
            raise ClassificationError(
                message=f"Classifier unreachable: {e}",
                details={"file_id": file_id},
            ) from e
        except ValueError as e:
            raise ClassificationError(
                message=f"Classifier returned invalid JSON for {file_id}",
                details={"file_id": file_id},
            ) from e

        label = data.get("classification")
        if not label:
            raise ClassificationError(
                message=f"Classifier returned no label for {file_id}",
                details={"file_id": file_id},
            )
        return Classification(
            label=label,
            confidence=float(data.get("confidence") or 0.0),
            metadata={k: v for k, v in data.items() if k not in ("classification", "confidence")},
        )

    def close(self) -> None:
        self._client.close()
