"""AI text collaborator: OpenAI-compatible chat completions returning plain prose."""
from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

import httpx

from ..exceptions import TextGenerationError

logger = logging.getLogger(__name__)


@runtime_checkable
class TextGenerator(Protocol):
    def generate(self, system_prompt: str, user_prompt: str) -> str:
        """Return generated text; raise TextGenerationError on failure."""
        ...


class ChatCompletionsTextGenerator:
    """
    Text generation over any /chat/completions endpoint.

    Only the first choice's message content is used; no structured
    parsing is applied.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: Optional[float] = 0.7,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        self.model = model
        self.temperature = temperature
        self._url = base_url.rstrip("/") + "/chat/completions"
        self._client = client or httpx.Client(
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature

        try:
            response = self._client.post(self._url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("AI text HTTP error: %s", e)
            raise TextGenerationError(
                message=f"AI collaborator returned HTTP {e.response.status_code}",
                details={"body": e.response.text[:500]},
            ) from e
        except httpx.RequestError as e:
            logger.error("AI text request error: %s", e)
            raise TextGenerationError(message=f"AI collaborator unreachable: {e}") from e
        except ValueError as e:
            raise TextGenerationError(message="AI collaborator returned invalid JSON") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise TextGenerationError(
                message="AI collaborator response had no message content",
                details={"response": str(data)[:500]},
            ) from None

        if not content or not content.strip():
            raise TextGenerationError(message="AI collaborator returned empty text")
        return content.strip()

    def close(self) -> None:
        self._client.close()
