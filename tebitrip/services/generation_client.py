"""
Client for the generative text endpoint (POST /ai/chat).
"""

import logging
from typing import Optional

import httpx

from tebitrip.config.settings import GenerationSettings, get_settings
from tebitrip.core.exceptions import GenerationParseError, GenerationTransportError

logger = logging.getLogger(__name__)


class GenerationClient:
    """Sends one prompt, returns the generated text. No retries at this layer."""

    def __init__(
        self,
        config: Optional[GenerationSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or get_settings().generation
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.toolkit_url,
                timeout=self.config.timeout_seconds,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def generate_text(self, prompt: str) -> str:
        """
        Send prompt as a single user message.

        Returns:
            The generated text (may be empty)

        Raises:
            GenerationTransportError: Network failure or non-2xx response
            GenerationParseError: The response body is not JSON
        """
        body = {"messages": [{"role": "user", "content": prompt}]}
        logger.info("Sending prompt to generation endpoint")

        try:
            response = await self._get_client().post(self.config.chat_path, json=body)
        except httpx.HTTPError as e:
            logger.warning(f"Generation request failed: {e!r}")
            raise GenerationTransportError(f"AI request failed: {e}") from e

        if not response.is_success:
            logger.warning(f"Generation endpoint returned {response.status_code}")
            raise GenerationTransportError(
                f"AI request failed: {response.reason_phrase or response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationParseError("Generation response is not JSON", raw_text=response.text) from e

        if not isinstance(data, dict):
            raise GenerationParseError("Generation response is not a JSON object", raw_text=response.text)

        for field in ("text", "message", "content"):
            value = data.get(field)
            if isinstance(value, str) and value:
                logger.debug(f"Generated text received ({len(value)} chars)")
                return value
        return ""

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
