"""Thin async client for the Generative Language ``generateContent`` endpoint.

Each call is a single POST; there are no retries. Transport problems are
raised as ``TransportError`` and responses without usable text as
``ResponseParseError``. The stages translate both into their own error types.
"""

from typing import Any, Dict, List, Optional
import httpx
import logging

from app.core.config import PipelineConfig
from app.core.errors import ResponseParseError, TransportError

logger = logging.getLogger(__name__)


class GenerativeLanguageClient:
    """Client for POSTing prompts to a generative language model"""

    def __init__(
        self,
        config: PipelineConfig,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            config: API credentials, base URL, model and timeout
            http_client: Pre-built client (tests inject one with a mock transport)
        """
        self.config = config
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=config.timeout_seconds
        )

    @property
    def endpoint(self) -> str:
        return f"{self.config.api_base_url.rstrip('/')}/models/{self.config.model}:generateContent"

    @staticmethod
    def build_payload(parts: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Wrap request parts into a single user turn"""
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": parts
                }
            ]
        }

    async def generate_content(self, parts: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Send one generateContent request and return the decoded JSON body

        Raises:
            TransportError: On connection failures, timeouts and HTTP error statuses
            ResponseParseError: If the body is not a JSON object
        """
        payload = self.build_payload(parts)

        try:
            response = await self.http_client.post(
                self.endpoint,
                params={"key": self.config.api_key},
                json=payload,
                headers={"Content-Type": "application/json"}
            )
        except httpx.HTTPError as e:
            reason = str(e) or e.__class__.__name__
            logger.error(f"Request to {self.config.model} failed: {reason}")
            raise TransportError(reason) from e

        if response.status_code >= 400:
            reason = f"HTTP {response.status_code}: {self._error_detail(response)}"
            logger.error(f"Model {self.config.model} returned an error: {reason}")
            raise TransportError(reason)

        try:
            body = response.json()
        except ValueError as e:
            logger.warning(f"Model {self.config.model} returned a non-JSON body")
            raise ResponseParseError() from e

        if not isinstance(body, dict):
            raise ResponseParseError()

        return body

    async def generate_text(self, parts: List[Dict[str, Any]]) -> str:
        """Send a request and return the text of the first candidate"""
        body = await self.generate_content(parts)
        return self.extract_text(body)

    @staticmethod
    def extract_text(body: Dict[str, Any]) -> str:
        """
        Pull candidates[0].content.parts[0].text out of a response body

        The text is returned verbatim, including an empty string.

        Raises:
            ResponseParseError: If any level of that structure is missing
        """
        try:
            candidates = body["candidates"]
            content = candidates[0]["content"]
            text = content["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ResponseParseError() from e

        if not isinstance(text, str):
            raise ResponseParseError()

        return text

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            error = response.json().get("error", {})
            message = error.get("message")
        except (ValueError, AttributeError):
            message = None
        return message or response.reason_phrase or "request failed"

    async def aclose(self):
        """Close the underlying HTTP client if this instance created it"""
        if self._owns_client:
            await self.http_client.aclose()
