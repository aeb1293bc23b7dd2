"""Chat-completion API HTTP client for the AI advisor"""

import logging
import httpx
from typing import Dict, List, Optional
from spendio_gateway.config import settings
from spendio_gateway.domain.exceptions import (
    AIResponseError,
    AIServiceAuthError,
    AIServiceError,
    AIServiceNotConfiguredError,
    AIServiceRateLimitError,
)
from spendio_gateway.infrastructure.observability.metrics import (
    ai_upstream_failure_counter,
    ai_upstream_latency_histogram,
)

logger = logging.getLogger(__name__)


class ChatCompletionClient:
    """Client for the external chat-completion API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.openai_model
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """
        Send messages and return the assistant's reply text.

        Raises:
            AIServiceNotConfiguredError: No API key configured
            AIServiceAuthError: API rejected the key (401)
            AIServiceRateLimitError: API rate limit reached (429)
            AIResponseError: Empty, unparseable or content-less response
            AIServiceError: Timeout, network failure or other HTTP error
        """
        if not self.api_key:
            ai_upstream_failure_counter.labels(reason="not_configured").inc()
            raise AIServiceNotConfiguredError("Chat-completion API key not configured")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with ai_upstream_latency_histogram.time():
                    response = await client.post(
                        f"{self.base_url}/chat/completions",
                        headers={"Authorization": f"Bearer {self.api_key}"},
                        json={
                            "model": self.model,
                            "messages": messages,
                            "temperature": temperature,
                            "max_tokens": max_tokens,
                        },
                    )
                response.raise_for_status()
            except httpx.TimeoutException as e:
                ai_upstream_failure_counter.labels(reason="timeout").inc()
                raise AIServiceError(f"Chat-completion API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.error(f"Chat-completion API error ({status}): {e.response.text}")
                if status == 401:
                    ai_upstream_failure_counter.labels(reason="auth").inc()
                    raise AIServiceAuthError("Chat-completion API rejected credentials") from e
                if status == 429:
                    ai_upstream_failure_counter.labels(reason="rate_limited").inc()
                    raise AIServiceRateLimitError("Chat-completion API rate limited") from e
                ai_upstream_failure_counter.labels(reason="upstream").inc()
                raise AIServiceError(f"Chat-completion API error: {status}") from e
            except httpx.RequestError as e:
                ai_upstream_failure_counter.labels(reason="upstream").inc()
                raise AIServiceError(f"Chat-completion API unreachable: {e}") from e

        if not response.text.strip():
            ai_upstream_failure_counter.labels(reason="invalid_response").inc()
            raise AIResponseError("Empty response from AI service")

        try:
            data = response.json()
        except ValueError as e:
            ai_upstream_failure_counter.labels(reason="invalid_response").inc()
            raise AIResponseError("Invalid response from AI service", str(e)) from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not content:
            ai_upstream_failure_counter.labels(reason="invalid_response").inc()
            raise AIResponseError("No response from AI service", f"No message content in: {data}")

        return content
