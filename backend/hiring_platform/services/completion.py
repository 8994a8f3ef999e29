"""
Client for the hosted LLM (OpenRouter chat-completions API).

Both the resume analyzer and the chat assistant talk to the provider only
through `CompletionClient.complete()`. Failures surface as typed
`UpstreamServiceError` subclasses; nothing here returns placeholder text.
"""
import asyncio
import logging
from typing import Dict, List, Optional

import aiohttp

from hiring_platform.config import settings
from hiring_platform.errors import (
    UpstreamServiceError,
    UpstreamTimeoutError,
    UpstreamRateLimitError,
    MalformedResponseError,
)

logger = logging.getLogger(__name__)

ChatMessages = List[Dict[str, str]]


class CompletionClient:
    """Async chat-completions client with timeout, retry/backoff and a concurrency cap."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        app_name: str,
        referer: str,
        timeout_s: float = 30.0,
        max_retries: int = 2,
        backoff_s: float = 0.5,
        max_concurrency: int = 4,
    ):
        self.api_key = api_key
        self.url = f"{base_url.rstrip('/')}/chat/completions"
        self.model = model
        self.app_name = app_name
        self.referer = referer
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.backoff_s = backoff_s
        self.max_concurrency = max_concurrency
        self._semaphore: Optional[asyncio.Semaphore] = None

    @classmethod
    def from_settings(cls) -> "CompletionClient":
        return cls(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            model=settings.ai_model,
            app_name=settings.ai_app_name,
            referer=settings.ai_referer,
            timeout_s=settings.ai_timeout_seconds,
            max_retries=settings.ai_max_retries,
            backoff_s=settings.ai_backoff_seconds,
            max_concurrency=settings.ai_max_concurrency,
        )

    @property
    def semaphore(self) -> asyncio.Semaphore:
        # Created on first use so it belongs to the running event loop
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        return self._semaphore

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.referer,
            "X-Title": self.app_name,
        }

    async def complete(self, messages: ChatMessages, *, json_mode: bool = False) -> str:
        """
        Send a conversation to the provider and return the assistant's reply text.

        Args:
            messages: [{"role": ..., "content": ...}, ...] in conversation order
            json_mode: Ask the provider for a JSON object response

        Returns:
            The content of the first choice's message

        Raises:
            UpstreamServiceError: provider not configured, unreachable or erroring
            UpstreamTimeoutError: every attempt timed out
            UpstreamRateLimitError: provider kept answering 429
            MalformedResponseError: response had no message content
        """
        if not self.api_key:
            raise UpstreamServiceError("AI provider is not configured", status_code=503, retryable=False)

        payload = {"model": self.model, "messages": messages}
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        attempt = 0
        while True:
            try:
                async with self.semaphore:
                    data = await self._post(payload)
                return self._extract_content(data)
            except UpstreamServiceError as e:
                if not e.retryable or attempt >= self.max_retries:
                    raise
                delay = getattr(e, "retry_after", None) or self.backoff_s * (2 ** attempt)
                attempt += 1
                logger.warning(
                    f"AI request failed ({type(e).__name__}: {e.message}), "
                    f"retry {attempt}/{self.max_retries} in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

    async def _post(self, payload: dict) -> dict:
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, json=payload, headers=self._headers()) as resp:
                    if resp.status == 429:
                        error = UpstreamRateLimitError()
                        error.retry_after = _parse_retry_after(resp.headers.get("Retry-After"))
                        raise error
                    if resp.status >= 500:
                        raise UpstreamServiceError(
                            f"AI service returned status {resp.status}", retryable=True
                        )
                    if resp.status >= 400:
                        body = await resp.text(errors="ignore")
                        logger.error(f"AI request rejected: status={resp.status} body={body[:200]!r}")
                        raise UpstreamServiceError(f"AI service rejected the request (status {resp.status})")
                    try:
                        return await resp.json(content_type=None)
                    except ValueError:
                        raise MalformedResponseError("AI service returned a non-JSON body")
        except asyncio.TimeoutError:
            raise UpstreamTimeoutError()
        except aiohttp.ClientError as e:
            raise UpstreamServiceError(f"AI service unreachable: {type(e).__name__}", retryable=True)

    @staticmethod
    def _extract_content(data: dict) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise MalformedResponseError("AI service response had no message content")
        if not isinstance(content, str):
            raise MalformedResponseError("AI service response had no message content")
        return content


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Numeric Retry-After header in seconds; HTTP-date form is ignored."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


completion_client = CompletionClient.from_settings()


def get_completion_client() -> CompletionClient:
    """FastAPI dependency; overridden in tests with a fake client."""
    return completion_client
