"""LLM collaborator: the server-side Anthropic call and the client-side proxy.

Security: the API key is only read server-side from settings, never sent
by or to the browser/editor side.
"""

import logging
from typing import Any, Protocol

import httpx

from pmtools.config import Settings, get_settings
from pmtools.errors import CredentialMissing, EnhancementError, NetworkError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "AI enhancement failed"
EMPTY_RESPONSE = "Empty response from AI"
MISSING_KEY = "ANTHROPIC_API_KEY is not configured on the server"


async def create_message(
    prompt: str,
    system_prompt: str,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """Send one single-turn request to the Anthropic Messages API.

    Args:
        prompt: Serialized document (user turn)
        system_prompt: Reviewer instructions
        settings: Settings override (defaults to cached settings)
        client: Optional httpx client (for testing with mocks)

    Returns:
        Raw upstream response; status is not checked here so the caller can
        forward it

    Raises:
        CredentialMissing: If no API key is configured
        httpx.TransportError: If the upstream cannot be reached
    """
    settings = settings or get_settings()
    if settings.anthropic_api_key is None or not settings.anthropic_api_key.get_secret_value():
        raise CredentialMissing(MISSING_KEY)

    headers = {
        "x-api-key": settings.anthropic_api_key.get_secret_value(),
        "anthropic-version": settings.anthropic_version,
        "content-type": "application/json",
    }
    payload = {
        "model": settings.anthropic_model,
        "max_tokens": settings.anthropic_max_tokens,
        "system": system_prompt,
        "messages": [{"role": "user", "content": prompt}],
    }

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=settings.upstream_timeout_s)
        close_client = True

    try:
        return await client.post(
            f"{settings.anthropic_base_url.rstrip('/')}/v1/messages",
            headers=headers,
            json=payload,
        )
    finally:
        if close_client:
            await client.aclose()


def upstream_error_message(body: Any, default: str = DEFAULT_ERROR) -> str:
    """Pull a human-readable message out of an error body.

    Understands both ``{"error": "..."}`` (our proxy) and
    ``{"error": {"message": "..."}}`` (Anthropic).
    """
    if not isinstance(body, dict):
        return default
    error = body.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return default


def extract_text(body: Any) -> str | None:
    """Reply text at ``content[0].text``, or None when absent."""
    if not isinstance(body, dict):
        return None
    content = body.get("content")
    if not isinstance(content, list) or not content or not isinstance(content[0], dict):
        return None
    text = content[0].get("text")
    return text if isinstance(text, str) and text else None


class CompletionClient(Protocol):
    """Protocol for anything that turns a prompt into raw model text."""

    async def complete(self, prompt: str, system_prompt: str) -> str:
        """Return the model's reply text.

        Raises:
            NetworkError: Endpoint unreachable
            CredentialMissing: No key configured server-side
            UpstreamError: Non-2xx answer
            EnhancementError: Reply carried no text
        """
        ...


class ProxyCompletionClient:
    """Completion client that goes through the ``POST /api/ai`` proxy."""

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        """Initialize proxy client.

        Args:
            base_url: API server root (defaults to ``settings.api_base_url``)
            client: Optional httpx client (for testing with mocks)
            timeout: Request timeout in seconds
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.client = client
        self.timeout = timeout if timeout is not None else settings.upstream_timeout_s

    async def complete(self, prompt: str, system_prompt: str) -> str:
        close_client = False
        client = self.client
        if client is None:
            client = httpx.AsyncClient(timeout=self.timeout)
            close_client = True

        try:
            response = await client.post(
                f"{self.base_url}/api/ai",
                json={"prompt": prompt, "systemPrompt": system_prompt},
            )
        except httpx.TransportError as e:
            logger.warning(f"AI proxy unreachable: {e}")
            raise NetworkError(f"Could not reach the AI service: {type(e).__name__}") from e
        finally:
            if close_client:
                await client.aclose()

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code == 503:
            raise CredentialMissing(upstream_error_message(body, MISSING_KEY))
        if not response.is_success:
            raise UpstreamError(upstream_error_message(body), status_code=response.status_code)

        text = extract_text(body)
        if text is None:
            raise EnhancementError(EMPTY_RESPONSE)
        return text
