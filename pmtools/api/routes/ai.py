"""AI enhancement proxy - POST /api/ai.

Forwards a single-turn request to the Anthropic Messages API with the
server-held key. The upstream JSON is returned verbatim on success; on
failure the upstream status is forwarded with an ``{"error"}`` body.
"""

import logging
import time
from typing import Annotated, Any

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import Field

from pmtools.api.deps import get_upstream_client
from pmtools.api.errors import ApiError
from pmtools.config import Settings, get_settings
from pmtools.errors import CredentialMissing
from pmtools.llm.client import create_message, upstream_error_message
from pmtools.models.common import CamelModel
from pmtools.utils.metrics import metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ai"])


class AIRequest(CamelModel):
    """Request body for POST /api/ai."""

    prompt: str = Field(..., description="Serialized document (user turn)")
    system_prompt: str = Field(..., description="Reviewer instructions")


@router.post("/ai")
async def proxy_ai(
    request: AIRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    client: Annotated[httpx.AsyncClient | None, Depends(get_upstream_client)],
) -> JSONResponse:
    """Proxy one enhancement request upstream.

    Returns:
        Upstream JSON verbatim; 503 without a configured key; 502 when the
        upstream is unreachable; the upstream status on upstream errors
    """
    start = time.perf_counter()

    def elapsed_ms() -> float:
        return (time.perf_counter() - start) * 1000

    try:
        response = await create_message(
            request.prompt, request.system_prompt, settings=settings, client=client
        )
    except CredentialMissing as e:
        metrics.record_ai_request("no_credentials", elapsed_ms())
        raise ApiError(503, str(e))
    except httpx.TransportError as e:
        metrics.record_ai_request("unreachable", elapsed_ms())
        logger.warning(f"Upstream LLM unreachable: {e}")
        raise ApiError(502, f"Could not reach the AI provider: {type(e).__name__}")

    try:
        body: Any = response.json()
    except ValueError:
        body = None

    if not response.is_success:
        metrics.record_ai_request("upstream_error", elapsed_ms())
        message = upstream_error_message(body)
        logger.warning(f"Upstream LLM returned {response.status_code}: {message}")
        raise ApiError(response.status_code, message)

    if body is None:
        metrics.record_ai_request("upstream_error", elapsed_ms())
        raise ApiError(502, "AI provider returned a non-JSON response")

    metrics.record_ai_request("success", elapsed_ms())
    return JSONResponse(content=body)
