"""Recover a JSON object from raw model output.

Strategies, first success wins:
1. strict JSON parse of the whole reply
2. strip one leading and one trailing Markdown code fence, then parse
3. parse the substring between the first ``{`` and the last ``}``

If all three fail a MalformedResponse is raised carrying the original text;
no partial or guessed result is ever returned.
"""

import json
import logging
import re
from typing import Any

from pmtools.errors import MalformedResponse
from pmtools.models.enhancement import EnhancementResult, PRDEnhancementResult

logger = logging.getLogger(__name__)

MALFORMED_MESSAGE = "AI returned an unexpected response format. Please try again."

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.MULTILINE)
_TRAILING_FENCE = re.compile(r"\s*```\s*\Z")


def strip_code_fence(text: str) -> str:
    """Remove a single leading and trailing Markdown code fence."""
    stripped = _LEADING_FENCE.sub("", text.strip(), count=1)
    return _TRAILING_FENCE.sub("", stripped, count=1)


def _try_load(candidate: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(candidate)
    except json.JSONDecodeError:
        return False, None


def parse_response(text: str) -> Any:
    """Parse raw model output into JSON.

    Raises:
        MalformedResponse: If no strategy yields valid JSON
    """
    ok, value = _try_load(text)
    if ok:
        return value

    ok, value = _try_load(strip_code_fence(text))
    if ok:
        logger.debug("Parsed model output after stripping code fence")
        return value

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        ok, value = _try_load(text[start : end + 1])
        if ok:
            logger.debug("Parsed model output by brace boundary extraction")
            return value

    logger.warning(f"Could not parse model output ({len(text)} chars) as JSON")
    raise MalformedResponse(MALFORMED_MESSAGE, raw_text=text)


def parse_review_result(text: str) -> EnhancementResult:
    """Parse raw model output into Code Review suggestions."""
    return EnhancementResult.from_raw(parse_response(text))


def parse_prd_result(text: str) -> PRDEnhancementResult:
    """Parse raw model output into PRD suggestions."""
    return PRDEnhancementResult.from_raw(parse_response(text))
