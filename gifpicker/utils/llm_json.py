"""Tolerant JSON-object extraction from LLM responses.

Models are asked for bare JSON but regularly wrap it in markdown fences
or add a sentence of preamble.  :func:`extract_json_object` strips both
and hands back the first top-level object, or an empty dict when nothing
parseable is found.  Schema validation is the caller's job.
"""

from __future__ import annotations

import json
import re
from typing import Any

from gifpicker.utils.logging import get_logger

# Matches ```json ... ``` or ``` ... ``` fences; DOTALL lets the body span lines.
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

_logger = get_logger(__name__)


def extract_json_object(response: str) -> dict[str, Any]:
    """Extract and parse a JSON object from an LLM response.

    Parameters
    ----------
    response:
        Raw LLM response text.

    Returns
    -------
    dict
        Parsed JSON object, or an empty dict if parsing fails.
    """
    text = response.strip()

    fence_match = _JSON_FENCE_RE.search(text)
    if fence_match:
        text = fence_match.group(1).strip()

    # Fallback: take the outermost { ... } block
    if not text.startswith("{"):
        brace_start = text.find("{")
        brace_end = text.rfind("}")
        if brace_start != -1 and brace_end > brace_start:
            text = text[brace_start : brace_end + 1]

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        _logger.warning(
            "json_object_parse_failed",
            error=str(exc),
            response_preview=text[:200],
        )
        return {}

    if isinstance(parsed, dict):
        return parsed
    _logger.warning("json_object_parse_not_dict", type=type(parsed).__name__)
    return {}
