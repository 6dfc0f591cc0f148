"""
Turn model output that was asked to be "JSON only" into parsed data.

Models regularly wrap JSON in markdown fences, leave trailing commas, forget
commas between list items, or use single quotes. Well-formed output takes the
fast path through ``json.loads``; everything else goes through ``json_repair``.
Text with broken nesting is rejected outright instead of being auto-closed,
so callers never receive a half-built structure.
"""
import json
import logging
import re
from typing import Any, Optional

from json_repair import repair_json

from .errors import MalformedResponse

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```$")
_FENCED_BLOCK = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\r?\n(.*?)```", re.DOTALL)
_PAIRS = {"}": "{", "]": "["}
# single quotes only open a string where a key or value can begin
_VALUE_START = ("", "{", "[", ",", ":")


def strip_code_fence(text: str) -> str:
    cleaned = (text or "").strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def has_balanced_brackets(text: str) -> bool:
    """True when every ``{``/``[`` outside strings and comments is closed by its partner."""
    stack = []
    quote: Optional[str] = None
    prev = ""
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
                prev = ch
        elif ch == "\"" or (ch == "'" and prev in _VALUE_START):
            quote = ch
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                return False
            i = end + 2
            continue
        else:
            if ch in "{[":
                stack.append(ch)
            elif ch in "}]":
                if not stack or stack.pop() != _PAIRS[ch]:
                    return False
            if not ch.isspace():
                prev = ch
        i += 1
    return not stack and quote is None


def _json_candidate(text: str) -> str:
    """Drop prose around the JSON: prefer a fenced block, else start at the first bracket."""
    block = _FENCED_BLOCK.search(text or "")
    cleaned = block.group(1).strip() if block else strip_code_fence(text)
    starts = [i for i in (cleaned.find("{"), cleaned.find("[")) if i != -1]
    return cleaned[min(starts):] if starts else cleaned


def parse_model_json(text: str, context: str = "AI response") -> Any:
    """Parse JSON produced by a model, repairing common syntax slips.

    Raises MalformedResponse(context) when the text cannot be turned into an
    object or array.
    """
    cleaned = strip_code_fence(text)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    candidate = _json_candidate(text)
    if candidate and has_balanced_brackets(candidate):
        try:
            repaired = repair_json(candidate)
            value = json.loads(repaired)
            if isinstance(value, (dict, list)):
                logger.info("Repaired malformed JSON for %s", context)
                return value
        except (json.JSONDecodeError, ValueError) as e:
            logger.debug("JSON repair raised for %s: %s", context, e)

    logger.error("Unparseable JSON for %s. Raw: %r Cleaned: %r", context, text, cleaned)
    raise MalformedResponse(context)
