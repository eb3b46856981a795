"""Helpers for reading structured answers out of model output."""

import json
import re

_JSON_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class ResponseParseError(ValueError):
    """The model did not return a usable structured response."""


def parse_json_object_from_text(text: str) -> dict | None:
    """
    Extract a JSON object from model output.

    A fenced ```json block wins; otherwise the span between the first "{"
    and the last "}" is tried. Returns None when nothing parses to a dict.
    """
    if not text:
        return None

    candidates = [m.group(1).strip() for m in _JSON_BLOCK.finditer(text)]
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None

