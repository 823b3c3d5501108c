"""
Response Parsing
================

Helpers for pulling JSON objects out of model output.
"""

import json
import re

_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n(.*?)\n?```\s*$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code block, if any."""
    text = text.strip()
    match = _FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text


def find_balanced_object(text: str) -> str | None:
    """
    Return the first balanced ``{...}`` substring of text.

    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        start = text.find("{", start + 1)
    return None


def parse_json_object(text: str, recover: bool = False) -> dict:
    """
    Parse model output into a dict.

    Args:
        text: Raw model output
        recover: Fall back to the first balanced object embedded in the text

    Raises:
        ValueError: If no JSON object can be parsed
    """
    cleaned = strip_code_fence(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        if not recover:
            raise ValueError("Response is not valid JSON") from None
        candidate = find_balanced_object(cleaned)
        if candidate is None:
            raise ValueError("Invalid JSON in LLM response") from None
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in LLM response: {e}") from None

    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed
