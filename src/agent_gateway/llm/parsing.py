"""Helpers for pulling JSON payloads and SQL out of raw LLM replies."""

import json
import re
from typing import Any

THINK_TAG_RE = re.compile(r"<(think|reasoning)>.*?</\1>", flags=re.DOTALL)
CODE_FENCE_RE = re.compile(r"^```[\w-]*\s*|\s*```$")


def strip_reasoning(response_text: str) -> str:
    """Remove ``<think>``/``<reasoning>`` blocks some models prepend."""
    cleaned = THINK_TAG_RE.sub("", response_text).strip()
    return cleaned or response_text


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_RE.sub("", text.strip()).strip()


def extract_json_from_response(response_text: str) -> Any:
    """Extract the outermost JSON object from an LLM reply.

    Raises:
        json.JSONDecodeError: If no valid JSON object is found.
    """
    cleaned_text = strip_code_fences(strip_reasoning(response_text))

    start_idx = cleaned_text.find("{")
    if start_idx == -1:
        raise json.JSONDecodeError("No JSON object found", cleaned_text, 0)

    # balanced-brace scan that ignores braces inside strings
    depth = 0
    in_string = False
    escape_next = False
    end_idx = -1
    for idx in range(start_idx, len(cleaned_text)):
        char = cleaned_text[idx]
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                end_idx = idx + 1
                break

    if end_idx == -1:
        match = re.search(r"\{.*\}", cleaned_text, flags=re.DOTALL)
        candidate = match.group(0) if match else cleaned_text[start_idx:]
    else:
        candidate = cleaned_text[start_idx:end_idx]

    return json.loads(candidate)
