"""json_extraction.py
Pull JSON out of LLM responses that wrap it in prose or Markdown code fences.
"""
import json
import re
from typing import Any, Dict, Optional

CODE_FENCE_START_REGEX = re.compile(r"^```[a-zA-Z]*\n?")
CODE_FENCE_END_REGEX = re.compile(r"\n?```$")


def strip_code_fences(response_text: str) -> str:
    """Remove surrounding whitespace and a leading/trailing ```json fence."""
    text = response_text.strip()
    text = CODE_FENCE_START_REGEX.sub("", text)
    text = CODE_FENCE_END_REGEX.sub("", text)
    return text.strip()


def clean_llm_json_response(response_text: str) -> Any:
    """
    Normalize and parse a JSON string returned by an LLM into a Python object.

    Steps:
    1. Strip whitespace and Markdown code fences such as ```json ... ```.
    2. Try to parse the cleaned string directly.
    3. Otherwise, return the first well-formed JSON object found anywhere in
       the text (see `extract_first_json_object`).

    Args:
        response_text (str): Raw LLM output expected to contain JSON.

    Returns:
        Any: The parsed value (typically a dict).

    Raises:
        json.JSONDecodeError: If no valid JSON structure can be found.
    """
    text = strip_code_fences(response_text)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        extracted = extract_first_json_object(text)
        if extracted is not None:
            return extracted
        raise  # rethrow if no valid JSON structure was found


def extract_first_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Return the first well-formed ``{...}`` object embedded in `text`, or None.

    Scans every ``{`` left to right and lets the JSON decoder find where the
    object ends, so prose before or after the object (and a second object
    later in the text) does not break parsing.

    Example:
        >>> extract_first_json_object('Here is the result:\\n```json\\n{"score": 72}\\n```')
        {'score': 72}
    """
    if not text:
        return None
    decoder = json.JSONDecoder()
    position = text.find("{")
    while position != -1:
        try:
            value, _ = decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            position = text.find("{", position + 1)
            continue
        if isinstance(value, dict):
            return value
        position = text.find("{", position + 1)
    return None
