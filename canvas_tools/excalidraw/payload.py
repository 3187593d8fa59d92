"""JSON payload loading for canvas commands."""

import json
from pathlib import Path
from typing import Any, Optional


class PayloadError(ValueError):
    """Malformed JSON or an unexpected top-level shape."""


def _parse(text: str, source: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise PayloadError(f"Invalid JSON in {source}: {e}") from e


def load_json(data: Optional[str] = None, file: Optional[str] = None) -> Any:
    """Parse an inline JSON string, or the contents of a JSON file.

    Inline data wins when both are given.

    Raises:
        ValueError: If neither source is given
        FileNotFoundError: If the file does not exist
        PayloadError: If the JSON is malformed
    """
    if data:
        return _parse(data, "--data")
    if file:
        return _parse(Path(file).read_text(encoding='utf-8'), file)
    raise ValueError("Either data or file is required")


def extract_elements(value: Any) -> list:
    """Unwrap an element list from a bare array or an {"elements": [...]} object."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict) and isinstance(value.get("elements"), list):
        return value["elements"]
    raise PayloadError('Input file must be an array, or an object with an "elements" array')


def read_elements(path: str) -> list:
    """Read the element list from an import file."""
    return extract_elements(load_json(file=path))
