"""
Helpers for the JSON-text columns (request headers, auth data, environment
variables).

Stored JSON that fails to parse or has the wrong shape resolves to an empty
container instead of raising.
"""

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def parse_json_list(text: str | None) -> list[Any]:
    """Parse a JSON array, returning ``[]`` for empty, corrupt or non-list data."""
    if not text:
        return []
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        logger.debug("Discarding malformed JSON list: %r", text)
        return []
    if not isinstance(value, list):
        logger.debug("Expected JSON list, got %s", type(value).__name__)
        return []
    return value


def parse_json_object(text: str | None) -> dict[str, Any]:
    """Parse a JSON object, returning ``{}`` for empty, corrupt or non-object data."""
    if not text:
        return {}
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        logger.debug("Discarding malformed JSON object: %r", text)
        return {}
    if not isinstance(value, dict):
        logger.debug("Expected JSON object, got %s", type(value).__name__)
        return {}
    return value


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)
