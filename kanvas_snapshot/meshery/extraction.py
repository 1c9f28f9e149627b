"""Design identifier extraction from Meshery responses.

Meshery versions disagree on where the new design's id lives in the
response. Each known shape is a named strategy; they are tried in order and
the first one that yields a non-empty string wins.
"""

import json
import logging
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Strategy = Callable[[Any], Optional[str]]


def _string_or_none(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _top_level_id(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        return _string_or_none(data.get("id"))
    return None


def _pattern_file_id(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        pattern_file = data.get("pattern_file")
        if isinstance(pattern_file, dict):
            return _string_or_none(pattern_file.get("id"))
    return None


def _pattern_id(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        return _string_or_none(data.get("pattern_id"))
    return None


def _first_array_item_id(data: Any) -> Optional[str]:
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return _string_or_none(data[0].get("id"))
    return None


# Priority order matters: an object carrying both "id" and "pattern_id"
# resolves to "id".
STRATEGIES: List[Tuple[str, Strategy]] = [
    ("id", _top_level_id),
    ("pattern_file.id", _pattern_file_id),
    ("pattern_id", _pattern_id),
    ("first_array_item.id", _first_array_item_id),
]


def parse_json_body(body: str) -> Any:
    """Parse a response body, returning None when it is not JSON."""
    try:
        return json.loads(body)
    except (TypeError, ValueError):
        return None


def extract_design_id(body: str, strategies: Optional[List[Tuple[str, Strategy]]] = None) -> Optional[str]:
    """Extract the design identifier from a response body.

    Args:
        body: Raw response text
        strategies: Named strategies to try (default: STRATEGIES)

    Returns:
        The identifier, or None if no strategy matched
    """
    data = parse_json_body(body)
    if data is None:
        logger.debug("Response body is not valid JSON")
        return None

    for name, strategy in strategies or STRATEGIES:
        design_id = strategy(data)
        if design_id:
            logger.debug(f"Design id resolved via '{name}'")
            return design_id
    return None
