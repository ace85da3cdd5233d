"""
Normalization service for lead submission payloads.
"""
import logging
from typing import Any

logger = logging.getLogger(__name__)


def normalize_value(value: Any) -> Any:
    """
    Normalize a single value.

    - Strings: trim whitespace
    - Everything else passes through unchanged
    """
    if isinstance(value, str):
        return value.strip()
    return value


def normalize_dict(data: dict) -> dict:
    """
    Recursively normalize all values in a dictionary.
    """
    result = {}
    for key, value in data.items():
        if isinstance(value, dict):
            result[key] = normalize_dict(value)
        elif isinstance(value, list):
            result[key] = [normalize_value(item) if not isinstance(item, dict)
                           else normalize_dict(item) for item in value]
        else:
            result[key] = normalize_value(value)
    return result


def normalize(payload: dict) -> dict:
    """
    Normalizes lead submission data.

    Operations:
    - Trim whitespace from all string fields
    - Lowercase email addresses

    Args:
        payload: Raw lead submission

    Returns:
        Normalized payload
    """
    if not payload:
        return {}

    normalized = normalize_dict(payload)

    if 'email' in normalized and isinstance(normalized['email'], str):
        normalized['email'] = normalized['email'].lower()

    logger.debug(f"Normalized payload: {normalized}")
    return normalized
