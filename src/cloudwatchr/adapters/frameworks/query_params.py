"""Query parameter normalization shared by HTTP endpoints."""

import math

# Valid log levels for validation
VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_since(raw: str | None) -> float:
    """Parse and validate the 'since' query parameter.

    Returns:
        Timestamp as float, defaulting to 0.0 if invalid or missing.
        Negative, NaN, and infinite values also yield 0.0.
    """
    if raw is None:
        return 0.0
    try:
        value = float(raw)
    except ValueError:
        return 0.0
    if value < 0 or math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def parse_level(raw: str | None) -> str | None:
    """Parse and validate the 'level' query parameter.

    Returns:
        Validated level string (uppercase) or None if invalid/missing.
    """
    if raw and raw.upper() in VALID_LEVELS:
        return raw.upper()
    return None
