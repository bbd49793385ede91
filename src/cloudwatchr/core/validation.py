"""Field validation for candidate metric events.

Validation is an explicit function over a MetricEvent. It never stops at the
first problem: every violated field is reported with its own message so the
caller can fix a submission in one round trip.
"""

from dataclasses import dataclass
from enum import Enum

from cloudwatchr.core.models import MetricEvent

MIN_STATUS_CODE = 100
MAX_STATUS_CODE = 599


class LatencyPolicy(Enum):
    """Lower bound applied to ``latencyMs``."""

    POSITIVE = "positive"
    NON_NEGATIVE = "non_negative"

    @classmethod
    def parse(cls, raw: str) -> "LatencyPolicy":
        """Parse a policy name, accepting dashes and any case."""
        normalized = raw.strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(policy.value for policy in cls)
            raise ValueError(
                f"Unknown latency policy {raw!r} (expected one of: {valid})"
            ) from None


@dataclass(frozen=True)
class FieldError:
    """A single violated constraint.

    Attributes:
        field: Wire (camelCase) name of the offending field.
        message: Human-readable description of the violation.
    """

    field: str
    message: str


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_event(
    event: MetricEvent,
    policy: LatencyPolicy = LatencyPolicy.POSITIVE,
) -> list[FieldError]:
    """Validate a candidate event and collect every violated field.

    Args:
        event: The candidate metric event.
        policy: Lower bound to enforce on ``latency_ms``.

    Returns:
        List of FieldError in field order. Empty when the event is valid.
    """
    errors: list[FieldError] = []

    if _is_blank(event.service_name):
        errors.append(FieldError("serviceName", "serviceName must not be blank"))
    if _is_blank(event.endpoint):
        errors.append(FieldError("endpoint", "endpoint must not be blank"))
    if event.timestamp is None:
        errors.append(FieldError("timestamp", "timestamp must not be null"))

    if event.latency_ms is None:
        errors.append(FieldError("latencyMs", "latencyMs must not be null"))
    elif policy is LatencyPolicy.POSITIVE and event.latency_ms <= 0:
        errors.append(FieldError("latencyMs", "latencyMs must be positive"))
    elif policy is LatencyPolicy.NON_NEGATIVE and event.latency_ms < 0:
        errors.append(FieldError("latencyMs", "latencyMs must not be negative"))

    if event.status_code is None:
        errors.append(FieldError("statusCode", "statusCode must not be null"))
    elif event.status_code < MIN_STATUS_CODE:
        errors.append(
            FieldError("statusCode", f"statusCode must be at least {MIN_STATUS_CODE}")
        )
    elif event.status_code > MAX_STATUS_CODE:
        errors.append(
            FieldError("statusCode", f"statusCode must be at most {MAX_STATUS_CODE}")
        )

    return errors


def errors_to_dict(errors: list[FieldError]) -> dict[str, str]:
    """Collapse field errors into a ``{field: message}`` mapping.

    The first message recorded for a field wins.
    """
    result: dict[str, str] = {}
    for error in errors:
        result.setdefault(error.field, error.message)
    return result
