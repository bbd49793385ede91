"""Runtime settings read from the environment (and an optional .env file)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from cloudwatchr.core.validation import LatencyPolicy

ENV_PREFIX = "CLOUDWATCHR_"
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _env(name: str, default: str) -> str:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_int(name: str, default: int, minimum: int) -> int:
    raw = _env(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"{ENV_PREFIX}{name} must be an integer, got {raw!r}"
        ) from None
    if value < minimum:
        raise ValueError(f"{ENV_PREFIX}{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Service configuration.

    Attributes:
        service_name: Name reported by the health endpoint.
        host: Interface the HTTP server binds to.
        port: TCP port the HTTP server listens on.
        latency_policy: Lower bound enforced on ``latencyMs``.
        log_level: Level of the ``cloudwatchr`` logger.
        log_buffer_size: Number of log entries kept for ``/logs``.
    """

    service_name: str = "metrics-ingestion-service"
    host: str = "0.0.0.0"
    port: int = 8081
    latency_policy: LatencyPolicy = LatencyPolicy.POSITIVE
    log_level: str = "INFO"
    log_buffer_size: int = 1000

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Settings":
        """Build settings from ``CLOUDWATCHR_*`` environment variables.

        A ``.env`` file is loaded first when present; variables already set
        in the environment win.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        load_dotenv(dotenv_path=env_file)

        try:
            policy = LatencyPolicy.parse(_env("LATENCY_POLICY", "positive"))
        except ValueError as e:
            raise ValueError(f"{ENV_PREFIX}LATENCY_POLICY: {e}") from None

        log_level = _env("LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"{ENV_PREFIX}LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}"
            )

        return cls(
            service_name=_env("SERVICE_NAME", cls.service_name),
            host=_env("HOST", cls.host),
            port=_env_int("PORT", cls.port, minimum=1),
            latency_policy=policy,
            log_level=log_level,
            log_buffer_size=_env_int("LOG_BUFFER_SIZE", cls.log_buffer_size, minimum=1),
        )
