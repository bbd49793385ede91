"""Metric intake service: validate, identify, store and query metric events."""

import logging
import threading
from collections.abc import Sequence

from cloudwatchr.core.errors import BatchValidationFailure, ValidationFailure
from cloudwatchr.core.models import IngestionStats, MetricEvent, StoredMetric
from cloudwatchr.core.ports import MetricStoragePort
from cloudwatchr.core.validation import LatencyPolicy, errors_to_dict, validate_event

logger = logging.getLogger(__name__)


class MetricIntake:
    """Accepts metric events and answers queries over what was accepted.

    Identifier assignment, the total counter and storage insertion happen
    under a single lock, so concurrent submitters always receive distinct,
    increasing identifiers and no counter update is lost. Identifiers start
    at 1 and are never reused, even after ``clear_all``.

    Example:
        ```python
        intake = MetricIntake(InMemoryMetricStorage())
        stored = intake.submit(event)
        intake.list_by_service("user-service")
        ```
    """

    def __init__(
        self,
        storage: MetricStoragePort,
        policy: LatencyPolicy = LatencyPolicy.POSITIVE,
    ) -> None:
        """Initialize the service with a storage backend.

        Args:
            storage: Storage adapter implementing MetricStoragePort. The
                intake assumes it is the only writer.
            policy: Lower bound enforced on ``latency_ms``.
        """
        self._storage = storage
        self._policy = policy
        self._lock = threading.Lock()
        self._last_id = 0
        self._total_ingested = 0

    @property
    def policy(self) -> LatencyPolicy:
        return self._policy

    def _check(self, event: MetricEvent) -> dict[str, str]:
        return errors_to_dict(validate_event(event, self._policy))

    def submit(self, event: MetricEvent) -> StoredMetric:
        """Validate and store a single metric event.

        Args:
            event: The candidate event.

        Returns:
            The stored metric with its freshly assigned identifier.

        Raises:
            ValidationFailure: If any field is invalid. Nothing is stored.
        """
        errors = self._check(event)
        if errors:
            logger.warning(
                "Rejected metric from %s: %s",
                event.service_name,
                errors,
                extra={"rejected_fields": ",".join(errors)},
            )
            raise ValidationFailure(errors)

        with self._lock:
            self._last_id += 1
            stored = StoredMetric.from_event(self._last_id, event)
            self._storage.insert(stored)
            self._total_ingested += 1

        logger.info(
            "Metric ingested - service=%s endpoint=%s status=%s latency=%sms",
            stored.service_name,
            stored.endpoint,
            stored.status_code,
            stored.latency_ms,
            extra={"metric_id": stored.id},
        )
        return stored

    def submit_batch(self, events: Sequence[MetricEvent]) -> list[StoredMetric]:
        """Validate and store several events, all or nothing.

        Every element is validated before anything is stored. If any element
        is invalid the whole batch is rejected with the errors of every
        failing element.

        Args:
            events: Candidate events, stored in input order.

        Returns:
            The stored metrics, in input order with consecutive identifiers.

        Raises:
            BatchValidationFailure: If one or more elements are invalid.
        """
        item_errors: dict[int, dict[str, str]] = {}
        for index, event in enumerate(events):
            errors = self._check(event)
            if errors:
                item_errors[index] = errors
        if item_errors:
            logger.warning(
                "Rejected batch of %d metrics: %d invalid element(s)",
                len(events),
                len(item_errors),
            )
            raise BatchValidationFailure(item_errors)

        with self._lock:
            first_id = self._last_id + 1
            stored = [
                StoredMetric.from_event(first_id + offset, event)
                for offset, event in enumerate(events)
            ]
            self._storage.insert_many(stored)
            self._last_id += len(stored)
            self._total_ingested += len(stored)

        logger.info("Batch ingestion complete - %d metrics stored", len(stored))
        return stored

    def list_all(self) -> list[StoredMetric]:
        """Return every stored metric in insertion order."""
        logger.debug("Retrieving all metrics")
        return self._storage.values()

    def list_by_service(self, service_name: str) -> list[StoredMetric]:
        """Return stored metrics whose service name matches exactly.

        Matching is case-sensitive and preserves insertion order.
        """
        logger.debug("Retrieving metrics for service %s", service_name)
        return [m for m in self._storage.values() if m.service_name == service_name]

    def stats(self) -> IngestionStats:
        """Return the total ingested count and the current store size."""
        with self._lock:
            return IngestionStats(
                total_ingested=self._total_ingested,
                currently_stored=self._storage.size(),
            )

    def clear_all(self) -> None:
        """Empty the store. Identifier and total counters are left alone."""
        with self._lock:
            removed = self._storage.size()
            self._storage.clear()
        logger.warning("Cleared all metrics from storage (%d removed)", removed)
