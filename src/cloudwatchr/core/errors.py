"""Errors raised by the metric intake core."""


class ValidationFailure(Exception):
    """A candidate metric event was rejected.

    Attributes:
        errors: Mapping of wire field name to a human-readable message.
            Every violated field is present, not just the first one.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__(self._describe())

    def _describe(self) -> str:
        return "Validation failed for field(s): " + ", ".join(self.errors)


class BatchValidationFailure(ValidationFailure):
    """One or more elements of a batch were rejected; nothing was stored.

    Attributes:
        item_errors: Mapping of input index to that element's field errors.
        errors: The same errors flattened to ``"<index>.<field>"`` keys.
    """

    def __init__(self, item_errors: dict[int, dict[str, str]]) -> None:
        self.item_errors = {index: dict(errs) for index, errs in item_errors.items()}
        super().__init__(
            {
                f"{index}.{name}": message
                for index, errs in self.item_errors.items()
                for name, message in errs.items()
            }
        )

    def _describe(self) -> str:
        indexes = ", ".join(str(index) for index in self.item_errors)
        return f"Validation failed for batch element(s): {indexes}"
