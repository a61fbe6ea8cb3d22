"""Error taxonomy for the recurrence engine.

All failures are deterministic for a given input; nothing here is retryable.
"""


class ShowcalError(Exception):
    """Base class for engine errors."""


class RuleParseError(ShowcalError, ValueError):
    """Recurrence text is malformed or internally contradictory.

    Attributes:
        fragment: The part of the rule text that could not be accepted
    """

    def __init__(self, message: str, fragment: str):
        super().__init__(f"{message}: {fragment!r}")
        self.fragment: str = fragment


class AmbiguousExceptionError(ShowcalError):
    """More than one exception record targets the same nominal occurrence."""

    def __init__(self, series_id: str, target: str):
        super().__init__(
            f"Series {series_id!r} has more than one exception for {target}.\n"
            f"Each nominal occurrence may carry at most one exception record."
        )
        self.series_id: str = series_id
        self.target: str = target


class OccurrenceIdError(ShowcalError, ValueError):
    """An occurrence id does not name a nominal occurrence of a recurring series."""
