"""Storage collaborator interface.

The engine never writes to storage; the API layer reads templates and
exception records through a ShowStore before projecting, and persists
new records through it.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from showcal.models import ExceptionRecord, SeriesTemplate


@dataclass(frozen=True)
class WriteResult:
    """Result of a write operation.

    Attributes:
        success: True if the operation succeeded, False otherwise
        record: The stored template or exception record if successful
        error: The exception that occurred if failed, None if successful
    """

    success: bool
    record: SeriesTemplate | ExceptionRecord | None
    error: Exception | None


class ShowStore(ABC):
    """Abstract base class for template and exception storage."""

    @abstractmethod
    def templates(self, workspace_id: str) -> Iterable[SeriesTemplate]:
        """Return every template in the workspace."""
        pass

    @abstractmethod
    def exceptions(self, workspace_id: str) -> Iterable[ExceptionRecord]:
        """Return every exception record owned by the workspace's templates."""
        pass

    @abstractmethod
    def get_template(self, template_id: str) -> SeriesTemplate | None:
        pass

    @abstractmethod
    def add_template(self, template: SeriesTemplate) -> WriteResult:
        pass

    @abstractmethod
    def replace_template(self, template: SeriesTemplate) -> WriteResult:
        """Overwrite an existing template with the same id."""
        pass

    @abstractmethod
    def add_exception(self, record: ExceptionRecord) -> WriteResult:
        """Store a record, replacing any record with the same (series, target) key."""
        pass


__all__ = ["ShowStore", "WriteResult"]
