"""In-memory show store.

Useful for tests, prototyping and ephemeral calendars.
"""

from collections.abc import Iterable
from datetime import datetime

from typing_extensions import override

from showcal.models import ExceptionRecord, SeriesTemplate
from showcal.store import ShowStore, WriteResult


class MemoryStore(ShowStore):
    """Dict-backed ShowStore.

    Exception records are keyed by (series_id, target_start), so a second
    write for the same nominal occurrence replaces the first.
    """

    def __init__(
        self,
        templates: Iterable[SeriesTemplate] = (),
        exceptions: Iterable[ExceptionRecord] = (),
    ) -> None:
        self._templates: dict[str, SeriesTemplate] = {}
        self._exceptions: dict[tuple[str, datetime], ExceptionRecord] = {}

        for template in templates:
            self.add_template(template)
        for record in exceptions:
            self.add_exception(record)

    @override
    def templates(self, workspace_id: str) -> list[SeriesTemplate]:
        return [t for t in self._templates.values() if t.workspace_id == workspace_id]

    @override
    def exceptions(self, workspace_id: str) -> list[ExceptionRecord]:
        owned = {t.id for t in self.templates(workspace_id)}
        return [r for r in self._exceptions.values() if r.series_id in owned]

    @override
    def get_template(self, template_id: str) -> SeriesTemplate | None:
        return self._templates.get(template_id)

    @override
    def add_template(self, template: SeriesTemplate) -> WriteResult:
        if template.id in self._templates:
            return WriteResult(
                success=False,
                record=None,
                error=ValueError(f"Template {template.id!r} already exists"),
            )
        self._templates[template.id] = template
        return WriteResult(success=True, record=template, error=None)

    @override
    def replace_template(self, template: SeriesTemplate) -> WriteResult:
        if template.id not in self._templates:
            return WriteResult(
                success=False,
                record=None,
                error=ValueError(f"Template {template.id!r} not found in memory store"),
            )
        self._templates[template.id] = template
        return WriteResult(success=True, record=template, error=None)

    @override
    def add_exception(self, record: ExceptionRecord) -> WriteResult:
        if record.series_id not in self._templates:
            return WriteResult(
                success=False,
                record=None,
                error=ValueError(f"Template {record.series_id!r} not found in memory store"),
            )
        self._exceptions[record.key] = record
        return WriteResult(success=True, record=record, error=None)
