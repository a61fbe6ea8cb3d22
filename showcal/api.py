"""HTTP surface for the calendar engine.

``GET /api/calendar`` expands every show in a workspace for a date window;
the two POST endpoints record single-occurrence exceptions and split a
series for "this and future" edits.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from dateutil.parser import isoparse
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from showcal import config
from showcal.calendar import fetch_calendar
from showcal.errors import AmbiguousExceptionError, OccurrenceIdError, RuleParseError
from showcal.models import ExceptionRecord, OccurrenceOverrides, SeriesTemplate
from showcal.schemas import ExceptionCreate, SeriesSplit
from showcal.series import exception_for_occurrence, split_series
from showcal.store import ShowStore
from showcal.store.memory import MemoryStore
from showcal.util import format_wire

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Calendar"])


def get_store(request: Request) -> ShowStore:
    """Dependency injection for the app's ShowStore"""
    return request.app.state.store


def _parse_bound(name: str, value: Optional[str]) -> datetime:
    if not value:
        raise HTTPException(
            status_code=400, detail="start, end, and workspaceId parameters are required"
        )
    try:
        parsed = isoparse(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date range: {name}={value!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def template_to_wire(template: SeriesTemplate) -> dict[str, Any]:
    return {
        "id": template.id,
        "title": template.title,
        "description": template.description,
        "startTime": format_wire(template.start),
        "endTime": format_wire(template.end),
        "status": template.status,
        "color": template.color,
        "notes": template.notes,
        "workspaceId": template.workspace_id,
        "recurringPattern": template.recurrence_rule,
    }


def exception_to_wire(record: ExceptionRecord) -> dict[str, Any]:
    overrides = record.overrides
    return {
        "parentId": record.series_id,
        "occurrenceDate": format_wire(record.target_start),
        "kind": record.kind,
        "isException": True,
        "title": overrides.title if overrides else None,
        "description": overrides.description if overrides else None,
        "startTime": format_wire(overrides.start) if overrides and overrides.start else None,
        "endTime": format_wire(overrides.end) if overrides and overrides.end else None,
        "status": overrides.status if overrides else None,
        "notes": overrides.notes if overrides else None,
        "color": overrides.color if overrides else None,
    }


@router.get("/calendar")
async def get_calendar(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    workspaceId: Optional[str] = Query(None),
    includeCancelled: bool = Query(True),
    store: ShowStore = Depends(get_store),
):
    """Expand every show in the workspace into occurrences within [start, end)"""
    if not workspaceId:
        raise HTTPException(
            status_code=400, detail="start, end, and workspaceId parameters are required"
        )
    window_start = _parse_bound("start", start)
    window_end = _parse_bound("end", end)

    occurrences = fetch_calendar(
        store, workspaceId, window_start, window_end, include_cancelled=includeCancelled
    )
    return [o.to_wire() for o in occurrences]


@router.post("/shows/{series_id}/exceptions", status_code=201)
async def create_exception(
    series_id: str,
    payload: ExceptionCreate,
    store: ShowStore = Depends(get_store),
):
    """Record an edit or cancellation of a single occurrence"""
    template = store.get_template(series_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Show not found")

    overrides = None
    if payload.kind == "modified":
        try:
            overrides = OccurrenceOverrides(
                title=payload.title,
                description=payload.description,
                start=payload.startTime,
                end=payload.endTime,
                status=payload.status,
                notes=payload.notes,
                color=payload.color,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    record = exception_for_occurrence(payload.occurrenceId, payload.kind, overrides, template)

    result = store.add_exception(record)
    if not result.success:
        logger.error(f"Error creating show exception for {series_id}: {result.error}")
        raise HTTPException(status_code=500, detail="Failed to create show exception")
    return exception_to_wire(record)


@router.post("/shows/{series_id}/split")
async def split_show(
    series_id: str,
    payload: SeriesSplit,
    store: ShowStore = Depends(get_store),
):
    """Split a recurring show so later occurrences follow a new pattern"""
    template = store.get_template(series_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Master show not found")

    changes = {
        field: value
        for field, value in {
            "title": payload.title,
            "description": payload.description,
            "status": payload.status,
            "notes": payload.notes,
            "color": payload.color,
        }.items()
        if value is not None
    }
    try:
        original, successor = split_series(
            template, payload.splitDate, payload.newPattern, str(uuid.uuid4()), **changes
        )
    except RuleParseError:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    for result in (store.replace_template(original), store.add_template(successor)):
        if not result.success:
            logger.error(f"Error splitting recurring series {series_id}: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to split recurring series")

    return {"originalMaster": template_to_wire(original), "newMaster": template_to_wire(successor)}


async def rule_parse_error_handler(request: Request, exc: RuleParseError) -> JSONResponse:
    logger.warning(f"Rejected recurrence rule on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid recurrence rule", "detail": str(exc), "fragment": exc.fragment},
    )


async def ambiguous_exception_handler(
    request: Request, exc: AmbiguousExceptionError
) -> JSONResponse:
    logger.error(f"Ambiguous exception records on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=409,
        content={"message": "Conflicting occurrence exceptions", "detail": str(exc)},
    )


async def occurrence_id_error_handler(request: Request, exc: OccurrenceIdError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": str(exc)})


def create_app(store: ShowStore | None = None) -> FastAPI:
    """Build the FastAPI application around ``store`` (in-memory by default)"""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app = FastAPI(title="showcal")
    app.state.store = store if store is not None else MemoryStore()
    app.include_router(router)
    app.add_exception_handler(RuleParseError, rule_parse_error_handler)
    app.add_exception_handler(AmbiguousExceptionError, ambiguous_exception_handler)
    app.add_exception_handler(OccurrenceIdError, occurrence_id_error_handler)
    return app
