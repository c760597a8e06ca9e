"""Ledger, history and staging endpoints for the signed-in user."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from macro_tracker.api.models import (
    AddMealRequest,
    DaysView,
    DescribeMealRequest,
    LedgerView,
    LoadDayRequest,
    MealEntryView,
    NutrientProgressView,
    StagedMealView,
    StatusView,
)
from macro_tracker.domain.goals import DailyGoals, progress
from macro_tracker.domain.ledger import DailyLedger, day_key
from macro_tracker.domain.staging import REJECTED, StagedMeal
from macro_tracker.services.tracking import TrackingContext

if TYPE_CHECKING:
    from macro_tracker.containers import AppContainer

router = APIRouter(tags=["tracking"])

_logger = logging.getLogger(__name__)


def require_context(request: Request) -> TrackingContext:
    """Return the signed-in user's tracking context or reject the request."""
    container: AppContainer = request.app.state.container
    context = container.session_scope.current
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )
    return context


def current_goals(request: Request) -> DailyGoals:
    """Return the daily goals currently in effect."""
    container: AppContainer = request.app.state.container
    return container.goals


def ledger_view(ledger: DailyLedger, goals: DailyGoals) -> LedgerView:
    """Render a ledger together with its progress toward the goals."""
    view = LedgerView.model_validate(ledger)
    view.progress = [
        NutrientProgressView.model_validate(item)
        for item in progress(ledger.totals, goals)
    ]
    return view


def _parse_day(value: str) -> str:
    try:
        return day_key(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc


def _staged_view(staged: StagedMeal) -> StagedMealView:
    return StagedMealView(
        id=staged.id,
        status=staged.status,
        estimate=staged.estimate,
        has_photo=staged.has_photo,
        photo_url=staged.photo.url if staged.photo else None,
        staged_at=staged.staged_at,
        committed_by=staged.committed_by,
        entry=MealEntryView.model_validate(staged.entry) if staged.entry else None,
    )


@router.get("/ledger")
async def current_ledger(
    context: TrackingContext = Depends(require_context),
    goals: DailyGoals = Depends(current_goals),
) -> LedgerView:
    """Return the current ledger, reloading it if the day has changed."""
    await context.ledger.roll_over()
    return ledger_view(context.ledger.ledger, goals)


@router.post("/ledger/load")
async def load_ledger(
    body: LoadDayRequest,
    context: TrackingContext = Depends(require_context),
    goals: DailyGoals = Depends(current_goals),
) -> LedgerView:
    """Make another day the current ledger."""
    await context.ledger.load_day(_parse_day(body.date))
    return ledger_view(context.ledger.ledger, goals)


@router.post("/ledger/meals", status_code=status.HTTP_201_CREATED)
async def add_meal(
    body: AddMealRequest, context: TrackingContext = Depends(require_context)
) -> MealEntryView:
    """Commit an estimate to today's ledger, or the explicitly loaded day."""
    await context.ledger.roll_over()
    entry = context.ledger.add_meal(
        body.estimate, has_photo=body.has_photo, photo_ref=body.photo_ref
    )
    if entry is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return MealEntryView.model_validate(entry)


@router.delete("/ledger/meals/{entry_id}")
async def remove_meal(
    entry_id: str, context: TrackingContext = Depends(require_context)
) -> MealEntryView:
    """Remove a meal from the current ledger."""
    removed = context.ledger.remove_meal(entry_id)
    if removed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return MealEntryView.model_validate(removed)


@router.get("/status")
async def ledger_status(
    context: TrackingContext = Depends(require_context),
) -> StatusView:
    """Return the loading flag and last error message."""
    return StatusView.model_validate(context.ledger.state)


@router.get("/history/days")
async def history_days(
    context: TrackingContext = Depends(require_context),
) -> DaysView:
    """List stored days, most recent first."""
    return DaysView(days=await context.history.list_days())


@router.get("/history/days/{day}")
async def history_day(
    day: str,
    context: TrackingContext = Depends(require_context),
    goals: DailyGoals = Depends(current_goals),
) -> LedgerView:
    """Open a stored day."""
    manager = await context.history.open_day(_parse_day(day))
    return ledger_view(manager.ledger, goals)


@router.delete("/history/days/{day}/meals/{entry_id}")
async def history_remove_meal(
    day: str, entry_id: str, context: TrackingContext = Depends(require_context)
) -> MealEntryView:
    """Remove a meal from a stored day."""
    key = _parse_day(day)
    manager = context.history.get_open_day(key)
    if manager is None:
        manager = await context.history.open_day(key)
    removed = manager.remove_meal(entry_id)
    if removed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return MealEntryView.model_validate(removed)


@router.post("/estimates/text", status_code=status.HTTP_201_CREATED)
async def estimate_text(
    body: DescribeMealRequest, context: TrackingContext = Depends(require_context)
) -> StagedMealView:
    """Estimate a described meal and stage it."""
    try:
        staged = await context.staging.stage_text(body.description)
    except Exception as exc:
        _logger.exception("Meal estimate failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Estimate failed"
        ) from exc
    return _staged_view(staged)


@router.post("/estimates/photo", status_code=status.HTTP_201_CREATED)
async def estimate_photo(
    request: Request, context: TrackingContext = Depends(require_context)
) -> StagedMealView:
    """Estimate a photographed meal (raw image body) and stage it."""
    image_bytes = await request.body()
    if not image_bytes:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Empty image"
        )
    try:
        staged = await context.staging.stage_photo(image_bytes)
    except Exception as exc:
        _logger.exception("Photo estimate failed")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Estimate failed"
        ) from exc
    return _staged_view(staged)


@router.get("/staged")
async def list_staged(
    context: TrackingContext = Depends(require_context),
) -> list[StagedMealView]:
    """Return meals still awaiting a decision."""
    return [_staged_view(staged) for staged in context.staging.pending()]


@router.post("/staged/{staged_id}/accept")
async def accept_staged(
    staged_id: str, context: TrackingContext = Depends(require_context)
) -> StagedMealView:
    """Commit a staged meal."""
    staged = context.staging.get(staged_id)
    if staged is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    await context.ledger.roll_over()
    if context.staging.accept(staged_id) is None and staged.status == REJECTED:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT)
    return _staged_view(staged)


@router.post("/staged/{staged_id}/reject")
async def reject_staged(
    staged_id: str, context: TrackingContext = Depends(require_context)
) -> StagedMealView:
    """Discard a staged meal."""
    staged = context.staging.get(staged_id)
    if staged is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    if not await context.staging.reject(staged_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT)
    return _staged_view(staged)
