"""Daily goal endpoints."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request

from macro_tracker.api.models import (
    CalorieGoalRequest,
    CalorieGoalView,
    GoalsView,
    UpdateGoalsRequest,
)
from macro_tracker.api.tracking import current_goals, require_context
from macro_tracker.domain.goals import DailyGoals, estimate_bmr
from macro_tracker.services.tracking import TrackingContext

if TYPE_CHECKING:
    from macro_tracker.containers import AppContainer

router = APIRouter(prefix="/goals", tags=["goals"])

_logger = logging.getLogger(__name__)


@router.get("")
async def get_goals(goals: DailyGoals = Depends(current_goals)) -> GoalsView:
    """Return the daily goals."""
    return GoalsView.model_validate(goals)


@router.patch("")
async def update_goals(
    body: UpdateGoalsRequest,
    request: Request,
    _context: TrackingContext = Depends(require_context),
) -> GoalsView:
    """Change some or all daily goals."""
    container: AppContainer = request.app.state.container
    container.goals = replace(container.goals, **body.model_dump(exclude_none=True))
    return GoalsView.model_validate(container.goals)


@router.post("/calories")
async def recommend_calories(
    body: CalorieGoalRequest,
    request: Request,
    _context: TrackingContext = Depends(require_context),
) -> CalorieGoalView:
    """Set the calorie goal from body measurements and an activity factor."""
    bmr = estimate_bmr(body.height_in, body.weight_lb, body.gender)
    calories = round(bmr * body.activity_factor)
    container: AppContainer = request.app.state.container
    container.goals = replace(container.goals, calories=calories)
    _logger.info("Calorie goal set to %s", calories)
    return CalorieGoalView(
        bmr=round(bmr, 1),
        calories=calories,
        goals=GoalsView.model_validate(container.goals),
    )
