"""Staging of estimated meals before they are committed to the ledger."""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import uuid4

from macro_tracker.domain.estimates import NutritionEstimate
from macro_tracker.domain.ledger import MealEntry
from macro_tracker.domain.staging import (
    COMMITTED,
    PENDING,
    REJECTED,
    StagedMeal,
    StoredPhoto,
)
from macro_tracker.services.estimates import EstimateService, image_mime_type
from macro_tracker.services.ledger import DailyLedgerManager, utc_now

_logger = logging.getLogger(__name__)


class PhotoStorage(Protocol):
    """Storage interface for meal photos."""

    def upload_photo(
        self, user_id: str, image_bytes: bytes, content_type: str
    ) -> StoredPhoto:
        """Store a photo and return where it lives."""

    def delete_photo(self, path: str) -> None:
        """Delete a stored photo."""


@dataclass
class MealStagingService:
    """State machine for staged meals: PENDING -> COMMITTED or REJECTED.

    A pending meal commits once, either when the user accepts it or when its
    auto-commit timer fires. Accepting or rejecting cancels the timer. Decided
    meals leave the pending map; the latest ``decided_limit`` of them stay
    retrievable so a repeated accept returns the same entry.
    """

    user_id: str
    manager: DailyLedgerManager
    estimate_service: EstimateService
    photo_storage: PhotoStorage
    auto_commit_seconds: float = 10.0
    clock: Callable[[], datetime] = utc_now
    decided_limit: int = 50
    _staged: dict[str, StagedMeal] = field(default_factory=dict, repr=False)
    _decided: "OrderedDict[str, StagedMeal]" = field(
        default_factory=OrderedDict, repr=False
    )
    _timers: "dict[str, asyncio.Task[None]]" = field(
        default_factory=dict, repr=False
    )

    async def stage_text(self, description: str) -> StagedMeal:
        """Estimate a described meal and stage the result."""
        estimate = await self.estimate_service.estimate_text(description)
        return self.stage(estimate)

    async def stage_photo(self, image_bytes: bytes) -> StagedMeal:
        """Estimate a photographed meal, upload the photo, and stage it."""
        estimate = await self.estimate_service.estimate_photo(image_bytes)
        photo = await self._upload(image_bytes)
        return self.stage(estimate, has_photo=True, photo=photo)

    def stage(
        self,
        estimate: NutritionEstimate,
        has_photo: bool = False,
        photo: StoredPhoto | None = None,
    ) -> StagedMeal:
        """Stage an estimate and start its auto-commit timer."""
        staged = StagedMeal(
            id=str(uuid4()),
            estimate=estimate,
            staged_at=self.clock(),
            has_photo=has_photo,
            photo=photo,
        )
        self._staged[staged.id] = staged
        if self.auto_commit_seconds > 0:
            self._timers[staged.id] = asyncio.get_running_loop().create_task(
                self._auto_commit(staged.id, self.auto_commit_seconds)
            )
        return staged

    def get(self, staged_id: str) -> StagedMeal | None:
        """Return a pending or recently decided meal by id."""
        staged = self._staged.get(staged_id)
        if staged is None:
            staged = self._decided.get(staged_id)
        return staged

    def pending(self) -> list[StagedMeal]:
        """Return meals still awaiting a decision."""
        return list(self._staged.values())

    def accept(self, staged_id: str) -> MealEntry | None:
        """Commit a staged meal; repeated accepts return the same entry."""
        staged = self.get(staged_id)
        if staged is None:
            return None
        self._cancel_timer(staged_id)
        return self._commit(staged, committed_by="user")

    async def reject(self, staged_id: str) -> bool:
        """Discard a pending meal and its uploaded photo."""
        staged = self._staged.get(staged_id)
        if staged is None or staged.status != PENDING:
            return False
        self._cancel_timer(staged_id)
        staged.status = REJECTED
        self._retire(staged)
        if staged.photo is not None:
            try:
                await asyncio.to_thread(
                    self.photo_storage.delete_photo, staged.photo.path
                )
            except Exception:
                _logger.exception("Failed to delete photo %s", staged.photo.path)
        return True

    def cancel_all(self) -> None:
        """Stop every auto-commit timer without committing."""
        for staged_id in list(self._timers):
            self._cancel_timer(staged_id)

    def _commit(self, staged: StagedMeal, committed_by: str) -> MealEntry | None:
        if staged.status == COMMITTED:
            return staged.entry
        if staged.status != PENDING:
            return None
        entry = self.manager.add_meal(
            staged.estimate,
            has_photo=staged.has_photo,
            photo_ref=staged.photo.url if staged.photo else None,
        )
        if entry is None:
            return None
        staged.status = COMMITTED
        staged.entry = entry
        staged.committed_by = committed_by
        self._retire(staged)
        return entry

    def _retire(self, staged: StagedMeal) -> None:
        self._staged.pop(staged.id, None)
        self._decided[staged.id] = staged
        while len(self._decided) > self.decided_limit:
            self._decided.popitem(last=False)

    def _cancel_timer(self, staged_id: str) -> None:
        timer = self._timers.pop(staged_id, None)
        if timer is not None:
            timer.cancel()

    async def _auto_commit(self, staged_id: str, delay: float) -> None:
        await asyncio.sleep(delay)
        self._timers.pop(staged_id, None)
        staged = self._staged.get(staged_id)
        if staged is None or staged.status != PENDING:
            return
        await self.manager.roll_over()
        _logger.info("Auto-committing staged meal %s", staged_id)
        self._commit(staged, committed_by="timeout")

    async def _upload(self, image_bytes: bytes) -> StoredPhoto | None:
        try:
            return await asyncio.to_thread(
                self.photo_storage.upload_photo,
                self.user_id,
                image_bytes,
                image_mime_type(image_bytes),
            )
        except Exception:
            _logger.exception("Failed to upload meal photo")
            return None
