"""Debounced autosave and food-quality re-scoring for draft entries."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from health_vitals.domain.entries import DailyEntry, FoodLogEntry, entry_id
from health_vitals.services.coach import CoachService
from health_vitals.services.entries import DailyEntryService, EntryNotFoundError
from health_vitals.services.llm import LlmError
from health_vitals.services.scheduling import Debouncer, RequestSupersededError

_logger = logging.getLogger(__name__)

SaveStatus = Literal["idle", "pending", "saved", "unsaved", "skipped"]


def food_signature(food_logs: list[FoodLogEntry]) -> str:
    """Fingerprint of the logged foods; changes only when foods change."""
    return "|".join(
        f"{log.meal_type}:{food.name.strip().lower()}:{food.amount}:{food.unit}"
        for log in food_logs
        for food in log.custom_foods
    )


@dataclass
class AutosaveService:
    """Saves drafts after a quiet period and re-scores changed food logs.

    Each user has one active date. A timer that fires for any other date
    is dropped without writing.
    """

    entries: DailyEntryService
    coach: CoachService
    save_delay_seconds: float = 3.0
    food_quality_delay_seconds: float = 15.0
    _save_timers: Debouncer = field(init=False)
    _quality_timers: Debouncer = field(init=False)
    _drafts: dict[str, DailyEntry] = field(default_factory=dict, init=False)
    _active_dates: dict[str, date] = field(default_factory=dict, init=False)
    _saving: set[str] = field(default_factory=set, init=False)
    _statuses: dict[str, SaveStatus] = field(default_factory=dict, init=False)
    _signatures: dict[str, str] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self._save_timers = Debouncer(self.save_delay_seconds)
        self._quality_timers = Debouncer(self.food_quality_delay_seconds)

    def set_active_date(self, user_id: str, day: date) -> None:
        self._active_dates[user_id] = day

    def active_date(self, user_id: str) -> date | None:
        return self._active_dates.get(user_id)

    def stage(self, entry: DailyEntry) -> SaveStatus:
        """Record a draft and (re)start its save and re-score timers."""
        key = entry.id
        self._active_dates[entry.user_id] = entry.date
        self._drafts[key] = entry
        self._statuses[key] = "pending"
        self._save_timers.schedule(key, lambda: self._flush(key))

        signature = food_signature(entry.food_logs)
        if self._signatures.get(key) != signature:
            self._signatures[key] = signature
            food_logs = list(entry.food_logs)
            self._quality_timers.schedule(
                key, lambda: self._rescore(entry.user_id, entry.date, food_logs)
            )
        return "pending"

    def status(self, user_id: str, day: date) -> SaveStatus:
        return self._statuses.get(entry_id(user_id, day), "idle")

    async def shutdown(self) -> None:
        """Cancel timers and write any drafts still waiting."""
        self._quality_timers.cancel_all()
        self._save_timers.cancel_all()
        for key in list(self._drafts):
            await self._flush(key)

    def _is_active(self, user_id: str, day: date) -> bool:
        return self._active_dates.get(user_id) == day

    async def _flush(self, key: str) -> None:
        entry = self._drafts.get(key)
        if entry is None:
            return
        if not self._is_active(entry.user_id, entry.date):
            del self._drafts[key]
            self._statuses[key] = "skipped"
            _logger.info("Dropped draft for inactive date", extra={"entry_id": key})
            return
        if key in self._saving:
            self._save_timers.schedule(key, lambda: self._flush(key))
            return

        del self._drafts[key]
        self._saving.add(key)
        try:
            await asyncio.to_thread(self.entries.save_entry, entry)
        except Exception:
            _logger.exception("Autosave failed", extra={"entry_id": key})
            self._statuses[key] = "unsaved"
        else:
            self._statuses[key] = "pending" if key in self._drafts else "saved"
        finally:
            self._saving.discard(key)

    async def _rescore(
        self, user_id: str, day: date, food_logs: list[FoodLogEntry]
    ) -> None:
        key = entry_id(user_id, day)
        if not self._is_active(user_id, day):
            self._signatures.pop(key, None)
            _logger.info("Skipped re-score for inactive date", extra={"entry_id": key})
            return
        try:
            result = await self.coach.score_food_quality(
                food_logs, stream=f"food-quality:{key}"
            )
        except RequestSupersededError:
            return
        except LlmError as exc:
            _logger.warning("Food quality re-score failed: %s", exc)
            return
        try:
            await asyncio.to_thread(
                self.entries.set_food_quality, user_id, day, result.score
            )
        except EntryNotFoundError:
            _logger.info("No stored entry to score", extra={"entry_id": key})
