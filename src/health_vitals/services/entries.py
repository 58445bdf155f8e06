"""Daily entry persistence with derived metrics."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol

from health_vitals.domain.entries import (
    DEFAULT_FOOD_QUALITY,
    DailyEntry,
    Recommendation,
)
from health_vitals.domain.insights import WeeklyRecommendationContext
from health_vitals.services.insights import WEEK_DAYS, build_weekly_context
from health_vitals.services.metrics import calculate_metrics

_logger = logging.getLogger(__name__)


class EntryNotFoundError(LookupError):
    """Raised when a user has no entry for the requested date."""

    def __init__(self, user_id: str, day: date) -> None:
        super().__init__(f"No entry for {day.isoformat()}")
        self.user_id = user_id
        self.day = day


class DailyEntryRepository(Protocol):
    """Persistence interface for daily entries."""

    def get_entry(self, user_id: str, day: date) -> DailyEntry | None:
        """Return the entry for a user's day."""

    def save_entry(self, entry: DailyEntry) -> None:
        """Merge an entry into the stored document, creating it if needed."""

    def replace_recommendations(
        self, user_id: str, day: date, recommendations: list[Recommendation] | None
    ) -> None:
        """Overwrite or clear the stored recommendations for a day."""

    def list_entries(self, user_id: str) -> list[DailyEntry]:
        """Return every entry stored for a user, in any order."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DailyEntryService:
    """Reads and writes daily entries, keeping metrics derived."""

    repository: DailyEntryRepository
    clock: Callable[[], datetime] = _utc_now

    def save_entry(self, entry: DailyEntry) -> DailyEntry:
        """Persist an entry with fresh metrics and return what was stored.

        The food-quality score is owned by the scorer: a new entry starts at
        the default and an existing entry keeps its stored value. Stored
        recommendations survive a save that does not carry any.
        """
        existing = self.repository.get_entry(entry.user_id, entry.date)
        now = self.clock()
        recommendations = entry.recommendations
        created_at = entry.created_at or now
        score = DEFAULT_FOOD_QUALITY
        if existing is not None:
            score = existing.health.food_quality_score
            if recommendations is None:
                recommendations = existing.recommendations
            created_at = existing.created_at or created_at

        stored = entry.model_copy(
            update={
                "health": entry.health.model_copy(
                    update={"food_quality_score": score}
                ),
                "metrics": calculate_metrics(entry.food_logs, entry.activity),
                "recommendations": recommendations,
                "created_at": created_at,
                "updated_at": now,
            }
        )
        self.repository.save_entry(stored)
        _logger.info("Saved entry", extra={"entry_id": stored.id})
        return stored

    def get_entry(self, user_id: str, day: date) -> DailyEntry | None:
        return self.repository.get_entry(user_id, day)

    def require_entry(self, user_id: str, day: date) -> DailyEntry:
        """Return the entry or raise ``EntryNotFoundError``."""
        entry = self.repository.get_entry(user_id, day)
        if entry is None:
            raise EntryNotFoundError(user_id, day)
        return entry

    def get_entries_in_range(
        self, user_id: str, start: date, end: date
    ) -> list[DailyEntry]:
        """Return entries with ``start <= date <= end``, oldest first."""
        entries = self.repository.list_entries(user_id)
        return sorted(
            (entry for entry in entries if start <= entry.date <= end),
            key=lambda entry: entry.date,
        )

    def get_all_entries(self, user_id: str) -> list[DailyEntry]:
        return sorted(
            self.repository.list_entries(user_id), key=lambda entry: entry.date
        )

    def get_weekly_context(
        self, user_id: str, day: date
    ) -> WeeklyRecommendationContext | None:
        """Build the recommendation context from the week ending on ``day``."""
        start = day - timedelta(days=WEEK_DAYS - 1)
        entries = self.get_entries_in_range(user_id, start, day)
        return build_weekly_context(entries, day)

    def set_food_quality(self, user_id: str, day: date, score: int) -> DailyEntry:
        """Store a new food-quality score on an existing entry."""
        entry = self.require_entry(user_id, day)
        updated = entry.model_copy(
            update={
                "health": entry.health.model_copy(
                    update={"food_quality_score": score}
                ),
                "updated_at": self.clock(),
            }
        )
        self.repository.save_entry(updated)
        return updated

    def set_recommendations(
        self, user_id: str, day: date, recommendations: list[Recommendation]
    ) -> DailyEntry:
        entry = self.require_entry(user_id, day)
        self.repository.replace_recommendations(user_id, day, recommendations)
        return entry.model_copy(update={"recommendations": recommendations})

    def clear_recommendations(self, user_id: str, day: date) -> None:
        self.require_entry(user_id, day)
        self.repository.replace_recommendations(user_id, day, None)
