"""Pydantic models for HTTP request bodies."""

from datetime import date
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from health_vitals.domain.coach import RoutineStep
from health_vitals.domain.entries import (
    CLOCK_PATTERN,
    ActivityRecord,
    DailyEntry,
    FoodLogEntry,
    HealthInputs,
    Recommendation,
)


class MetricsRequest(BaseModel):
    food_logs: list[FoodLogEntry] = Field(default_factory=list)
    activity: ActivityRecord = Field(default_factory=ActivityRecord)


class SleepHoursRequest(BaseModel):
    wake_time: str = Field(pattern=CLOCK_PATTERN)
    sleep_time: str = Field(pattern=CLOCK_PATTERN)


class FoodLogsRequest(BaseModel):
    """Food logs plus an optional stream id for superseding requests."""

    food_logs: list[FoodLogEntry] = Field(default_factory=list)
    veg_mode: bool = False
    stream: str | None = None


class EstimateCaloriesRequest(BaseModel):
    food_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    amount: float | None = Field(default=None, gt=0)
    unit: str | None = None
    stream: str | None = None


class EntryRequest(BaseModel):
    entry: DailyEntry
    veg_mode: bool | None = None


class WeeklyInsightsRequest(BaseModel):
    data: dict[str, object] = Field(min_length=1)


class RoutineRequest(BaseModel):
    steps: list[RoutineStep] = Field(min_length=1)


class EntryPayload(BaseModel):
    """Editable parts of a day; the user and date come from the path."""

    food_logs: list[FoodLogEntry] = Field(default_factory=list)
    activity: ActivityRecord = Field(default_factory=ActivityRecord)
    health: HealthInputs = Field(default_factory=HealthInputs)
    recommendations: list[Recommendation] | None = None

    def to_entry(self, user_id: str, day: date) -> DailyEntry:
        return DailyEntry(
            user_id=user_id,
            date=day,
            food_logs=self.food_logs,
            activity=self.activity,
            health=self.health,
            recommendations=self.recommendations,
        )


class ActiveDateRequest(BaseModel):
    date: date
