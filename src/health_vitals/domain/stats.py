"""Domain models for statistics."""

from dataclasses import dataclass, field
from datetime import date
from typing import Literal


@dataclass(frozen=True)
class WeeklyHighlight:
    """A win or focus area for the week."""

    title: str
    description: str
    metric: str
    trend: Literal["positive", "negative"]


@dataclass(frozen=True)
class WeeklySummary:
    """Averages and highlights for a week of entries."""

    week_start: date
    week_end: date
    average_intake: float
    average_burn: float
    average_deficit: float
    average_sleep: float
    average_water: float
    average_food_quality: float
    average_fruit: float
    face_trend: str
    notes_summary: str
    wins: list[WeeklyHighlight] = field(default_factory=list)
    focus: list[WeeklyHighlight] = field(default_factory=list)


@dataclass(frozen=True)
class DayDeficit:
    day: date
    deficit: int


@dataclass(frozen=True)
class MonthlySummary:
    """Totals and averages for a month of entries."""

    month_start: date
    month_end: date
    total_days: int
    days_with_data: int
    total_intake: int
    total_burn: int
    total_deficit: int
    average_intake: float
    average_burn: float
    average_deficit: float
    total_protein: float
    average_protein: float
    total_sleep: float
    average_sleep: float
    total_water: int
    average_water: float
    average_food_quality: float
    best_day: DayDeficit
    worst_day: DayDeficit
