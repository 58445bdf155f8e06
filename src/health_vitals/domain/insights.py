"""Domain models for heuristic insights."""

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from health_vitals.domain.entries import MealType

Confidence = Literal["high", "medium"]
WeeklyTrend = Literal["deficit", "balanced", "surplus"]


@dataclass(frozen=True)
class FruitMatch:
    """A logged food recognised as fruit."""

    name: str
    servings: float
    meal_type: MealType
    confidence: Confidence


@dataclass(frozen=True)
class FruitInsights:
    """Estimated fruit servings for a day."""

    servings: float
    matches: list[FruitMatch]
    detected_foods: list[str]


@dataclass(frozen=True)
class GuidanceItem:
    """An "eat more" or "limit" suggestion."""

    title: str
    detail: str
    suggestions: list[str]
    emphasis: str | None = None


@dataclass(frozen=True)
class GuidanceSummary:
    total_protein: float = 0
    fruit_servings: float = 0
    meals_logged: int = 0


@dataclass(frozen=True)
class FoodGuidance:
    """Food guidance for a day."""

    summary: GuidanceSummary = field(default_factory=GuidanceSummary)
    eat_more: list[GuidanceItem] = field(default_factory=list)
    limit: list[GuidanceItem] = field(default_factory=list)


@dataclass(frozen=True)
class WeeklyContextDay:
    day: date
    intake: int
    burn: int
    deficit: int


@dataclass(frozen=True)
class WeeklyRecommendationContext:
    """Rolling 7-day aggregate used to enrich prompts."""

    range_label: str
    days_tracked: int
    average_intake: float
    average_burn: float
    average_water: float
    average_sleep: float
    average_food_quality: float
    average_fruit: float
    average_deficit: float
    trend: WeeklyTrend
    timeline: list[WeeklyContextDay]
    yesterday: WeeklyContextDay | None
    missing_habits: list[str]
