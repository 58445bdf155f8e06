"""Models for LLM-backed coaching results."""

from typing import Literal

from pydantic import BaseModel, Field

RoutineMoment = Literal["morning", "evening", "night", "any"]
RoutineFrequency = Literal["daily", "alternate", "weekly"]


class NutritionEstimate(BaseModel):
    """Estimated nutrition for a food portion."""

    calories: int | None = None
    protein: float | None = None
    sodium: float | None = None
    method: Literal["ai", "unavailable"] = "ai"


class FoodQualityScore(BaseModel):
    """Overall food quality rating for a day."""

    score: int = Field(default=3, ge=1, le=5)
    reasoning: str = "Food quality analyzed"


class ActionItem(BaseModel):
    title: str
    detail: str


class WeeklyInsights(BaseModel):
    """LLM recap of a week of entries."""

    overview: str = "Unable to generate AI insights right now."
    wins: list[str] = Field(default_factory=list)
    watchouts: list[str] = Field(default_factory=list)
    actions: list[ActionItem] = Field(default_factory=list)


class RoutineStep(BaseModel):
    """A step of a skincare routine."""

    name: str = Field(min_length=1)
    moment: RoutineMoment = "any"
    frequency: RoutineFrequency = "daily"


class RoutineEvaluation(BaseModel):
    """LLM feedback on a skincare routine."""

    verdict: str = "Unable to analyze"
    positives: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)
    suggestions: list[ActionItem] = Field(default_factory=list)
