"""Domain models for daily entries."""

from datetime import date, datetime
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field

MealType = Literal["breakfast", "lunch", "snacks", "dinner", "extra"]
FaceStatus = Literal["puffy", "dull", "normal", "bright"]
Trend = Literal["good", "moderate", "bad"]
RecommendationCategory = Literal[
    "Nutrition", "Exercise", "Sleep", "Hydration", "Overall"
]
Priority = Literal["high", "medium", "low"]

CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
DEFAULT_WAKE_TIME = "07:00"
DEFAULT_SLEEP_TIME = "23:00"
DEFAULT_FOOD_QUALITY = 3


class CustomFood(BaseModel):
    """Free-text food with estimated or label-derived nutrition."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    calories: int = Field(default=0, ge=0)
    protein: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)
    amount: float | None = Field(default=None, gt=0)
    unit: str | None = None

    def describe(self) -> str:
        """Return the name with amount and unit, when both are known."""
        if self.amount and self.unit:
            return f"{self.name} ({self.amount:g} {self.unit})"
        return self.name


class FoodLogEntry(BaseModel):
    """One meal slot for a day."""

    meal_type: MealType
    custom_foods: list[CustomFood] = Field(default_factory=list)


class WorkoutTime(BaseModel):
    """Workout minutes split by type."""

    strength: int = Field(default=0, ge=0)
    cardio: int = Field(default=0, ge=0)


class ActivityRecord(BaseModel):
    """Calories burned and workout minutes for a day."""

    active_calories: int = Field(default=0, ge=0)
    resting_calories: int = Field(default=0, ge=0)
    workout_time: WorkoutTime = Field(default_factory=WorkoutTime)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_burn(self) -> int:
        """Total burn, always derived from the two calorie fields."""
        return self.active_calories + self.resting_calories


class HealthInputs(BaseModel):
    """Sleep, hydration and wellbeing inputs for a day."""

    wake_time: str = Field(default=DEFAULT_WAKE_TIME, pattern=CLOCK_PATTERN)
    sleep_time: str = Field(default=DEFAULT_SLEEP_TIME, pattern=CLOCK_PATTERN)
    water_intake: int = Field(default=0, ge=0)
    fruit_intake: float = Field(default=0, ge=0)
    green_tea_count: int = Field(default=0, ge=0)
    black_coffee_count: int = Field(default=0, ge=0)
    food_quality_score: int = Field(default=DEFAULT_FOOD_QUALITY, ge=1, le=5)
    face_status: FaceStatus = "normal"
    notes: str = ""
    veg_mode: bool = False


class CalculatedMetrics(BaseModel):
    """Derived daily metrics; recomputable from food logs and activity."""

    total_intake: int
    total_burn: int
    calorie_deficit: int
    trend: Trend
    total_protein: float = 0
    total_sodium: int = 0


class Recommendation(BaseModel):
    """LLM-generated recommendation for a day."""

    category: RecommendationCategory = "Overall"
    title: str
    description: str
    priority: Priority = "medium"


class DailyEntry(BaseModel):
    """All data logged by a user for a single day."""

    user_id: str = Field(min_length=1)
    date: date
    food_logs: list[FoodLogEntry] = Field(default_factory=list)
    activity: ActivityRecord = Field(default_factory=ActivityRecord)
    health: HealthInputs = Field(default_factory=HealthInputs)
    metrics: CalculatedMetrics | None = None
    recommendations: list[Recommendation] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def id(self) -> str:
        """Document key for the entry."""
        return entry_id(self.user_id, self.date)

    def all_foods(self) -> list[CustomFood]:
        """Return every custom food across meal slots."""
        return [food for log in self.food_logs for food in log.custom_foods]


def entry_id(user_id: str, day: date) -> str:
    """Build the document key for a user's day."""
    return f"{user_id}_{day.isoformat()}"
