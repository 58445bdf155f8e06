"""Derived daily metrics: intake, burn, deficit, trend and sleep."""

import math
from collections.abc import Iterable

from health_vitals.domain.entries import (
    ActivityRecord,
    CalculatedMetrics,
    FoodLogEntry,
    Trend,
)

GOOD_DEFICIT = 500
MODERATE_DEFICIT = 200
MINUTES_PER_DAY = 24 * 60


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for non-negative values (2.5 -> 3)."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def calculate_total_intake(food_logs: Iterable[FoodLogEntry]) -> int:
    """Sum calories over every custom food in every meal slot."""
    return sum(food.calories for log in food_logs for food in log.custom_foods)


def calculate_total_protein(food_logs: Iterable[FoodLogEntry]) -> float:
    """Sum protein grams, treating missing values as zero."""
    total = sum(food.protein or 0 for log in food_logs for food in log.custom_foods)
    return round_half_up(total, 1)


def calculate_total_sodium(food_logs: Iterable[FoodLogEntry]) -> int:
    """Sum sodium milligrams, treating missing values as zero."""
    total = sum(food.sodium or 0 for log in food_logs for food in log.custom_foods)
    return int(round_half_up(total))


def calculate_total_burn(activity: ActivityRecord) -> int:
    return activity.active_calories + activity.resting_calories


def calculate_deficit(intake: int, burn: int) -> int:
    """Positive when more calories were burned than eaten."""
    return burn - intake


def determine_trend(deficit: int) -> Trend:
    if deficit >= GOOD_DEFICIT:
        return "good"
    if deficit >= MODERATE_DEFICIT:
        return "moderate"
    return "bad"


def calculate_metrics(
    food_logs: list[FoodLogEntry], activity: ActivityRecord
) -> CalculatedMetrics:
    """Compute the metrics snapshot for a day."""
    total_intake = calculate_total_intake(food_logs)
    total_burn = calculate_total_burn(activity)
    deficit = calculate_deficit(total_intake, total_burn)
    return CalculatedMetrics(
        total_intake=total_intake,
        total_burn=total_burn,
        calorie_deficit=deficit,
        trend=determine_trend(deficit),
        total_protein=calculate_total_protein(food_logs),
        total_sodium=calculate_total_sodium(food_logs),
    )


def parse_clock_minutes(value: str) -> int:
    """Convert an HH:MM string to minutes since midnight."""
    hours_raw, sep, minutes_raw = value.strip().partition(":")
    if not sep or not hours_raw.isdigit() or not minutes_raw.isdigit():
        raise ValueError(f"Invalid clock time: {value!r}")
    hours, minutes = int(hours_raw), int(minutes_raw)
    if hours > 23 or minutes > 59:  # noqa: PLR2004
        raise ValueError(f"Invalid clock time: {value!r}")
    return hours * 60 + minutes


def calculate_sleep_hours(wake_time: str, sleep_time: str) -> float:
    """Return hours slept between a sleep clock time and a wake clock time.

    A sleep time later on the clock than the wake time is read as the night
    before (23:00 -> 07:00 is 8 hours). Otherwise both times are read as the
    same day (01:00 -> 09:00 is also 8 hours). Only the clock order decides
    between the two readings.
    """
    wake_minutes = parse_clock_minutes(wake_time)
    sleep_minutes = parse_clock_minutes(sleep_time)
    if sleep_minutes > wake_minutes:
        duration = (MINUTES_PER_DAY - sleep_minutes) + wake_minutes
    else:
        duration = wake_minutes - sleep_minutes
    return duration / 60
