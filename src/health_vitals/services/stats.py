"""Weekly and monthly statistics over daily entries."""

import calendar
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta

from health_vitals.domain.entries import CalculatedMetrics, DailyEntry
from health_vitals.domain.stats import (
    DayDeficit,
    MonthlySummary,
    WeeklyHighlight,
    WeeklySummary,
)
from health_vitals.services.entries import DailyEntryService
from health_vitals.services.metrics import (
    calculate_metrics,
    calculate_sleep_hours,
    round_half_up,
)

WEEK_DAYS = 7
NO_NOTES = "No notes for this week."


@dataclass
class StatsService:
    """Loads entries for a period and summarizes them."""

    entries: DailyEntryService

    def get_week(self, user_id: str, week_start: date) -> WeeklySummary | None:
        """Summarize the seven days starting at ``week_start``."""
        week_end = week_start + timedelta(days=WEEK_DAYS - 1)
        return calculate_weekly_summary(
            self.entries.get_entries_in_range(user_id, week_start, week_end)
        )

    def get_month(self, user_id: str, year: int, month: int) -> MonthlySummary | None:
        """Summarize a calendar month."""
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        return calculate_monthly_summary(
            self.entries.get_entries_in_range(user_id, start, end)
        )

    def get_all(self, user_id: str) -> list[DailyEntry]:
        return self.entries.get_all_entries(user_id)


def calculate_weekly_summary(entries: list[DailyEntry]) -> WeeklySummary | None:
    """Average a week of entries and pick out wins and focus areas."""
    if not entries:
        return None
    ordered = sorted(entries, key=lambda entry: entry.date)
    count = len(ordered)
    metrics = [_metrics(entry) for entry in ordered]

    average_intake = sum(item.total_intake for item in metrics) / count
    average_burn = sum(item.total_burn for item in metrics) / count
    average_deficit = sum(item.calorie_deficit for item in metrics) / count
    average_sleep = sum(_sleep_hours(entry) for entry in ordered) / count
    average_water = sum(entry.health.water_intake for entry in ordered) / count
    average_quality = sum(entry.health.food_quality_score for entry in ordered) / count
    average_fruit = sum(entry.health.fruit_intake for entry in ordered) / count

    face_counts = Counter(entry.health.face_status for entry in ordered)
    dominant_face, dominant_count = face_counts.most_common(1)[0]
    notes = [
        f"[{entry.date.isoformat()}]: {entry.health.notes}"
        for entry in ordered
        if entry.health.notes.strip()
    ]

    wins: list[WeeklyHighlight] = []
    focus: list[WeeklyHighlight] = []

    def win(title: str, description: str, metric: str) -> None:
        wins.append(WeeklyHighlight(title, description, metric, "positive"))

    def needs_focus(title: str, description: str, metric: str) -> None:
        focus.append(WeeklyHighlight(title, description, metric, "negative"))

    if average_water >= 8:  # noqa: PLR2004
        win(
            "Hydration on track",
            f"Averaged {average_water:.1f} glasses daily.",
            "Hydration",
        )
    elif average_water < 6:  # noqa: PLR2004
        needs_focus(
            "Drink more water",
            f"Only {average_water:.1f} glasses per day. Aim for 8+.",
            "Hydration",
        )

    if average_sleep >= 7.5:  # noqa: PLR2004
        win(
            "Sleep rhythm solid",
            f"{average_sleep:.1f} hours/night keeps recovery high.",
            "Sleep",
        )
    elif average_sleep < 6.5:  # noqa: PLR2004
        needs_focus(
            "Protect sleep time",
            f"{average_sleep:.1f} hours/night. Target 7.5+.",
            "Sleep",
        )

    if average_deficit >= 200:  # noqa: PLR2004
        win(
            "Calorie deficit achieved",
            f"Weekly deficit averaged {average_deficit:.0f} kcal/day.",
            "Energy",
        )
    elif average_deficit < 0:
        needs_focus(
            "Watch portions",
            f"In a surplus of {abs(average_deficit):.0f} kcal/day.",
            "Energy",
        )

    if average_quality >= 4:  # noqa: PLR2004
        win(
            "Clean eating streak",
            f"Food quality avg {average_quality:.1f}/5.",
            "Food Quality",
        )
    elif average_quality <= 3:  # noqa: PLR2004
        needs_focus(
            "Improve meal balance",
            f"Food quality avg {average_quality:.1f}/5. Add more whole foods.",
            "Food Quality",
        )

    if average_fruit >= 2:  # noqa: PLR2004
        win(
            "Fruit servings met",
            f"{average_fruit:.1f} servings/day.",
            "Micronutrients",
        )
    else:
        needs_focus(
            "Add fruit fiber",
            f"{average_fruit:.1f} servings/day. Aim for 2+.",
            "Micronutrients",
        )

    return WeeklySummary(
        week_start=ordered[0].date,
        week_end=ordered[-1].date,
        average_intake=average_intake,
        average_burn=average_burn,
        average_deficit=average_deficit,
        average_sleep=average_sleep,
        average_water=average_water,
        average_food_quality=average_quality,
        average_fruit=average_fruit,
        face_trend=f"Mostly {dominant_face} ({dominant_count}/{count} days)",
        notes_summary="\n\n".join(notes) or NO_NOTES,
        wins=wins,
        focus=focus,
    )


def calculate_monthly_summary(entries: list[DailyEntry]) -> MonthlySummary | None:
    """Total and average a month of entries with its best and worst day."""
    if not entries:
        return None
    ordered = sorted(entries, key=lambda entry: entry.date)
    count = len(ordered)
    days = [(entry, _metrics(entry)) for entry in ordered]

    total_intake = sum(item.total_intake for _, item in days)
    total_burn = sum(item.total_burn for _, item in days)
    total_deficit = sum(item.calorie_deficit for _, item in days)
    total_protein = round_half_up(sum(item.total_protein for _, item in days), 1)
    total_sleep = sum(_sleep_hours(entry) for entry in ordered)
    total_water = sum(entry.health.water_intake for entry in ordered)
    total_quality = sum(entry.health.food_quality_score for entry in ordered)

    # max/min keep the earliest day on ties.
    best_entry, best = max(days, key=lambda pair: pair[1].calorie_deficit)
    worst_entry, worst = min(days, key=lambda pair: pair[1].calorie_deficit)

    return MonthlySummary(
        month_start=ordered[0].date,
        month_end=ordered[-1].date,
        total_days=(ordered[-1].date - ordered[0].date).days + 1,
        days_with_data=count,
        total_intake=total_intake,
        total_burn=total_burn,
        total_deficit=total_deficit,
        average_intake=total_intake / count,
        average_burn=total_burn / count,
        average_deficit=total_deficit / count,
        total_protein=total_protein,
        average_protein=total_protein / count,
        total_sleep=total_sleep,
        average_sleep=total_sleep / count,
        total_water=total_water,
        average_water=total_water / count,
        average_food_quality=total_quality / count,
        best_day=DayDeficit(day=best_entry.date, deficit=best.calorie_deficit),
        worst_day=DayDeficit(day=worst_entry.date, deficit=worst.calorie_deficit),
    )


def _metrics(entry: DailyEntry) -> CalculatedMetrics:
    return calculate_metrics(entry.food_logs, entry.activity)


def _sleep_hours(entry: DailyEntry) -> float:
    return calculate_sleep_hours(entry.health.wake_time, entry.health.sleep_time)
