"""Keyword heuristics over logged foods and recent entries."""

from dataclasses import dataclass
from datetime import date, timedelta

from health_vitals.domain.entries import DailyEntry, FoodLogEntry
from health_vitals.domain.insights import (
    FoodGuidance,
    FruitInsights,
    FruitMatch,
    GuidanceItem,
    GuidanceSummary,
    WeeklyContextDay,
    WeeklyRecommendationContext,
    WeeklyTrend,
)
from health_vitals.services.metrics import (
    calculate_metrics,
    calculate_sleep_hours,
    round_half_up,
)

MIN_FRUIT_SERVINGS = 0.25
MAX_FRUIT_SERVINGS = 3.0
PROTEIN_TARGET_G = 55
MIN_PROTEIN_FOODS = 2
MIN_VEGGIE_FOODS = 2
FRUIT_TARGET_SERVINGS = 2
REFINED_CARB_EXCESS = 2
WEEK_DAYS = 7


@dataclass(frozen=True)
class FruitClassifier:
    label: str
    keywords: tuple[str, ...]
    base_servings: float = 1.0
    generic: bool = False


# Order matters: the first classifier with a matching keyword wins.
FRUIT_CLASSIFIERS: tuple[FruitClassifier, ...] = (
    FruitClassifier("Banana", ("banana", "kela")),
    FruitClassifier("Apple", ("apple", "seb")),
    FruitClassifier("Orange", ("orange", "santra", "mandarin", "kimia")),
    FruitClassifier("Mango", ("mango", "aam")),
    FruitClassifier("Papaya", ("papaya",)),
    FruitClassifier("Grapes", ("grape", "draksh")),
    FruitClassifier("Pomegranate", ("pomegranate", "anar")),
    FruitClassifier(
        "Berry",
        ("berry", "strawberry", "blueberry", "raspberry", "blackberry"),
    ),
    FruitClassifier("Kiwi", ("kiwi",)),
    FruitClassifier(
        "Melon", ("melon", "watermelon", "muskmelon", "kharbuja", "tarbooz")
    ),
    FruitClassifier("Pineapple", ("pineapple",)),
    FruitClassifier("Guava", ("guava", "amrood")),
    FruitClassifier("Dates", ("dates", "date", "khajoor"), base_servings=0.5),
    FruitClassifier(
        "Fruit Mix", ("fruit salad", "fruit bowl", "fruit mix", "mixed fruit")
    ),
    FruitClassifier("Generic Fruit", ("fruit",), generic=True),
    FruitClassifier(
        "Fruit Juice", ("juice", "smoothie", "shake"), base_servings=0.5, generic=True
    ),
)

FRUIT_BLOCKLIST: tuple[str, ...] = (
    "cake",
    "custard",
    "ice cream",
    "cream",
    "pastry",
    "cookie",
)

# fmt: off
CATEGORY_PATTERNS: dict[str, tuple[str, ...]] = {
    "lean_protein": (
        "chicken", "fish", "egg", "egg white", "paneer", "tofu", "soya", "sprout",
        "dal", "lentil", "rajma", "chole", "beans", "yogurt", "curd", "dahi",
        "greek yogurt", "protein",
    ),
    "veggies": (
        "salad", "sabji", "bhaji", "veg", "vegetable", "greens", "palak",
        "spinach", "methi", "beans", "okra", "bhindi", "gourd", "pumpkin",
        "cabbage", "cauliflower", "broccoli", "capsicum", "carrot", "beet",
        "cucumber",
    ),
    "fried": (
        "fried", "pakora", "bhajiya", "bhaji", "poori", "puri", "vada", "samosa",
        "cutlet", "manchurian", "fries",
    ),
    "sweets": (
        "sweet", "dessert", "halwa", "cake", "pastry", "jalebi", "laddu",
        "gulab jamun", "rasgulla", "peda", "chocolate", "brownie", "ice cream",
        "kheer", "payasam",
    ),
    "refined_carbs": (
        "white rice", "rice", "bread", "bun", "naan", "paratha", "pasta", "pizza",
        "burger", "noodle", "maggi", "poha", "upma",
    ),
    "whole_carbs": (
        "brown rice", "millet", "jowar", "bajra", "ragi", "oats", "quinoa",
        "multigrain", "dalia",
    ),
}
# fmt: on

POSITIVE_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "protein": (
        "Grilled chicken/paneer",
        "Sprouted moong salad",
        "Greek yogurt bowl",
        "Lentil & quinoa khichdi",
    ),
    "protein_veg": (
        "Grilled paneer or tofu tikka",
        "Sprouted moong salad",
        "Greek yogurt bowl",
        "Lentil & quinoa khichdi",
    ),
    "veggies": (
        "Mixed veggie sabji",
        "Cucumber + carrot salad",
        "Palak dal",
        "Stir-fried beans/broccoli",
    ),
    "fruits": (
        "Seasonal fruit bowl",
        "Citrus fruit after lunch",
        "Mixed berries smoothie",
        "Papaya or melon cubes",
    ),
}

LIMIT_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "fried": (
        "Bake or air-fry snacks",
        "Switch to roasted chana",
        "Use sprouts chat instead of pakora",
    ),
    "sweets": (
        "Keep desserts to 2 bites",
        "Swap sweets with fruit & yogurt",
        "Use dates/coconut ladoo",
    ),
    "refined_carbs": (
        "Swap white rice for millet",
        "Prefer phulkas over naan",
        "Add salad before carb-heavy meals",
    ),
}


def analyze_fruit_intake(food_logs: list[FoodLogEntry]) -> FruitInsights:
    """Estimate fruit servings from free-text food names."""
    matches: list[FruitMatch] = []
    detected: list[str] = []
    total = 0.0
    for log in food_logs:
        for food in log.custom_foods:
            name = food.name.lower()
            if not name or _matches_any(name, FRUIT_BLOCKLIST):
                continue
            classifier = _classify_fruit(name)
            if classifier is None:
                continue
            amount = food.amount if food.amount is not None else 1
            servings = _clamp(
                amount * classifier.base_servings,
                MIN_FRUIT_SERVINGS,
                MAX_FRUIT_SERVINGS,
            )
            matches.append(
                FruitMatch(
                    name=food.name,
                    servings=round_half_up(servings, 2),
                    meal_type=log.meal_type,
                    confidence="medium" if classifier.generic else "high",
                )
            )
            detected.append(food.name)
            total += servings
    return FruitInsights(
        servings=round_half_up(total, 2),
        matches=matches,
        detected_foods=_dedupe(detected),
    )


def build_food_guidance(
    food_logs: list[FoodLogEntry],
    fruit_insights: FruitInsights | None = None,
    *,
    veg_mode: bool = False,
) -> FoodGuidance:
    """Build "eat more" and "limit" items from a day's foods."""
    if fruit_insights is None:
        fruit_insights = analyze_fruit_intake(food_logs)
    tagged: dict[str, list[str]] = {category: [] for category in CATEGORY_PATTERNS}
    total_protein = 0.0
    for log in food_logs:
        for food in log.custom_foods:
            name = food.name.lower()
            display = food.name or "Custom food"
            for category, patterns in CATEGORY_PATTERNS.items():
                if _matches_any(name, patterns):
                    tagged[category].append(display)
            total_protein += food.protein or 0

    protein_label = f"{int(round_half_up(total_protein))}g protein"
    eat_more: list[GuidanceItem] = []
    limit: list[GuidanceItem] = []

    lean_protein = tagged["lean_protein"]
    if total_protein < PROTEIN_TARGET_G or len(lean_protein) < MIN_PROTEIN_FOODS:
        detail = (
            f"Only {int(round_half_up(total_protein))}g protein logged "
            f"({', '.join(_dedupe(lean_protein))})"
            if lean_protein
            else "No lean protein was detected in today's meals."
        )
        pool = "protein_veg" if veg_mode else "protein"
        eat_more.append(
            GuidanceItem(
                title="Lean Protein Boost",
                detail=detail,
                suggestions=list(POSITIVE_SUGGESTIONS[pool]),
                emphasis=protein_label,
            )
        )

    veggies = tagged["veggies"]
    if len(veggies) < MIN_VEGGIE_FOODS:
        detail = (
            f"Only {len(_dedupe(veggies))} veggie-rich items logged."
            if veggies
            else "No salads or veggie sabjis detected."
        )
        eat_more.append(
            GuidanceItem(
                title="Add Colorful Veggies",
                detail=detail,
                suggestions=list(POSITIVE_SUGGESTIONS["veggies"]),
            )
        )

    if fruit_insights.servings < FRUIT_TARGET_SERVINGS:
        detail = (
            f"Detected {', '.join(fruit_insights.detected_foods)} "
            f"(~{fruit_insights.servings:g} servings)."
            if fruit_insights.detected_foods
            else "No fruit servings identified from today's log."
        )
        eat_more.append(
            GuidanceItem(
                title="Bump Up Fruits",
                detail=detail,
                suggestions=list(POSITIVE_SUGGESTIONS["fruits"]),
                emphasis=f"{fruit_insights.servings:g} servings",
            )
        )

    if tagged["fried"]:
        limit.append(
            GuidanceItem(
                title="Cut Back on Fried Snacks",
                detail=f"Logged items: {', '.join(_dedupe(tagged['fried']))}.",
                suggestions=list(LIMIT_SUGGESTIONS["fried"]),
            )
        )

    if tagged["sweets"]:
        limit.append(
            GuidanceItem(
                title="Trim Added Sugar",
                detail=f"Dessert/sweet items: {', '.join(_dedupe(tagged['sweets']))}.",
                suggestions=list(LIMIT_SUGGESTIONS["sweets"]),
            )
        )

    refined = tagged["refined_carbs"]
    if len(refined) - len(tagged["whole_carbs"]) >= REFINED_CARB_EXCESS:
        limit.append(
            GuidanceItem(
                title="Balance Refined Carbs",
                detail=f"Refined carbs dominated ({', '.join(_dedupe(refined))}).",
                suggestions=list(LIMIT_SUGGESTIONS["refined_carbs"]),
            )
        )

    meals_logged = sum(1 for log in food_logs if log.custom_foods)
    return FoodGuidance(
        summary=GuidanceSummary(
            total_protein=int(round_half_up(total_protein)),
            fruit_servings=fruit_insights.servings,
            meals_logged=meals_logged,
        ),
        eat_more=eat_more,
        limit=limit,
    )


def build_weekly_context(
    entries: list[DailyEntry], current_date: date
) -> WeeklyRecommendationContext | None:
    """Aggregate up to the last seven entries into a prompt context."""
    if not entries:
        return None
    recent = sorted(entries, key=lambda entry: entry.date)[-WEEK_DAYS:]
    count = len(recent)

    timeline: list[WeeklyContextDay] = []
    water = sleep = quality = fruit = 0.0
    for entry in recent:
        metrics = calculate_metrics(entry.food_logs, entry.activity)
        timeline.append(
            WeeklyContextDay(
                day=entry.date,
                intake=metrics.total_intake,
                burn=metrics.total_burn,
                deficit=metrics.calorie_deficit,
            )
        )
        water += entry.health.water_intake
        sleep += calculate_sleep_hours(entry.health.wake_time, entry.health.sleep_time)
        quality += entry.health.food_quality_score
        fruit += entry.health.fruit_intake

    average_deficit = sum(day.deficit for day in timeline) / count
    average_water = water / count
    average_sleep = sleep / count
    average_quality = quality / count
    average_fruit = fruit / count

    missing_habits: list[str] = []
    if average_water < 8:  # noqa: PLR2004
        missing_habits.append("Water < 8 glasses")
    if average_sleep < 7:  # noqa: PLR2004
        missing_habits.append("Sleep < 7 hrs")
    if average_quality < 3.5:  # noqa: PLR2004
        missing_habits.append("Food quality < 3.5")
    if average_fruit < FRUIT_TARGET_SERVINGS:
        missing_habits.append("Fruit servings < 2")

    yesterday = current_date - timedelta(days=1)
    return WeeklyRecommendationContext(
        range_label=format_range_label(recent[0].date, recent[-1].date),
        days_tracked=count,
        average_intake=sum(day.intake for day in timeline) / count,
        average_burn=sum(day.burn for day in timeline) / count,
        average_water=average_water,
        average_sleep=average_sleep,
        average_food_quality=average_quality,
        average_fruit=average_fruit,
        average_deficit=average_deficit,
        trend=classify_weekly_trend(average_deficit),
        timeline=timeline,
        yesterday=next((day for day in timeline if day.day == yesterday), None),
        missing_habits=missing_habits,
    )


def classify_weekly_trend(average_deficit: float) -> WeeklyTrend:
    if average_deficit >= 250:  # noqa: PLR2004
        return "deficit"
    if average_deficit <= -150:  # noqa: PLR2004
        return "surplus"
    return "balanced"


def format_range_label(start: date, end: date) -> str:
    """Format a date span like "Mar 3 - 9" or "Mar 29 - Apr 4"."""
    start_label = f"{start:%b} {start.day}"
    if (start.year, start.month) == (end.year, end.month):
        return f"{start_label} - {end.day}"
    return f"{start_label} - {end:%b} {end.day}"


def _classify_fruit(name: str) -> FruitClassifier | None:
    for classifier in FRUIT_CLASSIFIERS:
        if _matches_any(name, classifier.keywords):
            return classifier
    return None


def _matches_any(name: str, patterns: tuple[str, ...]) -> bool:
    return any(pattern in name for pattern in patterns)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        trimmed = item.strip()
        if trimmed and trimmed not in seen:
            seen.add(trimmed)
            result.append(trimmed)
    return result
