"""LLM-backed coaching features with neutral fallbacks."""

import logging
import math
import re
from dataclasses import dataclass, field

from health_vitals.domain.coach import (
    ActionItem,
    FoodQualityScore,
    RoutineEvaluation,
    RoutineStep,
    WeeklyInsights,
)
from health_vitals.domain.entries import (
    DEFAULT_FOOD_QUALITY,
    DailyEntry,
    FoodLogEntry,
    Recommendation,
)
from health_vitals.domain.insights import (
    FoodGuidance,
    GuidanceItem,
    GuidanceSummary,
    WeeklyRecommendationContext,
)
from health_vitals.services import prompts
from health_vitals.services.json_repair import parse_llm_json
from health_vitals.services.llm import LlmService
from health_vitals.services.metrics import round_half_up
from health_vitals.services.scheduling import SupersedingRunner

_logger = logging.getLogger(__name__)

_SCORE_RE = re.compile(r"[\"']?score[\"']?\s*:\s*(\d)")
_CATEGORIES = {"Nutrition", "Exercise", "Sleep", "Hydration", "Overall"}
_PRIORITIES = {"high", "medium", "low"}
_DEFAULT_SUGGESTION = "Review your food choices"


@dataclass
class CoachService:
    """Turns entries into prompts and parses the replies."""

    llm: LlmService
    runner: SupersedingRunner = field(default_factory=SupersedingRunner)

    async def score_food_quality(
        self, food_logs: list[FoodLogEntry], *, stream: str | None = None
    ) -> FoodQualityScore:
        """Rate a day's foods from 1 to 5; 3 when nothing usable comes back."""
        foods = [food.describe() for log in food_logs for food in log.custom_foods]
        if not foods:
            return FoodQualityScore(
                score=DEFAULT_FOOD_QUALITY, reasoning="No foods logged yet"
            )

        async def request() -> str:
            return await self.llm.generate(
                prompts.food_quality_prompt(foods),
                temperature=0.3,
                max_output_tokens=200,
            )

        if stream is None:
            text = await request()
        else:
            text = await self.runner.run(stream, request)
        return parse_food_quality(text)

    async def daily_recommendations(
        self,
        entry: DailyEntry,
        context: WeeklyRecommendationContext | None = None,
    ) -> list[Recommendation]:
        text = await self.llm.generate(
            prompts.daily_recommendations_prompt(entry, context),
            temperature=0.5,
            max_output_tokens=500,
        )
        return parse_recommendations(text)

    async def food_guidance(self, entry: DailyEntry, *, veg_mode: bool) -> FoodGuidance:
        text = await self.llm.generate(
            prompts.food_guidance_prompt(entry, veg_mode=veg_mode),
            temperature=0.3,
            max_output_tokens=1200,
        )
        return parse_food_guidance(text)

    async def weekly_insights(self, data: dict[str, object]) -> WeeklyInsights:
        text = await self.llm.generate(
            prompts.weekly_insights_prompt(data),
            temperature=0.35,
            max_output_tokens=800,
        )
        parsed = parse_llm_json(text)
        if not isinstance(parsed, dict):
            _logger.warning("Weekly insights returned invalid JSON")
            return WeeklyInsights()
        return WeeklyInsights(
            overview=str(parsed.get("overview") or WeeklyInsights().overview),
            wins=_string_list(parsed.get("wins")),
            watchouts=_string_list(parsed.get("watchouts")),
            actions=_action_items(parsed.get("actions")),
        )

    async def evaluate_routine(self, steps: list[RoutineStep]) -> RoutineEvaluation:
        text = await self.llm.generate(
            prompts.routine_evaluation_prompt(steps),
            temperature=0.35,
            max_output_tokens=600,
        )
        parsed = parse_llm_json(text)
        if not isinstance(parsed, dict):
            _logger.warning("Routine evaluation returned invalid JSON")
            return RoutineEvaluation()
        return RoutineEvaluation(
            verdict=str(parsed.get("verdict") or RoutineEvaluation().verdict),
            positives=_string_list(parsed.get("positives")),
            gaps=_string_list(parsed.get("gaps")),
            suggestions=_action_items(parsed.get("suggestions")),
        )


def parse_food_quality(text: str) -> FoodQualityScore:
    parsed = parse_llm_json(text)
    if isinstance(parsed, dict):
        raw_score = parsed.get("score")
        reasoning = str(parsed.get("reasoning") or "Food quality analyzed")
    else:
        _logger.warning("Food quality reply was not JSON: %.200s", text)
        match = _SCORE_RE.search(text)
        raw_score = int(match.group(1)) if match else None
        reasoning = "AI response parsing failed, using extracted score"
    try:
        score = (
            int(round_half_up(float(raw_score))) if raw_score is not None else None
        )
    except (TypeError, ValueError):
        score = None
    if not score:
        score = DEFAULT_FOOD_QUALITY
    return FoodQualityScore(score=max(1, min(5, score)), reasoning=reasoning)


def parse_recommendations(text: str) -> list[Recommendation]:
    parsed = parse_llm_json(text)
    if isinstance(parsed, dict):
        raw_items = parsed.get("recommendations")
    elif isinstance(parsed, list):
        raw_items = parsed
    else:
        raw_items = None
    if not isinstance(raw_items, list):
        _logger.warning("Recommendations reply had no usable list")
        return []

    recommendations: list[Recommendation] = []
    for item in raw_items:
        if not isinstance(item, dict) or not item.get("title"):
            continue
        category = str(item.get("category") or "Overall")
        priority = str(item.get("priority") or "medium").lower()
        recommendations.append(
            Recommendation(
                category=category if category in _CATEGORIES else "Overall",
                title=str(item["title"]),
                description=str(item.get("description") or ""),
                priority=priority if priority in _PRIORITIES else "medium",
            )
        )
    return recommendations


def parse_food_guidance(text: str) -> FoodGuidance:
    parsed = parse_llm_json(text)
    if not isinstance(parsed, dict):
        _logger.warning("Food guidance reply was unusable")
        return FoodGuidance()
    data = parsed.get("guidance", parsed)
    if not isinstance(data, dict):
        return FoodGuidance()
    summary = data.get("summary") if isinstance(data.get("summary"), dict) else {}
    return FoodGuidance(
        summary=GuidanceSummary(
            total_protein=_safe_number(summary.get("totalProtein")),
            fruit_servings=_safe_number(summary.get("fruitServings")),
            meals_logged=int(_safe_number(summary.get("mealsLogged"))),
        ),
        eat_more=_guidance_items(data.get("eatMore")),
        limit=_guidance_items(data.get("limit")),
    )


def _guidance_items(raw: object) -> list[GuidanceItem]:
    if not isinstance(raw, list):
        return []
    items: list[GuidanceItem] = []
    for candidate in raw:
        if not isinstance(candidate, dict):
            continue
        title, detail = candidate.get("title"), candidate.get("detail")
        if not title or not detail:
            continue
        suggestions = candidate.get("suggestions")
        if isinstance(suggestions, list):
            tactics = [str(value) for value in suggestions if value]
        elif suggestions:
            tactics = [str(suggestions)]
        else:
            tactics = []
        emphasis = candidate.get("emphasis")
        items.append(
            GuidanceItem(
                title=str(title),
                detail=str(detail),
                suggestions=tactics or [_DEFAULT_SUGGESTION],
                emphasis=str(emphasis) if emphasis else None,
            )
        )
    return items


def _action_items(raw: object) -> list[ActionItem]:
    if not isinstance(raw, list):
        return []
    items: list[ActionItem] = []
    for candidate in raw:
        if not isinstance(candidate, dict):
            continue
        title = candidate.get("title")
        if not title:
            continue
        items.append(
            ActionItem(title=str(title), detail=str(candidate.get("detail") or ""))
        )
    return items


def _string_list(raw: object) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [str(value) for value in raw if value]


def _safe_number(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0
