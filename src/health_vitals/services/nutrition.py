"""Nutrition estimates for free-text foods via the LLM."""

import logging
import re
from dataclasses import dataclass, field

from health_vitals.domain.coach import NutritionEstimate
from health_vitals.services.cache import Cache
from health_vitals.services.json_repair import parse_llm_json
from health_vitals.services.llm import LlmService
from health_vitals.services.prompts import estimate_prompt
from health_vitals.services.scheduling import SupersedingRunner

_logger = logging.getLogger(__name__)

_FIELD_PATTERNS = {
    "calories": re.compile(r"[\"']?calories[\"']?\s*:\s*(\d+(?:\.\d+)?)", re.I),
    "protein": re.compile(r"[\"']?protein[\"']?\s*:\s*(\d+(?:\.\d+)?)", re.I),
    "sodium": re.compile(r"[\"']?sodium[\"']?\s*:\s*(\d+(?:\.\d+)?)", re.I),
}


@dataclass
class NutritionService:
    """Estimates calories, protein and sodium with a short-lived cache."""

    llm: LlmService
    cache: Cache
    estimate_ttl_seconds: int = 300
    runner: SupersedingRunner = field(default_factory=SupersedingRunner)

    async def estimate(
        self,
        food_name: str,
        amount: float | None = None,
        unit: str | None = None,
        *,
        stream: str | None = None,
    ) -> NutritionEstimate:
        """Estimate nutrition for a portion of food.

        When ``stream`` is given, a newer estimate on the same stream cancels
        this one and the caller gets ``RequestSupersededError``.
        """
        cache_key = _cache_key(food_name, amount, unit)
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutritionEstimate):
            return cached

        if stream is None:
            estimate = await self._request(food_name, amount, unit)
        else:
            estimate = await self.runner.run(
                stream, lambda: self._request(food_name, amount, unit)
            )
        if estimate.method == "ai":
            self.cache.set(cache_key, estimate, ttl_seconds=self.estimate_ttl_seconds)
        return estimate

    async def _request(
        self, food_name: str, amount: float | None, unit: str | None
    ) -> NutritionEstimate:
        text = await self.llm.generate(
            estimate_prompt(food_name, amount, unit),
            temperature=0.3,
            max_output_tokens=100,
        )
        return parse_estimate(text)


def parse_estimate(text: str) -> NutritionEstimate:
    """Read an estimate from LLM output, falling back to field regexes."""
    parsed = parse_llm_json(text)
    values: dict[str, float | None] = {}
    if isinstance(parsed, dict):
        for name in _FIELD_PATTERNS:
            values[name] = _as_number(parsed.get(name))
    else:
        for name, pattern in _FIELD_PATTERNS.items():
            match = pattern.search(text)
            values[name] = float(match.group(1)) if match else None

    calories = values.get("calories")
    if not calories:
        _logger.warning("Could not parse calorie estimate: %.200s", text)
        return NutritionEstimate(method="unavailable")
    return NutritionEstimate(
        calories=int(calories),
        protein=values.get("protein"),
        sodium=values.get("sodium"),
        method="ai",
    )


def _as_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        match = re.search(r"\d+(?:\.\d+)?", value)
        return float(match.group(0)) if match else None
    return None


def _cache_key(food_name: str, amount: float | None, unit: str | None) -> str:
    quantity = f"{amount:g}" if amount else "1"
    return f"{food_name.strip().lower()}-{quantity}-{unit or ''}"
