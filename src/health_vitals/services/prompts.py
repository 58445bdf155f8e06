"""Prompt templates sent to the LLM.

Each template spells out the JSON shape it expects back; the matching parser
lives in the service that sends it.
"""

import json

from health_vitals.domain.coach import RoutineStep
from health_vitals.domain.entries import DailyEntry
from health_vitals.domain.insights import WeeklyRecommendationContext
from health_vitals.services.metrics import calculate_sleep_hours


def estimate_prompt(food_name: str, amount: float | None, unit: str | None) -> str:
    quantity = f"{amount:g}" if amount else "1"
    return (
        f"Estimate the calories (in kcal), protein (in grams) and sodium "
        f"(in mg) for {quantity} {unit or 'serving'} of {food_name}.\n"
        "Respond with ONLY a JSON object in this exact format:\n"
        '{"calories": <number>, "protein": <number>, "sodium": <number>}\n\n'
        "If the amount is not specified, assume 1 standard serving.\n"
        "Provide only the JSON object, no other text."
    )


def food_quality_prompt(foods: list[str]) -> str:
    return (
        "Analyze the following foods consumed in a day and rate the overall "
        "food quality on a scale of 1-5, where:\n"
        "- 1 = Very poor (mostly processed, high sugar, unhealthy)\n"
        "- 2 = Poor (mostly unhealthy with few nutritious items)\n"
        "- 3 = Moderate (mix of healthy and unhealthy)\n"
        "- 4 = Good (mostly healthy, balanced nutrition)\n"
        "- 5 = Excellent (very healthy, whole foods, balanced macros)\n\n"
        f"Foods consumed: {', '.join(foods)}\n\n"
        "Respond with ONLY a JSON object in this exact format:\n"
        '{"score": <number 1-5>, "reasoning": "<brief explanation>"}\n\n'
        "Do not include any other text, just the JSON object."
    )


def daily_recommendations_prompt(
    entry: DailyEntry, context: WeeklyRecommendationContext | None = None
) -> str:
    metrics = entry.metrics
    activity = entry.activity
    health = entry.health
    foods = [food.describe() for food in entry.all_foods()]
    sleep_hours = calculate_sleep_hours(health.wake_time, health.sleep_time)
    lines = [
        "Analyze the following daily health data and provide 3-5 specific, "
        "actionable recommendations for improvement. Be concise and practical.",
        "",
        "Daily Data:",
        f"- Foods consumed: {', '.join(foods) if foods else 'No foods logged'}",
        f"- Total calorie intake: {metrics.total_intake if metrics else 0} kcal",
        f"- Total calorie burn: {metrics.total_burn if metrics else 0} kcal",
        f"- Calorie deficit: {metrics.calorie_deficit if metrics else 0} kcal",
        f"- Protein: {metrics.total_protein if metrics else 0} g",
        f"- Sodium: {metrics.total_sodium if metrics else 0} mg",
        f"- Active calories: {activity.active_calories} kcal",
        f"- Resting calories: {activity.resting_calories} kcal",
        f"- Workout time: {activity.workout_time.strength} min strength, "
        f"{activity.workout_time.cardio} min cardio",
        f"- Sleep: {sleep_hours:.1f} hours "
        f"(wake: {health.wake_time}, sleep: {health.sleep_time})",
        f"- Water intake: {health.water_intake} glasses",
        f"- Fruit intake: {health.fruit_intake:g} servings",
        f"- Green tea: {health.green_tea_count} cups",
        f"- Black coffee: {health.black_coffee_count} cups",
        f"- Food quality score: {health.food_quality_score}/5",
        f"- Face status: {health.face_status}",
    ]
    if context is not None:
        lines.extend(_weekly_context_lines(context))
    lines.extend(
        [
            "",
            "Provide recommendations in JSON format:",
            "{",
            '  "recommendations": [',
            "    {",
            '      "category": "Nutrition" | "Exercise" | "Sleep" | "Hydration" '
            '| "Overall",',
            '      "title": "Brief title",',
            '      "description": "Specific actionable advice",',
            '      "priority": "high" | "medium" | "low"',
            "    }",
            "  ]",
            "}",
            "",
            "Focus on:",
            "- Specific improvements based on actual data",
            "- Actionable steps the user can take tomorrow",
            "- Balance between different health aspects",
            "- Realistic and achievable goals",
            "",
            "Respond with ONLY the JSON object, no other text.",
        ]
    )
    return "\n".join(lines)


def food_guidance_prompt(entry: DailyEntry, *, veg_mode: bool) -> str:
    metrics = entry.metrics
    health = entry.health
    veg_note = (
        "\n\nIMPORTANT: User is in VEG MODE. Only suggest vegetarian foods. "
        "Do NOT recommend any meat, fish, poultry, or seafood. Focus on "
        "plant-based proteins like paneer, tofu, dal, legumes, sprouts, etc."
        if veg_mode
        else ""
    )
    veg_rule = (
        "ONLY suggest vegetarian options. Never recommend meat, fish, or poultry."
        if veg_mode
        else "Any cuisine is fine."
    )
    protein = metrics.total_protein if metrics else "unknown"
    sodium = metrics.total_sodium if metrics else "unknown"
    item_schema = (
        "      {\n"
        '        "title": "<string, max 7 words>",\n'
        '        "detail": "<string referencing specific foods from log>",\n'
        '        "suggestions": ["<actionable tactic 1>", "<actionable tactic 2>"],\n'
        '        "emphasis": "<optional string>"\n'
        "      }"
    )
    return (
        "You are a precise nutrition coach. Analyze the user's logged meals and "
        "lifestyle data, critique problem areas, and provide food guidance that "
        "balances praise with clear fixes.\n\n"
        "DATA SNAPSHOT\n"
        f"- Foods: {_format_food_list(entry)}\n"
        f"- Total intake: {metrics.total_intake if metrics else 0} kcal\n"
        f"- Total burn: {metrics.total_burn if metrics else 0} kcal\n"
        f"- Protein estimate: {protein} g\n"
        f"- Sodium estimate: {sodium} mg\n"
        f"- Hydration: {health.water_intake} glasses\n"
        f"- Fruit servings (auto): {health.fruit_intake:g}\n"
        f"- Face status: {health.face_status}"
        f"{veg_note}\n\n"
        "TASK\n"
        "1. Identify 2-3 things to double down on (protein, fiber, fruits, smart "
        "carbs, hydration, etc.) referencing the actual foods eaten.\n"
        "2. Identify 2-3 things to pause/limit (fried, sugar, refined carbs, "
        "overeating, missing meals) referencing the actual foods.\n"
        "3. Keep guidance hyper-specific with portion ideas or swaps.\n"
        f"4. {veg_rule}\n"
        "5. Count meals logged from the food list above.\n\n"
        "CRITICAL: You MUST respond with ONLY valid JSON. No markdown, no code "
        "blocks. Start directly with { and end with }.\n\n"
        "Required JSON format:\n"
        "{\n"
        '  "guidance": {\n'
        '    "summary": {"totalProtein": <number>, "fruitServings": <number>, '
        '"mealsLogged": <number>},\n'
        f'    "eatMore": [\n{item_schema}\n    ],\n'
        f'    "limit": [\n{item_schema}\n    ]\n'
        "  }\n"
        "}\n\n"
        "Rules:\n"
        "- Title must be <= 7 words.\n"
        "- Detail must reference concrete foods from the log.\n"
        "- If no data is available, return empty arrays but keep the structure.\n"
        "- Return 2-3 items in eatMore and 2-3 items in limit arrays.\n"
        "- Ensure all strings are properly escaped in JSON."
    )


def weekly_insights_prompt(data: dict[str, object]) -> str:
    return (
        "You are a performance coach analyzing a 7-day health log.\n"
        "DATA:\n"
        f"{json.dumps(data, indent=2, default=str)}\n\n"
        "Respond ONLY with JSON in this exact schema:\n"
        "{\n"
        '  "overview": "<2-sentence recap>",\n'
        '  "wins": ["<bullet>", "..."],\n'
        '  "watchouts": ["<bullet>", "..."],\n'
        '  "actions": [\n'
        '    { "title": "<short action>", "detail": "<how to do it>" }\n'
        "  ]\n"
        "}\n\n"
        "Rules:\n"
        '- Use data-driven references (e.g., "Averaged 5.5h sleep").\n'
        "- Max 3 bullets per section.\n"
        "- Titles <= 6 words.\n"
        "- No markdown, no code fences."
    )


def routine_evaluation_prompt(steps: list[RoutineStep]) -> str:
    payload = json.dumps([step.model_dump() for step in steps], indent=2)
    return (
        "You are a dermatologist. Evaluate this skincare routine:\n"
        f"{payload}\n\n"
        "Return STRICT JSON (no markdown) with schema:\n"
        "{\n"
        '  "verdict": "<short headline>",\n'
        '  "positives": ["..."],\n'
        '  "gaps": ["..."],\n'
        '  "suggestions": [\n'
        '    { "title": "<short action>", "detail": "<how to improve>" }\n'
        "  ]\n"
        "}\n\n"
        "Rules:\n"
        "- Mention if AM/PM balance is missing (e.g., sunscreen absent in AM).\n"
        "- Note frequency conflicts (e.g., multiple exfoliants daily).\n"
        "- Max 3 bullets per section."
    )


def _weekly_context_lines(context: WeeklyRecommendationContext) -> list[str]:
    lines = [
        "",
        f"Recent week ({context.range_label}, {context.days_tracked} days tracked):",
        f"- Average intake: {context.average_intake:.0f} kcal",
        f"- Average burn: {context.average_burn:.0f} kcal",
        f"- Average deficit: {context.average_deficit:.0f} kcal ({context.trend})",
        f"- Average sleep: {context.average_sleep:.1f} hours",
        f"- Average water: {context.average_water:.1f} glasses",
        f"- Average food quality: {context.average_food_quality:.1f}/5",
        f"- Average fruit: {context.average_fruit:.1f} servings",
    ]
    if context.yesterday is not None:
        lines.append(
            f"- Yesterday: {context.yesterday.intake} kcal in, "
            f"{context.yesterday.burn} kcal out, "
            f"deficit {context.yesterday.deficit} kcal"
        )
    if context.missing_habits:
        lines.append(f"- Missing habits: {', '.join(context.missing_habits)}")
    return lines


def _format_food_list(entry: DailyEntry) -> str:
    foods: list[str] = []
    for log in entry.food_logs:
        for food in log.custom_foods:
            parts = [food.describe(), f"{food.calories} kcal"]
            if food.protein is not None:
                parts.append(f"{food.protein:g}g protein")
            parts.append(f"meal: {log.meal_type}")
            foods.append(", ".join(parts))
    return "; ".join(foods) if foods else "No foods logged"
