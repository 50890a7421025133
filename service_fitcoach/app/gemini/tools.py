"""
System instruction and function declarations sent with every chat request.
"""

DEFAULT_SYSTEM_INSTRUCTION = """
You are a helpful fitness & nutrition assistant. Use mainstream, trusted sports/nutrition science.
Be specific and quantitative. If the user wants a concrete meal or workout, call a function to return structured data.

MEALS
- When proposing meals, include ingredients with amounts and per-ingredient macros (kcal, protein, carbs, fat).
- Also include totals, and 2-4 small low-impact swaps (with brief macro impact).
- If the user sends a description or image of food, estimate the meal via the estimation function and include a confidence 0..1 and a brief disclaimer.

WORKOUTS
- For each exercise, provide sets, reps, RPE (0-10), optional restSeconds, and 1-3 swaps (alternatives targeting similar muscles).
- Use conservative guidance for intensity. RPE is subjective and should align with how hard the user feels the effort (0=rest, 10=max).

Avoid extreme claims; do not diagnose conditions. Keep wording concise.
""".strip()


_MACROS = {
    "calories": {"type": "number"},
    "protein": {"type": "number"},
    "carbs": {"type": "number"},
    "fat": {"type": "number"},
}

_INGREDIENTS = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "amount": {"type": "number"},
            "unit": {"type": "string"},
            **_MACROS,
        },
        "required": ["name", "amount", "unit", "calories", "protein", "carbs", "fat"],
    },
}

_TOTALS = {
    "type": "object",
    "properties": dict(_MACROS),
    "required": ["calories", "protein", "carbs", "fat"],
}

_SWAPS = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "why": {"type": "string"},
            "macroImpact": {"type": "string"},
        },
        "required": ["name", "why", "macroImpact"],
    },
}


PROPOSE_MEAL = {
    "name": "propose_meal",
    "description": "Return a specific meal with ingredients, per-ingredient macros, totals, and low-impact swaps.",
    "parametersJsonSchema": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "ingredients": _INGREDIENTS,
            "totals": _TOTALS,
            "swaps": _SWAPS,
            "notes": {"type": "string"},
        },
        "required": ["title", "ingredients", "totals", "swaps"],
    },
}

ESTIMATE_MEAL = {
    "name": "estimate_meal_from_input",
    "description": (
        "Estimate a meal from text and/or images. Return ingredients/macros/totals, swaps, "
        "and confidence 0..1 plus an estimation note."
    ),
    "parametersJsonSchema": {
        "type": "object",
        "properties": {
            "title": {"type": "string"},
            "ingredients": _INGREDIENTS,
            "totals": _TOTALS,
            "swaps": _SWAPS,
            "confidence": {"type": "number"},
            "estimationNote": {"type": "string"},
            "notes": {"type": "string"},
        },
        "required": ["title", "ingredients", "totals", "swaps", "confidence", "estimationNote"],
    },
}

PROPOSE_WORKOUT_PLAN = {
    "name": "propose_workout_plan",
    "description": "Return a workout plan with exercises (sets, reps, RPE), optional restSeconds, and swaps.",
    "parametersJsonSchema": {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "assignToToday": {"type": "boolean"},
            "notes": {"type": "string"},
            "exercises": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "sets": {"type": "integer"},
                        "reps": {"type": "integer"},
                        "rpe": {"type": "number"},
                        "restSeconds": {"type": "integer"},
                        "swaps": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": ["name", "sets", "reps", "rpe"],
                },
            },
        },
        "required": ["name", "exercises"],
    },
}

TOOLS = [
    {"functionDeclarations": [PROPOSE_MEAL, ESTIMATE_MEAL, PROPOSE_WORKOUT_PLAN]},
]
