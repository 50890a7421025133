"""
Projections applied to nutrition API responses right after each call.

The upstream nests a lone result as an object and several results as an
array, so every result node goes through ``as_sequence``.
"""

from typing import Any, Dict, List, Optional

from .models import FoodDetails, FoodSummary


def as_sequence(node: Any) -> List[Any]:
    if node is None:
        return []
    if isinstance(node, list):
        return node
    return [node]


def dig(data: Any, *keys: str) -> Any:
    """Nested dict lookup that yields None on any missing or non-dict level."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def food_summaries(data: Any) -> List[FoodSummary]:
    node = dig(data, "foods", "food")
    if node is None:
        node = dig(data, "foods_search", "results", "food")

    return [
        FoodSummary(
            id=_text(food.get("food_id")),
            name=_text(food.get("food_name")),
            type=_text(food.get("food_type")),
        )
        for food in as_sequence(node)
        if isinstance(food, dict)
    ]


def suggestions(data: Any) -> List[str]:
    return [_text(item) for item in as_sequence(dig(data, "suggestions", "suggestion"))]


def food_details(data: Any) -> FoodDetails:
    food = dig(data, "food")
    if not isinstance(food, dict):
        food = {}

    servings: List[Dict[str, Any]] = as_sequence(dig(food, "servings", "serving"))
    return FoodDetails(
        id=_text(food.get("food_id")),
        name=_text(food.get("food_name")),
        servings=servings,
    )


def barcode_food_id(data: Any) -> Optional[str]:
    """The resolved id, or None when the barcode matched nothing."""
    node = dig(data, "food_id")
    if isinstance(node, dict):
        node = node.get("value")
    food_id = _text(node).strip()
    if not food_id or food_id == "0":
        return None
    return food_id
