"""
Normalized nutrition outputs.
"""

from typing import Any, List

from pydantic import BaseModel


class FoodSummary(BaseModel):
    id: str
    name: str
    type: str


class FoodDetails(BaseModel):
    id: str
    name: str
    servings: List[Any] = []
