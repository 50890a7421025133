"""
Callable-function envelopes and per-function input models.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shared.errors import InvalidArgumentError


class CallableRequest(BaseModel):
    """Request envelope: ``{"data": {...}}``."""
    data: Optional[Dict[str, Any]] = None


class CallableInput(BaseModel):
    """Callable payloads use camelCase keys; text inputs are trimmed."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_default(cls, value, info):
        if value is None:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)
        return value


class GeminiChatRequest(CallableInput):
    contents: List[Any] = []
    model: Optional[str] = None
    fallback_model: Optional[str] = Field(default=None, alias="fallbackModel")
    system_instruction: Optional[str] = Field(default=None, alias="systemInstruction")


class ExerciseSearchRequest(CallableInput):
    name: str = ""
    muscle: str = ""
    type: str = ""
    difficulty: str = ""


class SearchFoodsRequest(CallableInput):
    query: str = ""
    max_results: int = Field(default=20, alias="max")
    page: int = 0


class AutocompleteRequest(CallableInput):
    expr: str = ""
    max_results: int = Field(default=8, alias="max")


class FoodDetailsRequest(CallableInput):
    food_id: str = Field(default="", alias="foodId")


class BarcodeRequest(CallableInput):
    raw_code: str = Field(default="", alias="rawCode")
    region: Optional[str] = None
    language: Optional[str] = None


InputT = TypeVar("InputT", bound=CallableInput)


def parse_input(model: Type[InputT], data: Optional[Dict[str, Any]]) -> InputT:
    """Validate callable ``data``; failures become ``InvalidArgumentError``."""
    try:
        return model.model_validate(data or {})
    except ValidationError as exc:
        fields = [".".join(str(loc) for loc in err["loc"]) for err in exc.errors()]
        raise InvalidArgumentError(
            f"Invalid input: {', '.join(fields)}",
            details={"fields": fields}
        )
