"""
Food operations exposed to callers.

Each operation shapes the upstream parameters, lets the orchestrator choose
the protocol, and projects the raw response into a stable output.
"""

import re
from typing import Dict, List, Optional

from shared.config import BaseConfig
from shared.errors import InvalidArgumentError, NotFoundError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from . import normalize
from .adapters import LegacyAdapter, ModernAdapter
from .models import FoodDetails, FoodSummary
from .orchestrator import FallbackOrchestrator
from .token_acquirer import TokenAcquirer
from .token_cache import TokenCache


_NON_DIGITS = re.compile(r"\D")


def normalize_barcode(raw_code: str) -> str:
    """Canonicalise UPC-A / EAN-8 / EAN-13 input to a 13-digit GTIN."""
    digits = _NON_DIGITS.sub("", raw_code or "")
    if len(digits) == 13:
        return digits
    if len(digits) == 12:
        return "0" + digits
    if len(digits) == 8:
        return "00000" + digits
    raise InvalidArgumentError(
        f"Unsupported barcode length: {len(digits)}",
        details={"length": len(digits)}
    )


class NutritionService:
    """Search, autocomplete and detail lookups against the nutrition API."""

    def __init__(self, modern: ModernAdapter, legacy: LegacyAdapter,
                 orchestrator: FallbackOrchestrator):
        self.modern = modern
        self.legacy = legacy
        self.orchestrator = orchestrator
        self.logger = get_logger("fitcoach.nutrition")

    @classmethod
    def from_config(cls, config: BaseConfig, metrics: Optional[MetricsCollector] = None,
                    cache: Optional[TokenCache] = None) -> "NutritionService":
        acquirer = TokenAcquirer(config, cache or TokenCache(), metrics)
        return cls(
            modern=ModernAdapter(config, acquirer, metrics),
            legacy=LegacyAdapter(config, metrics),
            orchestrator=FallbackOrchestrator(lambda: config.fs_api_mode, metrics),
        )

    async def search_foods(self, query: str, max_results: int = 20, page: int = 0) -> List[FoodSummary]:
        query = (query or "").strip()
        if not query:
            return []

        params = {
            "search_expression": query,
            "max_results": str(max_results),
            "page_number": str(page),
        }
        data = await self.orchestrator.run(
            lambda: self.modern.get("foods/search/v3", params),
            lambda: self.legacy.call("foods.search.v2", params),
            operation="search_foods",
        )
        return normalize.food_summaries(data)

    async def autocomplete(self, expression: str, max_results: int = 8) -> List[str]:
        expression = (expression or "").strip()
        if not expression:
            return []

        params = {"expression": expression, "max_results": str(max_results)}
        data = await self.orchestrator.run(
            lambda: self.modern.post_method("foods.autocomplete", params),
            lambda: self.legacy.call("foods.autocomplete", params),
            operation="autocomplete",
        )
        return normalize.suggestions(data)

    async def get_food_details(self, food_id: str) -> FoodDetails:
        food_id = (food_id or "").strip()
        if not food_id:
            raise InvalidArgumentError("foodId required")

        params = {"food_id": food_id}
        data = await self.orchestrator.run(
            lambda: self.modern.get("food/v4", params),
            lambda: self.legacy.call("food.get", params),
            operation="get_food_details",
        )
        return normalize.food_details(data)

    async def get_food_details_by_barcode(self, raw_code: str, region: Optional[str] = None,
                                          language: Optional[str] = None) -> FoodDetails:
        raw_code = (raw_code or "").strip()
        if not raw_code:
            raise InvalidArgumentError("rawCode required")

        gtin13 = normalize_barcode(raw_code)
        region = (region or "").strip()
        language = (language or "").strip()

        params: Dict[str, str] = {"barcode": gtin13}
        if region:
            params["region"] = region
            if language:
                params["language"] = language

        data = await self.orchestrator.run(
            lambda: self.modern.get("food/barcode/find-by-id/v1", params),
            lambda: self.legacy.call("food.find_id_for_barcode", params),
            operation="find_id_for_barcode",
        )

        food_id = normalize.barcode_food_id(data)
        if food_id is None:
            raise NotFoundError(f"No match for barcode {gtin13}", details={"barcode": gtin13})

        self.logger.info("Barcode resolved", barcode=gtin13, food_id=food_id)
        return await self.get_food_details(food_id)
