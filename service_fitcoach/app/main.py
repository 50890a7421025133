"""
FitCoach function service for the FitCoach Access Layer.
"""

from typing import Any, Dict

from fastapi import Request

from shared.base_service import BaseService
from .exercises.client import ExerciseClient
from .gemini.client import GeminiClient
from .identity.authenticator import CallerAuthenticator
from .identity.client import IdentityClient
from .nutrition.service import NutritionService
from .schemas import (
    AutocompleteRequest,
    BarcodeRequest,
    CallableRequest,
    ExerciseSearchRequest,
    FoodDetailsRequest,
    GeminiChatRequest,
    SearchFoodsRequest,
    parse_input,
)


class FitcoachService(BaseService):
    """Callable functions fronting the model, exercise and nutrition APIs."""

    def __init__(self):
        super().__init__("fitcoach", 8020)

        self.authenticator = CallerAuthenticator(IdentityClient(self.config))
        self.gemini = GeminiClient(self.config, self.metrics)
        self.exercises = ExerciseClient(self.config, self.metrics)
        # Owns the process-wide bearer token cache.
        self.nutrition = NutritionService.from_config(self.config, self.metrics)

        self._setup_function_routes()

    def _setup_function_routes(self):
        """Set up callable function routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "fitcoach",
                "message": "FitCoach Access Layer - Function Service",
                "version": "1.0.0"
            }

        @self.app.post("/geminiChat")
        async def gemini_chat(request: Request, body: CallableRequest):
            await self.authenticator.authenticate_request(request)
            data = parse_input(GeminiChatRequest, body.data)
            result = await self.gemini.chat(
                data.contents,
                model=data.model,
                fallback_model=data.fallback_model,
                system_instruction=data.system_instruction,
            )
            return self._result("geminiChat", result)

        @self.app.post("/apiNinjasSearchExercises")
        async def search_exercises(request: Request, body: CallableRequest):
            await self.authenticator.authenticate_request(request)
            data = parse_input(ExerciseSearchRequest, body.data)
            result = await self.exercises.search(
                name=data.name,
                muscle=data.muscle,
                type=data.type,
                difficulty=data.difficulty,
            )
            return self._result("apiNinjasSearchExercises", result)

        @self.app.post("/fsSearchFoods")
        async def search_foods(request: Request, body: CallableRequest):
            await self.authenticator.authenticate_request(request)
            data = parse_input(SearchFoodsRequest, body.data)
            foods = await self.nutrition.search_foods(data.query, data.max_results, data.page)
            return self._result("fsSearchFoods", [food.model_dump() for food in foods])

        @self.app.post("/fsAutocomplete")
        async def autocomplete(request: Request, body: CallableRequest):
            await self.authenticator.authenticate_request(request)
            data = parse_input(AutocompleteRequest, body.data)
            suggestions = await self.nutrition.autocomplete(data.expr, data.max_results)
            return self._result("fsAutocomplete", suggestions)

        @self.app.post("/fsGetFoodDetails")
        async def get_food_details(request: Request, body: CallableRequest):
            await self.authenticator.authenticate_request(request)
            data = parse_input(FoodDetailsRequest, body.data)
            details = await self.nutrition.get_food_details(data.food_id)
            return self._result("fsGetFoodDetails", details.model_dump())

        @self.app.post("/fsGetFoodDetailsByBarcode")
        async def get_food_details_by_barcode(request: Request, body: CallableRequest):
            await self.authenticator.authenticate_request(request)
            data = parse_input(BarcodeRequest, body.data)
            details = await self.nutrition.get_food_details_by_barcode(
                data.raw_code,
                region=data.region,
                language=data.language,
            )
            return self._result("fsGetFoodDetailsByBarcode", details.model_dump())

    def _result(self, function_name: str, value: Any) -> Dict[str, Any]:
        self.metrics.record_business_event(function_name)
        return {"result": value}

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report which upstream credentials are configured."""
        config = self.config
        breaker = self.authenticator.identity_client.circuit_breaker

        def configured(*values) -> str:
            return "configured" if all(values) else "missing"

        return {
            "identity_service": breaker.get_state()["state"],
            "gemini": configured(config.gemini_api_key),
            "api_ninjas": configured(config.api_ninjas_key),
            "fatsecret_oauth2": configured(config.fs_oauth2_client_id, config.fs_oauth2_client_secret),
            "fatsecret_oauth1": configured(config.fs_oauth1_consumer_key, config.fs_oauth1_consumer_secret),
        }


def create_app():
    """Create FastAPI application."""
    service = FitcoachService()
    return service.app


if __name__ == "__main__":
    service = FitcoachService()
    service.run()
