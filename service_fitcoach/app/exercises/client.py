"""
Exercise database (API Ninjas) client.
"""

from typing import Any, Dict, Optional

import httpx

from shared.config import BaseConfig
from shared.errors import ConfigurationError
from shared.metrics import MetricsCollector
from ..upstream import check_response


SERVICE = "API Ninjas"


class ExerciseClient:
    """Stateless passthrough to the exercises endpoint."""

    def __init__(self, config: BaseConfig, metrics: Optional[MetricsCollector] = None):
        self.config = config
        self.metrics = metrics

    async def search(self, name: str = "", muscle: str = "", type: str = "",
                     difficulty: str = "") -> Any:
        api_key = self.config.api_ninjas_key
        if not api_key:
            raise ConfigurationError("API_NINJAS_KEY missing")

        filters = {"name": name, "muscle": muscle, "type": type, "difficulty": difficulty}
        params: Dict[str, str] = {k: v.strip() for k, v in filters.items() if v and v.strip()}

        async with httpx.AsyncClient(timeout=self.config.upstream_timeout_seconds) as client:
            response = await client.get(
                self.config.api_ninjas_url,
                params=params,
                headers={"X-Api-Key": api_key},
            )
        return check_response(SERVICE, response, self.metrics)
