"""
Helpers shared by the third-party API clients.
"""

from typing import Any, Optional

import httpx

from shared.errors import UpstreamError
from shared.logging import get_logger
from shared.metrics import MetricsCollector


logger = get_logger("fitcoach.upstream")


def read_json(response: httpx.Response) -> Any:
    """Decode a JSON body; bodies that are not JSON read as an empty object."""
    try:
        return response.json()
    except ValueError:
        return {}


def check_response(service: str, response: httpx.Response,
                   metrics: Optional[MetricsCollector] = None) -> Any:
    """Return the decoded body of a 2xx response or raise ``UpstreamError``."""
    if metrics is not None:
        metrics.increment_counter(
            "upstream_requests_total",
            upstream=service,
            status=str(response.status_code)
        )

    if not response.is_success:
        logger.warning("Upstream call failed", upstream=service, status_code=response.status_code)
        raise UpstreamError.from_response(service, response)

    return read_json(response)
