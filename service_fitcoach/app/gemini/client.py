"""
Generative Language API client.
"""

from typing import Any, Dict, List, Optional

import httpx

from shared.config import BaseConfig
from shared.errors import ConfigurationError, InvalidArgumentError, UpstreamError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..upstream import check_response
from .tools import DEFAULT_SYSTEM_INSTRUCTION, TOOLS


SERVICE = "Gemini"


def is_overloaded(error: UpstreamError) -> bool:
    """True for errors that warrant one retry on the fallback model."""
    return error.upstream_status == 503 or "overloaded" in error.body.lower()


def simplify_response(payload: Any) -> Dict[str, Any]:
    """Flatten the first candidate into text plus structured function calls."""
    candidates = payload.get("candidates") if isinstance(payload, dict) else None
    candidate = candidates[0] if isinstance(candidates, list) and candidates else {}
    content = candidate.get("content") if isinstance(candidate, dict) else None
    parts = (content or {}).get("parts") or []

    text = "\n".join(p["text"] for p in parts if isinstance(p, dict) and p.get("text")).strip()

    function_calls = [
        {"name": str(call.get("name") or ""), "args": call.get("args") or {}}
        for call in (p.get("functionCall") for p in parts if isinstance(p, dict))
        if call
    ]

    return {
        "text": text or None,
        "candidateContent": content,
        "functionCalls": function_calls,
    }


class GeminiClient:
    """Chat with tool calling, with a single retry on an alternate model."""

    def __init__(self, config: BaseConfig, metrics: Optional[MetricsCollector] = None):
        self.config = config
        self.metrics = metrics
        self.logger = get_logger("fitcoach.gemini")

    def build_payload(self, contents: List[Any], system_instruction: Optional[str] = None) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": system_instruction or DEFAULT_SYSTEM_INSTRUCTION}]},
            "contents": contents,
            "tools": TOOLS,
            "toolConfig": {"functionCallingConfig": {"mode": "AUTO"}},
            "generationConfig": {"temperature": self.config.gemini_temperature},
        }

    async def generate(self, model: str, payload: Dict[str, Any]) -> Any:
        api_key = self.config.gemini_api_key
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY missing")

        url = f"{self.config.gemini_api_root.rstrip('/')}/models/{model}:generateContent"
        async with httpx.AsyncClient(timeout=self.config.upstream_timeout_seconds) as client:
            response = await client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
            )
        return check_response(SERVICE, response, self.metrics)

    async def chat(self, contents: List[Any], model: Optional[str] = None,
                   fallback_model: Optional[str] = None,
                   system_instruction: Optional[str] = None) -> Dict[str, Any]:
        if not isinstance(contents, list) or not contents:
            raise InvalidArgumentError("contents[] required")

        model = model or self.config.gemini_default_model
        fallback_model = fallback_model or self.config.gemini_fallback_model
        payload = self.build_payload(contents, system_instruction)

        try:
            result = await self.generate(model, payload)
        except UpstreamError as exc:
            if not is_overloaded(exc):
                raise
            self.logger.warning(
                "Model overloaded, retrying on fallback model",
                model=model,
                fallback_model=fallback_model,
                status_code=exc.upstream_status
            )
            result = await self.generate(fallback_model, payload)

        return simplify_response(result)
