"""LLM menu structurer.

Turns the flattened text of a LionDine page into a JSON menu record using
GPT, Claude, or a local Ollama model. The extraction policy lives in the
prompt: one entry per dining hall, exact hours, items grouped by station,
and closed halls carry no stations (also enforced after decoding).

Usage:
    structurer = LLMStructurer(provider="openai", api_key="sk-...")
    payload = await structurer.structure(menu_text, MealCategory.LUNCH)
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from liondine.config import Settings
from liondine.errors import StructuringFailed
from liondine.models import MealCategory
from liondine.pipeline.ports import MenuStructurer

logger = logging.getLogger(__name__)


_DEFAULT_MODELS = {
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-5",
    "ollama": "llama3.1:8b",
}

_KEYED_PROVIDERS = {"openai", "anthropic"}

_SYSTEM_PROMPT = (
    "You are a precise data extraction assistant. "
    "You always return valid JSON and nothing else."
)

_KNOWN_HALLS = (
    "Ferris, JJ's, Faculty House, Grace Dodge, Johnny's, Fac Shack, "
    "John Jay, Hewitt, Chef Mike's, Diana, Chef Don's"
)


def build_prompt(menu_text: str, category: MealCategory, timestamp: str) -> str:
    """Build the extraction prompt for one meal page."""
    meal = category.value
    return f"""Parse the following menu text from Lion Dine's {meal} page and structure it into JSON format.

The text contains information about multiple dining halls, each with:
- Hall name
- Operating hours (or "Closed for {meal}")
- Stations (e.g., "Main Line", "Vegan Station", "500 Degrees", etc.)
- Food items under each station

IMPORTANT RULES:
1. If a hall says "Closed for {meal}" or "No data available", set status to "closed" and include an empty stations array
2. Extract the exact hours shown (e.g., "7:30 AM to 11:00 AM")
3. Group food items by their station name
4. Preserve the exact food item names
5. The dining halls are typically: {_KNOWN_HALLS}

Return a JSON object with this exact structure:
{{
  "mealType": "{meal}",
  "timestamp": "{timestamp}",
  "diningHalls": [
    {{
      "name": "Dining Hall Name",
      "hours": "X:XX AM to XX:XX AM",
      "status": "open" or "closed",
      "stations": [
        {{
          "name": "Station Name",
          "items": ["item1", "item2", ...]
        }}
      ]
    }}
  ]
}}

Menu Text:
{menu_text}

Return ONLY the JSON object, no additional text or explanation."""


def decode_menu_json(content: str | None) -> dict[str, Any]:
    """Decode model output into a JSON object.

    Tolerates a surrounding Markdown code fence.

    Raises:
        StructuringFailed: If content is empty, not JSON, or not an object
    """
    if not content or not content.strip():
        raise StructuringFailed("No content returned from structuring service")

    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StructuringFailed(f"Structuring service returned invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise StructuringFailed(
            f"Structuring service returned {type(data).__name__}, expected a JSON object"
        )
    return data


def clear_closed_stations(payload: dict[str, Any]) -> dict[str, Any]:
    """Empty the stations of every hall marked closed."""
    halls = payload.get("diningHalls")
    if not isinstance(halls, list):
        return payload

    for hall in halls:
        if not isinstance(hall, dict):
            continue
        status = hall.get("status")
        if isinstance(status, str) and status.strip().lower() == "closed":
            hall["stations"] = []
    return payload


class LLMStructurer(MenuStructurer):
    """Structures menu text through an LLM chat API.

    Args:
        provider: 'openai', 'anthropic', or 'ollama'
        api_key: API key for the provider (None for ollama)
        model: Model ID (defaults per provider)
        base_url: Ollama base URL (default: http://localhost:11434)
        temperature: Sampling temperature (low for faithful extraction)
        max_tokens: Maximum response tokens
        timeout: HTTP timeout in seconds
    """

    def __init__(
        self,
        provider: str = "openai",
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = "http://localhost:11434",
        temperature: float = 0.1,
        max_tokens: int = 4096,
        timeout: float = 120.0,
    ) -> None:
        if provider not in _DEFAULT_MODELS:
            raise ValueError(f"Unknown structurer provider: {provider}")
        self.provider = provider
        self.api_key = api_key
        self.model = model or _DEFAULT_MODELS[provider]
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMStructurer":
        """Build a structurer from settings.

        Raises:
            StructuringFailed: If the provider needs an API key and none is set
        """
        provider = settings.structurer_provider
        api_key = {
            "openai": settings.openai_api_key,
            "anthropic": settings.anthropic_api_key,
        }.get(provider)

        if provider in _KEYED_PROVIDERS and not api_key:
            raise StructuringFailed(f"{provider} API key not configured")

        return cls(
            provider=provider,
            api_key=api_key,
            model=settings.structurer_model,
            base_url=settings.ollama_base_url,
            temperature=settings.structurer_temperature,
            max_tokens=settings.structurer_max_tokens,
            timeout=settings.structure_timeout,
        )

    async def structure(self, text: str, category: MealCategory) -> dict[str, Any]:
        timestamp = datetime.now(timezone.utc).isoformat()
        prompt = build_prompt(text, category, timestamp)

        logger.info("[%s] Structuring %s menu (%d chars)", self.provider, category.value, len(text))

        try:
            if self.provider == "openai":
                content = await self._call_openai(_SYSTEM_PROMPT, prompt)
            elif self.provider == "anthropic":
                content = await self._call_anthropic(_SYSTEM_PROMPT, prompt)
            else:
                content = await self._call_ollama(_SYSTEM_PROMPT, prompt)
        except httpx.HTTPError as e:
            raise StructuringFailed(f"Failed to structure menu data: {e}") from e

        payload = clear_closed_stations(decode_menu_json(content))
        logger.info(
            "[%s] Structured %s menu: %d halls",
            self.provider, category.value, len(payload.get("diningHalls") or []),
        )
        return payload

    def _check_response(self, response: httpx.Response) -> Any:
        if response.status_code != 200:
            logger.warning(
                "%s API error: %d %s",
                self.provider, response.status_code, response.text[:200],
            )
            raise StructuringFailed(
                f"{self.provider} API error: {response.status_code}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise StructuringFailed(f"{self.provider} API returned a non-JSON body") from e

    async def _call_openai(self, system: str, user: str) -> str | None:
        """Call OpenAI Chat Completions API in JSON mode."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                "https://api.openai.com/v1/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "temperature": self.temperature,
                    "max_tokens": self.max_tokens,
                    "response_format": {"type": "json_object"},
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                },
            )

        data = self._check_response(response)
        choices = data.get("choices") or []
        if choices:
            return (choices[0].get("message") or {}).get("content")
        return None

    async def _call_anthropic(self, system: str, user: str) -> str | None:
        """Call Anthropic Messages API."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                "https://api.anthropic.com/v1/messages",
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": "2023-06-01",
                    "content-type": "application/json",
                },
                json={
                    "model": self.model,
                    "max_tokens": self.max_tokens,
                    "temperature": self.temperature,
                    "system": system,
                    "messages": [{"role": "user", "content": user}],
                },
            )

        data = self._check_response(response)
        content = data.get("content") or []
        if content and content[0].get("type") == "text":
            return content[0]["text"]
        return None

    async def _call_ollama(self, system: str, user: str) -> str | None:
        """Call Ollama Chat API (local) with JSON output."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/api/chat",
                json={
                    "model": self.model,
                    "stream": False,
                    "format": "json",
                    "options": {"temperature": self.temperature},
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                },
            )

        data = self._check_response(response)
        message = data.get("message") or {}
        return message.get("content")
