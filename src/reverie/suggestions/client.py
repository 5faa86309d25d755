"""Generative-text client for pattern suggestions.

The default backend is a local Ollama server (``/api/generate`` with JSON
output). Hosted Ollama-compatible gateways are supported through an optional
bearer token.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx

from reverie.errors import CollaboratorUnavailableError, MalformedCollaboratorResponse

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a dream pattern analyst. Analyze the provided dream data to identify recurring patterns, cycles, and insights. Look for:
1. Symbol frequency patterns
2. Emotional cycles
3. Timing patterns
4. Theme evolution
5. Stress response patterns

Return a JSON object with a "patterns" array containing pattern objects with: type, name, description, frequency, confidence (0-1), and insight.
The type must be one of: symbol, emotion, timing, theme, stress, seasonal."""


class SuggestionClient(Protocol):
    """Protocol for services that propose candidate patterns."""

    async def suggest_patterns(self, summaries: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Return raw candidate dictionaries for the given entry summaries.

        Raises:
            CollaboratorUnavailableError: Service could not be reached
            MalformedCollaboratorResponse: Payload could not be parsed
        """
        ...


def build_prompt(summaries: Sequence[Dict[str, Any]]) -> str:
    return (
        f"{SYSTEM_PROMPT}\n\nAnalyze these dreams for patterns:\n"
        f"{json.dumps(list(summaries), indent=2)}"
    )


def parse_patterns_payload(text: str) -> List[Dict[str, Any]]:
    """Extract the ``patterns`` list from a model's JSON answer."""
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedCollaboratorResponse(details={"reason": str(exc)}) from exc

    if not isinstance(payload, dict):
        raise MalformedCollaboratorResponse(details={"reason": "top-level value is not an object"})
    patterns = payload.get("patterns", [])
    if not isinstance(patterns, list):
        raise MalformedCollaboratorResponse(details={"reason": "'patterns' is not a list"})
    return [item for item in patterns if isinstance(item, dict)]


class OllamaSuggestionClient:
    """Pattern suggestions from an Ollama-compatible generate endpoint.

    Example:
        client = OllamaSuggestionClient(model="llama3.1:8b-instruct-q4_0")
        candidates = await client.suggest_patterns(summaries)
    """

    def __init__(
        self,
        model: str = "llama3.1:8b-instruct-q4_0",
        base_url: str = "http://localhost:11434",
        timeout: float = 30.0,
        api_key: Optional[str] = None,
        temperature: float = 0.6,
        max_tokens: int = 1500,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize suggestion client.

        Args:
            model: Ollama model name
            base_url: Server URL
            timeout: Request timeout in seconds
            api_key: Optional bearer token for hosted gateways
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            transport: Optional httpx transport (used by tests)
        """
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._transport = transport
        self.headers = {"Accept": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

        logger.info(f"OllamaSuggestionClient initialized (model={model}, url={self.base_url})")

    async def suggest_patterns(self, summaries: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        request_data = {
            "model": self.model,
            "prompt": build_prompt(summaries),
            "stream": False,
            "format": "json",
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            },
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/api/generate",
                    json=request_data,
                    headers=self.headers,
                )
                response.raise_for_status()
                result = response.json()

        except httpx.TimeoutException as exc:
            raise CollaboratorUnavailableError(
                f"Suggestion request timed out after {self.timeout}s"
            ) from exc

        except httpx.HTTPStatusError as exc:
            raise CollaboratorUnavailableError(
                f"Suggestion service returned {exc.response.status_code}",
                details={"status_code": exc.response.status_code},
            ) from exc

        except httpx.RequestError as exc:
            raise CollaboratorUnavailableError(f"Suggestion request failed: {exc}") from exc

        except ValueError as exc:
            raise MalformedCollaboratorResponse(details={"reason": "response body is not JSON"}) from exc

        if not isinstance(result, dict):
            raise MalformedCollaboratorResponse(details={"reason": "response body is not an object"})
        return parse_patterns_payload(result.get("response", ""))
