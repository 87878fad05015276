"""Model service clients.

The rest of the trainer talks to a generative model through one narrow
capability::

    client.generate(system, prompt, schema) -> str   # JSON text

Two HTTP backends implement it:

- OllamaClient  -- local Ollama ``/api/chat`` with a JSON-schema ``format``
- GeminiClient  -- Google Generative Language ``generateContent`` REST API

Tests inject a fake with the same ``generate`` signature.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx
import requests
from loguru import logger

from .errors import ModelServiceError
from .schema import to_gemini_schema


class ModelClient(ABC):
    """Send a system instruction + prompt + response schema, get JSON text back."""

    name: str = "model"

    @abstractmethod
    def generate(self, system: str, prompt: str, schema: dict[str, Any]) -> str:
        ...

    def list_models(self) -> list[str]:
        """Models this backend can serve (empty when unknown)."""
        return []


class OllamaClient(ModelClient):
    """Ollama chat API with structured output."""

    name = "ollama"

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "gemma3:4b",
        timeout: float = 120.0,
        temperature: float = 0.4,
    ) -> None:
        self.host = host.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    def generate(self, system: str, prompt: str, schema: dict[str, Any]) -> str:
        t0 = time.monotonic()
        try:
            resp = requests.post(
                f"{self.host}/api/chat",
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": prompt},
                    ],
                    "format": schema,
                    "stream": False,
                    "options": {"temperature": self.temperature},
                },
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise ModelServiceError(f"Ollama request failed: {e}") from e
        except ValueError as e:
            raise ModelServiceError(f"Ollama returned a non-JSON body: {e}") from e

        text = data.get("message", {}).get("content", "")
        logger.info(f"Ollama {self.model}: {len(text)} chars in {time.monotonic() - t0:.1f}s")
        return text

    def list_models(self) -> list[str]:
        """List models installed on the Ollama host (empty when unreachable)."""
        try:
            resp = requests.get(f"{self.host}/api/tags", timeout=3)
            if resp.status_code == 200:
                return [m["name"] for m in resp.json().get("models", [])]
        except requests.RequestException as e:
            logger.warning(f"Ollama model listing failed: {e}")
        return []


class GeminiClient(ModelClient):
    """Google Generative Language API (``models/{model}:generateContent``)."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120.0,
    ) -> None:
        if not api_key:
            raise ModelServiceError("Gemini backend selected but no API key configured")
        self._api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def generate(self, system: str, prompt: str, schema: dict[str, Any]) -> str:
        t0 = time.monotonic()
        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": to_gemini_schema(schema),
            },
        }
        try:
            resp = httpx.post(
                url,
                json=body,
                headers={"x-goog-api-key": self._api_key},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise ModelServiceError(f"Gemini request failed: {e}") from e

        if not resp.is_success:
            raise ModelServiceError(
                f"Gemini returned HTTP {resp.status_code}: {resp.text[:200]}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise ModelServiceError(f"Gemini returned a non-JSON body: {e}") from e

        text = self._extract_text(data)
        logger.info(f"Gemini {self.model}: {len(text)} chars in {time.monotonic() - t0:.1f}s")
        return text

    def list_models(self) -> list[str]:
        return [self.model]

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Concatenate the text parts of the first candidate."""
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


def create_client(settings) -> ModelClient:
    """Build the configured backend from app settings."""
    backend = settings.model_backend.lower()
    if backend == "gemini":
        return GeminiClient(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.model_timeout,
        )
    if backend == "ollama":
        return OllamaClient(
            host=settings.ollama_host,
            model=settings.ollama_model,
            timeout=settings.model_timeout,
        )
    raise ValueError(f"Unknown model backend: {settings.model_backend!r}")
