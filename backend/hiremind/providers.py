"""
Text-generation provider clients.

Each provider exposes ``async generate(prompt, instruction) -> str`` and talks
to its vendor over plain HTTP with httpx. Failures surface as ProviderError so
the fallback engine can decide whether another provider is worth trying.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """A provider call failed; ``status_code`` is the HTTP status when there was one."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.reason = reason


def _error_details(response: httpx.Response) -> Dict[str, Any]:
    """Pull message/reason out of a vendor error body, tolerating non-JSON bodies."""
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text[:500], "reason": None}
    err = body.get("error") if isinstance(body, dict) else None
    if not isinstance(err, dict):
        return {"message": response.text[:500], "reason": None}
    reason = err.get("code") or err.get("status") or err.get("type")
    for detail in err.get("details") or []:
        if isinstance(detail, dict) and detail.get("reason"):
            reason = detail["reason"]
    return {"message": err.get("message") or response.text[:500], "reason": reason}


class TextProvider:
    """Base for providers; subclasses implement ``_request``."""

    name = "provider"

    def __init__(self, api_key: str, model: str, base_url: str, timeout: float = 60.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str, instruction: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await self._request(client, prompt, instruction)
        except httpx.TransportError as e:
            raise ProviderError(self.name, f"{type(e).__name__}: {e}") from e

        if response.status_code != 200:
            details = _error_details(response)
            raise ProviderError(self.name, details["message"], response.status_code, details["reason"])
        try:
            text = self._extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(self.name, f"Unexpected response body: {e}", response.status_code) from e
        if not text:
            raise ProviderError(self.name, "Empty response from model", response.status_code)
        return text

    async def _request(self, client: httpx.AsyncClient, prompt: str, instruction: str) -> httpx.Response:
        raise NotImplementedError

    def _extract_text(self, body: Dict[str, Any]) -> str:
        raise NotImplementedError


class OpenAIProvider(TextProvider):
    """OpenAI-compatible Chat Completions endpoint."""

    name = "openai"

    async def _request(self, client, prompt, instruction):
        headers = {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": instruction},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.7,
            "max_tokens": 2000,
        }
        return await client.post(f"{self.base_url}/chat/completions", headers=headers, json=payload)

    def _extract_text(self, body):
        return body["choices"][0]["message"]["content"]


class GeminiProvider(TextProvider):
    """Google Gemini ``generateContent`` REST endpoint."""

    name = "gemini"

    async def _request(self, client, prompt, instruction):
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        payload = {
            "systemInstruction": {"parts": [{"text": instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": 2000},
        }
        return await client.post(f"{self.base_url}/models/{self.model}:generateContent", headers=headers, json=payload)

    def _extract_text(self, body):
        parts = body["candidates"][0]["content"]["parts"]
        return "".join(p.get("text", "") for p in parts)


def build_providers(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, TextProvider]:
    """Instantiate every provider that has a credential configured."""
    providers: Dict[str, TextProvider] = {}
    if settings.openai_api_key:
        providers["openai"] = OpenAIProvider(
            settings.openai_api_key, settings.openai_model, settings.openai_base_url,
            timeout=settings.request_timeout, transport=transport,
        )
    if settings.gemini_api_key:
        providers["gemini"] = GeminiProvider(
            settings.gemini_api_key, settings.gemini_model, settings.gemini_base_url,
            timeout=settings.request_timeout, transport=transport,
        )
    if not providers:
        logger.warning("No AI provider API key set. AI features will fail until OPENAI_API_KEY or GEMINI_API_KEY is configured.")
    for ident in settings.provider_priority:
        if ident not in ("openai", "gemini"):
            logger.warning(f"Unknown provider '{ident}' in AI_PROVIDER_PRIORITY; it will be skipped")
    return providers
