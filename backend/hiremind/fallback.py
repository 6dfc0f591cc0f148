"""
Sequential multi-provider fallback.

Providers are tried strictly one after another in priority order; the first
success wins. Rate limits, 5xx responses and network failures move on to the
next provider. A rejected credential stops the whole chain, because it is a
configuration problem the operator has to fix.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

import httpx

from .errors import AllProvidersFailed, InvalidCredential, NoProviderConfigured
from .providers import ProviderError, TextProvider

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("rate limit", "rate_limit", "quota", "resource_exhausted", "too many requests")
AUTH_MARKERS = ("api_key_invalid", "invalid api key", "invalid_api_key", "api key not valid", "incorrect api key")


class ErrorKind(enum.Enum):
    RETRYABLE = "retryable"
    AUTH = "auth"
    OTHER = "other"


@dataclass
class ProviderAttempt:
    provider: str
    message: str
    status_code: Optional[int] = None
    retryable: bool = False


def classify_error(exc: Exception) -> ErrorKind:
    if isinstance(exc, httpx.TransportError):
        return ErrorKind.RETRYABLE

    status = getattr(exc, "status_code", None)
    text = " ".join(str(x) for x in (getattr(exc, "reason", None), exc) if x).lower()

    if status == 401 or any(m in text for m in AUTH_MARKERS):
        return ErrorKind.AUTH
    if status == 429 or any(m in text for m in RATE_LIMIT_MARKERS):
        return ErrorKind.RETRYABLE
    if status is not None and 500 <= status < 600:
        return ErrorKind.RETRYABLE
    # ProviderError without a status wraps a transport failure
    if isinstance(exc, ProviderError) and status is None and isinstance(exc.__cause__, httpx.TransportError):
        return ErrorKind.RETRYABLE
    return ErrorKind.OTHER


class FallbackEngine:
    def __init__(self, providers: Mapping[str, TextProvider], priority: Sequence[str]):
        self.providers: Dict[str, TextProvider] = dict(providers)
        self.priority: List[str] = list(priority)

    def configured(self) -> List[str]:
        return [p for p in self.priority if p in self.providers]

    async def generate(
        self, prompt: str, instruction: str, attempts: Optional[List[ProviderAttempt]] = None,
    ) -> str:
        """Return the first provider's text.

        Failures are appended to ``attempts`` when the caller passes a list, so
        the providers skipped on the way to a success stay observable.
        """
        order = self.configured()
        if not order:
            raise NoProviderConfigured()

        if attempts is None:
            attempts = []
        for ident in order:
            provider = self.providers[ident]
            try:
                text = await provider.generate(prompt, instruction)
            except Exception as e:
                kind = classify_error(e)
                if kind is ErrorKind.AUTH:
                    logger.error(f"Provider {ident} rejected its API key: {e}")
                    raise InvalidCredential(ident) from e
                attempts.append(ProviderAttempt(
                    provider=ident,
                    message=str(e),
                    status_code=getattr(e, "status_code", None),
                    retryable=kind is ErrorKind.RETRYABLE,
                ))
                if kind is ErrorKind.RETRYABLE:
                    logger.warning(f"Provider {ident} unavailable, trying next: {e}")
                else:
                    logger.exception(f"Provider {ident} failed unexpectedly, trying next")
                continue
            if attempts:
                logger.info(f"Generated with fallback provider {ident} after {len(attempts)} failure(s)")
            return text

        raise AllProvidersFailed(attempts)
