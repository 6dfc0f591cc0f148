"""
Error taxonomy for the HireMind backend.

Every error carries the HTTP status it maps to; the exception handler in
``main`` turns them into the ``{"success": false, "message": ...}`` envelope.
"""
from typing import List, Optional


class HireMindError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HireMindError):
    """Missing or invalid request fields."""
    status_code = 400


class FileParseError(HireMindError):
    """Uploaded file is missing, unsupported, too large or unreadable."""
    status_code = 400


class NoProviderConfigured(HireMindError):
    status_code = 500

    def __init__(self, message: str = "No AI provider is configured. Set OPENAI_API_KEY or GEMINI_API_KEY."):
        super().__init__(message)


class InvalidCredential(HireMindError):
    status_code = 401

    def __init__(self, provider: str):
        super().__init__(f"Invalid API key for provider '{provider}'")
        self.provider = provider


class AllProvidersFailed(HireMindError):
    status_code = 503

    def __init__(self, attempts: List):
        summary = "; ".join(f"{a.provider}: {a.message}" for a in attempts) or "no attempts"
        super().__init__(f"AI generation failed on all providers ({summary})")
        self.attempts = attempts


class MalformedResponse(HireMindError):
    status_code = 502

    def __init__(self, context: str):
        super().__init__(f"Failed to parse AI response for {context}. Please try again.")
        self.context = context


class EmptyExtraction(HireMindError):
    status_code = 422

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "Could not extract meaningful resume information from the file. "
               "Please check the file content and try again."
        )
