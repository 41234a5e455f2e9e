"""Infrastructure adapter for the Gemini report collaborator."""

from __future__ import annotations

from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from adreport.domain.errors import ReportFormatError, classify_collaborator_error
from adreport.settings import DEFAULT_MODEL, Settings


class GeminiReportClient:
    """Explicit client handle; construct once per process and pass it down."""

    def __init__(self, api_key: str | None, model: str = DEFAULT_MODEL, client: Any | None = None) -> None:
        if client is None:
            if not api_key:
                raise ValueError("GEMINI_API_KEY is not set")
            client = genai.Client(api_key=api_key)
        self._client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiReportClient":
        return cls(api_key=settings.api_key, model=settings.model)

    def generate(self, prompt: str, *, json_output: bool = True, timeout_s: float | None = None) -> str:
        config = types.GenerateContentConfig(
            response_mime_type="application/json" if json_output else None,
            http_options=types.HttpOptions(timeout=max(1, int(timeout_s * 1000))) if timeout_s else None,
        )
        try:
            response = self._client.models.generate_content(model=self.model, contents=prompt, config=config)
        except genai_errors.APIError as exc:
            raise classify_collaborator_error(exc) from exc

        text = getattr(response, "text", None)
        if not text:
            raise ReportFormatError("No response text from Gemini")
        return text
