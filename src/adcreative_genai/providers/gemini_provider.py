from __future__ import annotations

from typing import Any

from adcreative_genai.config import settings
from adcreative_genai.providers.base import ContentPart, SectionRequest


class GeminiProvider:
    """One Gemini client bound to one API key."""

    name = "gemini"

    def __init__(self, api_key: str, model: str | None = None) -> None:
        # Imported lazily so the app can start without the dependency installed.
        from google import genai  # type: ignore

        self._genai = genai
        self.client = genai.Client(api_key=api_key)
        self.model = model or settings.gemini_text_model

    async def generate(self, request: SectionRequest) -> str:
        """
        Send system instruction + user parts; return the response text.

        JSON sections ask for `application/json`; the answer is still parsed
        with a fallback by the caller.
        """
        from google.genai import types  # type: ignore

        config_kwargs: dict[str, Any] = {"system_instruction": request.system_instruction}
        if request.wants_json:
            config_kwargs["response_mime_type"] = "application/json"

        resp = await self.client.aio.models.generate_content(
            model=self.model,
            contents=[types.Content(role="user", parts=[_to_part(types, p) for p in request.parts])],
            config=types.GenerateContentConfig(**config_kwargs),
        )
        return getattr(resp, "text", None) or ""


def _to_part(types: Any, part: ContentPart) -> Any:
    if part.is_inline:
        return types.Part.from_bytes(data=part.data, mime_type=part.mime_type or "application/octet-stream")
    return types.Part.from_text(text=part.text or "")
