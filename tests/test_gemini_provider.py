from types import SimpleNamespace

import pytest

from adcreative_genai.providers.base import ContentPart, ResponseFormat, SectionRequest
from adcreative_genai.providers.gemini_provider import GeminiProvider


class RecordingModels:
    def __init__(self, text):
        self.text = text
        self.kwargs = None

    async def generate_content(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(text=self.text)


def _provider(text):
    provider = GeminiProvider(api_key="test-key", model="gemini-test")
    models = RecordingModels(text)
    provider.client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return provider, models


@pytest.mark.asyncio
async def test_json_sections_request_json_mime():
    provider, models = _provider('{"a": 1}')
    request = SectionRequest(
        section="Poster",
        system_instruction="design a poster",
        parts=[ContentPart.from_text("go"), ContentPart.from_bytes(b"\x89PNG", "image/png")],
        response_format=ResponseFormat.JSON,
    )
    assert await provider.generate(request) == '{"a": 1}'

    assert models.kwargs["model"] == "gemini-test"
    config = models.kwargs["config"]
    assert config.system_instruction == "design a poster"
    assert config.response_mime_type == "application/json"
    parts = models.kwargs["contents"][0].parts
    assert parts[0].text == "go"
    assert parts[1].inline_data.mime_type == "image/png"


@pytest.mark.asyncio
async def test_text_sections_and_empty_response():
    provider, models = _provider(None)
    request = SectionRequest(section="Header", system_instruction="sys", parts=[ContentPart.from_text("hi")])
    assert await provider.generate(request) == ""
    assert models.kwargs["config"].response_mime_type is None
