import os
import tempfile

import pytest

# Settings and the API's store are created at import time; keep them off the repo tree.
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="adcreative-test-"))

from adcreative_genai.config import MAX_KEY_SLOTS  # noqa: E402
from adcreative_genai.credentials import CredentialPool  # noqa: E402
from adcreative_genai.dispatcher import Dispatcher  # noqa: E402
from adcreative_genai.providers.base import SectionRequest  # noqa: E402
from adcreative_genai.sections import SectionGenerator  # noqa: E402


class FakeAPIError(Exception):
    """Shaped like google.genai.errors.APIError: numeric `code`, message text."""

    def __init__(self, code, message=""):
        super().__init__(f"{code} {message}".strip())
        self.code = code


class FakeBackend:
    """
    Scripted stand-in for the model service.

    `failing` maps an API key to the exception it raises on every call.
    `responses` maps a section label to the text returned (a list is consumed in order).
    """

    def __init__(self, responses=None, failing=None, default="x" * 200):
        self.responses = dict(responses or {})
        self.failing = dict(failing or {})
        self.default = default
        self.calls = []

    def client(self, api_key):
        return FakeClient(self, api_key)

    def answer(self, api_key, request):
        self.calls.append((api_key, request))
        if api_key in self.failing:
            raise self.failing[api_key]
        value = self.responses.get(request.section, self.default)
        if isinstance(value, list):
            value = value.pop(0) if len(value) > 1 else value[0]
        if isinstance(value, Exception):
            raise value
        return value

    def sections(self):
        return [req.section for _, req in self.calls]

    def keys(self):
        return [key for key, _ in self.calls]


class FakeClient:
    name = "fake"

    def __init__(self, backend, api_key):
        self.backend = backend
        self.api_key = api_key

    async def generate(self, request: SectionRequest) -> str:
        return self.backend.answer(self.api_key, request)


@pytest.fixture(autouse=True)
def clean_key_env(monkeypatch):
    for i in range(1, MAX_KEY_SLOTS + 1):
        monkeypatch.delenv(f"API_KEY_{i}", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def make_generator():
    def _make(backend, keys=("k1", "k2", "k3")):
        pool = CredentialPool.load(keys)
        dispatcher = Dispatcher(pool, client_factory=backend.client, backoff_seconds=0)
        return SectionGenerator(dispatcher)

    return _make


@pytest.fixture
def no_retry_delay(monkeypatch):
    from adcreative_genai.config import settings

    monkeypatch.setattr(settings, "retry_backoff_seconds", 0.0)
    monkeypatch.setattr(settings, "rotation_backoff_seconds", 0.0)
