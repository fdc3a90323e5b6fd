from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable
from typing import TypeVar

from adcreative_genai.config import settings
from adcreative_genai.credentials import NO_KEYS_MESSAGE, CredentialPool
from adcreative_genai.errors import AllCredentialsExhaustedError, ConfigurationError, CredentialFailure
from adcreative_genai.logging import get_logger
from adcreative_genai.providers.base import SectionRequest, TextModel

logger = get_logger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[str], TextModel]
ModelCall = Callable[[TextModel], Awaitable[T]]

CREDENTIAL_STATUS_CODES = {401, 403, 429}
# google-genai APIError.status carries the RPC status name.
CREDENTIAL_STATUS_NAMES = {"RESOURCE_EXHAUSTED", "PERMISSION_DENIED", "UNAUTHENTICATED"}

# Word-anchored so e.g. "generate" does not count as "rate".
_CREDENTIAL_MESSAGE_RE = re.compile(
    r"\b(quota|rate|limit|invalid|api[ _-]?key)|\b(401|403|429)\b",
    re.IGNORECASE,
)


def is_credential_error(exc: BaseException) -> bool:
    """Quota, rate limit, auth or invalid-key failures: the key is at fault, not the request."""
    for attr in ("code", "status", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and value in CREDENTIAL_STATUS_CODES:
            return True
        if isinstance(value, str) and value.upper() in CREDENTIAL_STATUS_NAMES:
            return True
    message = str(exc) or type(exc).__name__
    return bool(_CREDENTIAL_MESSAGE_RE.search(message))


def _default_client_factory(api_key: str) -> TextModel:
    from adcreative_genai.providers.gemini_provider import GeminiProvider

    return GeminiProvider(api_key=api_key)


class Dispatcher:
    """
    Runs one logical model call against whichever key currently works.

    Credential failures rotate the pool and retry, at most once per distinct
    key within a single dispatch. Anything else propagates untouched since a
    different key would not fix it.
    """

    def __init__(
        self,
        pool: CredentialPool,
        client_factory: ClientFactory | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.pool = pool
        self.client_factory = client_factory or _default_client_factory
        self.backoff_seconds = settings.rotation_backoff_seconds if backoff_seconds is None else backoff_seconds

    async def dispatch(self, call: ModelCall[T]) -> T:
        size = self.pool.size()
        if size == 0:
            raise ConfigurationError(NO_KEYS_MESSAGE)

        tried: set[int] = set()
        last_error: BaseException | None = None

        for _attempt in range(size):
            index = self.pool.current_index
            client = self.client_factory(self.pool.current())
            try:
                return await call(client)
            except Exception as exc:
                if not is_credential_error(exc):
                    raise
                failure = CredentialFailure(index, exc)
                last_error = exc
                logger.warning("%s. Trying next key...", failure)

                if size == 1:
                    # Rotating a single-key pool would just retry the same key.
                    logger.error("All API keys exhausted.")
                    raise AllCredentialsExhaustedError(1, exc) from exc

                tried.add(index)
                self.pool.rotate()
                if len(tried) >= size:
                    logger.error("All API keys exhausted.")
                    raise AllCredentialsExhaustedError(size, exc) from exc

                await asyncio.sleep(self.backoff_seconds)

        # Only reachable when another caller rotated the shared cursor under us
        # and we landed on keys already tried in this dispatch.
        raise AllCredentialsExhaustedError(size, last_error) from last_error  # type: ignore[arg-type]

    async def generate(self, request: SectionRequest) -> str:
        """Shortcut for the common case: dispatch `client.generate(request)`."""

        async def _call(client: TextModel) -> str:
            return await client.generate(request)

        return await self.dispatch(_call)
