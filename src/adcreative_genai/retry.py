from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from adcreative_genai.config import settings
from adcreative_genai.errors import ConfigurationError, SectionGenerationFailed, TransientGenerationError
from adcreative_genai.logging import get_logger

logger = get_logger(__name__)


async def generate_with_retry(
    call: Callable[[], Awaitable[str]],
    section: str,
    min_length: int | None = None,
    max_retries: int | None = None,
    backoff_seconds: float | None = None,
) -> str:
    """
    Retry a section call that may "succeed" with a degenerate answer.

    `call` must start a fresh dispatch each time it is invoked, so key rotation
    inside the dispatcher and this response validation compose independently.
    One initial attempt plus `max_retries` retries; the pause before retry N is
    N * `backoff_seconds`.
    """
    min_length = settings.min_section_length if min_length is None else min_length
    max_retries = settings.max_section_retries if max_retries is None else max_retries
    backoff_seconds = settings.retry_backoff_seconds if backoff_seconds is None else backoff_seconds

    attempts = max_retries + 1
    last_error: BaseException | None = None

    for attempt in range(1, attempts + 1):
        try:
            text = await call()
        except ConfigurationError:
            # No keys at all: retrying cannot help.
            raise
        except Exception as exc:
            logger.warning("%s attempt %d failed: %s", section, attempt, exc)
            last_error = exc
        else:
            if text and len(text.strip()) >= min_length:
                return text
            length = len(text.strip()) if text else 0
            logger.warning("%s attempt %d: response too short (%d chars), retrying...", section, attempt, length)
            last_error = TransientGenerationError(f"Empty or too-short response for {section} ({length} chars)")

        if attempt < attempts:
            await asyncio.sleep(attempt * backoff_seconds)

    raise SectionGenerationFailed(section, attempts, last_error)
