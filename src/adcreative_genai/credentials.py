from __future__ import annotations

from collections.abc import Iterable

from adcreative_genai.config import Settings
from adcreative_genai.errors import ConfigurationError
from adcreative_genai.logging import get_logger

logger = get_logger(__name__)

NO_KEYS_MESSAGE = "No API keys configured. Please set API_KEY_1, API_KEY_2, etc. in your environment."


class CredentialPool:
    """
    Ordered API keys plus a cursor naming the key to try next.

    The cursor is shared by every caller holding this pool: once a key has
    been rotated past, later calls start from the key that worked.
    """

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._keys: tuple[str, ...] = tuple(k.strip() for k in keys if k and k.strip())
        self._index = 0

    @classmethod
    def load(cls, raw: Iterable[str | None]) -> CredentialPool:
        pool = cls(k for k in raw if k)
        if not pool:
            raise ConfigurationError(NO_KEYS_MESSAGE)
        return pool

    @classmethod
    def from_settings(cls, settings: Settings) -> CredentialPool:
        return cls.load(settings.api_keys())

    @property
    def current_index(self) -> int:
        return self._index

    def current(self) -> str:
        if not self._keys:
            raise ConfigurationError(NO_KEYS_MESSAGE)
        return self._keys[self._index]

    def rotate(self) -> None:
        if not self._keys:
            return
        next_index = (self._index + 1) % len(self._keys)
        if next_index == 0 and self._index != 0:
            logger.warning("All API keys have been tried. Starting over from the first key.")
        self._index = next_index
        logger.info("Rotated to API key %d of %d", self._index + 1, len(self._keys))

    def size(self) -> int:
        return len(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        # Never print the keys themselves.
        return f"CredentialPool(size={len(self._keys)}, current_index={self._index})"
