from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

# Numbered credential slots API_KEY_1 .. API_KEY_22.
MAX_KEY_SLOTS = 22


class Settings(BaseSettings):
    # Loads keys from process env, and also from a local .env file for convenience.
    model_config = SettingsConfigDict(env_prefix="", extra="ignore", env_file=".env", env_file_encoding="utf-8")

    data_dir: str = "data"

    # Keys
    api_key_1: str | None = None
    api_key_2: str | None = None
    api_key_3: str | None = None
    api_key_4: str | None = None
    api_key_5: str | None = None
    api_key_6: str | None = None
    api_key_7: str | None = None
    api_key_8: str | None = None
    api_key_9: str | None = None
    api_key_10: str | None = None
    api_key_11: str | None = None
    api_key_12: str | None = None
    api_key_13: str | None = None
    api_key_14: str | None = None
    api_key_15: str | None = None
    api_key_16: str | None = None
    api_key_17: str | None = None
    api_key_18: str | None = None
    api_key_19: str | None = None
    api_key_20: str | None = None
    api_key_21: str | None = None
    api_key_22: str | None = None
    # Legacy single key, only consulted when every numbered slot is blank.
    api_key: str | None = None

    # Models
    gemini_text_model: str = "gemini-2.5-flash"

    # Dispatch / retry tuning
    rotation_backoff_seconds: float = 0.5
    retry_backoff_seconds: float = 1.0
    min_section_length: int = 50
    max_section_retries: int = 2

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    def api_keys(self) -> list[str]:
        keys = [getattr(self, f"api_key_{i}") or "" for i in range(1, MAX_KEY_SLOTS + 1)]
        keys = [k for k in keys if k.strip()]
        if not keys and self.api_key:
            keys = [self.api_key]
        return keys


settings = Settings()
