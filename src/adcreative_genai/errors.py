from __future__ import annotations


class AdCreativeError(Exception):
    """Base class for every error raised by the generation core."""


class ConfigurationError(AdCreativeError):
    pass


class CredentialFailure(AdCreativeError):
    """A quota / rate / auth rejection attributed to one credential.

    Internal: the dispatcher recovers from these by rotating, and only the
    exhaustion of the whole pool escapes to callers.
    """

    def __init__(self, index: int, error: BaseException) -> None:
        super().__init__(f"API key {index + 1} failed: {error}")
        self.index = index
        self.error = error


class AllCredentialsExhaustedError(AdCreativeError):
    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"All {attempts} API keys failed. Last error: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class TransientGenerationError(AdCreativeError):
    """A section call returned, but with an empty or too-short answer."""


class SectionGenerationFailed(AdCreativeError):
    def __init__(self, section: str, attempts: int, last_error: BaseException | None = None) -> None:
        detail = f": {last_error}" if last_error is not None else ""
        super().__init__(f"Failed to generate {section} after {attempts} attempts{detail}")
        self.section = section
        self.attempts = attempts
        self.last_error = last_error


class MalformedResponseError(AdCreativeError):
    """Model output could not be parsed as JSON.

    Post-processors catch this and return a fallback value.
    """
