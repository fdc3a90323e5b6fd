from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol


class ResponseFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    # Free text the caller splits on a separator token.
    DELIMITED = "delimited"


@dataclass(frozen=True)
class ContentPart:
    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @classmethod
    def from_text(cls, text: str) -> ContentPart:
        return cls(text=text)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> ContentPart:
        return cls(data=data, mime_type=mime_type)

    @property
    def is_inline(self) -> bool:
        return self.data is not None


@dataclass(frozen=True)
class SectionRequest:
    section: str
    system_instruction: str
    parts: list[ContentPart] = field(default_factory=list)
    response_format: ResponseFormat = ResponseFormat.TEXT

    @property
    def wants_json(self) -> bool:
        return self.response_format == ResponseFormat.JSON


class TextModel(Protocol):
    name: str

    async def generate(self, request: SectionRequest) -> str: ...
