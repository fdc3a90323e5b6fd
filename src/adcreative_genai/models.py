from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any


class AdType(str, Enum):
    COMMERCIAL = "commercial"
    FESTIVAL = "festival"


class AttireType(str, Enum):
    PROFESSIONAL = "professional"
    TRADITIONAL = "traditional"


class DurationPackage(int, Enum):
    SHORT = 16
    MEDIUM = 32
    LONG = 64


class CreationMode(str, Enum):
    FULL = "full"
    # Extraction only; the poster is requested afterwards on demand.
    POSTER = "poster"


# Each generated video segment covers this many seconds of the voice-over.
SEGMENT_SECONDS = 8


@dataclass(frozen=True)
class AdFormData:
    ad_type: AdType = AdType.COMMERCIAL
    festival_name: str = ""
    attire_type: AttireType = AttireType.TRADITIONAL
    duration: DurationPackage = DurationPackage.SHORT
    text_instructions: str = ""

    @property
    def is_festival(self) -> bool:
        return self.ad_type == AdType.FESTIVAL

    @property
    def segment_count(self) -> int:
        return max(1, int(self.duration) // SEGMENT_SECONDS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "adType": self.ad_type.value,
            "festivalName": self.festival_name,
            "attireType": self.attire_type.value,
            "duration": int(self.duration),
            "textInstructions": self.text_instructions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AdFormData:
        return cls(
            ad_type=AdType(data.get("adType", AdType.COMMERCIAL.value)),
            festival_name=data.get("festivalName") or "",
            attire_type=AttireType(data.get("attireType", AttireType.TRADITIONAL.value)),
            duration=DurationPackage(int(data.get("duration", DurationPackage.SHORT.value))),
            text_instructions=data.get("textInstructions") or "",
        )


@dataclass(frozen=True)
class Attachment:
    filename: str
    mime_type: str
    data: bytes

    def as_text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


@dataclass
class FileStore:
    logo: Attachment | None = None
    visiting_card: Attachment | None = None
    store_image: Attachment | None = None
    product_images: list[Attachment] = field(default_factory=list)
    flyers_posters: list[Attachment] = field(default_factory=list)
    voice_recording: Attachment | None = None
    text_instructions_file: Attachment | None = None


@dataclass(frozen=True)
class ProgressEvent:
    step: str
    percent: int


@dataclass(frozen=True)
class GenerationBundle:
    business_info: dict[str, Any]
    main_frame_prompt: str = ""
    header_prompt: str = ""
    poster_prompt: str = ""
    voice_over_script: str = ""
    veo_prompts: list[str] = field(default_factory=list)
    has_product_images: bool = False
    product_image_count: int = 0
    # Populated later, on demand, once the main bundle exists.
    stock_image_prompts: list[dict[str, Any]] | None = None

    def replace_field(self, name: str, value: Any) -> GenerationBundle:
        if name not in self.__dataclass_fields__:
            raise KeyError(name)
        return replace(self, **{name: value})

    def with_stock_images(self, prompts: list[dict[str, Any]]) -> GenerationBundle:
        return replace(self, stock_image_prompts=prompts)

    @property
    def business_name(self) -> str:
        info = self.business_info if isinstance(self.business_info, dict) else {}
        return str(info.get("businessName") or info.get("name") or "Untitled")

    @property
    def business_type(self) -> str:
        info = self.business_info if isinstance(self.business_info, dict) else {}
        return str(info.get("businessType") or info.get("type") or "Business")

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "businessInfo": data["business_info"],
            "mainFramePrompt": data["main_frame_prompt"],
            "headerPrompt": data["header_prompt"],
            "posterPrompt": data["poster_prompt"],
            "voiceOverScript": data["voice_over_script"],
            "veoPrompts": data["veo_prompts"],
            "hasProductImages": data["has_product_images"],
            "productImageCount": data["product_image_count"],
            "stockImagePrompts": data["stock_image_prompts"],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationBundle:
        return cls(
            business_info=data.get("businessInfo") or {},
            main_frame_prompt=data.get("mainFramePrompt") or "",
            header_prompt=data.get("headerPrompt") or "",
            poster_prompt=data.get("posterPrompt") or "",
            voice_over_script=data.get("voiceOverScript") or "",
            veo_prompts=list(data.get("veoPrompts") or []),
            has_product_images=bool(data.get("hasProductImages", False)),
            product_image_count=int(data.get("productImageCount", 0) or 0),
            stock_image_prompts=data.get("stockImagePrompts"),
        )
