"""
Section kinds and how each one is requested and post-processed.

Every artifact the pipeline produces is a `SectionKind`. `SECTION_SPECS` maps
a kind to its system prompt, user content, response format and
post-processor, so adding an artifact means adding one entry here.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from adcreative_genai import prompts
from adcreative_genai.dispatcher import Dispatcher
from adcreative_genai.models import AdFormData, Attachment, FileStore
from adcreative_genai.postprocess import (
    format_poster_json,
    parse_json_object,
    parse_stock_images,
    split_segments,
    strip_code_fences,
)
from adcreative_genai.providers.base import ContentPart, ResponseFormat, SectionRequest
from adcreative_genai.retry import generate_with_retry

FAILED_SCRIPT_TEXT = "Failed to generate Script."


class SectionKind(str, Enum):
    EXTRACTION = "extraction"
    MAIN_FRAME = "mainFrame"
    HEADER = "header"
    POSTER = "poster"
    VOICE_OVER = "voiceOver"
    VEO = "veo"
    STOCK_IMAGES = "stockImages"
    TRANSLITERATION = "transliteration"


@dataclass(frozen=True)
class SectionContext:
    """Everything a section may draw on when building its request."""

    form: AdFormData
    files: FileStore = field(default_factory=FileStore)
    business_info: dict[str, Any] = field(default_factory=dict)
    script_segments: list[str] = field(default_factory=list)
    voice_over_script: str = ""
    poster_instructions: str = ""
    theme: str = prompts.DEFAULT_STOCK_IMAGE_THEME
    text: str = ""

    @property
    def business_json(self) -> str:
        return json.dumps(self.business_info, indent=2, ensure_ascii=False)

    @property
    def business_type(self) -> str:
        return prompts.detect_business_type(self.business_json)

    @property
    def custom_instructions(self) -> str:
        special = self.business_info.get("specialRequirements") if isinstance(self.business_info, dict) else None
        if isinstance(special, dict) and special.get("customInstructions"):
            return str(special["customInstructions"])
        return "None"


@dataclass(frozen=True)
class Refinement:
    """How a previously generated section is shown back to the model."""

    noun: str
    marker: str
    rules: tuple[str, ...]


@dataclass(frozen=True)
class SectionSpec:
    kind: SectionKind
    label: str
    response_format: ResponseFormat
    system_prompt: Callable[[SectionContext], str]
    user_parts: Callable[[SectionContext], list[ContentPart]]
    postprocess: Callable[[str], Any]
    bundle_field: str | None = None
    refinement: Refinement | None = None


# --- content parts ---------------------------------------------------------


def _text(text: str) -> ContentPart:
    return ContentPart.from_text(text)


def _inline(attachment: Attachment) -> ContentPart:
    return ContentPart.from_bytes(attachment.data, attachment.mime_type)


def build_file_parts(files: FileStore, text_instructions: str = "") -> list[ContentPart]:
    """All client material, each attachment followed by a note saying what it is."""
    parts: list[ContentPart] = []
    if text_instructions:
        parts.append(_text(f"Client Text Instructions: {text_instructions}"))
    if files.text_instructions_file:
        parts.append(_text(f"Client Text File Content: {files.text_instructions_file.as_text()}"))
    if files.logo:
        parts += [_inline(files.logo), _text("This is the Business Logo.")]
    if files.visiting_card:
        parts += [_inline(files.visiting_card), _text("This is the Visiting Card.")]
    if files.store_image:
        parts += [_inline(files.store_image), _text("This is the Store/Office Image.")]
    if files.voice_recording:
        parts += [_inline(files.voice_recording), _text("This is the Client's Voice Instructions. Listen carefully.")]
    total = len(files.flyers_posters)
    for i, flyer in enumerate(files.flyers_posters, start=1):
        parts += [
            _inline(flyer),
            _text(
                f"This is a Flyer/Offer Poster/Brochure ({i} of {total}). Extract ALL business information, "
                "offers, services, contact details, and branding from this material."
            ),
        ]
    return parts


def _product_parts(files: FileStore, note: str) -> list[ContentPart]:
    total = len(files.product_images)
    parts: list[ContentPart] = []
    for i, image in enumerate(files.product_images, start=1):
        parts += [_inline(image), _text(f"Product Image {i} of {total}: {note}")]
    return parts


def _extraction_parts(ctx: SectionContext) -> list[ContentPart]:
    return build_file_parts(ctx.files, ctx.form.text_instructions) + [_text("Extract business info.")]


def _main_frame_parts(ctx: SectionContext) -> list[ContentPart]:
    count = len(ctx.files.product_images)
    lines = [
        "Generate a Main Frame image prompt for:",
        f"BUSINESS INFORMATION: {ctx.business_json}",
        f"AD TYPE: {ctx.form.ad_type.value}",
        prompts.festival_line(ctx.form),
        f"ATTIRE: {ctx.form.attire_type.value}",
        f"SPECIAL CLIENT INSTRUCTIONS: {ctx.custom_instructions}",
    ]
    if count:
        lines.append(
            f"PRODUCT IMAGES: {count} product image(s) are attached. Include product placement instructions: "
            "products sit in the LOWER 20-25% of the frame, naturally displayed, well lit, secondary to the model, "
            "used EXACTLY as provided."
        )
    lines.append("Generate the complete image generation prompt now.")
    text = "\n".join(line for line in lines if line)
    return [_text(text)] + _product_parts(
        ctx.files, "this product MUST appear in the generated main frame image."
    )


def _header_parts(ctx: SectionContext) -> list[ContentPart]:
    files = ctx.files
    count = len(files.product_images)
    lines = [
        "Generate a Header image prompt for:",
        f"BUSINESS INFORMATION: {ctx.business_json}",
        f"AD TYPE: {ctx.form.ad_type.value}",
        prompts.festival_line(ctx.form),
        "CRITICAL INSTRUCTION: If a visiting card is attached, extract EVERY piece of information from it "
        "(business name, owner name, ALL phone numbers, email, website, full address, tagline, services) and "
        "include ALL of them in the header prompt. The header is a premium digital version of the visiting card.",
    ]
    if count:
        lines.append(
            f"PRODUCT IMAGES: {count} product image(s) are attached. Add a slim product banner strip of small "
            "thumbnails at the bottom of the header, using the EXACT product images."
        )
    parts = [_text("\n".join(line for line in lines if line))]

    # The card and logo go to the header directly, not via the extracted summary.
    if files.visiting_card:
        parts += [
            _inline(files.visiting_card),
            _text(
                "This is the VISITING CARD: the #1 PRIMARY SOURCE for ALL header content. Include every name, "
                "phone number, email, website, the complete address, tagline and services exactly as printed."
            ),
        ]
    if files.logo:
        parts += [
            _inline(files.logo),
            _text("This is the LOGO: place this exact image as-is in the header. Do NOT recreate or redesign it."),
        ]
    return parts + _product_parts(files, "include this product in the header's product banner strip.")


def _poster_parts(ctx: SectionContext) -> list[ContentPart]:
    lines = [
        "Generate an atomic-level detailed poster design prompt in JSON format for:",
        f"BUSINESS INFORMATION: {ctx.business_json}",
        f"AD TYPE: {ctx.form.ad_type.value}",
        prompts.festival_line(ctx.form),
    ]
    if ctx.poster_instructions:
        lines.append(f"USER POSTER INSTRUCTIONS (IMPORTANT: follow these closely):\n{ctx.poster_instructions}")
    lines.append("Generate the complete poster design JSON now.")
    return [_text("\n".join(line for line in lines if line))]


def _voice_over_parts(ctx: SectionContext) -> list[ContentPart]:
    form = ctx.form
    lines = [
        f"Generate a {int(form.duration)}-second Telugu voice-over script for:",
        f"BUSINESS INFORMATION: {ctx.business_json}",
        f"AD TYPE: {form.ad_type.value}",
        prompts.festival_line(form),
        f"DURATION: {int(form.duration)} seconds ({form.segment_count} segments)",
    ]
    return [_text("\n".join(line for line in lines if line))]


def _veo_parts(ctx: SectionContext) -> list[ContentPart]:
    segments = "\n".join(f"Segment {i}: {s}" for i, s in enumerate(ctx.script_segments, start=1))
    return [
        _text(
            "Generate Veo 3 prompts for all segments.\n"
            f"VOICE-OVER SEGMENTS: {segments}\n"
            f"Generate {ctx.form.segment_count} complete Veo 3 prompts now."
        )
    ]


def _stock_image_parts(ctx: SectionContext) -> list[ContentPart]:
    theme = prompts.STOCK_IMAGE_THEMES.get(ctx.theme) or prompts.STOCK_IMAGE_THEMES[prompts.DEFAULT_STOCK_IMAGE_THEME]
    lines = [
        "Analyze this voice-over script and generate stock image prompts for B-roll / cutaway shots to use "
        "during video editing.",
        f"VOICE-OVER SCRIPT:\n{ctx.voice_over_script}",
        f"BUSINESS INFORMATION:\n{ctx.business_json}",
        f"AD TYPE: {ctx.form.ad_type.value}",
        prompts.festival_line(ctx.form),
        f"CULTURAL THEME: {theme}\nALL people, clothing, settings, and cultural elements in every image MUST "
        "match this theme.",
        "Generate ONLY the stock image prompts this specific script needs (1-5 maximum).",
    ]
    return [_text("\n\n".join(line for line in lines if line))]


def _text_or(default: str) -> Callable[[str], str]:
    def _post(text: str) -> str:
        return text.strip() or default

    return _post


_PROMPT_RULES = (
    "Apply ONLY the requested changes to the existing prompt",
    "Keep all other aspects exactly the same",
    "Output ONLY the refined prompt, no explanations",
    "Do NOT wrap in markdown code blocks",
    "Make sure the output is a clean, copy-paste ready prompt",
)


SECTION_SPECS: dict[SectionKind, SectionSpec] = {
    SectionKind.EXTRACTION: SectionSpec(
        kind=SectionKind.EXTRACTION,
        label="Business Info",
        response_format=ResponseFormat.JSON,
        system_prompt=lambda ctx: prompts.EXTRACTION_SYSTEM_PROMPT,
        user_parts=_extraction_parts,
        postprocess=parse_json_object,
        bundle_field="business_info",
    ),
    SectionKind.MAIN_FRAME: SectionSpec(
        kind=SectionKind.MAIN_FRAME,
        label="Main Frame",
        response_format=ResponseFormat.TEXT,
        system_prompt=lambda ctx: prompts.main_frame_system_prompt(ctx.form, ctx.business_type),
        user_parts=_main_frame_parts,
        postprocess=strip_code_fences,
        bundle_field="main_frame_prompt",
        refinement=Refinement("Main Frame prompt", "PROMPT", _PROMPT_RULES),
    ),
    SectionKind.HEADER: SectionSpec(
        kind=SectionKind.HEADER,
        label="Header",
        response_format=ResponseFormat.TEXT,
        system_prompt=lambda ctx: prompts.header_system_prompt(ctx.form, ctx.business_type),
        user_parts=_header_parts,
        postprocess=strip_code_fences,
        bundle_field="header_prompt",
        refinement=Refinement("Header prompt", "PROMPT", _PROMPT_RULES),
    ),
    SectionKind.POSTER: SectionSpec(
        kind=SectionKind.POSTER,
        label="Poster",
        response_format=ResponseFormat.JSON,
        system_prompt=lambda ctx: prompts.poster_system_prompt(ctx.form),
        user_parts=_poster_parts,
        postprocess=format_poster_json,
        bundle_field="poster_prompt",
        refinement=Refinement(
            "Poster design prompt (JSON)",
            "PROMPT",
            (
                "Apply ONLY the requested changes to the existing JSON prompt",
                "Keep all other fields exactly the same",
                "Output ONLY the refined JSON, no explanations",
                "The output must be a valid JSON object",
                "Do NOT wrap in markdown code blocks",
            ),
        ),
    ),
    SectionKind.VOICE_OVER: SectionSpec(
        kind=SectionKind.VOICE_OVER,
        label="Voice Over",
        response_format=ResponseFormat.TEXT,
        system_prompt=lambda ctx: prompts.voice_over_system_prompt(ctx.form),
        user_parts=_voice_over_parts,
        postprocess=_text_or(FAILED_SCRIPT_TEXT),
        bundle_field="voice_over_script",
        refinement=Refinement(
            "Voice Over script",
            "SCRIPT",
            (
                "Apply ONLY the requested changes to the existing script",
                "Keep the same structure and duration",
                "Maintain Telugu language",
                "Output ONLY the refined script, no explanations",
            ),
        ),
    ),
    SectionKind.VEO: SectionSpec(
        kind=SectionKind.VEO,
        label="Veo Segments",
        response_format=ResponseFormat.DELIMITED,
        system_prompt=lambda ctx: prompts.veo_segment_system_prompt(ctx.form.segment_count),
        user_parts=_veo_parts,
        postprocess=split_segments,
        bundle_field="veo_prompts",
        refinement=Refinement(
            "Veo prompts",
            "PROMPTS",
            (
                "Apply ONLY the requested changes to the existing prompts",
                "Keep the same structure and segment count",
                "Output ONLY the refined prompts, no explanations",
                "Use ###SEGMENT### separator between segments",
            ),
        ),
    ),
    SectionKind.STOCK_IMAGES: SectionSpec(
        kind=SectionKind.STOCK_IMAGES,
        label="Stock Images",
        response_format=ResponseFormat.JSON,
        system_prompt=lambda ctx: prompts.STOCK_IMAGE_SYSTEM_PROMPT,
        user_parts=_stock_image_parts,
        postprocess=parse_stock_images,
        bundle_field="stock_image_prompts",
    ),
    SectionKind.TRANSLITERATION: SectionSpec(
        kind=SectionKind.TRANSLITERATION,
        label="Transliteration",
        response_format=ResponseFormat.TEXT,
        system_prompt=lambda ctx: prompts.TRANSLITERATION_SYSTEM_PROMPT,
        user_parts=lambda ctx: [_text(prompts.transliteration_user_prompt(ctx.text))],
        postprocess=lambda text: text.strip(),
    ),
}

REFINABLE_SECTIONS = tuple(kind for kind, spec in SECTION_SPECS.items() if spec.refinement is not None)


def build_request(kind: SectionKind, ctx: SectionContext) -> SectionRequest:
    spec = SECTION_SPECS[kind]
    return SectionRequest(
        section=spec.label,
        system_instruction=spec.system_prompt(ctx),
        parts=spec.user_parts(ctx),
        response_format=spec.response_format,
    )


def build_refinement_request(
    kind: SectionKind,
    ctx: SectionContext,
    current_content: str,
    instructions: str,
) -> SectionRequest:
    """Same system prompt as the original generation; the user turn shows the old output and the requested change."""
    spec = SECTION_SPECS[kind]
    if spec.refinement is None:
        raise ValueError(f"Unknown section type: {kind.value}")
    ref = spec.refinement
    rules = "\n".join(f"- {rule}" for rule in ref.rules)
    text = (
        f"You previously generated this {ref.noun}:\n\n"
        f"---CURRENT {ref.marker}---\n{current_content}\n---END CURRENT {ref.marker}---\n\n"
        f'The user wants the following changes/additions:\n"{instructions}"\n\n'
        f"IMPORTANT:\n{rules}"
    )
    return SectionRequest(
        section=spec.label,
        system_instruction=spec.system_prompt(ctx),
        parts=[_text(text)],
        response_format=ResponseFormat.TEXT,
    )


class SectionGenerator:
    """Builds a section's request, dispatches it and post-processes the answer."""

    def __init__(self, dispatcher: Dispatcher) -> None:
        self.dispatcher = dispatcher

    async def raw(self, request: SectionRequest) -> str:
        return await self.dispatcher.generate(request)

    async def generate(self, kind: SectionKind, ctx: SectionContext) -> Any:
        request = build_request(kind, ctx)
        return SECTION_SPECS[kind].postprocess(await self.raw(request))

    async def generate_validated(
        self,
        kind: SectionKind,
        ctx: SectionContext,
        min_length: int | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> Any:
        """Like `generate`, but retries empty / too-short answers."""
        spec = SECTION_SPECS[kind]
        request = build_request(kind, ctx)
        text = await generate_with_retry(
            lambda: self.raw(request),
            spec.label,
            min_length=min_length,
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
        )
        return spec.postprocess(text)

    async def refine(self, kind: SectionKind, ctx: SectionContext, current_content: str, instructions: str) -> Any:
        request = build_refinement_request(kind, ctx, current_content, instructions)
        text = await self.raw(request)
        # An empty answer keeps what the user already had.
        return SECTION_SPECS[kind].postprocess(text if text.strip() else current_content)
