"""
Generation pipeline: business-info extraction first, then each artifact in turn.

Steps run strictly one after another. Every later prompt embeds the extracted
business info, and the video segments are derived from the voice-over script,
so extraction is always first and the voice-over always precedes the segments.
Main frame and header do not depend on each other; they are sequenced for
clear progress reporting and failure attribution.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from adcreative_genai.logging import get_logger
from adcreative_genai.models import AdFormData, CreationMode, FileStore, GenerationBundle, ProgressEvent
from adcreative_genai.postprocess import join_segments, parse_script_segments
from adcreative_genai.prompts import DEFAULT_STOCK_IMAGE_THEME
from adcreative_genai.sections import SECTION_SPECS, SectionContext, SectionGenerator, SectionKind

logger = get_logger(__name__)

ProgressCallback = Callable[[str, int], None]


class PipelineState(str, Enum):
    IDLE = "idle"
    EXTRACTING_BUSINESS_INFO = "extracting_business_info"
    GENERATING_MAIN_FRAME = "generating_main_frame"
    GENERATING_HEADER = "generating_header"
    GENERATING_POSTER = "generating_poster"
    GENERATING_VOICE_OVER = "generating_voice_over"
    GENERATING_VIDEO_SEGMENTS = "generating_video_segments"
    DONE = "done"
    FAILED = "failed"


# state entered -> (progress label, percent)
FULL_STEPS = {
    PipelineState.EXTRACTING_BUSINESS_INFO: ("Extracting business intelligence...", 10),
    PipelineState.GENERATING_MAIN_FRAME: ("Generating Main Frame prompt...", 30),
    PipelineState.GENERATING_HEADER: ("Generating Header prompt...", 50),
    PipelineState.GENERATING_POSTER: ("Designing Poster prompt...", 55),
    PipelineState.GENERATING_VOICE_OVER: ("Writing Voice Over script...", 65),
    PipelineState.GENERATING_VIDEO_SEGMENTS: ("Creating Veo 3 video segment prompts...", 85),
    PipelineState.DONE: ("Finalizing...", 100),
}

POSTER_STEPS = {
    PipelineState.EXTRACTING_BUSINESS_INFO: ("Extracting business intelligence...", 30),
    PipelineState.DONE: ("Business info extracted. Ready for poster creation.", 100),
}


class AdPipeline:
    def __init__(self, generator: SectionGenerator, on_progress: ProgressCallback | None = None) -> None:
        self.generator = generator
        self.on_progress = on_progress
        self.state = PipelineState.IDLE
        self.error: BaseException | None = None
        self.progress_log: list[ProgressEvent] = []
        self._running = False

    # --- state / progress --------------------------------------------------

    def _enter(self, state: PipelineState, steps: dict[PipelineState, tuple[str, int]]) -> None:
        self.state = state
        label, percent = steps[state]
        if self.progress_log:
            percent = max(percent, self.progress_log[-1].percent)
        self.progress_log.append(ProgressEvent(label, percent))
        logger.info("[%d%%] %s", percent, label)
        if self.on_progress is not None:
            self.on_progress(label, percent)

    def _start(self) -> None:
        if self._running:
            raise RuntimeError("A generation run is already in progress")
        self._running = True
        self.state = PipelineState.IDLE
        self.error = None
        self.progress_log = []

    def _fail(self, exc: BaseException) -> None:
        self.state = PipelineState.FAILED
        self.error = exc
        logger.error("Generation failed during %s: %s", self.progress_log[-1].step if self.progress_log else "start", exc)

    # --- runs --------------------------------------------------------------

    async def run(self, form: AdFormData, files: FileStore, mode: CreationMode = CreationMode.FULL) -> GenerationBundle:
        if mode == CreationMode.POSTER:
            return await self.extract_only(form, files)
        return await self.generate(form, files)

    async def generate(self, form: AdFormData, files: FileStore) -> GenerationBundle:
        """Full pipeline. Any unrecoverable section failure aborts the run; nothing partial is returned."""
        self._start()
        try:
            bundle = await self._generate(form, files)
        except Exception as exc:
            self._fail(exc)
            raise
        finally:
            self._running = False
        return bundle

    async def _generate(self, form: AdFormData, files: FileStore) -> GenerationBundle:
        gen = self.generator

        self._enter(PipelineState.EXTRACTING_BUSINESS_INFO, FULL_STEPS)
        business_info = await gen.generate(SectionKind.EXTRACTION, SectionContext(form=form, files=files))
        ctx = SectionContext(form=form, files=files, business_info=business_info)

        self._enter(PipelineState.GENERATING_MAIN_FRAME, FULL_STEPS)
        main_frame = await gen.generate_validated(SectionKind.MAIN_FRAME, ctx)

        self._enter(PipelineState.GENERATING_HEADER, FULL_STEPS)
        header = await gen.generate_validated(SectionKind.HEADER, ctx)

        self._enter(PipelineState.GENERATING_POSTER, FULL_STEPS)
        poster = await gen.generate(SectionKind.POSTER, ctx)

        self._enter(PipelineState.GENERATING_VOICE_OVER, FULL_STEPS)
        script = await gen.generate(SectionKind.VOICE_OVER, ctx)

        self._enter(PipelineState.GENERATING_VIDEO_SEGMENTS, FULL_STEPS)
        segments = parse_script_segments(script, form.segment_count)
        veo_ctx = SectionContext(form=form, business_info=business_info, script_segments=segments)
        veo_prompts = await gen.generate(SectionKind.VEO, veo_ctx)

        self._enter(PipelineState.DONE, FULL_STEPS)
        product_count = len(files.product_images)
        return GenerationBundle(
            business_info=business_info,
            main_frame_prompt=main_frame,
            header_prompt=header,
            poster_prompt=poster,
            voice_over_script=script,
            veo_prompts=veo_prompts,
            has_product_images=product_count > 0,
            product_image_count=product_count,
            stock_image_prompts=None,
        )

    async def extract_only(self, form: AdFormData, files: FileStore) -> GenerationBundle:
        """Poster mode: business info only; the poster itself is requested later."""
        self._start()
        try:
            self._enter(PipelineState.EXTRACTING_BUSINESS_INFO, POSTER_STEPS)
            business_info = await self.generator.generate(
                SectionKind.EXTRACTION, SectionContext(form=form, files=files)
            )
            self._enter(PipelineState.DONE, POSTER_STEPS)
        except Exception as exc:
            self._fail(exc)
            raise
        finally:
            self._running = False
        return GenerationBundle(business_info=business_info)

    # --- post-hoc, user-triggered steps -------------------------------------

    async def generate_stock_images(
        self,
        bundle: GenerationBundle,
        form: AdFormData,
        theme: str = DEFAULT_STOCK_IMAGE_THEME,
    ) -> GenerationBundle:
        """B-roll prompts for a finished full run. Re-running overwrites the previous list."""
        if not bundle.voice_over_script:
            raise ValueError("Stock images need a completed voice-over script")
        ctx = SectionContext(
            form=form,
            business_info=bundle.business_info,
            voice_over_script=bundle.voice_over_script,
            theme=theme,
        )
        prompts = await self.generator.generate(SectionKind.STOCK_IMAGES, ctx)
        return bundle.with_stock_images(prompts)

    async def generate_poster(self, bundle: GenerationBundle, form: AdFormData, instructions: str = "") -> GenerationBundle:
        ctx = SectionContext(form=form, business_info=bundle.business_info, poster_instructions=instructions)
        poster = await self.generator.generate(SectionKind.POSTER, ctx)
        return bundle.replace_field("poster_prompt", poster)

    async def refine(
        self,
        bundle: GenerationBundle,
        kind: SectionKind,
        instructions: str,
        form: AdFormData,
    ) -> GenerationBundle:
        """Re-run one section with extra instructions; every other field is left as is."""
        spec = SECTION_SPECS[kind]
        if spec.refinement is None or spec.bundle_field is None:
            raise ValueError(f"Unknown section type: {kind.value}")

        current = getattr(bundle, spec.bundle_field)
        if isinstance(current, list):
            current = join_segments(current)

        ctx = SectionContext(form=form, business_info=bundle.business_info)
        refined = await self.generator.refine(kind, ctx, current, instructions)
        return bundle.replace_field(spec.bundle_field, refined)

    async def transliterate(self, text: str) -> str:
        result = await self.generator.generate(SectionKind.TRANSLITERATION, SectionContext(form=AdFormData(), text=text))
        return result or text
