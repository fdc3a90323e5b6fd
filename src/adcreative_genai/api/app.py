from __future__ import annotations

from typing import Any

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, Field

from adcreative_genai.config import settings
from adcreative_genai.credentials import CredentialPool
from adcreative_genai.dispatcher import Dispatcher
from adcreative_genai.errors import AdCreativeError, ConfigurationError
from adcreative_genai.files import attachment_from_bytes
from adcreative_genai.logging import get_logger, setup_logging
from adcreative_genai.models import (
    AdFormData,
    AdType,
    Attachment,
    AttireType,
    CreationMode,
    DurationPackage,
    FileStore,
    GenerationBundle,
)
from adcreative_genai.pipeline import AdPipeline
from adcreative_genai.prompts import DEFAULT_STOCK_IMAGE_THEME
from adcreative_genai.sections import SectionGenerator, SectionKind
from adcreative_genai.storage import GenerationStore

setup_logging(settings.log_level, settings.log_json)
logger = get_logger(__name__)

app = FastAPI(title="adcreative_genai")

store = GenerationStore()

# One pool for the whole process: a key that starts failing for one request is
# skipped by the next one too.
_dispatcher: Dispatcher | None = None


def get_generator() -> SectionGenerator:
    global _dispatcher
    if _dispatcher is None:
        try:
            pool = CredentialPool.from_settings(settings)
        except ConfigurationError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        _dispatcher = Dispatcher(pool)
    return SectionGenerator(_dispatcher)


def get_store() -> GenerationStore:
    return store


class FormPayload(BaseModel):
    adType: AdType = AdType.COMMERCIAL
    festivalName: str = ""
    attireType: AttireType = AttireType.TRADITIONAL
    duration: DurationPackage = DurationPackage.SHORT
    textInstructions: str = ""

    def to_form(self) -> AdFormData:
        return AdFormData.from_dict(self.model_dump(mode="json"))


class RefineRequest(BaseModel):
    bundle: dict[str, Any]
    section: SectionKind
    instructions: str
    form: FormPayload = Field(default_factory=FormPayload)


class StockImagesRequest(BaseModel):
    bundle: dict[str, Any]
    form: FormPayload = Field(default_factory=FormPayload)
    theme: str = DEFAULT_STOCK_IMAGE_THEME


class PosterRequest(BaseModel):
    bundle: dict[str, Any]
    form: FormPayload = Field(default_factory=FormPayload)
    instructions: str = ""


class TransliterateRequest(BaseModel):
    text: str


class SaveRequest(BaseModel):
    owner_id: str
    bundle: dict[str, Any]
    form: FormPayload = Field(default_factory=FormPayload)


def _http_error(exc: Exception) -> HTTPException:
    # Messages are surfaced unmodified; the UI shows them as-is.
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, AdCreativeError):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc) or "An unexpected error occurred.")


async def _read_upload(upload: UploadFile | None) -> Attachment | None:
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    if not content:
        return None
    return attachment_from_bytes(upload.filename, content, upload.content_type)


async def _read_uploads(uploads: list[UploadFile] | None) -> list[Attachment]:
    out: list[Attachment] = []
    for upload in uploads or []:
        attachment = await _read_upload(upload)
        if attachment is not None:
            out.append(attachment)
    return out


@app.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True, "keys_configured": len(settings.api_keys())}


@app.post("/generations")
async def create_generation(
    logo: UploadFile = File(...),
    ad_type: AdType = Form(AdType.COMMERCIAL),
    festival_name: str = Form(""),
    attire_type: AttireType = Form(AttireType.TRADITIONAL),
    duration: int = Form(int(DurationPackage.SHORT)),
    text_instructions: str = Form(""),
    mode: CreationMode = Form(CreationMode.FULL),
    visiting_card: UploadFile | None = File(None),
    store_image: UploadFile | None = File(None),
    voice_recording: UploadFile | None = File(None),
    text_instructions_file: UploadFile | None = File(None),
    product_images: list[UploadFile] = File(default=[]),
    flyers_posters: list[UploadFile] = File(default=[]),
    generator: SectionGenerator = Depends(get_generator),
):
    try:
        package = DurationPackage(duration)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"duration must be one of {[int(d) for d in DurationPackage]}")

    files = FileStore(
        logo=await _read_upload(logo),
        visiting_card=await _read_upload(visiting_card),
        store_image=await _read_upload(store_image),
        product_images=await _read_uploads(product_images),
        flyers_posters=await _read_uploads(flyers_posters),
        voice_recording=await _read_upload(voice_recording),
        text_instructions_file=await _read_upload(text_instructions_file),
    )
    if files.logo is None:
        raise HTTPException(status_code=400, detail="Please upload a logo image to proceed.")

    form = AdFormData(
        ad_type=ad_type,
        festival_name=festival_name.strip(),
        attire_type=attire_type,
        duration=package,
        text_instructions=text_instructions,
    )

    pipeline = AdPipeline(generator)
    try:
        bundle = await pipeline.run(form, files, mode)
    except Exception as exc:
        logger.exception("Generation failed")
        raise _http_error(exc)

    return {
        "bundle": bundle.to_dict(),
        "progress": [{"step": e.step, "percent": e.percent} for e in pipeline.progress_log],
    }


@app.post("/generations/refine")
async def refine_section(req: RefineRequest, generator: SectionGenerator = Depends(get_generator)):
    pipeline = AdPipeline(generator)
    try:
        bundle = await pipeline.refine(
            GenerationBundle.from_dict(req.bundle),
            req.section,
            req.instructions,
            req.form.to_form(),
        )
    except Exception as exc:
        logger.exception("Refinement failed")
        raise _http_error(exc)
    return {"bundle": bundle.to_dict()}


@app.post("/generations/stock-images")
async def generate_stock_images(req: StockImagesRequest, generator: SectionGenerator = Depends(get_generator)):
    pipeline = AdPipeline(generator)
    try:
        bundle = await pipeline.generate_stock_images(
            GenerationBundle.from_dict(req.bundle),
            req.form.to_form(),
            req.theme,
        )
    except Exception as exc:
        logger.exception("Stock image generation failed")
        raise _http_error(exc)
    return {"bundle": bundle.to_dict()}


@app.post("/generations/poster")
async def generate_poster(req: PosterRequest, generator: SectionGenerator = Depends(get_generator)):
    pipeline = AdPipeline(generator)
    try:
        bundle = await pipeline.generate_poster(
            GenerationBundle.from_dict(req.bundle),
            req.form.to_form(),
            req.instructions,
        )
    except Exception as exc:
        logger.exception("Poster generation failed")
        raise _http_error(exc)
    return {"bundle": bundle.to_dict()}


@app.post("/transliterate")
async def transliterate(req: TransliterateRequest, generator: SectionGenerator = Depends(get_generator)):
    try:
        text = await AdPipeline(generator).transliterate(req.text)
    except Exception as exc:
        logger.exception("Transliteration failed")
        raise _http_error(exc)
    return {"text": text}


@app.post("/saved")
def save_generation(req: SaveRequest, store: GenerationStore = Depends(get_store)):
    generation_id = store.save_generation(
        req.owner_id,
        GenerationBundle.from_dict(req.bundle),
        req.form.to_form(),
    )
    return {"id": generation_id}


@app.get("/saved/{owner_id}")
def list_saved(owner_id: str, store: GenerationStore = Depends(get_store)):
    return {"items": [g.to_dict() for g in store.list_generations(owner_id)]}


@app.delete("/saved/{generation_id}")
def delete_saved(generation_id: str, store: GenerationStore = Depends(get_store)):
    try:
        store.delete_generation(generation_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True}
