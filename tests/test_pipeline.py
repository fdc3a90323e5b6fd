import json

import pytest

from adcreative_genai.errors import AllCredentialsExhaustedError, SectionGenerationFailed
from adcreative_genai.models import AdFormData, Attachment, CreationMode, DurationPackage, FileStore, GenerationBundle
from adcreative_genai.pipeline import AdPipeline, PipelineState
from adcreative_genai.sections import SectionKind

from conftest import FakeAPIError, FakeBackend

BUSINESS = {"businessName": "Ravi Sarees", "businessType": "Saree boutique"}
SCRIPT = "Segment 1 (0-8s): Namaskaram! Ravi Sarees ki swagatham.\nSegment 2 (8-16s): Ee roje visit cheyandi."


def _files(products=0):
    return FileStore(
        logo=Attachment("logo.png", "image/png", b"logo"),
        product_images=[Attachment(f"p{i}.png", "image/png", b"p") for i in range(products)],
    )


def _scripted_backend(**overrides):
    responses = {
        "Business Info": json.dumps(BUSINESS),
        "Main Frame": "```\n" + "M" * 120 + "\n```",
        "Header": "H" * 120,
        "Poster": '{"headline": "Grand Saree Sale"}',
        "Voice Over": SCRIPT,
        "Veo Segments": "prompt one\n###SEGMENT###\nprompt two",
    }
    responses.update(overrides)
    return FakeBackend(responses=responses)


class TestFullRun:
    @pytest.mark.asyncio
    async def test_rotates_past_exhausted_key(self, make_generator, no_retry_delay):
        backend = FakeBackend(failing={"k1": FakeAPIError(429, "Resource exhausted")})
        gen = make_generator(backend, keys=("k1", "k2"))
        bundle = await AdPipeline(gen).run(AdFormData(), _files(), CreationMode.FULL)

        assert gen.dispatcher.pool.current_index == 1
        assert bundle.main_frame_prompt == "x" * 200
        assert backend.keys()[0] == "k1"
        assert set(backend.keys()[1:]) == {"k2"}

    @pytest.mark.asyncio
    async def test_bundle_contents(self, make_generator, no_retry_delay):
        backend = _scripted_backend()
        bundle = await AdPipeline(make_generator(backend)).run(AdFormData(), _files(products=2))

        assert backend.sections() == ["Business Info", "Main Frame", "Header", "Poster", "Voice Over", "Veo Segments"]
        assert bundle.business_info == BUSINESS
        assert bundle.main_frame_prompt == "M" * 120
        assert bundle.header_prompt == "H" * 120
        assert json.loads(bundle.poster_prompt) == {"headline": "Grand Saree Sale"}
        assert bundle.poster_prompt.startswith("{\n  ")
        assert bundle.voice_over_script == SCRIPT
        assert bundle.veo_prompts == ["prompt one", "prompt two"]
        assert bundle.has_product_images is True
        assert bundle.product_image_count == 2
        assert bundle.stock_image_prompts is None

    @pytest.mark.asyncio
    async def test_veo_request_embeds_script_segments(self, make_generator, no_retry_delay):
        backend = _scripted_backend()
        await AdPipeline(make_generator(backend)).run(AdFormData(duration=DurationPackage.SHORT), _files())
        veo_request = backend.calls[-1][1]
        assert "Segment 1: Namaskaram! Ravi Sarees ki swagatham." in veo_request.parts[0].text
        assert "Generate 2 complete Veo 3 prompts" in veo_request.parts[0].text

    @pytest.mark.asyncio
    async def test_progress_is_monotonic_and_reaches_100(self, make_generator, no_retry_delay):
        seen = []
        pipeline = AdPipeline(make_generator(_scripted_backend()), on_progress=lambda step, pct: seen.append(pct))
        await pipeline.run(AdFormData(), _files())

        assert seen == [10, 30, 50, 55, 65, 85, 100]
        assert [e.percent for e in pipeline.progress_log] == seen
        assert pipeline.state == PipelineState.DONE

    @pytest.mark.asyncio
    async def test_section_failure_aborts_run(self, make_generator, no_retry_delay):
        backend = _scripted_backend(Header="short")
        pipeline = AdPipeline(make_generator(backend))
        with pytest.raises(SectionGenerationFailed) as info:
            await pipeline.run(AdFormData(), _files())

        assert info.value.section == "Header"
        assert pipeline.state == PipelineState.FAILED
        assert pipeline.error is info.value
        assert "Poster" not in backend.sections()
        assert backend.sections().count("Header") == 3

    @pytest.mark.asyncio
    async def test_exhausted_keys_abort_run(self, make_generator, no_retry_delay):
        backend = FakeBackend(failing={"k1": FakeAPIError(429), "k2": FakeAPIError(403)})
        pipeline = AdPipeline(make_generator(backend, keys=("k1", "k2")))
        with pytest.raises(AllCredentialsExhaustedError):
            await pipeline.run(AdFormData(), _files())
        assert pipeline.state == PipelineState.FAILED
        assert backend.sections() == ["Business Info", "Business Info"]

    @pytest.mark.asyncio
    async def test_pipeline_can_run_again_after_failure(self, make_generator, no_retry_delay):
        backend = _scripted_backend(Header="short")
        pipeline = AdPipeline(make_generator(backend))
        with pytest.raises(SectionGenerationFailed):
            await pipeline.run(AdFormData(), _files())
        backend.responses["Header"] = "H" * 60
        bundle = await pipeline.run(AdFormData(), _files())
        assert bundle.header_prompt == "H" * 60
        assert pipeline.error is None


class TestPosterMode:
    @pytest.mark.asyncio
    async def test_extracts_only(self, make_generator):
        backend = _scripted_backend()
        seen = []
        pipeline = AdPipeline(make_generator(backend), on_progress=lambda step, pct: seen.append((step, pct)))
        bundle = await pipeline.run(AdFormData(), _files(), CreationMode.POSTER)

        assert backend.sections() == ["Business Info"]
        assert bundle.business_info == BUSINESS
        assert bundle.main_frame_prompt == ""
        assert [pct for _, pct in seen] == [30, 100]
        assert seen[-1][0] == "Business info extracted. Ready for poster creation."

    @pytest.mark.asyncio
    async def test_poster_on_demand(self, make_generator):
        backend = _scripted_backend()
        pipeline = AdPipeline(make_generator(backend))
        bundle = await pipeline.run(AdFormData(), _files(), CreationMode.POSTER)
        bundle = await pipeline.generate_poster(bundle, AdFormData(), "Make it green")

        assert json.loads(bundle.poster_prompt) == {"headline": "Grand Saree Sale"}
        assert "Make it green" in backend.calls[-1][1].parts[0].text


class TestPostHocSteps:
    @pytest.fixture
    def bundle(self):
        return GenerationBundle(
            business_info=BUSINESS,
            main_frame_prompt="main",
            header_prompt="header",
            poster_prompt='{\n  "headline": "Old"\n}',
            voice_over_script=SCRIPT,
            veo_prompts=["one", "two"],
        )

    @pytest.mark.asyncio
    async def test_refine_replaces_only_target_field(self, make_generator, bundle):
        backend = _scripted_backend(Header="A much bolder header")
        refined = await AdPipeline(make_generator(backend)).refine(
            bundle, SectionKind.HEADER, "bolder", AdFormData()
        )
        assert refined.header_prompt == "A much bolder header"
        assert refined.main_frame_prompt == bundle.main_frame_prompt
        assert refined.poster_prompt == bundle.poster_prompt
        assert refined.veo_prompts == bundle.veo_prompts
        assert bundle.header_prompt == "header"

    @pytest.mark.asyncio
    async def test_refine_poster_invalid_json_keeps_raw_text(self, make_generator, bundle):
        backend = _scripted_backend(Poster="Headline: New")
        refined = await AdPipeline(make_generator(backend)).refine(bundle, SectionKind.POSTER, "new", AdFormData())
        assert refined.poster_prompt == "Headline: New"

    @pytest.mark.asyncio
    async def test_refine_veo_round_trips_segments(self, make_generator, bundle):
        backend = _scripted_backend(**{"Veo Segments": "uno\n###SEGMENT###\ndos\n###SEGMENT###\ntres"})
        refined = await AdPipeline(make_generator(backend)).refine(bundle, SectionKind.VEO, "add one", AdFormData())
        assert refined.veo_prompts == ["uno", "dos", "tres"]
        sent = backend.calls[-1][1].parts[0].text
        assert "one\n###SEGMENT###\ntwo" in sent

    @pytest.mark.asyncio
    async def test_refine_rejects_non_refinable_kind(self, make_generator, bundle):
        with pytest.raises(ValueError):
            await AdPipeline(make_generator(FakeBackend())).refine(
                bundle, SectionKind.EXTRACTION, "x", AdFormData()
            )

    @pytest.mark.asyncio
    async def test_stock_images_overwrite_previous(self, make_generator, bundle):
        backend = _scripted_backend(**{"Stock Images": ['[{"id": 1}]', '[{"id": 1}, {"id": 2}]']})
        pipeline = AdPipeline(make_generator(backend))
        first = await pipeline.generate_stock_images(bundle, AdFormData())
        second = await pipeline.generate_stock_images(first, AdFormData(), theme="european")

        assert first.stock_image_prompts == [{"id": 1}]
        assert second.stock_image_prompts == [{"id": 1}, {"id": 2}]
        assert "EUROPEAN" in backend.calls[-1][1].parts[0].text

    @pytest.mark.asyncio
    async def test_stock_images_need_a_script(self, make_generator):
        pipeline = AdPipeline(make_generator(FakeBackend()))
        with pytest.raises(ValueError):
            await pipeline.generate_stock_images(GenerationBundle(business_info={}), AdFormData())

    @pytest.mark.asyncio
    async def test_transliterate(self, make_generator):
        backend = _scripted_backend(Transliteration="  Namaskaram  ")
        assert await AdPipeline(make_generator(backend)).transliterate("నమస్కారం") == "Namaskaram"


class TestRunGuard:
    @pytest.mark.asyncio
    async def test_concurrent_run_is_rejected(self, make_generator):
        pipeline = AdPipeline(make_generator(FakeBackend()))
        pipeline._running = True
        with pytest.raises(RuntimeError, match="already in progress"):
            await pipeline.run(AdFormData(), _files())
