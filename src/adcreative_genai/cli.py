"""
CLI entrypoint:
  adcreative generate --logo logo.png [--visiting-card card.jpg] [--mode poster] [--out bundle.json]
  adcreative transliterate script.txt
  adcreative serve [--host 0.0.0.0] [--port 8000]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from adcreative_genai.config import settings
from adcreative_genai.credentials import CredentialPool
from adcreative_genai.dispatcher import Dispatcher
from adcreative_genai.errors import AdCreativeError
from adcreative_genai.files import attachment_from_path
from adcreative_genai.logging import get_logger, setup_logging
from adcreative_genai.models import AdFormData, AdType, AttireType, CreationMode, DurationPackage, FileStore
from adcreative_genai.pipeline import AdPipeline
from adcreative_genai.sections import SectionGenerator

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="adcreative", description="Generate ad creative prompts from business assets")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Run the generation pipeline")
    gen.add_argument("--logo", type=Path, required=True)
    gen.add_argument("--visiting-card", type=Path)
    gen.add_argument("--store-image", type=Path)
    gen.add_argument("--voice-recording", type=Path)
    gen.add_argument("--text-file", type=Path, help="Client instructions as a text file")
    gen.add_argument("--product-image", type=Path, action="append", default=[])
    gen.add_argument("--flyer", type=Path, action="append", default=[])
    gen.add_argument("--instructions", default="", help="Client instructions as text")
    gen.add_argument("--ad-type", choices=[t.value for t in AdType], default=AdType.COMMERCIAL.value)
    gen.add_argument("--festival", default="", help="Festival name (festival ads only)")
    gen.add_argument("--attire", choices=[t.value for t in AttireType], default=AttireType.TRADITIONAL.value)
    gen.add_argument("--duration", type=int, choices=[int(d) for d in DurationPackage], default=int(DurationPackage.SHORT))
    gen.add_argument("--mode", choices=[m.value for m in CreationMode], default=CreationMode.FULL.value)
    gen.add_argument("--out", type=Path, help="Write the bundle JSON here instead of stdout")

    tr = sub.add_parser("transliterate", help="Transliterate a Telugu script file to English letters")
    tr.add_argument("path", type=Path)

    srv = sub.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    return parser


def _optional(path: Path | None):
    return attachment_from_path(path) if path else None


def files_from_args(args: argparse.Namespace) -> FileStore:
    return FileStore(
        logo=attachment_from_path(args.logo),
        visiting_card=_optional(args.visiting_card),
        store_image=_optional(args.store_image),
        product_images=[attachment_from_path(p) for p in args.product_image],
        flyers_posters=[attachment_from_path(p) for p in args.flyer],
        voice_recording=_optional(args.voice_recording),
        text_instructions_file=_optional(args.text_file),
    )


def form_from_args(args: argparse.Namespace) -> AdFormData:
    return AdFormData(
        ad_type=AdType(args.ad_type),
        festival_name=args.festival,
        attire_type=AttireType(args.attire),
        duration=DurationPackage(args.duration),
        text_instructions=args.instructions,
    )


def _print_progress(step: str, percent: int) -> None:
    print(f"[{percent:3d}%] {step}", file=sys.stderr)


async def _run(args: argparse.Namespace, generator: SectionGenerator) -> str:
    pipeline = AdPipeline(generator, on_progress=_print_progress)
    if args.command == "transliterate":
        return await pipeline.transliterate(args.path.read_text("utf-8"))
    bundle = await pipeline.run(form_from_args(args), files_from_args(args), CreationMode(args.mode))
    return json.dumps(bundle.to_dict(), indent=2, ensure_ascii=False)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.log_level, settings.log_json)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("adcreative_genai.api.app:app", host=args.host, port=args.port)
        return 0

    try:
        generator = SectionGenerator(Dispatcher(CredentialPool.from_settings(settings)))
        output = asyncio.run(_run(args, generator))
    except AdCreativeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    out = getattr(args, "out", None)
    if out:
        out.write_text(output, encoding="utf-8")
        logger.info("Wrote %s", out)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
