from __future__ import annotations

import mimetypes
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from adcreative_genai.models import Attachment

DEFAULT_MIME = "application/octet-stream"


def _sniff_image_mime(content: bytes) -> str | None:
    try:
        with Image.open(BytesIO(content)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        return None
    return Image.MIME.get(fmt or "")


def attachment_from_bytes(filename: str, content: bytes, declared_mime: str | None = None) -> Attachment:
    """
    Wrap uploaded bytes as an attachment with a usable mime type.

    Browsers and CLIs are sloppy about content types, so images are identified
    by their actual bytes; everything else falls back to the declared type, then
    the file extension.
    """
    mime = _sniff_image_mime(content)
    if mime is None:
        declared = (declared_mime or "").split(";")[0].strip()
        if declared and declared != DEFAULT_MIME:
            mime = declared
        else:
            mime = mimetypes.guess_type(filename)[0] or DEFAULT_MIME
    return Attachment(filename=Path(filename).name, mime_type=mime, data=content)


def attachment_from_path(path: str | Path) -> Attachment:
    p = Path(path)
    return attachment_from_bytes(p.name, p.read_bytes())
