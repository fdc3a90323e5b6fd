from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from adcreative_genai.config import settings
from adcreative_genai.logging import get_logger
from adcreative_genai.models import AdFormData, GenerationBundle

logger = get_logger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SavedGeneration:
    generation_id: str
    owner_id: str
    business_name: str
    business_type: str
    bundle: GenerationBundle
    form: AdFormData
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.generation_id,
            "userId": self.owner_id,
            "businessName": self.business_name,
            "businessType": self.business_type,
            "createdAt": self.created_at,
        }
        data.update(self.bundle.to_dict())
        data.update(self.form.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SavedGeneration:
        return cls(
            generation_id=data["id"],
            owner_id=data["userId"],
            business_name=data.get("businessName") or "Untitled",
            business_type=data.get("businessType") or "Business",
            bundle=GenerationBundle.from_dict(data),
            form=AdFormData.from_dict(data),
            created_at=data.get("createdAt") or "",
        )


class GenerationStore:
    """Saved generations as one JSON document per generation."""

    def __init__(self, root_dir: Path | None = None) -> None:
        self.root_dir = Path(root_dir or settings.data_dir).resolve()
        self.generations_dir = self.root_dir / "generations"
        self.generations_dir.mkdir(parents=True, exist_ok=True)

    def save_generation(self, owner_id: str, bundle: GenerationBundle, form: AdFormData) -> str:
        generation_id = uuid.uuid4().hex[:12]
        record = SavedGeneration(
            generation_id=generation_id,
            owner_id=owner_id,
            business_name=bundle.business_name,
            business_type=bundle.business_type,
            bundle=bundle,
            form=form,
            created_at=_now_iso(),
        )
        self._path(generation_id).write_text(
            json.dumps(record.to_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info("Saved generation %s for %s", generation_id, owner_id)
        return generation_id

    def list_generations(self, owner_id: str) -> list[SavedGeneration]:
        """Newest first."""
        out: list[SavedGeneration] = []
        for path in self.generations_dir.glob("*.json"):
            try:
                record = SavedGeneration.from_dict(json.loads(path.read_text("utf-8")))
            except (OSError, ValueError, KeyError) as exc:
                logger.warning("Skipping unreadable generation %s: %s", path.name, exc)
                continue
            if record.owner_id == owner_id:
                out.append(record)
        out.sort(key=lambda r: r.created_at, reverse=True)
        return out

    def read_generation(self, generation_id: str) -> SavedGeneration:
        path = self._path(generation_id)
        return SavedGeneration.from_dict(json.loads(path.read_text("utf-8")))

    def delete_generation(self, generation_id: str) -> None:
        path = self._path(generation_id)
        if path.exists():
            path.unlink()

    def _path(self, generation_id: str) -> Path:
        path = (self.generations_dir / f"{generation_id}.json").resolve()
        if not str(path).startswith(str(self.generations_dir) + os.sep):
            raise ValueError("Refusing to access outside generations_dir")
        return path
