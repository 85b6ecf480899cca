"""
Prompt presets stored under users/{uid}/promptPresets.
"""

from __future__ import annotations

from typing import Callable

from backend.db import DocumentStore
from shared.firebase_constants import prompt_presets_path
from shared.types import PromptPreset
from shared.utils import timestamp_to_unix, utc_now


def _to_preset(preset_id: str, uid: str, data: dict) -> PromptPreset:
    return PromptPreset(
        id=preset_id,
        uid=uid,
        title=data.get("title", ""),
        prompt=data.get("prompt", ""),
        is_default=1 if data.get("isDefault") else 0,
        created_at=timestamp_to_unix(data["createdAt"]),
    )


class PromptPresetStore:
    def __init__(self, db: DocumentStore, clock: Callable = utc_now):
        self.db = db
        self.clock = clock

    def list_presets(self, uid: str) -> list[PromptPreset]:
        docs = self.db.query(prompt_presets_path(uid), order_by="createdAt")
        return [_to_preset(doc_id, uid, data) for doc_id, data in docs]

    def create_preset(self, uid: str, title: str, prompt: str) -> str:
        return self.db.add(
            prompt_presets_path(uid),
            {
                "title": title,
                "prompt": prompt,
                "isDefault": False,
                "createdAt": self.clock(),
            },
        )

    def update_preset(self, uid: str, preset_id: str, title: str, prompt: str) -> None:
        self.db.update(
            f"{prompt_presets_path(uid)}/{preset_id}",
            {"title": title, "prompt": prompt},
        )

    def delete_preset(self, uid: str, preset_id: str) -> None:
        self.db.delete(f"{prompt_presets_path(uid)}/{preset_id}")
