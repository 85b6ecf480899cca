"""
AI model profiles stored under users/{uid}/aiProfiles.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable, Optional

from dacite import Config, from_dict

from backend.db import DocumentStore
from shared.api import CreateAiProfileData, UpdateAiProfileData
from shared.api_keys import decode_api_key, encode_api_key
from shared.firebase_constants import ai_profiles_path
from shared.json_utils import convert_keys
from shared.types import AiProfile, ModelPreset, Provider
from shared.utils import now_millis, timestamp_to_unix, utc_now

logger = logging.getLogger(__name__)

DEFAULT_FLAG = "isDefault"

AI_MODEL_PRESETS: dict[str, ModelPreset] = {
    "gpt-4": ModelPreset(
        name="GPT-4",
        provider=Provider.OPENAI,
        model="gpt-4",
        default_temperature=0.7,
        default_max_tokens=2048,
        description="Most capable OpenAI model for complex tasks",
    ),
    "gpt-3.5-turbo": ModelPreset(
        name="GPT-3.5 Turbo",
        provider=Provider.OPENAI,
        model="gpt-3.5-turbo",
        default_temperature=0.7,
        default_max_tokens=2048,
        description="Fast and efficient OpenAI model",
    ),
    "claude-3-opus": ModelPreset(
        name="Claude 3 Opus",
        provider=Provider.ANTHROPIC,
        model="claude-3-opus-20240229",
        default_temperature=0.7,
        default_max_tokens=2048,
        description="Most capable Anthropic model",
    ),
    "claude-3-sonnet": ModelPreset(
        name="Claude 3 Sonnet",
        provider=Provider.ANTHROPIC,
        model="claude-3-sonnet-20240229",
        default_temperature=0.7,
        default_max_tokens=2048,
        description="Balanced Anthropic model",
    ),
    "gemini-pro": ModelPreset(
        name="Gemini Pro",
        provider=Provider.GOOGLE,
        model="gemini-pro",
        default_temperature=0.7,
        default_max_tokens=2048,
        description="Google's advanced AI model",
    ),
}


def _to_profile(profile_id: str, data: dict) -> AiProfile:
    """Builds an AiProfile from a stored (camelCase) document."""
    doc = convert_keys(data, "camel_to_snake")
    doc["id"] = profile_id
    doc.setdefault("description", "")
    doc.setdefault("system_prompt", "")
    doc.setdefault("is_default", False)
    doc.setdefault("is_active", True)
    for key in ("created_at", "updated_at"):
        value = doc.get(key)
        doc[key] = timestamp_to_unix(value) if value is not None else now_millis()
    if doc.get("api_key"):
        doc["api_key"] = decode_api_key(doc["api_key"])
    return from_dict(
        data_class=AiProfile,
        data=doc,
        config=Config(check_types=False, cast=[Provider]),
    )


class AiProfileStore:
    def __init__(self, db: DocumentStore, clock: Callable = utc_now):
        self.db = db
        self.clock = clock

    def list_profiles(self, uid: str) -> list[AiProfile]:
        docs = self.db.query(ai_profiles_path(uid), order_by="createdAt", descending=True)
        return [_to_profile(doc_id, data) for doc_id, data in docs]

    def get_profile(self, uid: str, profile_id: str) -> Optional[AiProfile]:
        data = self.db.get(f"{ai_profiles_path(uid)}/{profile_id}")
        if data is None:
            return None
        return _to_profile(profile_id, data)

    def create_profile(self, uid: str, data: CreateAiProfileData) -> str:
        """
        Creates a profile and returns its id.

        A profile created as default is written first and then promoted, so the
        previous default survives if the promotion fails.
        """
        now = self.clock()
        profile_data = {
            "uid": uid,
            "name": data.name,
            "description": data.description,
            "model": data.model,
            "provider": str(data.provider),
            "temperature": data.temperature,
            "maxTokens": data.max_tokens,
            "systemPrompt": data.system_prompt,
            "isDefault": False,
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
        }
        if data.api_key:
            profile_data["apiKey"] = encode_api_key(data.api_key)

        profile_id = self.db.add(ai_profiles_path(uid), profile_data)
        logger.info("Created AI profile %s for %s", profile_id, uid)

        if data.is_default:
            self.set_default_profile(uid, profile_id)
        return profile_id

    def update_profile(
        self, uid: str, profile_id: str, data: UpdateAiProfileData
    ) -> None:
        changes = {
            key: value
            for key, value in asdict(data).items()
            if value is not None and key != "is_default"
        }
        if "provider" in changes:
            changes["provider"] = str(changes["provider"])
        if changes.get("api_key"):
            changes["api_key"] = encode_api_key(changes["api_key"])
        if data.is_default is False:
            changes["is_default"] = False
        changes["updated_at"] = self.clock()

        self.db.update(
            f"{ai_profiles_path(uid)}/{profile_id}",
            convert_keys(changes, "snake_to_camel"),
        )
        if data.is_default:
            self.set_default_profile(uid, profile_id)

    def delete_profile(self, uid: str, profile_id: str) -> None:
        # Deleting the default does not promote another profile.
        self.db.delete(f"{ai_profiles_path(uid)}/{profile_id}")

    def get_default_profile(self, uid: str) -> Optional[AiProfile]:
        docs = self.db.query(
            ai_profiles_path(uid),
            filters=[(DEFAULT_FLAG, "==", True), ("isActive", "==", True)],
            limit=1,
        )
        if not docs:
            return None
        doc_id, data = docs[0]
        return _to_profile(doc_id, data)

    def set_default_profile(self, uid: str, profile_id: str) -> None:
        """Makes one profile the default and clears the flag on all others."""
        self.db.set_exclusive_flag(
            ai_profiles_path(uid),
            profile_id,
            DEFAULT_FLAG,
            extra={"updatedAt": self.clock()},
        )
        logger.info("Set default AI profile %s for %s", profile_id, uid)
