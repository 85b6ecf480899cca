# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from dataclasses import dataclass, field
from enum import StrEnum
from typing import List, Optional


class Provider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    LOCAL = "local"


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class SyncState(StrEnum):
    """Whether a locally cached record matches the remote store."""

    CLEAN = "clean"
    DIRTY = "dirty"


@dataclass
class UserProfile:
    uid: str
    display_name: str
    email: str


@dataclass
class AiProfile:
    """A per-user model configuration stored under users/{uid}/aiProfiles."""

    id: str
    uid: str
    name: str
    description: str
    model: str
    provider: Provider
    temperature: float
    max_tokens: int
    system_prompt: str
    is_default: bool
    is_active: bool
    created_at: int
    updated_at: int
    api_key: Optional[str] = None


@dataclass
class Session:
    id: str
    uid: str
    title: str
    session_type: str
    started_at: int
    updated_at: int
    ended_at: Optional[int] = None
    sync_state: SyncState = SyncState.CLEAN


@dataclass
class Transcript:
    id: str
    session_id: str
    start_at: int
    text: str
    created_at: int
    end_at: Optional[int] = None
    speaker: Optional[str] = None
    lang: Optional[str] = None
    sync_state: SyncState = SyncState.CLEAN


@dataclass
class AiMessage:
    id: str
    session_id: str
    sent_at: int
    role: MessageRole
    content: str
    created_at: int
    tokens: Optional[int] = None
    model: Optional[str] = None
    sync_state: SyncState = SyncState.CLEAN


@dataclass
class Summary:
    """The single generated summary of a session."""

    session_id: str
    generated_at: int
    text: str
    tldr: str
    bullet_json: str
    action_json: str
    updated_at: int
    model: Optional[str] = None
    tokens_used: Optional[int] = None
    sync_state: SyncState = SyncState.CLEAN


@dataclass
class PromptPreset:
    id: str
    uid: str
    title: str
    prompt: str
    is_default: int
    created_at: int
    sync_state: SyncState = SyncState.CLEAN


@dataclass
class SessionDetails:
    session: Session
    transcripts: List[Transcript] = field(default_factory=list)
    ai_messages: List[AiMessage] = field(default_factory=list)
    summary: Optional[Summary] = None


@dataclass
class ModelPreset:
    name: str
    provider: Provider
    model: str
    default_temperature: float
    default_max_tokens: int
    description: str
