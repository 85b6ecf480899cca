"""
Pydantic schemas for the dashboard API.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from shared.constants import (
    DEFAULT_SESSION_TYPE,
    MAX_PRESET_PROMPT_LENGTH,
    MAX_PROFILE_NAME_LENGTH,
    MAX_SESSION_TITLE_LENGTH,
    MAX_SYSTEM_PROMPT_LENGTH,
)
from shared.types import MessageRole, Provider


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class SignupRequest(BaseModel):
    email: str = ""
    display_name: str = ""
    password: str = ""
    confirm_password: str = ""


class GoogleSignInRequest(BaseModel):
    id_token: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    email: str = ""


class UserProfileResponse(BaseModel):
    uid: str
    display_name: str
    email: str


class AuthResponse(BaseModel):
    user: UserProfileResponse
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None


class StatusResponse(BaseModel):
    status: Literal["ok"]


class UpdateUserRequest(BaseModel):
    display_name: str = ""


class CreatedResponse(BaseModel):
    id: str


class AiProfileCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_PROFILE_NAME_LENGTH)
    description: str = ""
    model: str = Field(..., min_length=1)
    provider: Provider
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2048, gt=0)
    system_prompt: str = Field(default="", max_length=MAX_SYSTEM_PROMPT_LENGTH)
    api_key: Optional[str] = None
    is_default: bool = False


class AiProfileUpdateRequest(BaseModel):
    name: Optional[str] = Field(
        default=None, min_length=1, max_length=MAX_PROFILE_NAME_LENGTH
    )
    description: Optional[str] = None
    model: Optional[str] = Field(default=None, min_length=1)
    provider: Optional[Provider] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    system_prompt: Optional[str] = Field(
        default=None, max_length=MAX_SYSTEM_PROMPT_LENGTH
    )
    api_key: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None


class AiProfileResponse(BaseModel):
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


class ModelPresetResponse(BaseModel):
    name: str
    provider: Provider
    model: str
    default_temperature: float
    default_max_tokens: int
    description: str


class SessionCreateRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=MAX_SESSION_TITLE_LENGTH)
    session_type: str = DEFAULT_SESSION_TYPE


class SessionResponse(BaseModel):
    id: str
    uid: str
    title: str
    session_type: str
    started_at: int
    updated_at: int
    ended_at: Optional[int] = None
    sync_state: str


class TranscriptResponse(BaseModel):
    id: str
    session_id: str
    start_at: int
    end_at: Optional[int] = None
    speaker: Optional[str] = None
    text: str
    lang: Optional[str] = None
    created_at: int
    sync_state: str


class AiMessageResponse(BaseModel):
    id: str
    session_id: str
    sent_at: int
    role: MessageRole
    content: str
    tokens: Optional[int] = None
    model: Optional[str] = None
    created_at: int
    sync_state: str


class SummaryResponse(BaseModel):
    session_id: str
    generated_at: int
    model: Optional[str] = None
    text: str
    tldr: str
    bullet_json: str
    action_json: str
    tokens_used: Optional[int] = None
    updated_at: int
    sync_state: str


class SessionDetailsResponse(BaseModel):
    session: SessionResponse
    transcripts: List[TranscriptResponse]
    ai_messages: List[AiMessageResponse]
    summary: Optional[SummaryResponse] = None


class PresetRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=MAX_PROFILE_NAME_LENGTH)
    prompt: str = Field(..., max_length=MAX_PRESET_PROMPT_LENGTH)


class PresetResponse(BaseModel):
    id: str
    uid: str
    title: str
    prompt: str
    is_default: int
    created_at: int
    sync_state: str


class BatchResponse(BaseModel):
    profile: Optional[UserProfileResponse] = None
    presets: Optional[List[PresetResponse]] = None
    sessions: Optional[List[SessionResponse]] = None


class DownloadInfoResponse(BaseModel):
    platform: str
    display_name: str
    url: str
    filename: str


class RuntimeConfigResponse(BaseModel):
    API_URL: str


class HandoffResponse(BaseModel):
    kind: Literal["deep_link", "ipc", "navigate"]
    target: str


ModelPresetsResponse = Dict[str, ModelPresetResponse]
