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
from typing import List, Optional

from shared.types import PromptPreset, Provider, Session, UserProfile


@dataclass
class CreateAiProfileData:
    """Fields accepted when creating an AI profile."""

    name: str
    description: str
    model: str
    provider: Provider
    temperature: float
    max_tokens: int
    system_prompt: str
    api_key: Optional[str] = None
    is_default: bool = False


@dataclass
class UpdateAiProfileData:
    """Partial update of an AI profile. Unset (None) fields are left untouched."""

    name: Optional[str] = None
    description: Optional[str] = None
    model: Optional[str] = None
    provider: Optional[Provider] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    system_prompt: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None


@dataclass
class BatchData:
    profile: Optional[UserProfile] = None
    presets: Optional[List[PromptPreset]] = None
    sessions: Optional[List[Session]] = None


@dataclass
class VerifiedUser:
    """User information returned by the identity verification function."""

    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
    email_verified: bool = False


@dataclass
class FormValidation:
    is_valid: bool
    errors: dict = field(default_factory=dict)
