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

# Firestore collection names. All application data lives under the owning user.
USERS_COLLECTION = "users"
AI_PROFILES_COLLECTION = "aiProfiles"
SESSIONS_COLLECTION = "sessions"
TRANSCRIPTS_COLLECTION = "transcripts"
AI_MESSAGES_COLLECTION = "aiMessages"
SUMMARY_COLLECTION = "summary"
SUMMARY_DOCUMENT_ID = "data"
PROMPT_PRESETS_COLLECTION = "promptPresets"


def user_path(uid: str) -> str:
    return f"{USERS_COLLECTION}/{uid}"


def ai_profiles_path(uid: str) -> str:
    return f"{user_path(uid)}/{AI_PROFILES_COLLECTION}"


def sessions_path(uid: str) -> str:
    return f"{user_path(uid)}/{SESSIONS_COLLECTION}"


def session_path(uid: str, session_id: str) -> str:
    return f"{sessions_path(uid)}/{session_id}"


def transcripts_path(uid: str, session_id: str) -> str:
    return f"{session_path(uid, session_id)}/{TRANSCRIPTS_COLLECTION}"


def ai_messages_path(uid: str, session_id: str) -> str:
    return f"{session_path(uid, session_id)}/{AI_MESSAGES_COLLECTION}"


def summary_path(uid: str, session_id: str) -> str:
    return f"{session_path(uid, session_id)}/{SUMMARY_COLLECTION}/{SUMMARY_DOCUMENT_ID}"


def prompt_presets_path(uid: str) -> str:
    return f"{user_path(uid)}/{PROMPT_PRESETS_COLLECTION}"
