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

# Local storage key holding the serialized current user profile.
USER_INFO_STORAGE_KEY = "pickleglass_user"

# Event name dispatched whenever the stored user info changes.
USER_INFO_CHANGED_EVENT = "userInfoChanged"

# Placeholders used when the identity provider has no display name or email.
DEFAULT_DISPLAY_NAME = "User"
DEFAULT_EMAIL = "no-email@example.com"

DEFAULT_SESSION_TITLE = "New Session"
DEFAULT_SESSION_TYPE = "ask"

DISPLAY_NAME_MIN_LENGTH = 2
DISPLAY_NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
PASSWORD_RECOMMENDED_LENGTH = 8

MAX_PROFILE_NAME_LENGTH = 100
MAX_SYSTEM_PROMPT_LENGTH = 20000
MAX_SESSION_TITLE_LENGTH = 500
MAX_PRESET_PROMPT_LENGTH = 20000

# Query parameter value that marks a login launched from the desktop app.
ELECTRON_MODE = "electron"
DESKTOP_AUTH_IPC_CHANNEL = "firebase-auth-success"

DEVELOPMENT_API_ORIGIN = "http://localhost:9001"
RUNTIME_CONFIG_PATH = "/runtime-config.json"
