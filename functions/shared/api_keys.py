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

# Placeholder reversible encoding for stored provider API keys.
# NOT encryption: replace with envelope encryption or a secret manager before
# treating stored keys as protected.

import base64
import binascii


def encode_api_key(api_key: str) -> str:
    return base64.b64encode(api_key.encode("utf-8")).decode("ascii")


def decode_api_key(encoded_key: str) -> str:
    """Decodes a stored key, returning the value unchanged if it is not base64."""
    try:
        return base64.b64decode(encoded_key, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return encoded_key
