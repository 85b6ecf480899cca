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

import re
from typing import Any, Literal

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

ConversionMode = Literal["camel_to_snake", "snake_to_camel"]


def camel_to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def snake_to_camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def convert_keys(data: Any, mode: ConversionMode) -> Any:
    """
    Recursively converts dictionary keys between camelCase and snake_case.

    Lists are walked element by element. Any other value (including Firestore
    sentinels such as SERVER_TIMESTAMP and timestamp objects) is returned as is.
    """
    if mode == "camel_to_snake":
        convert = camel_to_snake
    elif mode == "snake_to_camel":
        convert = snake_to_camel
    else:
        raise ValueError(f"Unknown key conversion mode: {mode}")

    if isinstance(data, dict):
        return {
            (convert(key) if isinstance(key, str) else key): convert_keys(value, mode)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [convert_keys(item, mode) for item in data]
    return data
