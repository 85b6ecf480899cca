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

import time
from datetime import datetime, timezone
from typing import Any, Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_millis() -> int:
    return int(time.time() * 1000)


def timestamp_to_unix(timestamp: Any) -> int:
    """
    Converts a Firestore timestamp to integer Unix milliseconds.

    Accepts the datetimes returned by the Firestore SDK (including
    DatetimeWithNanoseconds) as well as protobuf-style objects exposing
    `seconds` and `nanos`/`nanoseconds`. The result is
    `seconds * 1000 + floor(nanoseconds / 1e6)`.
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        delta = timestamp - _EPOCH
        seconds = delta.days * 86400 + delta.seconds
        nanoseconds = getattr(timestamp, "nanosecond", None)
        if nanoseconds is None:
            nanoseconds = delta.microseconds * 1000
        return seconds * 1000 + nanoseconds // 1_000_000

    seconds = getattr(timestamp, "seconds", None)
    if seconds is None:
        raise TypeError(f"Unsupported timestamp value: {timestamp!r}")
    nanoseconds = getattr(timestamp, "nanoseconds", None)
    if nanoseconds is None:
        nanoseconds = getattr(timestamp, "nanos", 0)
    return int(seconds) * 1000 + int(nanoseconds) // 1_000_000


def optional_timestamp_to_unix(timestamp: Any) -> Optional[int]:
    if timestamp is None:
        return None
    return timestamp_to_unix(timestamp)


def unix_to_timestamp(millis: int) -> datetime:
    """Converts Unix milliseconds to a timezone-aware datetime for storage."""
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
