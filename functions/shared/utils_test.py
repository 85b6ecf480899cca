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

import unittest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from google.api_core.datetime_helpers import DatetimeWithNanoseconds

from shared.api_keys import decode_api_key, encode_api_key
from shared.json_utils import convert_keys
from shared.utils import (
    optional_timestamp_to_unix,
    timestamp_to_unix,
    unix_to_timestamp,
)


class TimestampToUnixTest(unittest.TestCase):

    def test_aware_datetime(self):
        ts = datetime(2024, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        self.assertEqual(timestamp_to_unix(ts), 1704164645678)

    def test_naive_datetime_is_utc(self):
        ts = datetime(1970, 1, 1, 0, 0, 1, 500000)
        self.assertEqual(timestamp_to_unix(ts), 1500)

    def test_other_timezone(self):
        ts = datetime(1970, 1, 1, 2, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(timestamp_to_unix(ts), 0)

    def test_datetime_with_nanoseconds(self):
        ts = DatetimeWithNanoseconds(
            1970, 1, 1, 0, 0, 10, nanosecond=999999999, tzinfo=timezone.utc
        )
        self.assertEqual(timestamp_to_unix(ts), 10999)

    def test_seconds_and_nanoseconds_object(self):
        self.assertEqual(
            timestamp_to_unix(SimpleNamespace(seconds=12, nanoseconds=345678901)),
            12345,
        )
        self.assertEqual(timestamp_to_unix(SimpleNamespace(seconds=1, nanos=0)), 1000)

    def test_unsupported_value(self):
        with self.assertRaises(TypeError):
            timestamp_to_unix("2024-01-01")

    def test_optional(self):
        self.assertIsNone(optional_timestamp_to_unix(None))
        self.assertEqual(
            optional_timestamp_to_unix(SimpleNamespace(seconds=2, nanos=0)), 2000
        )

    def test_unix_to_timestamp(self):
        self.assertEqual(
            unix_to_timestamp(1500),
            datetime(1970, 1, 1, 0, 0, 1, 500000, tzinfo=timezone.utc),
        )


class ConvertKeysTest(unittest.TestCase):

    def test_nested_snake_to_camel(self):
        data = {"system_prompt": "x", "items": [{"max_tokens": 1}], "plain": 2}
        self.assertEqual(
            convert_keys(data, "snake_to_camel"),
            {"systemPrompt": "x", "items": [{"maxTokens": 1}], "plain": 2},
        )

    def test_camel_to_snake(self):
        self.assertEqual(
            convert_keys({"isDefault": True, "createdAt": 1}, "camel_to_snake"),
            {"is_default": True, "created_at": 1},
        )

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            convert_keys({}, "kebab")


class ApiKeyEncodingTest(unittest.TestCase):

    def test_encoded_value_differs_and_decodes(self):
        encoded = encode_api_key("sk-test-123")
        self.assertNotEqual(encoded, "sk-test-123")
        self.assertEqual(decode_api_key(encoded), "sk-test-123")

    def test_non_base64_value_is_returned_unchanged(self):
        self.assertEqual(decode_api_key("sk-raw-key!"), "sk-raw-key!")


if __name__ == "__main__":
    unittest.main()
