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

"""Form validation helpers for the email/password authentication forms."""

import re
from typing import Any, Mapping

from shared.api import FormValidation
from shared.constants import (
    DISPLAY_NAME_MAX_LENGTH,
    DISPLAY_NAME_MIN_LENGTH,
    PASSWORD_MIN_LENGTH,
    PASSWORD_RECOMMENDED_LENGTH,
)

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def validate_email(email: str) -> bool:
    """Returns True if the trimmed email matches the accepted address format."""
    return EMAIL_PATTERN.fullmatch(email.strip()) is not None


def _password_complexity(password: str) -> int:
    return sum(
        1
        for pattern in (_UPPERCASE, _LOWERCASE, _DIGIT, _SPECIAL)
        if pattern.search(password)
    )


def validate_password(password: str) -> FormValidation:
    """
    Validates password strength.

    Only one message is kept under `password`; the complexity message replaces
    the length hint, so any password of 6+ characters drawing on fewer than two
    character classes is rejected regardless of its length.
    """
    errors: dict[str, str] = {}

    if not password:
        errors["password"] = "Password is required"
        return FormValidation(is_valid=False, errors=errors)

    if len(password) < PASSWORD_MIN_LENGTH:
        errors["password"] = (
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    elif len(password) < PASSWORD_RECOMMENDED_LENGTH:
        errors["password"] = (
            f"Password should be at least {PASSWORD_RECOMMENDED_LENGTH} "
            "characters for better security"
        )

    if len(password) >= PASSWORD_MIN_LENGTH and _password_complexity(password) < 2:
        errors["password"] = (
            "Password should include a mix of letters, numbers, or special characters"
        )

    return FormValidation(is_valid=not errors, errors=errors)


def validate_display_name(display_name: str) -> FormValidation:
    errors: dict[str, str] = {}
    trimmed = display_name.strip()

    if not trimmed:
        errors["displayName"] = "Display name is required"
    elif len(trimmed) < DISPLAY_NAME_MIN_LENGTH:
        errors["displayName"] = (
            f"Display name must be at least {DISPLAY_NAME_MIN_LENGTH} characters"
        )
    elif len(trimmed) > DISPLAY_NAME_MAX_LENGTH:
        errors["displayName"] = (
            f"Display name must be less than {DISPLAY_NAME_MAX_LENGTH} characters"
        )

    return FormValidation(is_valid=not errors, errors=errors)


def _email_errors(email: str) -> dict[str, str]:
    if not email.strip():
        return {"email": "Email is required"}
    if not validate_email(email):
        return {"email": "Please enter a valid email address"}
    return {}


def validate_login_form(data: Mapping[str, str]) -> FormValidation:
    errors = _email_errors(data.get("email", ""))

    if not data.get("password"):
        errors["password"] = "Password is required"

    return FormValidation(is_valid=not errors, errors=errors)


def validate_signup_form(data: Mapping[str, str]) -> FormValidation:
    errors = _email_errors(data.get("email", ""))

    display_name_validation = validate_display_name(data.get("displayName", ""))
    if not display_name_validation.is_valid:
        errors.update(display_name_validation.errors)

    password = data.get("password", "")
    password_validation = validate_password(password)
    if not password_validation.is_valid:
        errors.update(password_validation.errors)

    confirm_password = data.get("confirmPassword", "")
    if not confirm_password:
        errors["confirmPassword"] = "Please confirm your password"
    elif password != confirm_password:
        errors["confirmPassword"] = "Passwords do not match"

    return FormValidation(is_valid=not errors, errors=errors)


def validate_password_reset_form(data: Mapping[str, str]) -> FormValidation:
    errors = _email_errors(data.get("email", ""))
    return FormValidation(is_valid=not errors, errors=errors)


def sanitize_form_data(data: Mapping[str, Any]) -> dict:
    """Returns a shallow copy with every string value trimmed."""
    sanitized = dict(data)
    for key, value in sanitized.items():
        if isinstance(value, str):
            sanitized[key] = value.strip()
    return sanitized
