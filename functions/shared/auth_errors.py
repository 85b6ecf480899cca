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

"""Maps identity provider error codes to user-readable messages."""

DEFAULT_AUTH_ERROR_MESSAGE = "Authentication failed. Please try again."

AUTH_ERROR_MESSAGES = {
    "auth/user-not-found": "No account found with this email address.",
    "auth/wrong-password": "Incorrect password.",
    "auth/email-already-in-use": "An account with this email already exists.",
    "auth/weak-password": "Password should be at least 6 characters.",
    "auth/invalid-email": "Invalid email address.",
    "auth/too-many-requests": "Too many failed attempts. Please try again later.",
    "auth/user-disabled": "This account has been disabled. Please contact support.",
    "auth/operation-not-allowed": "Email/password authentication is not enabled.",
    "auth/invalid-credential": "Invalid email or password.",
    "auth/network-request-failed": (
        "Network error. Please check your connection and try again."
    ),
    "auth/requires-recent-login": "Please sign in again to complete this action.",
    "auth/missing-email": "Email address is required.",
    "auth/missing-password": "Password is required.",
}

# Error strings returned by the Identity Toolkit REST API.
REST_ERROR_CODES = {
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "EMAIL_EXISTS": "auth/email-already-in-use",
    "WEAK_PASSWORD": "auth/weak-password",
    "INVALID_EMAIL": "auth/invalid-email",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "USER_DISABLED": "auth/user-disabled",
    "OPERATION_NOT_ALLOWED": "auth/operation-not-allowed",
    "PASSWORD_LOGIN_DISABLED": "auth/operation-not-allowed",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "INVALID_IDP_RESPONSE": "auth/invalid-credential",
    "MISSING_EMAIL": "auth/missing-email",
    "MISSING_PASSWORD": "auth/missing-password",
    "CREDENTIAL_TOO_OLD_LOGIN_AGAIN": "auth/requires-recent-login",
    "TOKEN_EXPIRED": "auth/requires-recent-login",
    "INVALID_ID_TOKEN": "auth/requires-recent-login",
    "USER_NOT_FOUND": "auth/user-not-found",
}


def get_auth_error_message(code: str | None) -> str:
    return AUTH_ERROR_MESSAGES.get(code or "", DEFAULT_AUTH_ERROR_MESSAGE)


def code_from_rest_error(message: str | None) -> str:
    """
    Translates an Identity Toolkit error message to a provider error code.

    Messages may carry a detail suffix, e.g.
    "WEAK_PASSWORD : Password should be at least 6 characters".
    """
    key = (message or "").split(":", 1)[0].strip()
    return REST_ERROR_CODES.get(key, "auth/internal-error")


class AuthError(Exception):
    """An identity provider failure carrying a provider error code."""

    def __init__(self, code: str, detail: str | None = None):
        self.code = code
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return get_auth_error_message(self.code)
