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

# Cloud functions for Pickle Glass - desktop app authentication.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
import json
import os
from dataclasses import asdict
from datetime import datetime, timezone

# Third-party library imports
from firebase_admin import auth, initialize_app
from firebase_functions import https_fn, logger, options

# Local application imports
from shared.api import VerifiedUser
from shared.json_utils import convert_keys

AUTH_CALLBACK_REGION = "us-west1"

initialize_app()


def _is_locally_emulated() -> bool:
    """Returns True if the function is running in the local emulator."""
    return os.environ.get("FUNCTIONS_EMULATOR") == "true"


def _iso_timestamp() -> str:
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _json_response(body: dict, status: int) -> https_fn.Response:
    return https_fn.Response(
        json.dumps(body), status=status, content_type="application/json"
    )


def _error_response(
    status: int, error: str, details: str | None = None
) -> https_fn.Response:
    body = {"success": False, "error": error}
    if details is not None and _is_locally_emulated():
        body["details"] = details
    return _json_response(body, status)


def _verified_user(decoded_token: dict) -> VerifiedUser:
    return VerifiedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name") or decoded_token.get("display_name"),
        picture=decoded_token.get("picture"),
        email_verified=bool(decoded_token.get("email_verified", False)),
    )


def _handle_auth_callback(req: https_fn.Request) -> https_fn.Response:
    logger.info(
        "auth_callback: Function triggered",
        method=req.method,
        user_agent=req.headers.get("User-Agent"),
    )

    if req.method != "POST":
        logger.error("auth_callback: Invalid HTTP method", method=req.method)
        return _error_response(405, "Method Not Allowed. Use POST.")

    body = req.get_json(silent=True)
    if not isinstance(body, dict):
        logger.error("auth_callback: Invalid request body")
        return _error_response(400, "Invalid request body.")

    token = body.get("token")
    if not token or not isinstance(token, str):
        logger.error("auth_callback: Missing or invalid token")
        return _error_response(400, "ID token is required and must be a string.")

    id_token = token.strip()
    if not id_token:
        logger.error("auth_callback: Empty token")
        return _error_response(400, "ID token cannot be empty.")

    try:
        decoded_token = auth.verify_id_token(id_token)
    except (
        ValueError,
        auth.InvalidIdTokenError,
        auth.UserDisabledError,
        auth.CertificateFetchError,
    ) as e:
        logger.error(
            "auth_callback: Token verification failed",
            error=str(e),
            token_length=len(id_token),
        )
        return _error_response(401, "Invalid or expired ID token.", str(e))

    uid = decoded_token["uid"]
    logger.info("auth_callback: Token verified successfully", uid=uid)

    try:
        custom_token = auth.create_custom_token(uid)
    except (ValueError, auth.TokenSignError) as e:
        logger.error("auth_callback: Custom token creation failed", error=str(e), uid=uid)
        return _error_response(500, "Failed to create custom token.")
    if isinstance(custom_token, bytes):
        custom_token = custom_token.decode("utf-8")

    user = _verified_user(decoded_token)
    logger.info(
        "auth_callback: Authentication successful",
        uid=user.uid,
        email=user.email,
        email_verified=user.email_verified,
    )
    return _json_response(
        {
            "success": True,
            "message": "Authentication successful.",
            "user": convert_keys(asdict(user), "snake_to_camel"),
            "customToken": custom_token,
            "timestamp": _iso_timestamp(),
        },
        200,
    )


@https_fn.on_request(
    region=AUTH_CALLBACK_REGION,
    cors=options.CorsOptions(cors_origins="*", cors_methods=["get", "post", "options"]),
)
def auth_callback(req: https_fn.Request) -> https_fn.Response:
    """
    Exchanges a Firebase ID token for a custom token the desktop app can use to
    sign in.

    Args:
        req (https_fn.Request): POST request with a JSON body {"token": "..."}.

    Returns:
        A JSON response with the verified user and a custom token, or
        {"success": false, "error": ...} with a 4xx/5xx status.
    """
    try:
        return _handle_auth_callback(req)
    except Exception as e:  # Any failure must still produce a JSON response.
        logger.error("auth_callback: Unexpected error", error=str(e))
        return _error_response(
            500, "Internal server error during authentication.", str(e)
        )
