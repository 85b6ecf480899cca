"""
HTTP routes for the dashboard API.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from google.api_core import exceptions

from backend.ai_profiles import AI_MODEL_PRESETS, AiProfileStore
from backend.auth import AuthResult, AuthService, auth_error_status
from backend.batch import BATCH_SECTIONS, get_batch_data
from backend.config import Settings, get_settings
from backend.dependencies import (
    get_ai_profile_store,
    get_auth_service,
    get_identity_client,
    get_preset_store,
    get_session_store,
    get_user_store,
)
from backend.desktop_bridge import DesktopBridge, is_electron_mode
from backend.identity import Identity, IdentityClient
from backend.presets import PromptPresetStore
from backend.runtime_config import fallback_api_origin
from backend.schemas import (
    AiProfileCreateRequest,
    AiProfileResponse,
    AiProfileUpdateRequest,
    AuthResponse,
    BatchResponse,
    CreatedResponse,
    DownloadInfoResponse,
    GoogleSignInRequest,
    HandoffResponse,
    LoginRequest,
    ModelPresetsResponse,
    PasswordResetRequest,
    PresetRequest,
    PresetResponse,
    RuntimeConfigResponse,
    SessionCreateRequest,
    SessionDetailsResponse,
    SessionResponse,
    SignupRequest,
    StatusResponse,
    UpdateUserRequest,
    UserProfileResponse,
)
from backend.sessions import SessionNotFoundError, SessionStore
from backend.users import ProfileBootstrapError, UserStore
from shared.api import CreateAiProfileData, FormValidation, UpdateAiProfileData
from shared.auth_errors import AuthError
from shared.download import (
    DOWNLOAD_CONFIG,
    detect_user_platform,
    get_download_filename,
    get_download_url,
    get_platform_display_name,
)
from shared.validation import (
    sanitize_form_data,
    validate_display_name,
    validate_login_form,
    validate_password_reset_form,
    validate_signup_form,
)

logger = logging.getLogger(__name__)

router = APIRouter()
public_router = APIRouter()

bearer_scheme = HTTPBearer(auto_error=False)


def _raise_validation_error(validation: FormValidation) -> None:
    if not validation.is_valid:
        raise HTTPException(
            status_code=400,
            detail={"message": "Validation failed", "errors": validation.errors},
        )


def _auth_http_error(error: AuthError) -> HTTPException:
    return HTTPException(
        status_code=auth_error_status(error.code),
        detail={"code": error.code, "message": error.message},
    )


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=UserProfileResponse(**asdict(result.profile)),
        id_token=result.identity.id_token,
        refresh_token=result.identity.refresh_token,
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    x_user_id: Optional[str] = Header(default=None),
    identity: IdentityClient = Depends(get_identity_client),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Returns the verified token claims for the caller. In development an
    X-User-ID header is accepted in place of a token.
    """
    if credentials is not None:
        try:
            return identity.verify_id_token(credentials.credentials)
        except AuthError as e:
            raise HTTPException(status_code=401, detail=e.message) from e

    if x_user_id and settings.environment == "development":
        return {"uid": x_user_id}
    raise HTTPException(status_code=401, detail="Authentication required")


@public_router.get("/runtime-config.json", response_model=RuntimeConfigResponse)
def runtime_config(settings: Settings = Depends(get_settings)):
    return RuntimeConfigResponse(
        API_URL=settings.api_url or fallback_api_origin(settings.environment)
    )


# Auth


@router.post("/auth/login", response_model=AuthResponse)
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    form = sanitize_form_data({"email": payload.email})
    form["password"] = payload.password
    _raise_validation_error(validate_login_form(form))
    try:
        result = auth.sign_in(form["email"], form["password"])
    except AuthError as e:
        logger.info("Sign-in failed: %s", e.code)
        raise _auth_http_error(e) from e
    except ProfileBootstrapError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return _auth_response(result)


@router.post("/auth/signup", response_model=AuthResponse, status_code=201)
def signup(payload: SignupRequest, auth: AuthService = Depends(get_auth_service)):
    form = sanitize_form_data(
        {"email": payload.email, "displayName": payload.display_name}
    )
    form["password"] = payload.password
    form["confirmPassword"] = payload.confirm_password
    _raise_validation_error(validate_signup_form(form))
    try:
        result = auth.sign_up(form["email"], form["password"], form["displayName"])
    except AuthError as e:
        logger.info("Sign-up failed: %s", e.code)
        raise _auth_http_error(e) from e
    except ProfileBootstrapError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return _auth_response(result)


@router.post("/auth/google", response_model=AuthResponse)
def google_sign_in(
    payload: GoogleSignInRequest, auth: AuthService = Depends(get_auth_service)
):
    try:
        result = auth.sign_in_with_google(payload.id_token)
    except AuthError as e:
        raise _auth_http_error(e) from e
    except ProfileBootstrapError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return _auth_response(result)


@router.post("/auth/password-reset", response_model=StatusResponse)
def password_reset(
    payload: PasswordResetRequest, auth: AuthService = Depends(get_auth_service)
):
    form = sanitize_form_data({"email": payload.email})
    _raise_validation_error(validate_password_reset_form(form))
    try:
        auth.reset_password(form["email"])
    except AuthError as e:
        raise _auth_http_error(e) from e
    return StatusResponse(status="ok")


@router.post("/auth/desktop-handoff", response_model=HandoffResponse)
def desktop_handoff(
    mode: str = Query(default=""),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    claims: dict = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    """
    Returns where the login page should send a freshly signed-in user: the
    desktop app deep link when opened with ?mode=electron, otherwise home.
    """
    identity = Identity(
        uid=claims["uid"], email=claims.get("email"), display_name=claims.get("name")
    )

    def id_token() -> str:
        if credentials is None:
            raise AuthError("auth/invalid-id-token")
        return credentials.credentials

    bridge = DesktopBridge(is_electron_mode({"mode": mode}), settings.app_protocol)
    result = bridge.hand_off(identity, id_token)
    if not result.ok:
        raise HTTPException(status_code=401, detail=result.error)
    return HandoffResponse(kind=result.kind, target=result.target)


# Current user


@router.get("/me", response_model=UserProfileResponse)
def get_me(
    claims: dict = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    return users.get_user_profile(claims["uid"], claims.get("name"), claims.get("email"))


@router.patch("/me", response_model=UserProfileResponse)
def update_me(
    payload: UpdateUserRequest,
    claims: dict = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    _raise_validation_error(validate_display_name(payload.display_name))
    try:
        users.update_user(claims["uid"], payload.display_name.strip())
    except exceptions.NotFound as e:
        raise HTTPException(status_code=404, detail="User not found") from e
    return users.get_user_profile(claims["uid"], claims.get("name"), claims.get("email"))


@router.delete("/me", status_code=204)
def delete_me(
    claims: dict = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        auth.delete_account(claims["uid"])
    except AuthError as e:
        raise _auth_http_error(e) from e
    return Response(status_code=204)


# AI profiles


@router.get("/ai-profiles", response_model=List[AiProfileResponse])
def list_ai_profiles(
    claims: dict = Depends(get_current_user),
    profiles: AiProfileStore = Depends(get_ai_profile_store),
):
    return profiles.list_profiles(claims["uid"])


@router.post("/ai-profiles", response_model=CreatedResponse, status_code=201)
def create_ai_profile(
    payload: AiProfileCreateRequest,
    claims: dict = Depends(get_current_user),
    profiles: AiProfileStore = Depends(get_ai_profile_store),
):
    profile_id = profiles.create_profile(
        claims["uid"], CreateAiProfileData(**payload.model_dump())
    )
    return CreatedResponse(id=profile_id)


@router.get("/ai-profiles/default", response_model=AiProfileResponse)
def get_default_ai_profile(
    claims: dict = Depends(get_current_user),
    profiles: AiProfileStore = Depends(get_ai_profile_store),
):
    profile = profiles.get_default_profile(claims["uid"])
    if profile is None:
        raise HTTPException(status_code=404, detail="No default profile")
    return profile


@router.get("/ai-profiles/{profile_id}", response_model=AiProfileResponse)
def get_ai_profile(
    profile_id: str,
    claims: dict = Depends(get_current_user),
    profiles: AiProfileStore = Depends(get_ai_profile_store),
):
    profile = profiles.get_profile(claims["uid"], profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.patch("/ai-profiles/{profile_id}", response_model=AiProfileResponse)
def update_ai_profile(
    profile_id: str,
    payload: AiProfileUpdateRequest,
    claims: dict = Depends(get_current_user),
    profiles: AiProfileStore = Depends(get_ai_profile_store),
):
    try:
        profiles.update_profile(
            claims["uid"], profile_id, UpdateAiProfileData(**payload.model_dump())
        )
    except exceptions.NotFound as e:
        raise HTTPException(status_code=404, detail="Profile not found") from e
    return profiles.get_profile(claims["uid"], profile_id)


@router.delete("/ai-profiles/{profile_id}", status_code=204)
def delete_ai_profile(
    profile_id: str,
    claims: dict = Depends(get_current_user),
    profiles: AiProfileStore = Depends(get_ai_profile_store),
):
    profiles.delete_profile(claims["uid"], profile_id)
    return Response(status_code=204)


@router.post("/ai-profiles/{profile_id}/default", status_code=204)
def set_default_ai_profile(
    profile_id: str,
    claims: dict = Depends(get_current_user),
    profiles: AiProfileStore = Depends(get_ai_profile_store),
):
    try:
        profiles.set_default_profile(claims["uid"], profile_id)
    except exceptions.NotFound as e:
        raise HTTPException(status_code=404, detail="Profile not found") from e
    return Response(status_code=204)


@router.get("/ai-model-presets", response_model=ModelPresetsResponse)
def list_ai_model_presets():
    return {key: asdict(preset) for key, preset in AI_MODEL_PRESETS.items()}


# Sessions


@router.get("/sessions", response_model=List[SessionResponse])
def list_sessions(
    claims: dict = Depends(get_current_user),
    sessions: SessionStore = Depends(get_session_store),
):
    return sessions.list_sessions(claims["uid"])


@router.post("/sessions", response_model=CreatedResponse, status_code=201)
def create_session(
    payload: SessionCreateRequest,
    claims: dict = Depends(get_current_user),
    sessions: SessionStore = Depends(get_session_store),
):
    session_id = sessions.create_session(
        claims["uid"], payload.title, payload.session_type
    )
    return CreatedResponse(id=session_id)


@router.get("/sessions/search", response_model=List[SessionResponse])
def search_sessions(
    q: str = Query(default=""),
    claims: dict = Depends(get_current_user),
    sessions: SessionStore = Depends(get_session_store),
):
    return sessions.search_conversations(claims["uid"], q)


@router.get("/sessions/{session_id}", response_model=SessionDetailsResponse)
def get_session_details(
    session_id: str,
    claims: dict = Depends(get_current_user),
    sessions: SessionStore = Depends(get_session_store),
):
    try:
        return sessions.get_session_details(claims["uid"], session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(
    session_id: str,
    claims: dict = Depends(get_current_user),
    sessions: SessionStore = Depends(get_session_store),
):
    sessions.delete_session(claims["uid"], session_id)
    return Response(status_code=204)


# Prompt presets


@router.get("/presets", response_model=List[PresetResponse])
def list_presets(
    claims: dict = Depends(get_current_user),
    presets: PromptPresetStore = Depends(get_preset_store),
):
    return presets.list_presets(claims["uid"])


@router.post("/presets", response_model=CreatedResponse, status_code=201)
def create_preset(
    payload: PresetRequest,
    claims: dict = Depends(get_current_user),
    presets: PromptPresetStore = Depends(get_preset_store),
):
    preset_id = presets.create_preset(claims["uid"], payload.title, payload.prompt)
    return CreatedResponse(id=preset_id)


@router.patch("/presets/{preset_id}", status_code=204)
def update_preset(
    preset_id: str,
    payload: PresetRequest,
    claims: dict = Depends(get_current_user),
    presets: PromptPresetStore = Depends(get_preset_store),
):
    try:
        presets.update_preset(claims["uid"], preset_id, payload.title, payload.prompt)
    except exceptions.NotFound as e:
        raise HTTPException(status_code=404, detail="Preset not found") from e
    return Response(status_code=204)


@router.delete("/presets/{preset_id}", status_code=204)
def delete_preset(
    preset_id: str,
    claims: dict = Depends(get_current_user),
    presets: PromptPresetStore = Depends(get_preset_store),
):
    presets.delete_preset(claims["uid"], preset_id)
    return Response(status_code=204)


@router.get("/batch", response_model=BatchResponse)
def batch(
    include: str = Query(default=",".join(BATCH_SECTIONS)),
    claims: dict = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
    presets: PromptPresetStore = Depends(get_preset_store),
    sessions: SessionStore = Depends(get_session_store),
):
    sections = [name.strip() for name in include.split(",") if name.strip()]
    return get_batch_data(
        claims["uid"],
        sections,
        users=users,
        presets=presets,
        sessions=sessions,
        display_name=claims.get("name"),
        email=claims.get("email"),
    )


# Downloads


@router.get("/download/info", response_model=DownloadInfoResponse)
def download_info(user_agent: Optional[str] = Header(default=None)):
    platform = detect_user_platform(user_agent)
    return DownloadInfoResponse(
        platform=platform,
        display_name=get_platform_display_name(platform),
        url=get_download_url(platform),
        filename=get_download_filename(platform),
    )


@router.get("/download")
def download(user_agent: Optional[str] = Header(default=None)):
    if not DOWNLOAD_CONFIG.enabled:
        raise HTTPException(status_code=404, detail="Downloads are disabled")
    platform = detect_user_platform(user_agent)
    return RedirectResponse(get_download_url(platform), status_code=302)
