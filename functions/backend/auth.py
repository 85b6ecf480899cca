"""
Account operations: sign-in, sign-up, Google sign-in, sign-out, password reset
and account deletion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from backend.ai_profiles import AiProfileStore
from backend.auth_state import (
    AuthSession,
    LocalStorage,
    UserInfoEmitter,
    profile_from_identity,
    set_user_info,
)
from backend.identity import Identity, IdentityClient
from backend.presets import PromptPresetStore
from backend.sessions import SessionStore
from backend.users import UserStore
from shared.types import UserProfile

logger = logging.getLogger(__name__)

# Storage keys written by older dashboard builds.
LEGACY_STORAGE_KEYS = ("openai_api_key", "user_info")

AUTH_ERROR_STATUS = {
    "auth/user-not-found": 401,
    "auth/wrong-password": 401,
    "auth/invalid-credential": 401,
    "auth/invalid-id-token": 401,
    "auth/requires-recent-login": 401,
    "auth/email-already-in-use": 409,
    "auth/weak-password": 400,
    "auth/invalid-email": 400,
    "auth/missing-email": 400,
    "auth/missing-password": 400,
    "auth/user-disabled": 403,
    "auth/operation-not-allowed": 403,
    "auth/too-many-requests": 429,
    "auth/network-request-failed": 503,
}


def auth_error_status(code: str) -> int:
    return AUTH_ERROR_STATUS.get(code, 500)


@dataclass
class AuthResult:
    identity: Identity
    profile: UserProfile


class AuthService:
    """
    Runs account flows against the identity provider and the user stores.

    When an AuthSession is given, successful sign-ins become its current
    identity and sign-out clears it; otherwise the service is stateless.
    """

    def __init__(
        self,
        identity: IdentityClient,
        users: UserStore,
        sessions: SessionStore,
        profiles: AiProfileStore,
        presets: PromptPresetStore,
        auth_session: Optional[AuthSession] = None,
        storage: Optional[LocalStorage] = None,
        emitter: Optional[UserInfoEmitter] = None,
    ):
        self.identity = identity
        self.users = users
        self.sessions = sessions
        self.profiles = profiles
        self.presets = presets
        self.auth_session = auth_session
        self.storage = storage
        self.emitter = emitter

    def _complete_sign_in(self, identity: Identity) -> AuthResult:
        profile = self.users.find_or_create_user(profile_from_identity(identity))
        if self.auth_session is not None:
            self.auth_session.set_identity(identity)
        logger.info("Signed in %s", identity.uid)
        return AuthResult(identity=identity, profile=profile)

    def sign_in(self, email: str, password: str) -> AuthResult:
        identity = self.identity.sign_in_with_password(email.strip(), password)
        return self._complete_sign_in(identity)

    def sign_up(self, email: str, password: str, display_name: str) -> AuthResult:
        """
        Creates the identity, sets its display name and then bootstraps the
        user record, so the record never carries the placeholder name.
        """
        identity = self.identity.sign_up(email.strip(), password)
        identity = self.identity.update_display_name(identity, display_name.strip())
        return self._complete_sign_in(identity)

    def sign_in_with_google(self, google_id_token: str) -> AuthResult:
        identity = self.identity.sign_in_with_google(google_id_token)
        return self._complete_sign_in(identity)

    def sign_out(self) -> None:
        if self.auth_session is not None:
            self.auth_session.sign_out()
        if self.storage is not None:
            set_user_info(self.storage, None, self.emitter)
            for key in LEGACY_STORAGE_KEYS:
                self.storage.remove_item(key)

    def reset_password(self, email: str) -> None:
        self.identity.send_password_reset(email.strip())

    def delete_account(self, uid: str) -> None:
        """
        Removes every document the user owns and then the identity itself.
        """
        for session in self.sessions.list_sessions(uid):
            self.sessions.delete_session(uid, session.id)
        for profile in self.profiles.list_profiles(uid):
            self.profiles.delete_profile(uid, profile.id)
        for preset in self.presets.list_presets(uid):
            self.presets.delete_preset(uid, preset.id)
        self.users.delete_user(uid)
        self.identity.delete_user(uid)
        logger.info("Deleted account %s", uid)

        current = self.auth_session.current_identity if self.auth_session else None
        if current is not None and current.uid == uid:
            self.sign_out()
