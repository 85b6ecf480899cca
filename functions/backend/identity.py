"""
Identity provider access: Firebase Authentication and an in-memory double.

End-user flows (sign-in, sign-up, password reset) go through the Identity
Toolkit REST API; token verification, custom tokens and account deletion use
the firebase_admin SDK.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Optional, Protocol

import requests
from firebase_admin import auth

from shared.auth_errors import AuthError, code_from_rest_error

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"
SECURE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"
REQUEST_TIMEOUT = 30  # seconds
GOOGLE_PROVIDER_ID = "google.com"


@dataclass
class Identity:
    """A signed-in identity as reported by the provider."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    email_verified: bool = False
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None


class IdentityClient(Protocol):
    """Operations the app needs from the identity provider."""

    def sign_up(self, email: str, password: str) -> Identity:
        ...

    def sign_in_with_password(self, email: str, password: str) -> Identity:
        ...

    def sign_in_with_google(self, google_id_token: str) -> Identity:
        ...

    def update_display_name(self, identity: Identity, display_name: str) -> Identity:
        ...

    def send_password_reset(self, email: str) -> None:
        ...

    def refresh_id_token(self, refresh_token: str) -> str:
        ...

    def verify_id_token(self, id_token: str) -> dict:
        ...

    def create_custom_token(self, uid: str) -> str:
        ...

    def delete_user(self, uid: str) -> None:
        ...


def _identity_from_response(payload: dict) -> Identity:
    if not payload.get("localId"):
        raise AuthError("auth/internal-error", "Identity response has no localId")
    return Identity(
        uid=payload["localId"],
        email=payload.get("email"),
        display_name=payload.get("displayName") or None,
        photo_url=payload.get("photoUrl"),
        email_verified=bool(payload.get("emailVerified", False)),
        id_token=payload.get("idToken"),
        refresh_token=payload.get("refreshToken"),
    )


def _rest_error_message(response: requests.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text


@dataclass
class FirebaseIdentityClient:
    """
    Firebase Authentication client. Requires the project's web API key for the
    REST flows and an initialized firebase_admin app for the admin calls.
    """

    api_key: str
    identity_toolkit_url: str = IDENTITY_TOOLKIT_URL
    secure_token_url: str = SECURE_TOKEN_URL
    timeout: float = REQUEST_TIMEOUT
    session: requests.Session = field(default_factory=requests.Session)

    def _post(self, url: str, **kwargs) -> dict:
        try:
            response = self.session.post(
                url, params={"key": self.api_key}, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning("Identity request to %s failed: %s", url, e)
            raise AuthError("auth/network-request-failed", str(e)) from e

        if not response.ok:
            message = _rest_error_message(response)
            raise AuthError(code_from_rest_error(message), message)
        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Identity response from %s is not JSON: %s", url, e)
            raise AuthError("auth/internal-error", str(e)) from e
        if not isinstance(payload, dict):
            raise AuthError("auth/internal-error", "Unexpected identity response")
        return payload

    def _accounts(self, action: str, payload: dict) -> dict:
        return self._post(f"{self.identity_toolkit_url}/accounts:{action}", json=payload)

    def sign_up(self, email: str, password: str) -> Identity:
        payload = self._accounts(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return _identity_from_response(payload)

    def sign_in_with_password(self, email: str, password: str) -> Identity:
        payload = self._accounts(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return _identity_from_response(payload)

    def sign_in_with_google(self, google_id_token: str) -> Identity:
        payload = self._accounts(
            "signInWithIdp",
            {
                "postBody": f"id_token={google_id_token}&providerId={GOOGLE_PROVIDER_ID}",
                "requestUri": "http://localhost",
                "returnIdpCredential": True,
                "returnSecureToken": True,
            },
        )
        return _identity_from_response(payload)

    def update_display_name(self, identity: Identity, display_name: str) -> Identity:
        payload = self._accounts(
            "update",
            {
                "idToken": identity.id_token,
                "displayName": display_name,
                "returnSecureToken": True,
            },
        )
        return replace(
            identity,
            display_name=payload.get("displayName", display_name),
            id_token=payload.get("idToken") or identity.id_token,
            refresh_token=payload.get("refreshToken") or identity.refresh_token,
        )

    def send_password_reset(self, email: str) -> None:
        self._accounts("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    def refresh_id_token(self, refresh_token: str) -> str:
        payload = self._post(
            self.secure_token_url,
            data={"grant_type": "refresh_token", "refresh_token": refresh_token},
        )
        id_token = payload.get("id_token")
        if not id_token:
            raise AuthError("auth/internal-error", "Token response has no id_token")
        return id_token

    def verify_id_token(self, id_token: str) -> dict:
        try:
            return auth.verify_id_token(id_token)
        except (auth.InvalidIdTokenError, auth.UserDisabledError, ValueError) as e:
            raise AuthError("auth/invalid-id-token", str(e)) from e

    def create_custom_token(self, uid: str) -> str:
        token = auth.create_custom_token(uid)
        return token.decode("utf-8") if isinstance(token, bytes) else token

    def delete_user(self, uid: str) -> None:
        auth.delete_user(uid)


@dataclass
class _StoredAccount:
    uid: str
    email: str
    password: Optional[str]
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


class InMemoryIdentityClient:
    """Identity provider double for development and tests."""

    def __init__(self):
        self.accounts: dict[str, _StoredAccount] = {}
        self.tokens: dict[str, str] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.google_accounts: dict[str, tuple[str, str]] = {}
        self.password_resets: list[str] = []

    def reset(self) -> None:
        self.accounts.clear()
        self.tokens.clear()
        self.refresh_tokens.clear()
        self.google_accounts.clear()
        self.password_resets.clear()

    def register_google_account(
        self, google_id_token: str, email: str, display_name: str
    ) -> None:
        self.google_accounts[google_id_token] = (email, display_name)

    def _issue(self, account: _StoredAccount) -> Identity:
        token = uuid.uuid4().hex
        refresh_token = uuid.uuid4().hex
        self.tokens[token] = account.uid
        self.refresh_tokens[refresh_token] = account.uid
        return Identity(
            uid=account.uid,
            email=account.email,
            display_name=account.display_name,
            photo_url=account.photo_url,
            id_token=token,
            refresh_token=refresh_token,
        )

    def _find_by_email(self, email: str) -> Optional[_StoredAccount]:
        return self.accounts.get(email.lower())

    def _find_by_uid(self, uid: str) -> Optional[_StoredAccount]:
        for account in self.accounts.values():
            if account.uid == uid:
                return account
        return None

    def sign_up(self, email: str, password: str) -> Identity:
        if self._find_by_email(email):
            raise AuthError("auth/email-already-in-use")
        if len(password) < 6:
            raise AuthError("auth/weak-password")
        account = _StoredAccount(uid=uuid.uuid4().hex, email=email, password=password)
        self.accounts[email.lower()] = account
        return self._issue(account)

    def sign_in_with_password(self, email: str, password: str) -> Identity:
        account = self._find_by_email(email)
        if account is None:
            raise AuthError("auth/user-not-found")
        if account.password != password:
            raise AuthError("auth/wrong-password")
        return self._issue(account)

    def sign_in_with_google(self, google_id_token: str) -> Identity:
        if google_id_token not in self.google_accounts:
            raise AuthError("auth/invalid-credential")
        email, display_name = self.google_accounts[google_id_token]
        account = self._find_by_email(email)
        if account is None:
            account = _StoredAccount(
                uid=uuid.uuid4().hex,
                email=email,
                password=None,
                display_name=display_name,
            )
            self.accounts[email.lower()] = account
        return self._issue(account)

    def update_display_name(self, identity: Identity, display_name: str) -> Identity:
        account = self._find_by_uid(identity.uid)
        if account is None:
            raise AuthError("auth/user-not-found")
        account.display_name = display_name
        return replace(identity, display_name=display_name)

    def send_password_reset(self, email: str) -> None:
        if self._find_by_email(email) is None:
            raise AuthError("auth/user-not-found")
        self.password_resets.append(email)

    def refresh_id_token(self, refresh_token: str) -> str:
        uid = self.refresh_tokens.get(refresh_token)
        if uid is None:
            raise AuthError("auth/requires-recent-login")
        token = uuid.uuid4().hex
        self.tokens[token] = uid
        return token

    def verify_id_token(self, id_token: str) -> dict:
        uid = self.tokens.get(id_token)
        if uid is None:
            raise AuthError("auth/invalid-id-token")
        account = self._find_by_uid(uid)
        if account is None:
            raise AuthError("auth/user-not-found")
        return {
            "uid": uid,
            "email": account.email,
            "name": account.display_name,
            "picture": account.photo_url,
            "email_verified": False,
        }

    def create_custom_token(self, uid: str) -> str:
        return f"custom-{uid}"

    def delete_user(self, uid: str) -> None:
        for key, account in list(self.accounts.items()):
            if account.uid == uid:
                del self.accounts[key]
        for tokens in (self.tokens, self.refresh_tokens):
            for token, token_uid in list(tokens.items()):
                if token_uid == uid:
                    del tokens[token]
