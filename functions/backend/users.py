"""
User records stored at users/{uid}, including first sign-in bootstrap.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from google.api_core import exceptions

from backend.db import DocumentStore
from shared.constants import DEFAULT_DISPLAY_NAME, DEFAULT_EMAIL
from shared.firebase_constants import user_path
from shared.types import UserProfile
from shared.utils import utc_now

logger = logging.getLogger(__name__)


class ProfileBootstrapError(Exception):
    """The user record could not be read or created on sign-in."""


class UserStore:
    def __init__(self, db: DocumentStore, clock: Callable = utc_now):
        self.db = db
        self.clock = clock

    def get_user(self, uid: str) -> Optional[dict]:
        return self.db.get(user_path(uid))

    def create_user(self, uid: str, display_name: str, email: str) -> None:
        self.db.set(
            user_path(uid),
            {"displayName": display_name, "email": email, "createdAt": self.clock()},
        )

    def update_user(self, uid: str, display_name: str) -> None:
        self.db.update(user_path(uid), {"displayName": display_name})

    def delete_user(self, uid: str) -> None:
        self.db.delete(user_path(uid))

    def find_or_create_user(self, profile: UserProfile) -> UserProfile:
        """
        Ensures users/{uid} exists, creating it from the given profile.

        An existing record is left untouched, even if its display name or email
        no longer matches the identity provider.
        """
        try:
            if self.get_user(profile.uid) is None:
                logger.info("Creating user record for %s", profile.uid)
                self.create_user(profile.uid, profile.display_name, profile.email)
        except exceptions.GoogleAPICallError as e:
            raise ProfileBootstrapError(
                f"Failed to bootstrap user {profile.uid}: {e}"
            ) from e
        return profile

    def get_user_profile(
        self,
        uid: str,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> UserProfile:
        """Stored values win over the identity's, then the placeholders."""
        stored = self.get_user(uid) or {}
        return UserProfile(
            uid=uid,
            display_name=stored.get("displayName") or display_name or DEFAULT_DISPLAY_NAME,
            email=stored.get("email") or email or DEFAULT_EMAIL,
        )
