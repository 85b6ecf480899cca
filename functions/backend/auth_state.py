"""
Signed-in state: the current identity, the local user-info mirror, and the
observer that bootstraps a profile whenever the identity changes.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass
from typing import Callable, Optional, Protocol

from backend.identity import Identity
from backend.users import ProfileBootstrapError, UserStore
from shared.constants import (
    DEFAULT_DISPLAY_NAME,
    DEFAULT_EMAIL,
    USER_INFO_CHANGED_EVENT,
    USER_INFO_STORAGE_KEY,
)
from shared.types import UserProfile

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[Identity]], None]
UserInfoListener = Callable[[Optional[UserProfile]], None]

PROFILE_INIT_ERROR = "Failed to initialize user profile"


class AuthSession:
    """Holds the current identity and notifies listeners when it changes."""

    def __init__(self):
        self._identity: Optional[Identity] = None
        self._listeners: list[AuthListener] = []
        self._lock = threading.RLock()

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._identity

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """
        Registers a listener and immediately calls it with the current identity.
        Returns a callable that unregisters it.
        """
        with self._lock:
            self._listeners.append(listener)
        listener(self._identity)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def set_identity(self, identity: Optional[Identity]) -> None:
        with self._lock:
            self._identity = identity
            listeners = list(self._listeners)
        for listener in listeners:
            listener(identity)

    def sign_out(self) -> None:
        self.set_identity(None)


class UserInfoEmitter:
    """
    Registry of user-info listeners plus named event listeners, the latter
    standing in for the global "userInfoChanged" event.
    """

    def __init__(self):
        self._listeners: list[UserInfoListener] = []
        self._event_listeners: dict[str, list[Callable[[], None]]] = {}

    def subscribe(self, listener: UserInfoListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add_event_listener(
        self, event: str, listener: Callable[[], None]
    ) -> Callable[[], None]:
        self._event_listeners.setdefault(event, []).append(listener)

        def remove() -> None:
            listeners = self._event_listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)

        return remove

    def emit(self, profile: Optional[UserProfile]) -> None:
        for listener in list(self._listeners):
            listener(profile)
        self.dispatch_event(USER_INFO_CHANGED_EVENT)

    def dispatch_event(self, event: str) -> None:
        for listener in list(self._event_listeners.get(event, [])):
            listener()

    def close(self) -> None:
        self._listeners.clear()
        self._event_listeners.clear()


class LocalStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class InMemoryLocalStorage:
    def __init__(self):
        self.items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileLocalStorage:
    """String key/value storage persisted as a single JSON object on disk."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                items = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable local storage %s: %s", self.path, e)
            return {}
        return items if isinstance(items, dict) else {}

    def _write(self, items: dict) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            items = self._read()
            items[key] = value
            self._write(items)

    def remove_item(self, key: str) -> None:
        with self._lock:
            items = self._read()
            if items.pop(key, None) is not None:
                self._write(items)


def get_user_info(storage: LocalStorage) -> Optional[UserProfile]:
    """Reads the mirrored profile. A corrupt entry is removed."""
    raw = storage.get_item(USER_INFO_STORAGE_KEY)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
        return UserProfile(
            uid=data["uid"],
            display_name=data["display_name"],
            email=data["email"],
        )
    except (ValueError, KeyError, TypeError) as e:
        logger.error("Failed to parse stored user info: %s", e)
        storage.remove_item(USER_INFO_STORAGE_KEY)
        return None


def set_user_info(
    storage: LocalStorage,
    profile: Optional[UserProfile],
    emitter: Optional[UserInfoEmitter] = None,
    skip_events: bool = False,
) -> None:
    if profile is None:
        storage.remove_item(USER_INFO_STORAGE_KEY)
    else:
        storage.set_item(USER_INFO_STORAGE_KEY, json.dumps(asdict(profile)))

    if emitter is not None and not skip_events:
        emitter.emit(profile)


def profile_from_identity(identity: Identity) -> UserProfile:
    return UserProfile(
        uid=identity.uid,
        display_name=identity.display_name or DEFAULT_DISPLAY_NAME,
        email=identity.email or DEFAULT_EMAIL,
    )


@dataclass
class AuthState:
    user: Optional[UserProfile] = None
    is_loading: bool = True
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def show_sidebar(self) -> bool:
        return self.user is not None and not self.is_loading


class AuthStateObserver:
    """
    Follows an AuthSession. Each identity change is turned into a UserProfile,
    bootstrapped in the user store and mirrored to local storage.
    """

    def __init__(
        self,
        session: AuthSession,
        users: UserStore,
        storage: LocalStorage,
        emitter: UserInfoEmitter,
    ):
        self.users = users
        self.storage = storage
        self.emitter = emitter
        self.state = AuthState()
        self._unsubscribe = session.on_auth_state_changed(self._handle_change)

    def _handle_change(self, identity: Optional[Identity]) -> None:
        if identity is None:
            self.state = AuthState(is_loading=False)
            set_user_info(self.storage, None, self.emitter)
            return

        profile = profile_from_identity(identity)
        try:
            self.users.find_or_create_user(profile)
        except ProfileBootstrapError:
            logger.exception("User profile initialization failed for %s", identity.uid)
            self.state = AuthState(is_loading=False, error=PROFILE_INIT_ERROR)
            return

        self.state = AuthState(user=profile, is_loading=False)
        set_user_info(self.storage, profile, self.emitter)

    def close(self) -> None:
        self._unsubscribe()
