"""
Returns a freshly signed-in identity to the desktop app, either through the
custom URL scheme or through an IPC channel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Protocol
from urllib.parse import urlencode

from backend.identity import Identity
from shared.constants import DESKTOP_AUTH_IPC_CHANNEL, ELECTRON_MODE

logger = logging.getLogger(__name__)

DEEP_LINK_ERROR = (
    "Login was successful but failed to return to app. Please check the app."
)
IPC_ERROR = "Failed to communicate with the desktop app."
HOME_PATH = "/"


def is_electron_mode(query_params: Mapping[str, str]) -> bool:
    return query_params.get("mode") == ELECTRON_MODE


def build_deep_link(
    protocol: str,
    uid: str,
    email: Optional[str],
    display_name: Optional[str],
    token: str,
) -> str:
    query = urlencode(
        {
            "uid": uid,
            "email": email or "",
            "displayName": display_name or "",
            "token": token,
        }
    )
    return f"{protocol}://auth-success?{query}"


class IpcChannel(Protocol):
    def send(self, channel: str, payload: dict) -> None:
        ...


@dataclass
class HandoffResult:
    """
    kind is "deep_link", "ipc" or "navigate". target is the URL, IPC channel
    or path the identity was handed to.
    """

    kind: str
    target: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DesktopBridge:
    """
    electron_mode is fixed at construction, from the login page's query
    string; it does not change for the lifetime of the page.
    """

    def __init__(
        self,
        electron_mode: bool,
        protocol: str,
        ipc: Optional[IpcChannel] = None,
        open_url: Optional[Callable[[str], None]] = None,
    ):
        self.electron_mode = electron_mode
        self.protocol = protocol
        self.ipc = ipc
        self.open_url = open_url

    def hand_off(
        self, identity: Identity, get_id_token: Callable[[], str]
    ) -> HandoffResult:
        if self.electron_mode:
            return self._deep_link(identity, get_id_token)
        if self.ipc is not None:
            return self._send_ipc(identity, get_id_token)
        return HandoffResult(kind="navigate", target=HOME_PATH)

    def _deep_link(
        self, identity: Identity, get_id_token: Callable[[], str]
    ) -> HandoffResult:
        target = f"{self.protocol}://auth-success"
        try:
            token = get_id_token()
            url = build_deep_link(
                self.protocol, identity.uid, identity.email, identity.display_name, token
            )
            logger.info("Returning to desktop app via deep link for %s", identity.uid)
            if self.open_url is not None:
                self.open_url(url)
        except Exception as e:  # Hand-off failures surface as a result, never raise.
            logger.error("Deep link processing failed: %s", e)
            return HandoffResult(kind="deep_link", target=target, error=DEEP_LINK_ERROR)
        return HandoffResult(kind="deep_link", target=url)

    def _send_ipc(
        self, identity: Identity, get_id_token: Callable[[], str]
    ) -> HandoffResult:
        try:
            token = get_id_token()
            self.ipc.send(
                DESKTOP_AUTH_IPC_CHANNEL,
                {
                    "uid": identity.uid,
                    "displayName": identity.display_name,
                    "email": identity.email,
                    "idToken": token,
                },
            )
        except Exception as e:
            logger.error("Desktop app communication failed: %s", e)
            return HandoffResult(
                kind="ipc", target=DESKTOP_AUTH_IPC_CHANNEL, error=IPC_ERROR
            )
        return HandoffResult(kind="ipc", target=DESKTOP_AUTH_IPC_CHANNEL)
