"""
Discovers the dashboard API origin and calls the API on behalf of the
locally mirrored user.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import requests

from shared.constants import DEVELOPMENT_API_ORIGIN, RUNTIME_CONFIG_PATH
from shared.types import UserProfile

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds


def fallback_api_origin(environment: str) -> str:
    return DEVELOPMENT_API_ORIGIN if environment == "development" else ""


def load_runtime_config(
    base_url: str,
    session: Optional[requests.Session] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> Optional[str]:
    """Returns API_URL from runtime-config.json, or None if it is unavailable."""
    http = session or requests
    try:
        response = http.get(f"{base_url}{RUNTIME_CONFIG_PATH}", timeout=timeout)
        if response.ok:
            config = response.json()
            logger.info("Runtime config loaded: %s", config)
            if isinstance(config, dict):
                return config.get("API_URL") or None
            logger.warning("Ignoring runtime config that is not an object")
    except (requests.RequestException, ValueError) as e:
        logger.warning("Failed to load runtime config: %s", e)
    return None


class ApiClient:
    """
    Thin wrapper over requests. The API origin is resolved on first use and
    kept for the client's lifetime.
    """

    def __init__(
        self,
        base_url: str,
        environment: str,
        get_user: Callable[[], Optional[UserProfile]],
        get_id_token: Optional[Callable[[], Optional[str]]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.base_url = base_url
        self.environment = environment
        self.get_user = get_user
        self.get_id_token = get_id_token
        self.session = session or requests.Session()
        self.timeout = timeout
        self._api_origin: Optional[str] = None

    @property
    def api_origin(self) -> str:
        if self._api_origin is None:
            runtime_url = load_runtime_config(
                self.base_url, self.session, self.timeout
            )
            if runtime_url:
                self._api_origin = runtime_url
            else:
                self._api_origin = fallback_api_origin(self.environment)
                logger.info("Using fallback API URL: %r", self._api_origin)
        return self._api_origin

    def headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        user = self.get_user()
        if user is not None and user.uid:
            headers["X-User-ID"] = user.uid
        token = self.get_id_token() if self.get_id_token else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        headers = {**self.headers(), **kwargs.pop("headers", {})}
        url = f"{self.api_origin}{path}"
        logger.debug("API call %s %s", method, url)
        return self.session.request(
            method, url, headers=headers, timeout=self.timeout, **kwargs
        )

    def get(self, path: str, **kwargs) -> requests.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> requests.Response:
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs) -> requests.Response:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs) -> requests.Response:
        return self.request("DELETE", path, **kwargs)
