"""
Backend Client - HTTP session for the AIACS REST backend.

Handles bearer auth with one-shot token refresh on 401, maps failures to
BackendError with a user-facing message, and decodes JSON bodies.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

from ..utils.constants import DEFAULT_TIMEOUT
from .errors import (
    STATUS_NETWORK,
    STATUS_TIMEOUT,
    AuthenticationExpired,
    BackendError,
    error_message,
)

logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/refresh"


@dataclass
class TokenStore:
    """Access/refresh token pair for the current session."""

    access_token: str | None = None
    refresh_token: str | None = None

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None


class BackendClient:
    """
    Client for the REST backend.

    Args:
        base_url: Backend root, e.g. "http://10.0.0.5:8000"
        timeout: Default request timeout in seconds
        tokens: Token store (shared with whatever performs login)
        session: requests.Session to use (one is created if omitted)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        tokens: TokenStore | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.tokens = tokens or TokenStore()
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

        logger.debug(f"BackendClient initialized: {self.base_url}")

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def stream_url(self, camera_id: int) -> str:
        """URL of a camera's live MJPEG stream."""
        return self.url(f"/camera/{camera_id}/")

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def get(self, path: str, params: dict | None = None, timeout: float | None = None) -> Any:
        return self.request("GET", path, params=params, timeout=timeout)

    def post(self, path: str, data: Any = None, timeout: float | None = None) -> Any:
        return self.request("POST", path, json_body=data, timeout=timeout)

    def put(self, path: str, data: Any = None, timeout: float | None = None) -> Any:
        return self.request("PUT", path, json_body=data, timeout=timeout)

    def delete(self, path: str, timeout: float | None = None) -> Any:
        return self.request("DELETE", path, timeout=timeout)

    def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json_body: Any = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Perform a request and return the decoded JSON body.

        Returns None for empty bodies. None-valued params are dropped.

        Raises:
            AuthenticationExpired: 401 and the token could not be refreshed
            BackendError: Any other failure
        """
        url = self.url(path)
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        response = self._send(method, url, params, json_body, timeout)

        if response.status_code == 401 and self.tokens.refresh_token:
            self._refresh_access_token(url)
            response = self._send(method, url, params, json_body, timeout)

        if not response.ok:
            detail = self._server_message(response)
            message = error_message(response.status_code, url, detail)
            logger.error(f"API error {response.status_code} {method} {url}: {detail}")
            raise BackendError(response.status_code, url, message, detail)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(
                response.status_code, url, error_message(0, url, str(e)), str(e)
            ) from e

    def _send(
        self,
        method: str,
        url: str,
        params: dict | None,
        json_body: Any,
        timeout: float | None,
    ) -> requests.Response:
        headers = {}
        if self.tokens.access_token:
            headers["Authorization"] = f"Bearer {self.tokens.access_token}"

        try:
            return self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=timeout or self.timeout,
            )
        except requests.Timeout as e:
            raise BackendError(
                0, url, error_message(0, url, str(e), STATUS_TIMEOUT), str(e)
            ) from e
        except requests.ConnectionError as e:
            raise BackendError(
                0, url, error_message(0, url, str(e), STATUS_NETWORK), str(e)
            ) from e
        except requests.RequestException as e:
            raise BackendError(0, url, error_message(0, url, str(e)), str(e)) from e

    def _refresh_access_token(self, url: str) -> None:
        """Exchange the refresh token for a new access token."""
        logger.info("Access token rejected, refreshing")
        try:
            response = self._session.post(
                self.url(REFRESH_PATH),
                json={"refreshToken": self.tokens.refresh_token},
                timeout=self.timeout,
            )
            response.raise_for_status()
            access_token = response.json()["accessToken"]
        except (requests.RequestException, ValueError, KeyError) as e:
            logger.warning(f"Token refresh failed: {e}")
            self.tokens.clear()
            raise AuthenticationExpired(url, str(e)) from e

        self.tokens.access_token = access_token

    @staticmethod
    def _server_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:100]
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.reason or ""

    def close(self) -> None:
        self._session.close()
