"""
Backend error types and user-facing error messages.

Messages are chosen by endpoint first (NVR playback, detections, auth),
then by HTTP status. Transport failures use status 0.
"""

STATUS_TIMEOUT = "timeout"
STATUS_NETWORK = "network"

_DEFAULT_MESSAGES = {
    400: "Bad request: {message}",
    401: "Authentication required.",
    403: "Access denied.",
    404: "Requested resource not found.",
    500: "Internal server error.",
    502: "Problem connecting to the server.",
    503: "Service temporarily unavailable.",
}

# (url fragment, {status: message}, fallback message)
_ENDPOINT_MESSAGES = (
    (
        "/nvr/playback/start",
        {
            404: "NVR playback service not found. Check the server status.",
            401: "NVR authentication failed. Check the login details.",
            403: "No permission for NVR playback.",
            500: "NVR server error. Try again shortly.",
            503: "NVR service temporarily unavailable.",
        },
        "Could not start playback. Check the network.",
    ),
    (
        "/nvr/playback/stop",
        {
            404: "Playback session to stop was not found.",
            500: "Server error while stopping playback.",
        },
        "Could not stop playback.",
    ),
    (
        "/detections",
        {
            404: "Detection history service not found.",
            401: "Not authorized to read detection history. Check the login.",
            403: "No access to detection history.",
            500: "Detection history server error.",
        },
        "Could not load detection history. Try again shortly.",
    ),
    (
        "/auth/",
        {
            401: "Invalid login credentials.",
            403: "Access denied.",
            429: "Too many login attempts. Try again shortly.",
        },
        "Authentication error.",
    ),
)


def error_message(status: int, url: str, detail: str = "", kind: str = "") -> str:
    """
    Pick the user-facing message for a failed request.

    Args:
        status: HTTP status, or 0 for transport failures
        url: Request URL or path
        detail: Server-provided message (or exception text)
        kind: STATUS_TIMEOUT / STATUS_NETWORK for transport failures
    """
    for fragment, by_status, fallback in _ENDPOINT_MESSAGES:
        if fragment in url:
            return by_status.get(status, fallback)

    if status in _DEFAULT_MESSAGES:
        return _DEFAULT_MESSAGES[status].format(message=detail)
    if kind == STATUS_TIMEOUT:
        return "Request timed out."
    if kind == STATUS_NETWORK:
        return "Check the network connection."
    return f"An error occurred: {detail}"


class BackendError(Exception):
    """
    A backend request failed.

    Attributes:
        status: HTTP status, 0 for timeouts and connection failures
        url: Request URL
        message: User-facing message
        detail: Raw server message or exception text
    """

    def __init__(self, status: int, url: str, message: str, detail: str = ""):
        super().__init__(message)
        self.status = status
        self.url = url
        self.message = message
        self.detail = detail

    @property
    def retryable(self) -> bool:
        """Transport failures and 5xx are worth retrying; 4xx are not."""
        return self.status == 0 or self.status >= 500

    def __repr__(self) -> str:
        return f"BackendError({self.status}, {self.url!r}, {self.message!r})"


class AuthenticationExpired(BackendError):
    """Access token rejected and could not be refreshed."""

    def __init__(self, url: str, detail: str = ""):
        super().__init__(401, url, "Login expired. Please log in again.", detail)
