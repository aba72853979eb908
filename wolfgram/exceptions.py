"""Exception hierarchy for the Wolfgram client."""

from typing import Any, Dict, Optional


class WolfgramError(Exception):
    """Base class for every error raised by the client."""

    code: str = "EX_WOLFGRAM"


class MissingCredentialError(WolfgramError):
    """Raised when a network operation is attempted without a bot token."""

    code = "EX_TOKEN_EMPTY"

    def __init__(self) -> None:
        super().__init__(f"{self.code}: bot token is not configured")


class InsecureWebhookUrlError(WolfgramError):
    """Raised when a webhook URL does not use the ``https://`` scheme.

    Attributes:
        url: The rejected webhook URL.
    """

    code = "EX_NOT_SSL_URL"

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"{self.code}: webhook URL must start with https:// (got {url!r})")


class TransportError(WolfgramError):
    """Structured failure of a single Bot API call.

    Only raised on request, via :meth:`wolfgram.transport.TransportResult.raise_for_error`;
    the transport itself reports failures as falsy results.

    Attributes:
        status_code: HTTP status code, or ``None`` for network-level failures.
        response_body: Decoded response body as a dict, when available.
    """

    code = "EX_TRANSPORT"

    def __init__(
        self,
        status_code: Optional[int],
        response_body: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        """Initialise with the HTTP status code and optional body."""
        self.status_code = status_code
        self.response_body = response_body or {}
        description = error or self.response_body.get("description", "Unknown error")
        super().__init__(f"API error {status_code}: {description}")
