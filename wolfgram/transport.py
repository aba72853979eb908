"""HTTP transport for the Telegram Bot API.

:class:`HttpTransport` is the only place that talks to the network.  It
performs a JSON POST (when a body is given) or a bodiless GET against
``base_url + path`` and never raises for network or HTTP failures: every call
returns a :class:`TransportResult` whose truthiness says whether it worked.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel

from wolfgram.exceptions import TransportError

_logger = logging.getLogger("wolfgram.transport")

_TOKEN_RE = re.compile(r"/(file/)?bot[^/]+")


def mask_token(url: str) -> str:
    """Return *url* with the bot token replaced by ``***`` for logging."""
    return _TOKEN_RE.sub(lambda m: f"/{m.group(1) or ''}bot***", url, count=1)


class TransportResult(BaseModel):
    """Outcome of one transport call.

    ``ok`` is ``False`` when the request could not be performed or the
    server answered with a non-2xx status.  An ``ok`` result with an empty
    ``body`` means "no data", not failure.
    """

    ok: bool
    status_code: Optional[int] = None
    body: str = ""
    content: bytes = b""
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    def payload(self) -> Dict[str, Any]:
        """Decode ``body`` as a JSON object; ``{}`` when empty or undecodable."""
        if not self.body:
            return {}
        try:
            data = json.loads(self.body)
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def raise_for_error(self) -> "TransportResult":
        """Raise :class:`TransportError` if the call failed, else return self."""
        if not self.ok:
            raise TransportError(self.status_code, self.payload(), self.error)
        return self


class HttpTransport:
    """``requests``-backed implementation of the transport contract."""

    _DEFAULT_TIMEOUT: int = 10

    def __init__(self, timeout: int = _DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

    def call(
        self,
        base_url: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        method: Optional[str] = None,
    ) -> TransportResult:
        """Call ``base_url/path``.

        Sends a JSON POST when *body* is given, a GET otherwise.  *method*
        forces the HTTP verb (``setWebhook``/``deleteWebhook`` POST without a
        body).
        """
        url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
        verb = (method or ("post" if body is not None else "get")).lower()
        headers = {"Content-Type": "application/json"}
        try:
            if verb == "post":
                response = requests.post(url, json=body, headers=headers, timeout=self._timeout)
            else:
                response = requests.get(url, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            _logger.error("Bot API request error", extra={"url": mask_token(url), "error": str(exc)})
            return TransportResult(ok=False, error=str(exc))

        result = TransportResult(
            ok=response.ok,
            status_code=response.status_code,
            body=response.text,
        )
        if not response.ok:
            _logger.warning(
                "Bot API HTTP error",
                extra={"url": mask_token(url), "status_code": response.status_code, "api_response": response.text[:200]},
            )
        return result

    def fetch(self, url: str) -> TransportResult:
        """GET *url* and return its raw bytes in ``content``."""
        try:
            response = requests.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            _logger.error("File download error", extra={"url": mask_token(url), "error": str(exc)})
            return TransportResult(ok=False, error=str(exc))
        if not response.ok:
            _logger.warning("File download HTTP error", extra={"url": mask_token(url), "status_code": response.status_code})
        return TransportResult(
            ok=response.ok,
            status_code=response.status_code,
            content=response.content,
        )
