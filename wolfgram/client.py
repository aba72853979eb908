"""WolfgramClient — single-shot Telegram Bot API client.

The client glues the pieces of the package together: text is split by
:mod:`wolfgram.splitter`, each chunk is encoded by :mod:`wolfgram.commands`
(pseudo-commands, keyboards, reply targets) and handed to the transport.
Every operation issues exactly one HTTP call, except long-message pushes,
which issue one call per chunk, strictly in order.

Usage::

    from wolfgram import WolfgramClient

    client = WolfgramClient("123:ABC")
    keyboard = client.make_keyboard([["Yes", "No"]])
    client.push(42, "Continue?", keyboard)
    client.push(42, "sendLocation:50.45, 30.52")
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urlencode

from wolfgram.commands import (
    ChatId,
    EncodedRequest,
    PseudoCommand,
    encode_command,
    encode_message,
)
from wolfgram.exceptions import InsecureWebhookUrlError, MissingCredentialError
from wolfgram.keyboards import Button, KeyboardSpec, make_keyboard
from wolfgram.models import NormalizedMessage, RawUpdate
from wolfgram.splitter import MESSAGE_LIMIT, split_message
from wolfgram.transport import HttpTransport, TransportResult
from wolfgram.webhook import get_hook_data

_logger = logging.getLogger("wolfgram.client")

DEFAULT_API_URL = "https://api.telegram.org/bot"


class WolfgramClient:
    """Client for the Telegram Bot API.

    The bot token may be given at construction time or later through
    :meth:`set_token`.  Without a token every network operation raises
    :class:`~wolfgram.exceptions.MissingCredentialError`; message encoding
    still happens first, so malformed input never hides a missing token.
    """

    _DEFAULT_TIMEOUT: int = 10

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: int = _DEFAULT_TIMEOUT,
        transport: Any = None,
        keyboard_removed_text: Optional[str] = None,
    ) -> None:
        """Create a new client.

        Args:
            token: Bot token issued by BotFather.
            api_url: API prefix the token is appended to.
            timeout: Request timeout in seconds for the default transport.
            transport: Object with ``call``/``fetch`` methods shaped like
                :class:`~wolfgram.transport.HttpTransport`.
            keyboard_removed_text: Text sent by ``removeKeyboard:`` when the
                message has nothing else to say.
        """
        self._token = ""
        self.set_token(token)
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport if transport is not None else HttpTransport(timeout)
        self._keyboard_removed_text = keyboard_removed_text

    # ------------------------------------------------------------------
    #  Credential
    # ------------------------------------------------------------------

    def set_token(self, token: Optional[str]) -> None:
        """Replace the bot token; an empty value disables the client."""
        self._token = (token or "").strip()

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    @property
    def base_url(self) -> str:
        return f"{self._api_url}{self._token}"

    @property
    def file_base_url(self) -> str:
        """Prefix for file downloads: ``…/file/bot<token>``."""
        root = self._api_url
        if root.endswith("bot"):
            root = root[: -len("bot")]
        elif not root.endswith("/"):
            root += "/"
        return f"{root}file/bot{self._token}"

    def _require_token(self) -> None:
        if not self._token:
            _logger.error("Bot API call attempted without a token")
            raise MissingCredentialError()

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _call(
        self,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        method: Optional[str] = None,
    ) -> TransportResult:
        """Issue one call through the transport.

        Raises:
            MissingCredentialError: If no token is configured.
        """
        self._require_token()
        endpoint = path.split("?", 1)[0]
        _logger.debug("Calling Bot API", extra={"api_endpoint": endpoint})
        result = self._transport.call(self.base_url, path, body, method)
        if result:
            data = result.payload()
            if data and not data.get("ok", True):
                _logger.warning("Bot API returned not-ok", extra={"api_endpoint": endpoint, "api_response": data})
        return result

    # ------------------------------------------------------------------
    #  Messages
    # ------------------------------------------------------------------

    @staticmethod
    def make_keyboard(
        buttons: Optional[Sequence[Sequence[Button]]],
        inline: bool = False,
        resize: bool = True,
        one_time: bool = False,
    ) -> Optional[KeyboardSpec]:
        """Build a keyboard for :meth:`push`, see :func:`wolfgram.keyboards.make_keyboard`."""
        return make_keyboard(buttons, inline=inline, resize=resize, one_time=one_time)

    def encode(
        self,
        chat_id: ChatId,
        text: str,
        keyboard: Optional[KeyboardSpec] = None,
        reply_to: Any = None,
    ) -> EncodedRequest:
        """Encode *text* (and its pseudo-commands) without sending anything."""
        return encode_message(
            chat_id,
            text,
            keyboard,
            reply_to,
            keyboard_removed_text=self._keyboard_removed_text,
        )

    def _send_request(self, chat_id: ChatId, request: EncodedRequest) -> TransportResult:
        result = self._call(request.path, request.body)
        if result:
            _logger.info("Message sent", extra={"chat_id": chat_id, "api_endpoint": request.method})
        else:
            _logger.error(
                "Message delivery failed",
                extra={"chat_id": chat_id, "api_endpoint": request.method, "status_code": result.status_code, "error": result.error},
            )
        return result

    def api_send_message(
        self,
        chat_id: ChatId,
        text: str,
        keyboard: Optional[KeyboardSpec] = None,
        reply_to: Any = None,
    ) -> TransportResult:
        """Encode and send one message, no splitting."""
        request = self.encode(chat_id, text, keyboard, reply_to)
        return self._send_request(chat_id, request)

    def push_chunks(
        self,
        chat_id: ChatId,
        text: str,
        keyboard: Optional[KeyboardSpec] = None,
        no_split: bool = False,
        reply_to: Any = None,
    ) -> List[TransportResult]:
        """Send *text*, split into :data:`MESSAGE_LIMIT` sized chunks.

        Each chunk is encoded on its own and carries the same keyboard and
        reply target; with a keyboard attached the reply target is dropped.
        A failed chunk does not stop the remaining ones.

        Returns:
            One result per chunk, in sending order.
        """
        if no_split or len(text) <= MESSAGE_LIMIT:
            chunks = [text]
        else:
            chunks = split_message(text)
            _logger.debug("Splitting long message", extra={"chat_id": chat_id, "chunks": len(chunks)})
        return [self.api_send_message(chat_id, chunk, keyboard, reply_to) for chunk in chunks]

    def push(
        self,
        chat_id: ChatId,
        text: str,
        keyboard: Optional[KeyboardSpec] = None,
        no_split: bool = False,
        reply_to: Any = None,
    ) -> TransportResult:
        """Send *text* to *chat_id*; see :meth:`push_chunks`.

        Returns:
            The result of the last chunk sent.
        """
        return self.push_chunks(chat_id, text, keyboard, no_split, reply_to)[-1]

    def send(
        self,
        chat_id: ChatId,
        command: Union[PseudoCommand, Sequence[PseudoCommand]],
        keyboard: Optional[KeyboardSpec] = None,
        reply_to: Any = None,
        text: str = "",
    ) -> TransportResult:
        """Send an explicit pseudo-command object, bypassing text parsing."""
        request = encode_command(chat_id, command, keyboard, reply_to, text)
        return self._send_request(chat_id, request)

    def send_chat_action(self, chat_id: ChatId, action: str = "typing") -> TransportResult:
        """Show a chat action (``typing``, ``upload_photo`` …) to the user."""
        return self._call("sendChatAction", {"chat_id": chat_id, "action": action})

    def answer_callback_query(
        self,
        callback_query_id: str,
        text: Optional[str] = None,
        show_alert: bool = False,
    ) -> TransportResult:
        """Acknowledge an inline button press so the client stops its spinner."""
        payload: Dict[str, Any] = {"callback_query_id": callback_query_id}
        if text is not None:
            payload["text"] = text
        if show_alert:
            payload["show_alert"] = True
        return self._call("answerCallbackQuery", payload)

    # ------------------------------------------------------------------
    #  Webhook
    # ------------------------------------------------------------------

    def set_webhook(self, url: str, max_connections: int = 40) -> TransportResult:
        """Register *url* for update delivery; an empty URL removes the webhook.

        Raises:
            MissingCredentialError: If no token is configured.
            InsecureWebhookUrlError: If *url* is not an ``https://`` URL.
        """
        self._require_token()
        if not url:
            return self.delete_webhook()
        if not url.lower().startswith("https://"):
            raise InsecureWebhookUrlError(url)
        result = self._call("setWebhook", {"url": url, "max_connections": max_connections})
        _logger.info("Webhook set", extra={"api_endpoint": "setWebhook", "ok": bool(result)})
        return result

    def delete_webhook(self) -> TransportResult:
        return self._call("deleteWebhook", method="post")

    def get_webhook_info(self) -> TransportResult:
        return self._call("getWebhookInfo")

    @staticmethod
    def get_hook_data(
        raw_body: Union[str, bytes, None], raw: bool = False
    ) -> Optional[Union[NormalizedMessage, RawUpdate]]:
        """Decode an inbound webhook body, see :func:`wolfgram.webhook.get_hook_data`."""
        return get_hook_data(raw_body, raw=raw)

    # ------------------------------------------------------------------
    #  Chats and files
    # ------------------------------------------------------------------

    def get_chat_info(self, chat_id: ChatId) -> Dict[str, Any]:
        """Return the decoded ``getChat`` reply; ``{}`` for an empty chat id."""
        if not chat_id:
            return {}
        return self._call(f"getChat?{urlencode({'chat_id': chat_id})}").payload()

    def get_file_path(self, file_id: str) -> str:
        """Resolve *file_id* to its server-side path; ``""`` if Telegram refuses."""
        data = self._call(f"getFile?{urlencode({'file_id': file_id})}").payload()
        if data.get("ok"):
            return (data.get("result") or {}).get("file_path", "")
        _logger.warning("getFile failed", extra={"api_endpoint": "getFile", "file_id": file_id, "api_response": data})
        return ""

    def download_file(self, file_path: str) -> bytes:
        """Download a file previously resolved with :meth:`get_file_path`."""
        self._require_token()
        result = self._transport.fetch(f"{self.file_base_url}/{file_path}")
        return result.content if result else b""


# ── Module-level default client ─────────────────────────────────────────────
#
# A lazily-initialised client carrying the values from :mod:`config`.
# ─────────────────────────────────────────────────────────────────────────────

_default_client: WolfgramClient | None = None


def get_default_client() -> WolfgramClient:
    """Return (and lazily create) the module-level client singleton."""
    global _default_client
    if _default_client is None:
        from config import API_URL, BOT_TOKEN, KEYBOARD_REMOVED_TEXT, REQUEST_TIMEOUT  # deferred to avoid import-time side effects
        _default_client = WolfgramClient(
            BOT_TOKEN,
            api_url=API_URL,
            timeout=REQUEST_TIMEOUT,
            keyboard_removed_text=KEYBOARD_REMOVED_TEXT,
        )
    return _default_client
