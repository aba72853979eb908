"""Pseudo-commands and the outbound request encoder.

A message text may embed a *pseudo-command*: a sentinel such as
``sendLocation:`` followed by its parameters.  The encoder turns a chat id,
a text, an optional keyboard and an optional reply target into an
:class:`EncodedRequest` — Bot API method, query parameters and JSON body.

Grammar (checked in this order)::

    sendLocation:<lat>,<lon>
    parseMode:{<mode>}<text>
    sendVenue:[<lat>,<lon>](<address>){<title>}
    sendPhoto:[<file id or url>]{<caption>}      (caption optional)
    sendVideo:[…]{…}  sendAudio:[…]{…}  sendDocument:[…]{…}
    <keyboard attached>
    removeKeyboard:<text>
    banChatMember:[<user id>@<chat id>]
    unbanChatMember:[<user id>@<chat id>]
    removeChatMessage:[<message id>@<chat id>]
    editMessageText:[<message id>@<chat id>]<new text>
    pinChatMessage:[<message id>@<chat id>(@<disable notification>)]
    unpinChatMessage:[<chat id>]  or  [<message id>@<chat id>]

Every applicable check runs and mutates the same request, so when several
sentinels appear in one text the one checked last decides the method.
Sentinels whose parameter groups are malformed are ignored and the text is
sent as a plain message.

Callers that know what they want should build a command object instead and
pass it to :func:`encode_command`; :func:`parse_commands` is the textual
compatibility layer on top of the same types.
"""

from __future__ import annotations

import logging
import re
from abc import abstractmethod
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Sequence, Union
from urllib.parse import urlencode

from pydantic import BaseModel, Field

from wolfgram.keyboards import KeyboardSpec, RemoveKeyboardMarkup

_logger = logging.getLogger("wolfgram.commands")

ChatId = Union[int, str]

SEND_MESSAGE = "sendMessage"
DEFAULT_KEYBOARD_REMOVED_TEXT = "Keyboard deleted"

#: Position of the keyboard step among the command ranks.
KEYBOARD_RANK = 60

_SQUARE = re.compile(r"\[(.*?)\]", re.S)
_ROUND = re.compile(r"\((.*?)\)", re.S)
_CURLY = re.compile(r"\{(.*?)\}", re.S)
_PARSE_MODE = re.compile(r"parseMode:\{(.*?)\}", re.S)
_EDIT_PREFIX = re.compile(r"editMessageText:\[(.*?)\]", re.S)


class EncodedRequest(BaseModel):
    """One outbound Bot API call: method name, query parameters and JSON body."""

    method: str = SEND_MESSAGE
    query: Dict[str, Any] = Field(default_factory=dict)
    body: Dict[str, Any] = Field(default_factory=dict)

    @property
    def path(self) -> str:
        """``method?query`` with every query value URL-encoded."""
        if not self.query:
            return self.method
        return f"{self.method}?{urlencode(self.query)}"


def _with_reply(query: Dict[str, Any], reply_to: Any) -> Dict[str, Any]:
    if reply_to:
        query["reply_to_message_id"] = reply_to
    return query


def _after(text: str, sentinel: str) -> str:
    """Return the part of *text* following the first *sentinel*."""
    return text.partition(sentinel)[2]


def _segments(text: str, sentinel: str) -> Optional[List[str]]:
    """Return the ``@``-separated fields of ``<sentinel>[a@b…]``, stripped."""
    match = re.search(re.escape(sentinel) + r"\[(.*?)\]", text, re.S)
    if match is None:
        return None
    return [part.strip() for part in match.group(1).split("@")]


def _pair(text: str, sentinel: str) -> Optional[List[str]]:
    parts = _segments(text, sentinel)
    if parts is None or len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return parts


def _geo(raw: str) -> Optional[List[str]]:
    parts = [part.strip() for part in raw.split(",")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return parts[:2]


# ── Command types ────────────────────────────────────────────────────────────


class PseudoCommand(BaseModel):
    """Abstract base of every command the encoder understands."""

    #: Text marker that announces the command inside a message.
    sentinel: ClassVar[str] = ""
    #: Position in the check order; lower ranks are applied first.
    rank: ClassVar[int] = 0

    @classmethod
    @abstractmethod
    def parse(cls, text: str, **options: Any) -> Optional["PseudoCommand"]:
        """Extract the command from *text*; ``None`` when absent or malformed."""

    @abstractmethod
    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        """Rewrite *request* in place."""


class PlainText(PseudoCommand):
    """Ordinary text message; the fallback when no sentinel is present."""

    rank: ClassVar[int] = 10

    text: str

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["PlainText"]:
        return cls(text=text)

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        request.body["text"] = self.text
        request.method = SEND_MESSAGE
        request.query = _with_reply({}, reply_to)


class SendLocation(PseudoCommand):
    sentinel: ClassVar[str] = "sendLocation:"
    rank: ClassVar[int] = 20

    latitude: Union[str, float]
    longitude: Union[str, float]

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["SendLocation"]:
        geo = _geo(text.replace(cls.sentinel, ""))
        if geo is None:
            return None
        return cls(latitude=geo[0], longitude=geo[1])

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        request.method = "sendLocation"
        request.query = _with_reply(
            {"chat_id": chat_id, "latitude": self.latitude, "longitude": self.longitude},
            reply_to,
        )


class SetParseMode(PseudoCommand):
    """Send *text* rendered with *mode* (``HTML``, ``Markdown``, ``MarkdownV2``)."""

    sentinel: ClassVar[str] = "parseMode:"
    rank: ClassVar[int] = 30

    mode: str
    text: str = ""

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["SetParseMode"]:
        match = _PARSE_MODE.search(text)
        if match is None:
            return None
        return cls(mode=match.group(1), text=text.replace(match.group(0), ""))

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        request.body["text"] = self.text
        request.method = SEND_MESSAGE
        request.query = _with_reply({"parse_mode": self.mode}, reply_to)


class SendVenue(PseudoCommand):
    sentinel: ClassVar[str] = "sendVenue:"
    rank: ClassVar[int] = 40

    latitude: Union[str, float]
    longitude: Union[str, float]
    address: str
    title: str

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["SendVenue"]:
        rest = _after(text, cls.sentinel)
        geo_match = _SQUARE.search(rest)
        address_match = _ROUND.search(rest)
        title_match = _CURLY.search(rest)
        if geo_match is None or address_match is None or title_match is None:
            return None
        geo = _geo(geo_match.group(1))
        if geo is None:
            return None
        return cls(
            latitude=geo[0],
            longitude=geo[1],
            address=address_match.group(1),
            title=title_match.group(1),
        )

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        request.body["title"] = self.title
        request.body["address"] = self.address
        request.method = "sendVenue"
        request.query = _with_reply(
            {"chat_id": chat_id, "latitude": self.latitude, "longitude": self.longitude},
            reply_to,
        )


class _SendMedia(PseudoCommand):
    """``send<Kind>:[<file id or url>]{<caption>}``."""

    #: Bot API method, also the ``send<Kind>`` sentinel stem.
    api_method: ClassVar[str] = ""
    #: Query parameter carrying the media reference.
    media_field: ClassVar[str] = ""

    media: str
    caption: Optional[str] = None

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["_SendMedia"]:
        rest = _after(text, cls.sentinel)
        media_match = _SQUARE.search(rest)
        if media_match is None:
            return None
        caption_match = _CURLY.search(rest)
        caption = caption_match.group(1) if caption_match else None
        return cls(media=media_match.group(1), caption=caption)

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        query: Dict[str, Any] = {"chat_id": chat_id, self.media_field: self.media}
        if self.caption:
            query["caption"] = self.caption
        request.method = self.api_method
        request.query = _with_reply(query, reply_to)


class SendPhoto(_SendMedia):
    sentinel: ClassVar[str] = "sendPhoto:"
    rank: ClassVar[int] = 50
    api_method: ClassVar[str] = "sendPhoto"
    media_field: ClassVar[str] = "photo"


class SendVideo(_SendMedia):
    sentinel: ClassVar[str] = "sendVideo:"
    rank: ClassVar[int] = 51
    api_method: ClassVar[str] = "sendVideo"
    media_field: ClassVar[str] = "video"


class SendAudio(_SendMedia):
    sentinel: ClassVar[str] = "sendAudio:"
    rank: ClassVar[int] = 52
    api_method: ClassVar[str] = "sendAudio"
    media_field: ClassVar[str] = "audio"


class SendDocument(_SendMedia):
    sentinel: ClassVar[str] = "sendDocument:"
    rank: ClassVar[int] = 53
    api_method: ClassVar[str] = "sendDocument"
    media_field: ClassVar[str] = "document"


class RemoveKeyboard(PseudoCommand):
    """Hide the reply keyboard while sending *text*."""

    sentinel: ClassVar[str] = "removeKeyboard:"
    rank: ClassVar[int] = 70

    text: str = DEFAULT_KEYBOARD_REMOVED_TEXT

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["RemoveKeyboard"]:
        clean = text.replace(cls.sentinel, "")
        if not clean:
            clean = options.get("keyboard_removed_text") or DEFAULT_KEYBOARD_REMOVED_TEXT
        return cls(text=clean)

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        request.body["text"] = self.text
        request.body["reply_markup"] = RemoveKeyboardMarkup().encode()


class _MemberCommand(PseudoCommand):
    """``<sentinel>[<user id>@<chat id>]`` targeting a chat other than the caller's."""

    api_method: ClassVar[str] = ""

    user_id: Union[int, str]
    chat_id: ChatId

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["_MemberCommand"]:
        parts = _pair(text, cls.sentinel)
        if parts is None:
            return None
        return cls(user_id=parts[0], chat_id=parts[1])

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        request.method = self.api_method
        request.query = {"chat_id": self.chat_id, "user_id": self.user_id}


class BanChatMember(_MemberCommand):
    sentinel: ClassVar[str] = "banChatMember:"
    rank: ClassVar[int] = 80
    api_method: ClassVar[str] = "banChatMember"


class UnbanChatMember(_MemberCommand):
    sentinel: ClassVar[str] = "unbanChatMember:"
    rank: ClassVar[int] = 90
    api_method: ClassVar[str] = "unbanChatMember"


class DeleteMessage(PseudoCommand):
    sentinel: ClassVar[str] = "removeChatMessage:"
    rank: ClassVar[int] = 100

    message_id: Union[int, str]
    chat_id: ChatId

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["DeleteMessage"]:
        parts = _pair(text, cls.sentinel)
        if parts is None:
            return None
        return cls(message_id=parts[0], chat_id=parts[1])

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        request.method = "deleteMessage"
        request.query = {"chat_id": self.chat_id, "message_id": self.message_id}


class EditMessageText(PseudoCommand):
    sentinel: ClassVar[str] = "editMessageText:"
    rank: ClassVar[int] = 110

    message_id: Union[int, str]
    chat_id: ChatId
    text: str

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["EditMessageText"]:
        match = _EDIT_PREFIX.search(text)
        if match is None:
            return None
        parts = [part.strip() for part in match.group(1).split("@")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            return None
        return cls(message_id=parts[0], chat_id=parts[1], text=text.replace(match.group(0), ""))

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        request.method = "editMessageText"
        request.query = {"chat_id": self.chat_id, "message_id": self.message_id, "text": self.text}


class PinMessage(PseudoCommand):
    sentinel: ClassVar[str] = "pinChatMessage:"
    rank: ClassVar[int] = 120

    message_id: Union[int, str]
    chat_id: ChatId
    disable_notification: bool = False

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["PinMessage"]:
        parts = _pair(text, cls.sentinel)
        if parts is None:
            return None
        flag = parts[2] if len(parts) > 2 else ""
        return cls(
            message_id=parts[0],
            chat_id=parts[1],
            disable_notification=flag == "1" or flag.lower() == "true",
        )

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        query: Dict[str, Any] = {"chat_id": self.chat_id, "message_id": self.message_id}
        if self.disable_notification:
            query["disable_notification"] = "true"
        request.method = "pinChatMessage"
        request.query = query


class UnpinMessage(PseudoCommand):
    """Unpin one message, or every pinned message when *message_id* is ``None``."""

    sentinel: ClassVar[str] = "unpinChatMessage:"
    rank: ClassVar[int] = 130

    chat_id: ChatId
    message_id: Optional[Union[int, str]] = None

    @classmethod
    def parse(cls, text: str, **options: Any) -> Optional["UnpinMessage"]:
        parts = _segments(text, cls.sentinel)
        if not parts or not parts[0]:
            return None
        if len(parts) == 1:
            return cls(chat_id=parts[0])
        if not parts[1]:
            return None
        return cls(message_id=parts[0], chat_id=parts[1])

    def apply(self, request: EncodedRequest, chat_id: ChatId, reply_to: Any = None) -> None:
        if self.message_id is None:
            request.method = "unpinAllChatMessages"
            request.query = {"chat_id": self.chat_id}
        else:
            request.method = "unpinChatMessage"
            request.query = {"chat_id": self.chat_id, "message_id": self.message_id}


#: Sentinel commands in check order.
COMMAND_TYPES: Sequence[type] = (
    SendLocation,
    SetParseMode,
    SendVenue,
    SendPhoto,
    SendVideo,
    SendAudio,
    SendDocument,
    RemoveKeyboard,
    BanChatMember,
    UnbanChatMember,
    DeleteMessage,
    EditMessageText,
    PinMessage,
    UnpinMessage,
)


# ── Parsing and encoding ─────────────────────────────────────────────────────


def parse_commands(text: str, keyboard_removed_text: Optional[str] = None) -> List[PseudoCommand]:
    """Return every pseudo-command found in *text*, in check order.

    Sentinels that are present but whose parameters cannot be parsed are
    skipped.  An empty list means *text* is a plain message.
    """
    commands: List[PseudoCommand] = []
    for command_type in COMMAND_TYPES:
        if command_type.sentinel not in text:
            continue
        command = command_type.parse(text, keyboard_removed_text=keyboard_removed_text)
        if command is None:
            _logger.debug("Ignoring malformed pseudo-command", extra={"sentinel": command_type.sentinel})
            continue
        commands.append(command)
    return commands


def _apply_keyboard(request: EncodedRequest, keyboard: KeyboardSpec) -> None:
    """Attach *keyboard*; the request becomes a bare ``sendMessage`` without reply target."""
    request.body["reply_markup"] = keyboard.encode()
    if keyboard.parse_mode:
        request.body["parse_mode"] = keyboard.parse_mode
    request.method = SEND_MESSAGE
    request.query = {}


def build_request(
    chat_id: ChatId,
    text: str,
    commands: Iterable[PseudoCommand],
    keyboard: Optional[KeyboardSpec] = None,
    reply_to: Any = None,
) -> EncodedRequest:
    """Apply *commands* and *keyboard* on top of a plain ``sendMessage`` request.

    Commands are applied by rank with the keyboard step between the media
    commands and ``removeKeyboard``; later steps overwrite the method and
    query set by earlier ones.
    """
    request = EncodedRequest(
        method=SEND_MESSAGE,
        query=_with_reply({}, reply_to),
        body={"chat_id": chat_id, "text": text},
    )
    pending_keyboard = keyboard
    for command in sorted(commands, key=lambda c: c.rank):
        if pending_keyboard is not None and command.rank > KEYBOARD_RANK:
            _apply_keyboard(request, pending_keyboard)
            pending_keyboard = None
        command.apply(request, chat_id, reply_to)
    if pending_keyboard is not None:
        _apply_keyboard(request, pending_keyboard)
    return request


def encode_message(
    chat_id: ChatId,
    text: str,
    keyboard: Optional[KeyboardSpec] = None,
    reply_to: Any = None,
    keyboard_removed_text: Optional[str] = None,
) -> EncodedRequest:
    """Encode a textual message, honouring any embedded pseudo-commands."""
    commands = parse_commands(text, keyboard_removed_text=keyboard_removed_text)
    return build_request(chat_id, text, commands, keyboard, reply_to)


def encode_command(
    chat_id: ChatId,
    command: Union[PseudoCommand, Sequence[PseudoCommand]],
    keyboard: Optional[KeyboardSpec] = None,
    reply_to: Any = None,
    text: str = "",
) -> EncodedRequest:
    """Encode explicit command object(s) without any text parsing."""
    commands = [command] if isinstance(command, PseudoCommand) else list(command)
    if text == "":
        for item in commands:
            if isinstance(item, (PlainText, SetParseMode, RemoveKeyboard)):
                text = item.text
    return build_request(chat_id, text, commands, keyboard, reply_to)
