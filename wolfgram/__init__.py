"""Wolfgram — a tiny Telegram Bot API client.

Sends text (with inline pseudo-commands for locations, venues, media and
chat moderation), builds keyboards, and normalizes inbound webhook updates.

Usage::

    from wolfgram import WolfgramClient, SendLocation
    from wolfgram.webhook import get_hook_data
"""

from wolfgram.client import WolfgramClient, get_default_client
from wolfgram.commands import (
    BanChatMember,
    DeleteMessage,
    EditMessageText,
    EncodedRequest,
    PinMessage,
    PlainText,
    PseudoCommand,
    RemoveKeyboard,
    SendAudio,
    SendDocument,
    SendLocation,
    SendPhoto,
    SendVenue,
    SendVideo,
    SetParseMode,
    UnbanChatMember,
    UnpinMessage,
    encode_command,
    encode_message,
    parse_commands,
)
from wolfgram.exceptions import (
    InsecureWebhookUrlError,
    MissingCredentialError,
    TransportError,
    WolfgramError,
)
from wolfgram.keyboards import InlineKeyboard, ReplyKeyboard, keyboard_from_markup, make_keyboard
from wolfgram.models import NormalizedMessage
from wolfgram.splitter import MESSAGE_LIMIT, split_message
from wolfgram.transport import HttpTransport, TransportResult

__all__ = [
    "WolfgramClient",
    "get_default_client",
    # Commands
    "PseudoCommand",
    "PlainText",
    "SendLocation",
    "SetParseMode",
    "SendVenue",
    "SendPhoto",
    "SendVideo",
    "SendAudio",
    "SendDocument",
    "RemoveKeyboard",
    "BanChatMember",
    "UnbanChatMember",
    "DeleteMessage",
    "EditMessageText",
    "PinMessage",
    "UnpinMessage",
    "EncodedRequest",
    "encode_message",
    "encode_command",
    "parse_commands",
    # Keyboards
    "ReplyKeyboard",
    "InlineKeyboard",
    "make_keyboard",
    "keyboard_from_markup",
    # Splitting
    "MESSAGE_LIMIT",
    "split_message",
    # Webhook
    "NormalizedMessage",
    # Transport and errors
    "HttpTransport",
    "TransportResult",
    "WolfgramError",
    "MissingCredentialError",
    "InsecureWebhookUrlError",
    "TransportError",
]
