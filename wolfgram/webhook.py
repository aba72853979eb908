"""Inbound webhook handling — turn Bot API updates into normalized messages.

Routing rules for a decoded update:

* ``message`` with a ``from`` sender → :class:`~wolfgram.models.NormalizedMessage`
* ``channel_post`` → normalized message whose sender is the channel
* any other known update kind → the payload itself, unmodified
* anything else → ``None``
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from wolfgram.models import NormalizedMessage, RawUpdate

_logger = logging.getLogger("wolfgram.webhook")

#: Update kinds that are handed back untouched.
RAW_UPDATE_KINDS = frozenset({
    "message",
    "edited_message",
    "channel_post",
    "edited_channel_post",
    "business_connection",
    "business_message",
    "edited_business_message",
    "deleted_business_messages",
    "message_reaction",
    "message_reaction_count",
    "inline_query",
    "chosen_inline_result",
    "callback_query",
    "shipping_query",
    "pre_checkout_query",
    "purchased_paid_media",
    "poll",
    "poll_answer",
    "my_chat_member",
    "chat_member",
    "chat_join_request",
    "chat_boost",
    "removed_chat_boost",
})

_OPTIONAL_FIELDS = (
    "photo",
    "video",
    "document",
    "voice",
    "audio",
    "video_note",
    "sticker",
    "location",
    "contact",
    "new_chat_member",
    "new_chat_members",
    "left_chat_member",
)


def _sender(data: Dict[str, Any], is_channel: bool) -> Dict[str, Any]:
    if is_channel:
        channel = data.get("sender_chat") or data.get("chat") or {}
        return {
            "id": channel.get("id"),
            "first_name": channel.get("title"),
            "username": channel.get("username"),
            "language_code": "",
        }
    user = data.get("from") or {}
    return {
        "id": user.get("id"),
        "first_name": user.get("first_name"),
        "username": user.get("username"),
        "language_code": user.get("language_code"),
    }


def normalize_message(data: Dict[str, Any], is_channel: bool = False) -> NormalizedMessage:
    """Build a :class:`NormalizedMessage` from a Telegram ``Message`` dict.

    Replied-to messages are normalized recursively as user messages; a reply
    without a ``from`` sender is left out.

    Raises:
        pydantic.ValidationError: If id, sender, chat or date are missing.
    """
    chat = data.get("chat") or {}
    fields: Dict[str, Any] = {
        "message_id": data.get("message_id"),
        "from": _sender(data, is_channel),
        "chat": {"id": chat.get("id"), "type": chat.get("type")},
        "date": data.get("date"),
        "text": data.get("text"),
        "caption": data.get("caption"),
    }
    for name in _OPTIONAL_FIELDS:
        if data.get(name) is not None:
            fields[name] = data[name]

    # Photos and documents only carry a caption.
    if fields["text"] is None and (data.get("photo") or data.get("document")):
        fields["text"] = data.get("caption")

    reply = data.get("reply_to_message")
    if isinstance(reply, dict) and reply.get("from"):
        fields["reply_to_message"] = normalize_message(reply)

    return NormalizedMessage.model_validate(fields)


def normalize_update(payload: Any) -> Union[NormalizedMessage, RawUpdate, None]:
    """Route one decoded update (see module docstring)."""
    if not isinstance(payload, dict) or not payload:
        return None

    update_id = payload.get("update_id")
    try:
        if "message" in payload:
            message = payload["message"]
            if isinstance(message, dict) and message.get("from"):
                return normalize_message(message)
            _logger.debug("Message without sender, skipping", extra={"update_id": update_id})
            return None
        if isinstance(payload.get("channel_post"), dict):
            return normalize_message(payload["channel_post"], is_channel=True)
    except ValidationError as exc:
        _logger.warning("Failed to normalize update", extra={"update_id": update_id, "error": str(exc)})
        return None

    if RAW_UPDATE_KINDS.intersection(payload):
        return payload
    _logger.debug("Unknown update kind", extra={"update_id": update_id, "keys": sorted(payload)})
    return None


def decode_body(raw_body: Union[str, bytes, None]) -> Dict[str, Any]:
    """Decode a webhook request body; ``{}`` when empty or not a JSON object."""
    if not raw_body:
        return {}
    if isinstance(raw_body, bytes):
        raw_body = raw_body.decode("utf-8", errors="replace")
    try:
        payload = json.loads(raw_body)
    except ValueError as exc:
        _logger.warning("Webhook body is not valid JSON", extra={"error": str(exc)})
        return {}
    return payload if isinstance(payload, dict) else {}


def get_hook_data(
    raw_body: Union[str, bytes, None], raw: bool = False
) -> Optional[Union[NormalizedMessage, RawUpdate]]:
    """Decode a webhook request body.

    Args:
        raw_body: The HTTP request body as received.
        raw: Return the decoded update unmodified instead of normalizing it.
    """
    payload = decode_body(raw_body)
    if raw:
        return payload
    return normalize_update(payload)
