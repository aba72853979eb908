"""Pydantic models for inbound webhook data in the client's normalized shape.

Only the handful of fields a host application usually needs are modelled;
media payloads (photo sizes, documents, stickers …) are kept as the raw
dicts Telegram sent.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

RawUpdate = Dict[str, Any]


class Sender(BaseModel):
    """Author of a message: a user, or the channel itself for channel posts."""

    id: int
    first_name: str
    username: Optional[str] = None
    language_code: Optional[str] = None

    model_config = {"populate_by_name": True}


class ChatRef(BaseModel):
    """Chat the message belongs to."""

    id: int
    type: str

    model_config = {"populate_by_name": True}


class NormalizedMessage(BaseModel):
    """A message reduced to a fixed field set.

    ``message_id``, ``from``, ``chat`` and ``date`` are always present; every
    other field is ``None`` when the update did not carry it.
    """

    message_id: int
    from_field: Sender = Field(..., alias="from")
    chat: ChatRef
    date: int
    text: Optional[str] = None
    caption: Optional[str] = None
    photo: Optional[List[Dict[str, Any]]] = None
    video: Optional[Dict[str, Any]] = None
    document: Optional[Dict[str, Any]] = None
    voice: Optional[Dict[str, Any]] = None
    audio: Optional[Dict[str, Any]] = None
    video_note: Optional[Dict[str, Any]] = None
    sticker: Optional[Dict[str, Any]] = None
    location: Optional[Dict[str, Any]] = None
    contact: Optional[Dict[str, Any]] = None
    new_chat_member: Optional[Dict[str, Any]] = None
    new_chat_members: Optional[List[Dict[str, Any]]] = None
    left_chat_member: Optional[Dict[str, Any]] = None
    reply_to_message: Optional["NormalizedMessage"] = None

    model_config = {"populate_by_name": True}

    @property
    def is_reply(self) -> bool:
        return self.reply_to_message is not None

    def to_dict(self) -> Dict[str, Any]:
        """Dump with Telegram key names (``from``), omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


NormalizedMessage.model_rebuild()
