"""Keyboard builder — reply and inline keyboard markup.

A keyboard is described by a 2-D grid of buttons.  Buttons are opaque: plain
dicts (``{"text": …, "callback_data": …}``) or SDK-style pydantic models are
passed through as-is and only serialised when the markup is encoded.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar, List, Literal, Optional, Sequence, Union

from pydantic import BaseModel, Field

Button = Any
ButtonGrid = List[List[Button]]


def _dump_button(button: Button) -> Any:
    if isinstance(button, BaseModel):
        return button.model_dump(exclude_none=True)
    return button


def _dump_grid(rows: Sequence[Sequence[Button]]) -> list:
    return [[_dump_button(button) for button in row] for row in rows]


class ReplyKeyboard(BaseModel):
    """Custom reply keyboard shown instead of the system keyboard."""

    kind: Literal["keyboard"] = "keyboard"
    rows: ButtonGrid
    resize: bool = True
    one_time: bool = False

    #: Reply keyboards leave ``parse_mode`` untouched.
    parse_mode: ClassVar[Optional[str]] = None

    def markup(self) -> dict:
        return {
            "keyboard": _dump_grid(self.rows),
            "resize_keyboard": self.resize,
            "one_time_keyboard": self.one_time,
        }

    def encode(self) -> str:
        """Return the markup as the JSON string sent in ``reply_markup``."""
        return json.dumps(self.markup(), ensure_ascii=False)


class InlineKeyboard(BaseModel):
    """Inline keyboard attached to the message itself."""

    kind: Literal["inline"] = "inline"
    rows: ButtonGrid

    #: Inline keyboards force HTML rendering of the message text.
    parse_mode: ClassVar[Optional[str]] = "HTML"

    def markup(self) -> dict:
        return {"inline_keyboard": _dump_grid(self.rows)}

    def encode(self) -> str:
        """Return the markup as the JSON string sent in ``reply_markup``."""
        return json.dumps(self.markup(), ensure_ascii=False)


KeyboardSpec = Union[ReplyKeyboard, InlineKeyboard]


class RemoveKeyboardMarkup(BaseModel):
    """Marker asking clients to hide the current reply keyboard."""

    remove_keyboard: bool = Field(True)

    def encode(self) -> str:
        return json.dumps(self.model_dump())


def make_keyboard(
    buttons: Optional[Sequence[Sequence[Button]]],
    inline: bool = False,
    resize: bool = True,
    one_time: bool = False,
) -> Optional[KeyboardSpec]:
    """Build a keyboard from a grid of buttons.

    Args:
        buttons: Rows of buttons.  An empty grid means "no keyboard".
        inline: Build an inline keyboard instead of a reply keyboard.
        resize: Ask clients to shrink the reply keyboard to fit its buttons.
        one_time: Hide the reply keyboard after the first press.

    Returns:
        :class:`InlineKeyboard` or :class:`ReplyKeyboard`, or ``None`` for an
        empty grid.  ``resize``/``one_time`` are ignored for inline keyboards.
    """
    if not buttons:
        return None
    rows = [list(row) for row in buttons]
    if inline:
        return InlineKeyboard(rows=rows)
    return ReplyKeyboard(rows=rows, resize=resize, one_time=one_time)


def keyboard_from_markup(encoded: Union[str, dict]) -> Optional[KeyboardSpec]:
    """Decode ``reply_markup`` (JSON string or dict) back into a keyboard.

    Returns ``None`` for markup that is not a keyboard (e.g. remove-keyboard).
    """
    markup = json.loads(encoded) if isinstance(encoded, str) else encoded
    if not isinstance(markup, dict):
        return None
    if "inline_keyboard" in markup:
        return make_keyboard(markup["inline_keyboard"], inline=True)
    if "keyboard" in markup:
        return make_keyboard(
            markup["keyboard"],
            resize=bool(markup.get("resize_keyboard", False)),
            one_time=bool(markup.get("one_time_keyboard", False)),
        )
    return None
