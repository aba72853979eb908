"""Tests for pseudo-command parsing and request encoding."""

import json
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from wolfgram.commands import (
    BanChatMember,
    EncodedRequest,
    PinMessage,
    PseudoCommand,
    PlainText,
    SendLocation,
    SendPhoto,
    SetParseMode,
    UnbanChatMember,
    UnpinMessage,
    encode_command,
    encode_message,
    parse_commands,
)
from wolfgram.keyboards import make_keyboard


INLINE_ROWS = [[{"text": "A", "callback_data": "a"}, {"text": "B", "callback_data": "b"}]]


# ── Plain text ───────────────────────────────────────────────────────────────


class TestPlainText:
    """Text without sentinels goes to sendMessage unchanged."""

    def test_default_request(self) -> None:
        req = encode_message(42, "hello")
        assert req.method == "sendMessage"
        assert req.query == {}
        assert req.body == {"chat_id": 42, "text": "hello"}
        assert req.path == "sendMessage"

    def test_reply_target_in_query(self) -> None:
        req = encode_message(42, "hello", reply_to=7)
        assert req.path == "sendMessage?reply_to_message_id=7"

    def test_no_commands_found(self) -> None:
        assert parse_commands("just chatting: [a] {b} (c)") == []


# ── Location / parse mode / venue ────────────────────────────────────────────


class TestLocation:
    def test_coordinates_trimmed(self) -> None:
        req = encode_message(42, "sendLocation:12.34, 56.78")
        assert req.method == "sendLocation"
        assert req.query == {"chat_id": 42, "latitude": "12.34", "longitude": "56.78"}
        assert req.path == "sendLocation?chat_id=42&latitude=12.34&longitude=56.78"

    def test_reply_target_kept(self) -> None:
        req = encode_message(42, "sendLocation:1,2", reply_to=9)
        assert req.query["reply_to_message_id"] == 9

    def test_missing_longitude_falls_back_to_text(self) -> None:
        req = encode_message(42, "sendLocation:12.34")
        assert req.method == "sendMessage"
        assert req.body["text"] == "sendLocation:12.34"


class TestParseMode:
    def test_sentinel_stripped(self) -> None:
        req = encode_message(42, "parseMode:{Markdown}Hello *world*")
        assert req.method == "sendMessage"
        assert req.body["text"] == "Hello *world*"
        assert req.query == {"parse_mode": "Markdown"}

    def test_reply_target_kept(self) -> None:
        req = encode_message(42, "parseMode:{HTML}<b>x</b>", reply_to=3)
        assert req.query == {"parse_mode": "HTML", "reply_to_message_id": 3}

    def test_without_braces_is_plain_text(self) -> None:
        req = encode_message(42, "parseMode:HTML hi")
        assert req.query == {}
        assert req.body["text"] == "parseMode:HTML hi"


class TestVenue:
    def test_all_groups(self) -> None:
        req = encode_message(42, "sendVenue:[50.45, 30.52](Khreshchatyk 1){City Hall}", reply_to=4)
        assert req.method == "sendVenue"
        assert req.body["title"] == "City Hall"
        assert req.body["address"] == "Khreshchatyk 1"
        assert req.query == {
            "chat_id": 42,
            "latitude": "50.45",
            "longitude": "30.52",
            "reply_to_message_id": 4,
        }

    def test_missing_address_is_plain_text(self) -> None:
        req = encode_message(42, "sendVenue:[50.45,30.52]{Title}")
        assert req.method == "sendMessage"
        assert "title" not in req.body


# ── Media ────────────────────────────────────────────────────────────────────


class TestMedia:
    def test_photo_with_caption(self) -> None:
        req = encode_message(42, "sendPhoto:[https://example.com/a.jpg]{Nice pic}")
        assert req.method == "sendPhoto"
        assert req.query == {"chat_id": 42, "photo": "https://example.com/a.jpg", "caption": "Nice pic"}
        assert "caption=Nice+pic" in req.path
        assert "photo=https%3A%2F%2Fexample.com%2Fa.jpg" in req.path

    def test_photo_without_caption(self) -> None:
        req = encode_message(42, "sendPhoto:[AgACAgIAAx0]", reply_to=8)
        assert req.query == {"chat_id": 42, "photo": "AgACAgIAAx0", "reply_to_message_id": 8}

    @pytest.mark.parametrize(
        "kind, field",
        [("Video", "video"), ("Audio", "audio"), ("Document", "document")],
    )
    def test_other_kinds(self, kind: str, field: str) -> None:
        req = encode_message(42, f"send{kind}:[file-1]{{Cap & more}}")
        assert req.method == f"send{kind}"
        assert req.query[field] == "file-1"
        assert "caption=Cap+%26+more" in req.path

    def test_missing_reference_is_plain_text(self) -> None:
        req = encode_message(42, "sendPhoto:{caption only}")
        assert req.method == "sendMessage"


# ── Keyboards ────────────────────────────────────────────────────────────────


class TestKeyboardStep:
    def test_inline_forces_send_message_and_html(self) -> None:
        keyboard = make_keyboard(INLINE_ROWS, inline=True)
        req = encode_message(42, "sendLocation:1,2", keyboard)
        assert req.method == "sendMessage"
        assert req.body["parse_mode"] == "HTML"
        assert json.loads(req.body["reply_markup"]) == {"inline_keyboard": INLINE_ROWS}

    def test_inline_overrides_media(self) -> None:
        keyboard = make_keyboard(INLINE_ROWS, inline=True)
        req = encode_message(42, "sendPhoto:[x]{y}", keyboard)
        assert req.method == "sendMessage"
        assert req.body["parse_mode"] == "HTML"

    def test_reply_keyboard_markup(self) -> None:
        keyboard = make_keyboard([["Yes", "No"]])
        req = encode_message(42, "Continue?", keyboard, reply_to=5)
        assert req.path == "sendMessage"
        assert "parse_mode" not in req.body
        assert json.loads(req.body["reply_markup"]) == {
            "keyboard": [["Yes", "No"]],
            "resize_keyboard": True,
            "one_time_keyboard": False,
        }

    def test_keyboard_drops_reply_target_and_parse_mode_query(self) -> None:
        keyboard = make_keyboard([["Yes"]])
        req = encode_message(42, "parseMode:{Markdown}*bold*", keyboard, reply_to=5)
        assert req.path == "sendMessage"
        assert req.query == {}
        assert json.loads(req.body["reply_markup"])["keyboard"] == [["Yes"]]

    def test_later_sentinels_still_override_keyboard(self) -> None:
        keyboard = make_keyboard(INLINE_ROWS, inline=True)
        req = encode_message(42, "banChatMember:[1@2]", keyboard)
        assert req.method == "banChatMember"


class TestRemoveKeyboard:
    def test_placeholder_when_empty(self) -> None:
        req = encode_message(42, "removeKeyboard:")
        assert req.body["text"] == "Keyboard deleted"
        assert json.loads(req.body["reply_markup"]) == {"remove_keyboard": True}

    def test_custom_placeholder(self) -> None:
        req = encode_message(42, "removeKeyboard:", keyboard_removed_text="Клавіатуру прибрано")
        assert req.body["text"] == "Клавіатуру прибрано"

    def test_text_kept(self) -> None:
        req = encode_message(42, "removeKeyboard:Bye")
        assert req.method == "sendMessage"
        assert req.body["text"] == "Bye"

    def test_overrides_attached_keyboard_markup(self) -> None:
        keyboard = make_keyboard([["Yes"]])
        req = encode_message(42, "removeKeyboard:Done", keyboard)
        assert json.loads(req.body["reply_markup"]) == {"remove_keyboard": True}


# ── Chat administration ──────────────────────────────────────────────────────


class TestMembers:
    def test_ban_targets_bracket_chat(self) -> None:
        req = encode_message(42, "banChatMember:[100@-200]")
        assert req.method == "banChatMember"
        assert req.query == {"chat_id": "-200", "user_id": "100"}

    def test_unban_wins_over_embedded_ban(self) -> None:
        text = "unbanChatMember:[100@-200]"
        kinds = [type(c) for c in parse_commands(text)]
        assert kinds == [BanChatMember, UnbanChatMember]
        assert encode_message(42, text).method == "unbanChatMember"

    def test_single_segment_ignored(self) -> None:
        assert encode_message(42, "banChatMember:[100]").method == "sendMessage"


class TestMessages:
    def test_delete(self) -> None:
        req = encode_message(42, "removeChatMessage:[7@-100]")
        assert req.method == "deleteMessage"
        assert req.query == {"chat_id": "-100", "message_id": "7"}

    def test_edit_text_strips_prefix(self) -> None:
        req = encode_message(42, "editMessageText:[7@-100]New text here")
        assert req.method == "editMessageText"
        assert req.query == {"chat_id": "-100", "message_id": "7", "text": "New text here"}
        assert req.path.endswith("text=New+text+here")

    def test_pin(self) -> None:
        req = encode_message(42, "pinChatMessage:[7@-100]")
        assert req.method == "pinChatMessage"
        assert req.query == {"chat_id": "-100", "message_id": "7"}

    @pytest.mark.parametrize("flag, expected", [("1", True), ("TRUE", True), ("true", True), ("0", False), ("no", False)])
    def test_pin_disable_notification(self, flag: str, expected: bool) -> None:
        req = encode_message(42, f"pinChatMessage:[7@-100@{flag}]")
        assert ("disable_notification" in req.query) is expected

    def test_pin_needs_both_ids(self) -> None:
        assert encode_message(42, "pinChatMessage:[7]").method == "sendMessage"

    def test_unpin_all(self) -> None:
        req = encode_message(1, "unpinChatMessage:[42]")
        assert req.method == "unpinAllChatMessages"
        assert req.query == {"chat_id": "42"}

    def test_unpin_single(self) -> None:
        req = encode_message(1, "unpinChatMessage:[7@42]")
        assert req.method == "unpinChatMessage"
        assert req.query == {"chat_id": "42", "message_id": "7"}


# ── Check order ──────────────────────────────────────────────────────────────


class TestPrecedence:
    def test_later_check_overrides_earlier(self) -> None:
        req = encode_message(42, "sendLocation:1,2 parseMode:{HTML}")
        assert req.method == "sendMessage"
        assert req.query == {"parse_mode": "HTML"}
        assert req.body["text"] == "sendLocation:1,2 "

    def test_parse_commands_in_check_order(self) -> None:
        text = "pinChatMessage:[1@2] sendLocation:3,4"
        kinds = [type(c) for c in parse_commands(text)]
        assert kinds[0] is SendLocation
        assert kinds[-1] is PinMessage


# ── Tagged commands ──────────────────────────────────────────────────────────


class TestEncodeCommand:
    def test_base_command_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            PseudoCommand()

    def test_location_object(self) -> None:
        req = encode_command(42, SendLocation(latitude=1.5, longitude=2.5), reply_to=3)
        assert req.path == "sendLocation?chat_id=42&latitude=1.5&longitude=2.5&reply_to_message_id=3"

    def test_plain_text_object(self) -> None:
        req = encode_command(42, PlainText(text="hi"))
        assert req.body == {"chat_id": 42, "text": "hi"}
        assert req.method == "sendMessage"

    def test_parse_mode_object_sets_body_text(self) -> None:
        req = encode_command(42, SetParseMode(mode="HTML", text="<b>x</b>"))
        assert req.body["text"] == "<b>x</b>"
        assert req.query == {"parse_mode": "HTML"}

    def test_unpin_all_object(self) -> None:
        req = encode_command(42, UnpinMessage(chat_id=42))
        assert req.method == "unpinAllChatMessages"

    def test_matches_textual_form(self) -> None:
        text = "sendPhoto:[id-1]{cap}"
        expected = encode_message(42, text)
        actual = encode_command(42, SendPhoto(media="id-1", caption="cap"), text=text)
        assert actual == expected

    def test_command_list_applied_by_rank(self) -> None:
        req = encode_command(42, [PinMessage(message_id=1, chat_id=2), SendLocation(latitude=1, longitude=2)])
        assert req.method == "pinChatMessage"

    def test_encoded_request_defaults(self) -> None:
        req = EncodedRequest()
        assert req.method == "sendMessage"
        assert req.path == "sendMessage"
