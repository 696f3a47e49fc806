"""Tests for room keys and the contact information filter."""
import pytest

from monlyking.services.chat import (
    room_key, support_room, room_members, other_member, contains_contact_info,
)


def test_room_key_is_order_independent():
    assert room_key(3, 12) == room_key(12, 3) == "12_3"


def test_support_room():
    assert support_room(7) == "admin-support_7"
    assert room_members("admin-support_7") == [7]
    assert other_member("admin-support_7", 7) is None


def test_room_members():
    assert room_members("12_3") == [12, 3]
    assert other_member("12_3", 3) == 12


@pytest.mark.parametrize("text", [
    "mail me at someone@example.org",
    "add me on Discord",
    "my GMAIL is open",
    "check mysite.com",
    "whatsapp works",
    "+20 100 555 1234",
    "call me later",
    "Text Me please",
    "contactme",
    "telegram?",
])
def test_contact_info_is_detected(text):
    assert contains_contact_info(text)


@pytest.mark.parametrize("text", [
    "Is the account still available?",
    "Would you take 900 for it?",
    "Does it have the Reaver vandal",
    "",
    None,
])
def test_normal_messages_pass(text):
    assert not contains_contact_info(text)
