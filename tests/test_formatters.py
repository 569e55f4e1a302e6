"""Tests for notification text formatting."""

from __future__ import annotations

import pytest

from notifier.formatters import notification_body, preview_body


def test_preview_uses_trimmed_text():
    assert preview_body({"content": "  hi  "}) == "hi"


def test_preview_text_wins_over_media():
    assert preview_body({"content": "look", "imageUrl": "https://cdn/x.jpg"}) == "look"


@pytest.mark.parametrize(
    "message, expected",
    [
        ({"content": "", "imageUrl": "x"}, "[Ảnh]"),
        ({"content": "   ", "videoUrl": "x"}, "[Video]"),
        ({"audioUrl": "x"}, "[Voice]"),
        ({"gifUrl": "x"}, "[GIF]"),
        ({"imageUrl": "x", "videoUrl": "y", "gifUrl": "z"}, "[Ảnh]"),
        ({"videoUrl": "y", "audioUrl": "z"}, "[Video]"),
    ],
)
def test_preview_media_placeholders_in_priority_order(message, expected):
    assert preview_body(message) == expected


def test_preview_fallback_for_empty_message():
    assert preview_body({}) == "Bạn có tin nhắn mới"
    assert preview_body({"content": None, "imageUrl": ""}) == "Bạn có tin nhắn mới"


def test_preview_stringifies_non_text_content():
    assert preview_body({"content": 42}) == "42"


@pytest.mark.parametrize(
    "notification_type, expected",
    [
        ("like", "An đã thích bài viết của bạn"),
        ("comment", "An đã bình luận bài viết của bạn"),
        ("reply", "An đã phản hồi bình luận của bạn"),
        ("follow", "An đã theo dõi bạn"),
        ("share", "An đã chia sẻ bài viết của bạn"),
        ("mention", "An đã gắn thẻ bạn trong bài viết"),
        ("friendRequest", "An đã gửi lời mời kết bạn"),
    ],
)
def test_notification_body_per_type(notification_type, expected):
    assert notification_body(notification_type, "An") == expected


@pytest.mark.parametrize("notification_type", ["poke", "", None, "LIKE"])
def test_notification_body_fallback_ignores_actor(notification_type):
    assert notification_body(notification_type, "An") == "Bạn có thông báo mới"
