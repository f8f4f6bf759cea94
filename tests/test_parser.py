"""Tests for splitting template source into segments."""

from stencil.ast import Literal, Logic, split_segments


def split(source, open_tag="<%", close_tag="%>"):
    return list(split_segments(source, open_tag, close_tag))


def test_plain_text_is_one_literal():
    assert split("hello world") == [Literal("hello world")]


def test_first_chunk_is_always_literal():
    """Text before the first open tag is literal, even when empty."""
    assert split("<%= x %>") == [Literal(""), Logic("= x ")]


def test_logic_followed_by_literal():
    assert split("Hi, <%=name%>!") == [
        Literal("Hi, "),
        Logic("=name"),
        Literal("!"),
    ]


def test_empty_trailing_literal_is_dropped():
    assert split("a<% x = 1 %>") == [Literal("a"), Logic(" x = 1 ")]


def test_unterminated_open_tag_is_literal():
    """A dangling open tag is text, tag included."""
    assert split("<% if True:") == [Literal(""), Literal("<% if True:")]


def test_close_tag_splits_once():
    """Only the first close tag ends a logic segment."""
    assert split("<% a %>b%>c") == [Literal(""), Logic(" a "), Literal("b%>c")]


def test_tags_do_not_nest():
    assert split("<% a <% b %>") == [
        Literal(""),
        Literal("<% a "),
        Logic(" b "),
    ]


def test_custom_tags():
    segments = split("x{{ y }}z", open_tag="{{", close_tag="}}")
    assert segments == [Literal("x"), Logic(" y "), Literal("z")]


def test_output_marker_detection():
    assert Logic("= name").is_output
    assert Logic("  =name ").is_output
    assert not Logic("== name").is_output
    assert not Logic(" x = 1").is_output
