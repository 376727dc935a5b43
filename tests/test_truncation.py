#!/usr/bin/env python3
"""Tests for excerpt truncation."""

import pytest


VERSE = "one\ntwo\n\nthree\n   \nfour\nfive\nsix"
PROSE = " ".join(f"word{i}" for i in range(25))


def test_preformatted_keeps_first_four_non_blank_lines():
    from truncation import truncate_content

    result = truncate_content(VERSE, is_preformatted=True)

    assert result == "one\ntwo\nthree\nfour"
    assert len(result.split("\n")) == 4
    assert not result.endswith(("\u2026", "..."))


def test_prose_keeps_first_twenty_words():
    from truncation import truncate_content

    result = truncate_content(PROSE, is_preformatted=False)

    assert result.split(" ") == [f"word{i}" for i in range(20)]
    assert "  " not in result


def test_prose_collapses_whitespace_runs():
    from truncation import truncate_content

    assert truncate_content("a \n b\t\tc", is_preformatted=False) == "a b c"


def test_custom_bounds():
    from truncation import truncate_content

    assert truncate_content(VERSE, True, max_lines=2) == "one\ntwo"
    assert truncate_content(PROSE, False, max_words=3) == "word0 word1 word2"


def test_short_input_is_unchanged():
    from truncation import truncate_content

    assert truncate_content("just\ntwo lines", True) == "just\ntwo lines"
    assert truncate_content("few words here", False) == "few words here"


@pytest.mark.parametrize("preformatted", [True, False])
def test_empty_input_returns_empty_string(preformatted):
    from truncation import truncate_content

    assert truncate_content("", preformatted) == ""
    assert truncate_content("  \n \n", preformatted) == ""


@pytest.mark.parametrize("preformatted", [True, False])
@pytest.mark.parametrize("text", [VERSE, PROSE, "", "single", "  lead\n\ntrail  \n"])
def test_truncation_is_idempotent(text, preformatted):
    from truncation import truncate_content

    once = truncate_content(text, preformatted)
    assert truncate_content(once, preformatted) == once
