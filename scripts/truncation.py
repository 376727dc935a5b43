#!/usr/bin/env python3
"""Bounds the poem excerpt shown on share images."""

DEFAULT_MAX_LINES = 4
DEFAULT_MAX_WORDS = 20


def truncate_content(
    content: str,
    is_preformatted: bool,
    max_lines: int = DEFAULT_MAX_LINES,
    max_words: int = DEFAULT_MAX_WORDS,
) -> str:
    """
    Keep the first max_lines non-blank lines of verse, or the first
    max_words words of prose.

    Verse keeps its line breaks; prose is re-joined with single spaces.
    Nothing is appended when text is cut.
    """
    if not content:
        return ""

    if is_preformatted:
        lines = [line for line in content.split("\n") if line.strip()]
        return "\n".join(lines[:max_lines])

    words = content.split()
    return " ".join(words[:max_words])
