#!/usr/bin/env python3
"""
Content Normalizer - turns poem markdown into plain display text.

Only italics survive, as <i>...</i>. Everything else (bold, code, links,
headings, list and quote markers, code fences) is reduced to its text, and
typographic dash and space variants are collapsed to one form each.
"""

import re
from typing import List, Tuple

# Applied in order; later patterns assume earlier ones already ran.
MARKDOWN_RULES: List[Tuple[re.Pattern, str]] = [
    # Bold
    (re.compile(r"\*\*(.+?)\*\*"), r"\1"),
    (re.compile(r"__(.+?)__"), r"\1"),
    # Italic
    (re.compile(r"\*(?=\S)([^*\n]+?)\*"), r"<i>\1</i>"),
    (re.compile(r"(?<!\w)_(?=\S)([^_\n]+?)_(?!\w)"), r"<i>\1</i>"),
    # Inline code (single backtick runs only, fences are handled below)
    (re.compile(r"(?<!`)`([^`\n]+)`(?!`)"), r"\1"),
    # Links and images keep their visible text
    (re.compile(r"!?\[([^\]]+)\]\([^)]+\)"), r"\1"),
    # Line prefixes
    (re.compile(r"^#+[ \t]+", re.MULTILINE), ""),
    (re.compile(r"^[ \t]*[-*+][ \t]+", re.MULTILINE), ""),
    (re.compile(r"^[ \t]*\d+\.[ \t]+", re.MULTILINE), ""),
    (re.compile(r"^[ \t]*>[ \t]?", re.MULTILINE), ""),
    # Code fences, opening (with optional language) and closing
    (re.compile(r"^[ \t]*`{3,}.*$", re.MULTILINE), ""),
]

EM_DASH = "\u2014"

DASH_VARIANTS = [
    "\u2e3a",  # two-em dash
    "\u2e3b",  # three-em dash
    "\u2015",  # horizontal bar
    "\u2e40",  # double hyphen
    "--",
]

SPACE_VARIANTS = [
    "\u2009",  # thin
    "\u200a",  # hair
    "\u00a0",  # no-break
    "\u2002",  # en
    "\u2003",  # em
    "\u2004",  # three-per-em
    "\u2005",  # four-per-em
    "\u2006",  # six-per-em
    "\u2007",  # figure
    "\u2008",  # punctuation
    "\u202f",  # narrow no-break
    "\u205f",  # medium mathematical
]

_DASH_RE = re.compile("|".join(re.escape(dash) for dash in DASH_VARIANTS))
_SPACE_RE = re.compile("[" + "".join(SPACE_VARIANTS) + "]")
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_special_characters(text: str) -> str:
    """Collapse dash variants to an em dash and space variants to ' '."""
    text = _DASH_RE.sub(EM_DASH, text)
    return _SPACE_RE.sub(" ", text)


def normalize_markdown(text: str) -> str:
    """Strip markdown down to display text, keeping italics as <i> tags."""
    if not text:
        return ""

    for pattern, replacement in MARKDOWN_RULES:
        text = pattern.sub(replacement, text)

    return normalize_special_characters(text.strip())


def strip_tags(text: str) -> str:
    """Remove every inline tag, keeping the text between them."""
    return _TAG_RE.sub("", text)


def normalize_title(title: str) -> str:
    """Plain single-line title: no markup, no tags, whitespace collapsed."""
    text = strip_tags(normalize_markdown(title))
    return _WHITESPACE_RE.sub(" ", text).strip()
