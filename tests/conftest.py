#!/usr/bin/env python3
"""Shared fixtures for the site build tests."""

import sys
import textwrap
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
SCRIPTS_DIR = ROOT / "scripts"
sys.path.insert(0, str(SCRIPTS_DIR))


ACCIDENTILY_MD = textwrap.dedent(
    """\
    ---
    id: accidentily
    title: accident(ily)
    color:
      hex: "#B60017"
      name: candy-apple-red
    written: 2023-02-11
    published: 2023-03-01
    tags: [phones, nightlife]
    ---
    one fifty-four
    is not the hour
    to send texts,
    no autocorrect

    risky confessions
    clipped affections
    """
)

OCEAN_MD = textwrap.dedent(
    """\
    ---
    id: atlantic-pacific
    title: "atlantic *pacific*"
    color:
      hex: "#2A3B4E"
      name: moonlit-ocean
    titleFontWeight: 700
    textFontMultiplier: 0.9
    written: 2022-11-02
    published: 2023-05-20
    publications:
      - title: Tide Review
        link: https://example.com/tide
        date: 2023-01-15
    ---
    i often wake three hours before
    your sunrise calls for a response
    """
)

ABOUT_MD = textwrap.dedent(
    """\
    ---
    title: about
    description: who writes these
    ---
    Some words about the author.
    """
)


@pytest.fixture
def temp_dir(tmp_path):
    """Per-test scratch directory."""
    return tmp_path


@pytest.fixture
def content_dir(tmp_path):
    """A small content tree with two poems and one page."""
    root = tmp_path / "content"
    (root / "poems").mkdir(parents=True)
    (root / "pages").mkdir(parents=True)
    (root / "poems" / "accidentily.md").write_text(ACCIDENTILY_MD, encoding="utf-8")
    (root / "poems" / "atlantic-pacific.md").write_text(OCEAN_MD, encoding="utf-8")
    (root / "pages" / "about.md").write_text(ABOUT_MD, encoding="utf-8")
    return root


@pytest.fixture
def make_poem():
    """Factory for poem records with sensible defaults."""
    from content_store import ColorInfo, PoemRecord

    def _make(**overrides):
        hex_color = overrides.pop("hex", "#B60017")
        fields = {
            "slug": overrides.get("id", "sample"),
            "id": "sample",
            "title": "sample",
            "written": date(2023, 1, 1),
            "published": date(2023, 2, 1),
            "body": "",
            "color": ColorInfo(hex=hex_color, name="sample") if hex_color else None,
        }
        fields.update(overrides)
        return PoemRecord(**fields)

    return _make


class StubFontLibrary:
    """Font library backed by Pillow's built-in font, no font files needed."""

    def __init__(self):
        from PIL import ImageFont

        self._font = ImageFont.load_default()
        self.requests = []

    def font(self, family, weight, size, italic=False):
        self.requests.append((family, weight, size, italic))
        return self._font


@pytest.fixture
def stub_fonts():
    return StubFontLibrary()
