#!/usr/bin/env python3
"""
Content Store - loads poems and pages from markdown files.

Layout:
    content/poems/<slug>.md
    content/pages/<slug>.md

Each file starts with a YAML front matter block fenced by '---' lines.
Records are validated once here; everything downstream trusts them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from color_math import InvalidColorFormat, hex_to_rgb, rgb_to_hex
from config import setup_logging

logger = setup_logging("content_store")

FRONT_MATTER_DELIMITER = "---"


class ContentValidationError(ValueError):
    """A content file is missing fields or has fields of the wrong type."""

    def __init__(self, message: str, source: Optional[Path] = None):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


def parse_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a markdown document into (front matter dict, body)."""
    clean = text.lstrip("\ufeff")
    lines = clean.splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return {}, clean

    for i in range(1, len(lines)):
        if lines[i].strip() == FRONT_MATTER_DELIMITER:
            raw = "\n".join(lines[1:i])
            body = "\n".join(lines[i + 1:])
            try:
                data = yaml.safe_load(raw)
            except yaml.YAMLError as e:
                raise ContentValidationError(f"Invalid front matter: {e}") from e
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise ContentValidationError("Front matter must be a mapping")
            return data, body.lstrip("\n")

    raise ContentValidationError("Unterminated front matter block")


# Field readers. Each raises ContentValidationError with the field name.

def _require(data: Dict[str, Any], key: str) -> Any:
    if data.get(key) is None:
        raise ContentValidationError(f"Missing required field '{key}'")
    return data[key]


def _string(data: Dict[str, Any], key: str, required: bool = False) -> Optional[str]:
    value = _require(data, key) if required else data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ContentValidationError(f"Field '{key}' must be a string")
    return str(value)


def _color(data: Dict[str, Any], key: str) -> Optional[str]:
    value = _string(data, key)
    if value is None:
        return None
    try:
        rgb = hex_to_rgb(value)
    except InvalidColorFormat as e:
        raise ContentValidationError(f"Field '{key}': {e}") from e
    # Stored as canonical "#rrggbb"
    return rgb_to_hex(*rgb)


def _multiplier(data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ContentValidationError(f"Field '{key}' must be a positive number")
    return float(value)


def _bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ContentValidationError(f"Field '{key}' must be true or false")
    return value


def _to_date(value: Any, key: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError as e:
            raise ContentValidationError(f"Field '{key}' is not an ISO date: {value!r}") from e
    raise ContentValidationError(f"Field '{key}' must be a date")


def _string_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ContentValidationError(f"Field '{key}' must be a list of strings")
    return list(value)


@dataclass(frozen=True)
class ColorInfo:
    """A poem's base color and where it came from."""
    hex: str
    name: str
    link: Optional[str] = None
    sampled_from: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ColorInfo":
        if not isinstance(data, dict):
            raise ContentValidationError("Field 'color' must be a mapping")
        _require(data, "hex")
        return cls(
            hex=_color(data, "hex"),
            name=_string(data, "name", required=True),
            link=_string(data, "link"),
            sampled_from=_string(data, "sampledFrom"),
        )


@dataclass(frozen=True)
class Publication:
    """A prior appearance of a poem elsewhere."""
    title: str
    link: str
    date: date

    @classmethod
    def from_dict(cls, data: Any) -> "Publication":
        if not isinstance(data, dict):
            raise ContentValidationError("Each publication must be a mapping")
        return cls(
            title=_string(data, "title", required=True),
            link=_string(data, "link", required=True),
            date=_to_date(_require(data, "date"), "date"),
        )


@dataclass(frozen=True)
class PoemRecord:
    """A poem as loaded from content/poems."""
    slug: str
    id: str
    title: str
    written: date
    published: date
    body: str = ""
    color: Optional[ColorInfo] = None
    title_font: Optional[str] = None
    title_font_multiplier: Optional[float] = None
    title_font_weight: Optional[str] = None
    text_font: Optional[str] = None
    text_font_multiplier: Optional[float] = None
    text_font_weight: Optional[str] = None
    sticker_font: Optional[str] = None
    sticker_font_size_multiplier: Optional[float] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    title_color: Optional[str] = None
    felt: Tuple[date, ...] = ()
    publications: Tuple[Publication, ...] = ()
    preformatted: bool = True
    ignores_dark_mode: bool = False
    tags: Tuple[str, ...] = ()

    @property
    def link(self) -> str:
        return f"/poem/{self.id}/"

    @classmethod
    def from_front_matter(cls, slug: str, data: Dict[str, Any], body: str) -> "PoemRecord":
        """Build a validated record from parsed front matter."""
        color = data.get("color")
        felt = data.get("felt")
        if felt is None:
            felt_dates: Tuple[date, ...] = ()
        elif isinstance(felt, list):
            felt_dates = tuple(_to_date(v, "felt") for v in felt)
        else:
            felt_dates = (_to_date(felt, "felt"),)

        publications = data.get("publications") or []
        if not isinstance(publications, list):
            raise ContentValidationError("Field 'publications' must be a list")

        return cls(
            slug=slug,
            id=_string(data, "id", required=True),
            title=_string(data, "title", required=True),
            written=_to_date(_require(data, "written"), "written"),
            published=_to_date(_require(data, "published"), "published"),
            body=body,
            color=ColorInfo.from_dict(color) if color is not None else None,
            title_font=_string(data, "titleFont"),
            title_font_multiplier=_multiplier(data, "titleFontMultiplier"),
            title_font_weight=_string(data, "titleFontWeight"),
            text_font=_string(data, "textFont"),
            text_font_multiplier=_multiplier(data, "textFontMultiplier"),
            text_font_weight=_string(data, "textFontWeight"),
            sticker_font=_string(data, "stickerFont"),
            sticker_font_size_multiplier=_multiplier(data, "stickerFontSizeMultiplier"),
            background_color=_color(data, "backgroundColor"),
            text_color=_color(data, "textColor"),
            title_color=_color(data, "titleColor"),
            felt=felt_dates,
            publications=tuple(Publication.from_dict(p) for p in publications),
            preformatted=_bool(data, "preformatted", True),
            ignores_dark_mode=_bool(data, "ignoresDarkMode", False),
            tags=tuple(_string_list(data, "tags")),
        )


@dataclass(frozen=True)
class PageRecord:
    """A standalone page as loaded from content/pages."""
    slug: str
    title: str
    description: str
    body: str = ""

    @property
    def link(self) -> str:
        return f"/{self.slug}/"

    @classmethod
    def from_front_matter(cls, slug: str, data: Dict[str, Any], body: str) -> "PageRecord":
        return cls(
            slug=slug,
            title=_string(data, "title", required=True),
            description=_string(data, "description", required=True),
            body=body,
        )


@dataclass
class ContentStore:
    """All poems and pages of the site, keyed by slug."""
    poems: Dict[str, PoemRecord] = field(default_factory=dict)
    pages: Dict[str, PageRecord] = field(default_factory=dict)
    errors: List[ContentValidationError] = field(default_factory=list)

    @classmethod
    def load(cls, content_dir: Path) -> "ContentStore":
        """
        Load every poem and page under content_dir.

        Invalid files are logged and collected in `errors`; the rest of the
        collection still loads.
        """
        store = cls()
        content_dir = Path(content_dir)

        for path in sorted((content_dir / "poems").glob("*.md")):
            poem = store._load_file(path, PoemRecord)
            if poem is not None:
                store.poems[poem.slug] = poem

        for path in sorted((content_dir / "pages").glob("*.md")):
            page = store._load_file(path, PageRecord)
            if page is not None:
                store.pages[page.slug] = page

        logger.info(
            "Loaded %s poems and %s pages from %s (%s invalid)",
            len(store.poems),
            len(store.pages),
            content_dir,
            len(store.errors),
        )
        return store

    def _load_file(self, path: Path, record_type):
        try:
            data, body = parse_front_matter(path.read_text(encoding="utf-8"))
            return record_type.from_front_matter(path.stem, data, body)
        except ContentValidationError as e:
            error = ContentValidationError(str(e), source=path)
        except OSError as e:
            error = ContentValidationError(f"Unreadable file: {e}", source=path)

        logger.warning("Skipping invalid content file: %s", error)
        self.errors.append(error)
        return None

    def get_poem(self, slug: str) -> Optional[PoemRecord]:
        return self.poems.get(slug)

    def get_page(self, slug: str) -> Optional[PageRecord]:
        return self.pages.get(slug)
