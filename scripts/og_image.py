#!/usr/bin/env python3
"""
OG Image Descriptions - resolves everything a share image needs.

A description is the fully resolved input for the rasterizer: plain title,
subtitle, body lines, three colors and the font family/weight/size for
title and body. Nothing in it is optional.

Three kinds of targets exist:
- poem: title, colors and fonts come from the poem, body is an excerpt
- page: title and subtitle come from the page, everything else is default
- home: fixed site title and description
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from color_math import adjust_luminance
from config import (
    AUTHOR_BYLINE,
    DEFAULT_COLORS,
    FONT_CONFIG,
    LUMINANCE_TARGETS,
    OG_IMAGE_CONFIG,
    SITE_DESCRIPTION,
    SITE_TITLE,
    setup_logging,
)
from content_normalizer import normalize_markdown, normalize_special_characters, normalize_title
from content_store import ContentStore, PageRecord, PoemRecord
from truncation import truncate_content

logger = setup_logging("og_image")

KIND_POEM = "poem"
KIND_PAGE = "page"
KIND_HOME = "home"

HOME_SLUG = "index"

FONT_WEIGHT_NORMAL = "normal"
FONT_WEIGHT_BOLD = "bold"

# Explicit weight tokens that are passed through; everything else is normal
FONT_WEIGHTS: Dict[str, str] = {
    "500": "500",
    "600": "600",
    "bold": FONT_WEIGHT_BOLD,
    "700": FONT_WEIGHT_BOLD,
}


@dataclass(frozen=True)
class FontSpec:
    """Resolved font for one text block."""
    family: str
    weight: str
    size: float


@dataclass(frozen=True)
class ImageDescription:
    """Renderer-ready content of one share image."""
    title: str
    subtitle: str
    body: Tuple[str, ...]
    title_color: str
    background_color: str
    text_color: str
    title_font: FontSpec
    body_font: FontSpec
    kind: str = KIND_HOME

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["body"] = list(self.body)
        return data


def resolve_font_weight(weight: Optional[str], default: str = FONT_WEIGHT_NORMAL) -> str:
    """Map a front matter weight token to a renderer weight."""
    if weight is None:
        return default
    return FONT_WEIGHTS.get(str(weight).strip().lower(), default)


def resolve_font_family(family: Optional[str]) -> str:
    return family.strip() if family and family.strip() else FONT_CONFIG["family"]


def resolve_title_font_size(title: str, multiplier: Optional[float] = None) -> float:
    """Long titles get the smaller base size, then the poem's multiplier."""
    sizes = OG_IMAGE_CONFIG["title_font_size"]
    base = sizes["small"] if len(title) > sizes["threshold"] else sizes["large"]
    return base * multiplier if multiplier else base


def resolve_body_font_size(multiplier: Optional[float] = None) -> float:
    base = OG_IMAGE_CONFIG["content_font_size"]
    return base * multiplier if multiplier else base


def build_excerpt(body: str, is_preformatted: bool) -> List[str]:
    """
    Poem body -> display lines for the image.

    Truncation cuts on line or word boundaries, which can split sequences
    the first normalization pass would have merged, so special characters
    are normalized again afterwards.
    """
    text = normalize_markdown(body)
    text = truncate_content(text, is_preformatted)
    text = normalize_special_characters(text)
    if not text:
        return []
    return text.split("\n")


def _default_fonts(title: str) -> Tuple[FontSpec, FontSpec]:
    family = FONT_CONFIG["family"]
    return (
        FontSpec(family, FONT_WEIGHT_BOLD, resolve_title_font_size(title)),
        FontSpec(family, FONT_WEIGHT_NORMAL, resolve_body_font_size()),
    )


def describe_home() -> ImageDescription:
    title_font, body_font = _default_fonts(SITE_TITLE)
    return ImageDescription(
        title=SITE_TITLE,
        subtitle=SITE_DESCRIPTION,
        body=(),
        title_color=DEFAULT_COLORS["title"],
        background_color=DEFAULT_COLORS["background"],
        text_color=DEFAULT_COLORS["text"],
        title_font=title_font,
        body_font=body_font,
        kind=KIND_HOME,
    )


def describe_page(page: PageRecord) -> ImageDescription:
    title_font, body_font = _default_fonts(page.title)
    return ImageDescription(
        title=page.title,
        subtitle=page.description or SITE_TITLE,
        body=(),
        title_color=DEFAULT_COLORS["title"],
        background_color=DEFAULT_COLORS["background"],
        text_color=DEFAULT_COLORS["text"],
        title_font=title_font,
        body_font=body_font,
        kind=KIND_PAGE,
    )


def describe_poem(poem: PoemRecord) -> ImageDescription:
    title = normalize_title(poem.title)
    base_color = poem.color.hex if poem.color else None

    title_color = poem.title_color or base_color or DEFAULT_COLORS["title"]
    if poem.background_color:
        background_color = poem.background_color
    elif base_color:
        background_color = adjust_luminance(base_color, LUMINANCE_TARGETS["background"])
    else:
        background_color = DEFAULT_COLORS["background"]
    if poem.text_color:
        text_color = poem.text_color
    elif base_color:
        text_color = adjust_luminance(base_color, LUMINANCE_TARGETS["text"])
    else:
        text_color = DEFAULT_COLORS["text"]

    return ImageDescription(
        title=title,
        subtitle=AUTHOR_BYLINE,
        body=tuple(build_excerpt(poem.body, poem.preformatted)),
        title_color=title_color,
        background_color=background_color,
        text_color=text_color,
        title_font=FontSpec(
            family=resolve_font_family(poem.title_font),
            weight=resolve_font_weight(poem.title_font_weight, default=FONT_WEIGHT_BOLD),
            size=resolve_title_font_size(title, poem.title_font_multiplier),
        ),
        body_font=FontSpec(
            family=resolve_font_family(poem.text_font),
            weight=resolve_font_weight(poem.text_font_weight),
            size=resolve_body_font_size(poem.text_font_multiplier),
        ),
        kind=KIND_POEM,
    )


def build_image_description(
    kind: str, entry: Union[PoemRecord, PageRecord, None] = None
) -> ImageDescription:
    """
    Description for one target. Unknown kinds, and kinds whose record is
    missing, get the home description.
    """
    if kind == KIND_POEM and isinstance(entry, PoemRecord):
        return describe_poem(entry)
    if kind == KIND_PAGE and isinstance(entry, PageRecord):
        return describe_page(entry)
    if kind != KIND_HOME:
        logger.warning("No %s record to describe, using the home image", kind)
    return describe_home()


@dataclass(frozen=True)
class OGTarget:
    """One share image to generate: og/<slug>.png."""
    slug: str
    kind: str
    entry: Union[PoemRecord, PageRecord, None] = field(default=None, compare=False)

    @property
    def filename(self) -> str:
        return f"{self.slug}.png"


def og_targets(store: ContentStore) -> List[OGTarget]:
    """Every share image the site needs: poems, pages, then home."""
    targets = [OGTarget(slug, KIND_POEM, poem) for slug, poem in store.poems.items()]
    targets.extend(OGTarget(slug, KIND_PAGE, page) for slug, page in store.pages.items())
    targets.append(OGTarget(HOME_SLUG, KIND_HOME))
    return targets


def resolve_og_target(store: ContentStore, kind: str, slug: str) -> ImageDescription:
    """Look up a record by kind and slug and describe it."""
    entry: Union[PoemRecord, PageRecord, None] = None
    if kind == KIND_POEM:
        entry = store.get_poem(slug)
    elif kind == KIND_PAGE:
        entry = store.get_page(slug)
    return build_image_description(kind, entry)
