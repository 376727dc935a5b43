#!/usr/bin/env python3
"""
OG Image Renderer - rasterizes image descriptions to 1200x630 PNGs.

Layout, top to bottom inside an 80px padding:
- title, wrapped to the content width
- optional poem excerpt, each display line wrapped on its own, <i> runs in
  the italic face
- footer row: subtitle on the left, site name on the right
Title and excerpt are centered vertically in the space above the footer.
"""

import re
import threading
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import requests
from PIL import Image, ImageDraw, ImageFont

from color_math import hex_to_rgb, rgb_to_hex
from config import FONT_CONFIG, FONT_FAMILIES, OG_IMAGE_CONFIG, SITE_TITLE, setup_logging
from og_image import FONT_WEIGHT_BOLD, FONT_WEIGHT_NORMAL, ImageDescription

logger = setup_logging("og_renderer")

Run = Tuple[str, bool]  # (text, italic)

BOLD_WEIGHTS = {"600", "700", FONT_WEIGHT_BOLD}

_ITALIC_TAG_RE = re.compile(r"(</?i>)")
_TOKEN_RE = re.compile(r"\s+|\S+")


class FontLoadFailure(RuntimeError):
    """A font file is missing or unreadable."""


class FontLibrary:
    """
    Font files for every configured family, handed out as Pillow fonts.

    File contents are read once and shared; Pillow font objects are cached
    per thread so workers never share a FreeType face.
    """

    def __init__(
        self,
        fonts_dir: Path,
        families: Optional[Dict[str, Dict[str, str]]] = None,
        default_family: str = FONT_CONFIG["family"],
    ):
        self.fonts_dir = Path(fonts_dir)
        self.families = families if families is not None else FONT_FAMILIES
        self.default_family = default_family
        self._data: Dict[Path, bytes] = {}
        self._lock = threading.Lock()
        self._local = threading.local()
        self._warned_families: set = set()

    def load(self) -> "FontLibrary":
        """Read every face of the default family; fail fast if one is missing."""
        faces = self.families.get(self.default_family)
        if not faces:
            raise FontLoadFailure(f"Default font family '{self.default_family}' is not configured")
        for filename in faces.values():
            self._read(self.fonts_dir / filename)
        return self

    def _read(self, path: Path) -> bytes:
        with self._lock:
            if path not in self._data:
                try:
                    self._data[path] = path.read_bytes()
                except OSError as e:
                    raise FontLoadFailure(f"Failed to load font {path}: {e}") from e
            return self._data[path]

    def face_path(self, family: str, weight: str, italic: bool = False) -> Path:
        """File for a family/weight/style, falling back to the default family."""
        faces = self.families.get(family)
        if not faces:
            if family not in self._warned_families:
                self._warned_families.add(family)
                logger.warning("Unknown font family '%s', using %s", family, self.default_family)
            faces = self.families[self.default_family]

        if italic:
            style = "italic"
        elif weight in BOLD_WEIGHTS:
            style = "bold"
        else:
            style = "regular"
        return self.fonts_dir / faces.get(style, faces["regular"])

    def font(self, family: str, weight: str, size: float, italic: bool = False):
        cache = getattr(self._local, "fonts", None)
        if cache is None:
            cache = self._local.fonts = {}

        path = self.face_path(family, weight, italic)
        key = (path, int(round(size)))
        if key not in cache:
            try:
                cache[key] = ImageFont.truetype(BytesIO(self._read(path)), key[1])
            except OSError as e:
                raise FontLoadFailure(f"Unreadable font {path}: {e}") from e
        return cache[key]


def fetch_missing_fonts(
    fonts_dir: Path,
    base_url: str,
    session: Optional[requests.Session] = None,
    families: Optional[Dict[str, Dict[str, str]]] = None,
    timeout: float = 15,
) -> List[Path]:
    """Download configured font files that are not present in fonts_dir."""
    fonts_dir = Path(fonts_dir)
    fonts_dir.mkdir(parents=True, exist_ok=True)
    session = session or requests.Session()
    families = families if families is not None else FONT_FAMILIES

    downloaded = []
    for faces in families.values():
        for filename in sorted(set(faces.values())):
            path = fonts_dir / filename
            if path.exists():
                continue

            url = f"{base_url.rstrip('/')}/{filename}"
            try:
                response = session.get(url, timeout=timeout)
                response.raise_for_status()
            except requests.exceptions.RequestException as e:
                raise FontLoadFailure(f"Failed to download font {url}: {e}") from e

            path.write_bytes(response.content)
            logger.info("Downloaded font %s", filename)
            downloaded.append(path)

    return downloaded


def parse_italic_runs(line: str) -> List[Run]:
    """Split a display line on <i>...</i> into (text, italic) runs."""
    runs: List[Run] = []
    italic = False
    for part in _ITALIC_TAG_RE.split(line):
        if part == "<i>":
            italic = True
        elif part == "</i>":
            italic = False
        elif part:
            runs.append((part, italic))
    return runs


def _append_run(row: List[Run], run: Run) -> None:
    if row and row[-1][1] == run[1]:
        row[-1] = (row[-1][0] + run[0], run[1])
    else:
        row.append(run)


def wrap_runs(runs: Sequence[Run], fonts: Dict[bool, object], max_width: float) -> List[List[Run]]:
    """
    Greedy word wrap over styled runs.

    Leading indentation of the first row is kept; whitespace at a wrap point
    is dropped. A word wider than max_width gets a row of its own.
    """
    rows: List[List[Run]] = []
    row: List[Run] = []
    row_width = 0.0
    pending: Optional[Run] = None

    for text, italic in runs:
        font = fonts[italic]
        for token in _TOKEN_RE.findall(text):
            if token.isspace():
                if row or not rows:
                    pending = (pending[0] + token, italic) if pending else (token, italic)
                continue

            width = font.getlength(token)
            space_width = fonts[pending[1]].getlength(pending[0]) if pending else 0.0
            if row and row_width + space_width + width > max_width:
                rows.append(row)
                row, row_width, pending, space_width = [], 0.0, None, 0.0

            if pending:
                _append_run(row, pending)
                row_width += space_width
                pending = None
            _append_run(row, (token, italic))
            row_width += width

    if row:
        rows.append(row)
    return rows


def _blend(foreground: str, background: str, opacity: float) -> str:
    fg = hex_to_rgb(foreground)
    bg = hex_to_rgb(background)
    return rgb_to_hex(*(int(f * opacity + b * (1 - opacity) + 0.5) for f, b in zip(fg, bg)))


def render_og_image(description: ImageDescription, fonts: FontLibrary) -> bytes:
    """Draw one description and return the PNG bytes."""
    cfg = OG_IMAGE_CONFIG
    width, height, padding = cfg["width"], cfg["height"], cfg["padding"]
    content_width = width - 2 * padding

    image = Image.new("RGB", (width, height), description.background_color)
    draw = ImageDraw.Draw(image)

    title_spec = description.title_font
    title_font = fonts.font(title_spec.family, title_spec.weight, title_spec.size)
    title_rows = wrap_runs([(description.title, False)], {False: title_font, True: title_font}, content_width)
    title_line_height = title_spec.size * cfg["line_height"]["title"]

    body_spec = description.body_font
    body_fonts = {
        False: fonts.font(body_spec.family, body_spec.weight, body_spec.size),
        True: fonts.font(body_spec.family, body_spec.weight, body_spec.size, italic=True),
    }
    body_rows: List[List[Run]] = []
    for line in description.body:
        if not line:
            body_rows.append([])
            continue
        body_rows.extend(wrap_runs(parse_italic_runs(line), body_fonts, content_width))
    body_line_height = body_spec.size * cfg["line_height"]["content"]

    subtitle_size = cfg["subtitle_font_size"]
    brand_size = cfg["brand_font_size"]
    footer_height = max(subtitle_size, brand_size) * cfg["line_height"]["title"]
    footer_top = height - padding - footer_height

    block_height = len(title_rows) * title_line_height
    if body_rows:
        block_height += cfg["margins"]["content"] + len(body_rows) * body_line_height
    available = footer_top - cfg["margins"]["footer"] - padding
    y = padding + max(0.0, (available - block_height) / 2)

    for row in title_rows:
        draw.text((padding, y), "".join(text for text, _ in row), font=title_font, fill=description.title_color)
        y += title_line_height

    if body_rows:
        y += cfg["margins"]["content"]
        for row in body_rows:
            x = float(padding)
            for text, italic in row:
                draw.text((x, y), text, font=body_fonts[italic], fill=description.text_color)
                x += body_fonts[italic].getlength(text)
            y += body_line_height

    family = FONT_CONFIG["family"]
    subtitle_font = fonts.font(family, FONT_WEIGHT_NORMAL, subtitle_size)
    brand_font = fonts.font(family, FONT_WEIGHT_BOLD, brand_size)
    subtitle_color = _blend(description.title_color, description.background_color, cfg["opacity"]["subtitle"])

    draw.text((padding, footer_top), description.subtitle, font=subtitle_font, fill=subtitle_color)
    # Bottom-align the smaller brand text with the subtitle
    brand_x = width - padding - brand_font.getlength(SITE_TITLE)
    draw.text((brand_x, footer_top + subtitle_size - brand_size), SITE_TITLE, font=brand_font, fill=description.title_color)

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
