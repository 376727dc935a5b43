#!/usr/bin/env python3
"""
Configuration for the chromatographics static build.

Paths, site identity, OG image layout and font settings. Values that differ
between environments (site URL, font mirror, log level) can be overridden
through environment variables or a local .env file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONTENT_DIR = PROJECT_ROOT / "content"
PUBLIC_DIR = PROJECT_ROOT / "public"
FONTS_DIR = PUBLIC_DIR / "fonts"
DATA_DIR = PROJECT_ROOT / "data"

# Site identity
SITE_URL = os.getenv("SITE_URL", "https://chromatographics.net").rstrip("/")
SITE_TITLE = "chromatographics"
SITE_DESCRIPTION = "gay poems by mb bischoff"
AUTHOR_BYLINE = "by mb bischoff"
SITE_LANGUAGE = "en-us"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Social share image layout
OG_IMAGE_CONFIG: Dict = {
    "width": 1200,
    "height": 630,
    "padding": 80,
    "title_font_size": {
        "small": 64,
        "large": 72,
        "threshold": 30,
    },
    "content_font_size": 32,
    "subtitle_font_size": 28,
    "brand_font_size": 24,
    "line_height": {
        "title": 1.2,
        "content": 1.5,
    },
    "margins": {
        "content": 40,
        "footer": 40,
    },
    "opacity": {
        "subtitle": 0.8,
    },
}

DEFAULT_COLORS: Dict[str, str] = {
    "title": "#000000",
    "background": "#ffffff",
    "text": "#333333",
}

# Lightness used to derive a background/text pair from one title color
LUMINANCE_TARGETS: Dict[str, float] = {
    "background": 0.98,
    "text": 0.02,
}

FONT_CONFIG: Dict[str, str] = {
    "family": "Lacrima",
    "regular": "LacrimaMG-SerifRegular.otf",
    "bold": "LacrimaMG-SerifBold.otf",
    "italic": "LacrimaMG-ItalicRegular.otf",
}

# Family name -> font files for each face. The default family must exist.
FONT_FAMILIES: Dict[str, Dict[str, str]] = {
    FONT_CONFIG["family"]: {
        "regular": FONT_CONFIG["regular"],
        "bold": FONT_CONFIG["bold"],
        "italic": FONT_CONFIG["italic"],
    },
}

# Optional mirror for font files missing from FONTS_DIR
FONT_BASE_URL = os.getenv("FONT_BASE_URL", "")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(name: str) -> logging.Logger:
    """Return a module logger writing to stderr, configured once per name."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    return logger
