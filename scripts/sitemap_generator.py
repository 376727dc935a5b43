#!/usr/bin/env python3
"""
Sitemap Generator Module - Generates XML sitemap and robots.txt.

Includes:
- Homepage and RSS feed
- Every standalone page
- Every poem, with its publish date as lastmod
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional
import xml.etree.ElementTree as ET

from config import SITE_URL, setup_logging
from content_store import PageRecord, PoemRecord

logger = setup_logging("sitemap_generator")

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def _add_url(urlset: ET.Element, loc: str, lastmod: str, changefreq: str, priority: str) -> None:
    url = ET.SubElement(urlset, "url")
    ET.SubElement(url, "loc").text = loc
    ET.SubElement(url, "lastmod").text = lastmod
    ET.SubElement(url, "changefreq").text = changefreq
    ET.SubElement(url, "priority").text = priority


def generate_sitemap(
    base_url: str = SITE_URL,
    poems: Optional[Iterable[PoemRecord]] = None,
    pages: Optional[Iterable[PageRecord]] = None,
) -> str:
    """
    Generate XML sitemap for the website.

    Args:
        base_url: Base URL of the website
        poems: Poem records, linked as /poem/<id>/
        pages: Page records, linked as /<slug>/

    Returns:
        XML string for sitemap.xml
    """
    base_url = base_url.rstrip("/")
    urlset = ET.Element("urlset")
    urlset.set("xmlns", SITEMAP_NS)

    today = datetime.now().strftime("%Y-%m-%d")

    _add_url(urlset, f"{base_url}/", today, "weekly", "1.0")
    _add_url(urlset, f"{base_url}/rss.xml", today, "weekly", "0.4")

    # Track added URLs to prevent duplicates
    added_urls = {f"{base_url}/", f"{base_url}/rss.xml"}

    for page in pages or []:
        loc = f"{base_url}{page.link}"
        if loc in added_urls:
            continue
        added_urls.add(loc)
        _add_url(urlset, loc, today, "monthly", "0.6")

    for poem in poems or []:
        loc = f"{base_url}{poem.link}"
        if loc in added_urls:
            logger.warning("Duplicate poem id '%s' (%s), keeping the first", poem.id, poem.slug)
            continue
        added_urls.add(loc)
        # Published poems don't change
        _add_url(urlset, loc, poem.published.isoformat(), "never", "0.8")

    ET.indent(urlset, space="  ")

    xml_string = ET.tostring(urlset, encoding="unicode", method="xml")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{xml_string}'


def generate_robots_txt(base_url: str = SITE_URL) -> str:
    """robots.txt allowing all crawlers and pointing at the sitemap."""
    return f"""# chromatographics robots.txt

User-agent: *
Allow: /

Sitemap: {base_url.rstrip('/')}/sitemap.xml
"""


def save_sitemap(
    public_dir: Path,
    base_url: str = SITE_URL,
    poems: Optional[Iterable[PoemRecord]] = None,
    pages: Optional[Iterable[PageRecord]] = None,
) -> List[Path]:
    """
    Save sitemap.xml and robots.txt to the public directory.

    Returns:
        Paths of the written files
    """
    public_dir = Path(public_dir)
    public_dir.mkdir(parents=True, exist_ok=True)

    sitemap_path = public_dir / "sitemap.xml"
    sitemap_path.write_text(generate_sitemap(base_url, poems, pages), encoding="utf-8")
    logger.info("Created %s", sitemap_path)

    robots_path = public_dir / "robots.txt"
    robots_path.write_text(generate_robots_txt(base_url), encoding="utf-8")
    logger.info("Created %s", robots_path)

    return [sitemap_path, robots_path]


def count_urls_in_sitemap(sitemap_path: Path) -> int:
    """
    Count the number of URLs in a sitemap.

    Args:
        sitemap_path: Path to sitemap.xml

    Returns:
        Number of URL entries
    """
    tree = ET.parse(sitemap_path)
    return len(tree.getroot().findall("sm:url", {"sm": SITEMAP_NS}))
