#!/usr/bin/env python3
"""
RSS Feed Generator - builds /rss.xml from the poem collection.

Each item carries the full poem as sanitized HTML in content:encoded.
"""

from datetime import datetime, time, timezone
from email.utils import format_datetime
from typing import Iterable, Optional
from urllib.parse import urlparse
import xml.etree.ElementTree as ET

import feedparser
import markdown
from bs4 import BeautifulSoup, Comment

from config import SITE_DESCRIPTION, SITE_LANGUAGE, SITE_TITLE, SITE_URL
from content_normalizer import normalize_special_characters, normalize_title
from content_store import PoemRecord

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
ET.register_namespace("content", CONTENT_NS)

ALLOWED_TAGS = {
    "address", "article", "aside", "footer", "header", "h1", "h2", "h3", "h4",
    "h5", "h6", "hgroup", "main", "nav", "section", "blockquote", "dd", "div",
    "dl", "dt", "figcaption", "figure", "hr", "li", "ol", "p", "pre", "ul",
    "a", "abbr", "b", "bdi", "bdo", "br", "cite", "code", "data", "dfn", "em",
    "i", "kbd", "mark", "q", "s", "samp", "small", "span", "strong", "sub",
    "sup", "time", "u", "var", "wbr", "caption", "col", "colgroup", "table",
    "tbody", "td", "tfoot", "th", "thead", "tr",
}

# Removed together with everything inside them
DROPPED_TAGS = ["script", "style", "iframe", "textarea", "option", "noscript", "object", "embed"]

ALLOWED_ATTRIBUTES = {
    "a": {"href", "name", "target"},
}

ALLOWED_SCHEMES = {"", "http", "https", "mailto", "tel"}


def _safe_href(href: str) -> bool:
    return urlparse(href.strip()).scheme.lower() in ALLOWED_SCHEMES


def sanitize_html(html: str) -> str:
    """Reduce rendered HTML to a safe allowlist of tags and attributes."""
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.find_all(DROPPED_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue

        allowed = ALLOWED_ATTRIBUTES.get(tag.name, set())
        for attr in list(tag.attrs):
            if attr not in allowed:
                del tag[attr]

        if tag.name == "a" and tag.has_attr("href") and not _safe_href(tag["href"]):
            del tag["href"]

    return str(soup)


def render_poem_html(poem: PoemRecord) -> str:
    """Poem body as sanitized HTML; verse keeps its line breaks."""
    extensions = ["nl2br"] if poem.preformatted else []
    html = markdown.markdown(normalize_special_characters(poem.body), extensions=extensions)
    return sanitize_html(html)


def _rfc822(day) -> str:
    return format_datetime(datetime.combine(day, time.min, tzinfo=timezone.utc), usegmt=True)


def generate_rss(
    poems: Iterable[PoemRecord],
    site_url: str = SITE_URL,
    build_date: Optional[datetime] = None,
) -> str:
    """
    Generate the RSS 2.0 feed for all poems, newest first.

    Args:
        poems: Poem records to include
        site_url: Absolute site URL used for channel and item links
        build_date: lastBuildDate of the channel (defaults to now)

    Returns:
        XML string for rss.xml
    """
    site_url = site_url.rstrip("/")
    build_date = build_date or datetime.now(timezone.utc)

    rss = ET.Element("rss")
    rss.set("version", "2.0")
    channel = ET.SubElement(rss, "channel")
    ET.SubElement(channel, "title").text = SITE_TITLE
    ET.SubElement(channel, "description").text = SITE_DESCRIPTION
    ET.SubElement(channel, "link").text = f"{site_url}/"
    ET.SubElement(channel, "language").text = SITE_LANGUAGE
    ET.SubElement(channel, "lastBuildDate").text = format_datetime(build_date.astimezone(timezone.utc), usegmt=True)

    ordered = sorted(poems, key=lambda poem: (poem.published, poem.id), reverse=True)
    for poem in ordered:
        link = f"{site_url}{poem.link}"
        item = ET.SubElement(channel, "item")
        ET.SubElement(item, "title").text = normalize_title(poem.title)
        ET.SubElement(item, "link").text = link
        guid = ET.SubElement(item, "guid")
        guid.set("isPermaLink", "true")
        guid.text = link
        ET.SubElement(item, "pubDate").text = _rfc822(poem.published)
        for tag in poem.tags:
            ET.SubElement(item, "category").text = tag
        ET.SubElement(item, f"{{{CONTENT_NS}}}encoded").text = render_poem_html(poem)

    ET.indent(rss, space="  ")

    xml_string = ET.tostring(rss, encoding="unicode", method="xml")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{xml_string}'


def count_feed_items(feed_xml: str) -> int:
    """Parse a generated feed back and count its entries."""
    parsed = feedparser.parse(feed_xml)
    return len(parsed.entries)
