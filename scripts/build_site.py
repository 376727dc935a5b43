#!/usr/bin/env python3
"""
Site Builder - generates the build-time artifacts of the poetry site.

Outputs (under the public directory):
- og/<slug>.png for every poem and page, og/index.png for the home page
- rss.xml
- sitemap.xml and robots.txt
- poems.json, the poem listing in spectrum order

Each artifact is built in isolation: a failure is recorded in the build
report and the remaining artifacts are still produced.
"""

from __future__ import annotations

import argparse
import json
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from build_report import STATUS_FAILED, STATUS_SKIPPED, ArtifactResult, BuildReport
from color_math import sort_poems_by_spectrum
from config import CONTENT_DIR, DATA_DIR, FONT_BASE_URL, FONTS_DIR, PUBLIC_DIR, SITE_URL, setup_logging
from content_store import ContentStore, PoemRecord
from og_image import OGTarget, build_image_description, og_targets
from og_renderer import FontLibrary, FontLoadFailure, fetch_missing_fonts, render_og_image
from rss_feed import count_feed_items, generate_rss
from sitemap_generator import count_urls_in_sitemap, save_sitemap

logger = setup_logging("build_site")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def render_target(target: OGTarget, fonts: FontLibrary, og_dir: Path) -> ArtifactResult:
    """Describe, rasterize and save one share image."""
    name = f"og/{target.filename}"
    started = time.perf_counter()
    try:
        description = build_image_description(target.kind, target.entry)
        path = og_dir / target.filename
        path.write_bytes(render_og_image(description, fonts))
    except Exception as e:
        logger.error("Failed to generate %s: %s", name, e)
        return ArtifactResult(name=name, status=STATUS_FAILED, duration_ms=_elapsed_ms(started), error=str(e))

    return ArtifactResult(
        name=name,
        duration_ms=_elapsed_ms(started),
        path=str(path),
        metadata={"kind": target.kind},
    )


def build_og_images(
    targets: List[OGTarget],
    output_dir: Path,
    fonts_dir: Path = FONTS_DIR,
    workers: int = 4,
    fonts: Optional[FontLibrary] = None,
) -> List[ArtifactResult]:
    """Render all share images in parallel; one failure never stops the rest."""
    og_dir = Path(output_dir) / "og"
    og_dir.mkdir(parents=True, exist_ok=True)

    if fonts is None:
        try:
            fonts = FontLibrary(fonts_dir).load()
        except FontLoadFailure as e:
            logger.error("Cannot render share images: %s", e)
            return [
                ArtifactResult(name=f"og/{t.filename}", status=STATUS_FAILED, error=str(e))
                for t in targets
            ]

    results: List[ArtifactResult] = []
    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = {executor.submit(render_target, target, fonts, og_dir): target for target in targets}
        for future in as_completed(futures):
            results.append(future.result())

    results.sort(key=lambda result: result.name)
    return results


def build_poem_index(poems: Iterable[PoemRecord]) -> List[Dict]:
    """Listing data for the index page, red through violet. Colorless poems are left out."""
    return [
        {
            "id": poem.id,
            "slug": poem.slug,
            "title": poem.title,
            "color": {"hex": poem.color.hex, "name": poem.color.name},
            "link": poem.link,
        }
        for poem in sort_poems_by_spectrum(poems)
    ]


def _build_artifact(report: BuildReport, name: str, build: Callable[[], Path]) -> Optional[Path]:
    started = time.perf_counter()
    try:
        path = build()
    except Exception as e:
        logger.error("Failed to generate %s: %s", name, e)
        report.record(ArtifactResult(name=name, status=STATUS_FAILED, duration_ms=_elapsed_ms(started), error=str(e)))
        return None

    report.record(ArtifactResult(name=name, duration_ms=_elapsed_ms(started), path=str(path)))
    return path


def run_build(
    content_dir: Path = CONTENT_DIR,
    output_dir: Path = PUBLIC_DIR,
    fonts_dir: Path = FONTS_DIR,
    site_url: str = SITE_URL,
    workers: int = 4,
    skip_images: bool = False,
    font_base_url: str = "",
    fonts: Optional[FontLibrary] = None,
) -> BuildReport:
    """Load content and generate every artifact; returns the filled-in report."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    report = BuildReport()
    report.start({"content_dir": str(content_dir), "output_dir": str(output_dir), "site_url": site_url})

    store = ContentStore.load(content_dir)
    report.set_counter("poems", len(store.poems))
    report.set_counter("pages", len(store.pages))
    report.set_counter("content_errors", len(store.errors))
    for error in store.errors:
        report.record(ArtifactResult(name=str(error.source), status=STATUS_FAILED, error=str(error)))

    targets = og_targets(store)
    if skip_images:
        for target in targets:
            report.record(ArtifactResult(name=f"og/{target.filename}", status=STATUS_SKIPPED))
    else:
        if font_base_url and fonts is None:
            try:
                fetch_missing_fonts(fonts_dir, font_base_url)
            except FontLoadFailure as e:
                logger.error("Font download failed: %s", e)
        for result in build_og_images(targets, output_dir, fonts_dir, workers, fonts):
            report.record(result)
            report.increment_counter("images_failed" if result.status == STATUS_FAILED else "images_built")

    poems = list(store.poems.values())

    def write_feed() -> Path:
        feed_xml = generate_rss(poems, site_url)
        path = output_dir / "rss.xml"
        path.write_text(feed_xml, encoding="utf-8")
        logger.info("Created %s with %s items", path, count_feed_items(feed_xml))
        return path

    def write_sitemap() -> Path:
        sitemap_path, _ = save_sitemap(output_dir, site_url, poems, store.pages.values())
        logger.info("Sitemap lists %s URLs", count_urls_in_sitemap(sitemap_path))
        return sitemap_path

    def write_index() -> Path:
        path = output_dir / "poems.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(build_poem_index(poems), f, indent=2, ensure_ascii=False)
        logger.info("Created %s", path)
        return path

    _build_artifact(report, "rss.xml", write_feed)
    _build_artifact(report, "sitemap.xml", write_sitemap)
    _build_artifact(report, "poems.json", write_index)

    return report


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the static artifacts of the poetry site")
    parser.add_argument(
        "--content-dir",
        type=Path,
        default=CONTENT_DIR,
        help="Directory holding poems/ and pages/ (default: content/)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=PUBLIC_DIR,
        help="Public output directory (default: public/)",
    )
    parser.add_argument(
        "--fonts-dir",
        type=Path,
        default=FONTS_DIR,
        help="Directory with the font files (default: public/fonts)",
    )
    parser.add_argument(
        "--site-url",
        default=SITE_URL,
        help="Absolute site URL used in feed and sitemap links",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=4,
        help="Parallel image workers",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=DATA_DIR / "build_report.json",
        help="Build report JSON path (default: data/build_report.json)",
    )
    parser.add_argument(
        "--skip-images",
        action="store_true",
        help="Do not render share images",
    )
    parser.add_argument(
        "--fetch-fonts",
        action="store_true",
        help="Download missing font files from FONT_BASE_URL first",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.fetch_fonts and not FONT_BASE_URL:
        logger.warning("--fetch-fonts given but FONT_BASE_URL is not set")

    report = run_build(
        content_dir=args.content_dir,
        output_dir=args.output_dir,
        fonts_dir=args.fonts_dir,
        site_url=args.site_url,
        workers=args.workers,
        skip_images=args.skip_images,
        font_base_url=FONT_BASE_URL if args.fetch_fonts else "",
    )
    report_path = report.finalize(args.report)

    logger.info(
        "Build finished: %s artifacts, %s failed",
        len(report.artifacts),
        len(report.failures),
    )
    logger.info("Saved build report to %s", report_path)

    return 0 if report.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
