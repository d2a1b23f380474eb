"""
Command-line interface for the site spider.
"""

import argparse
import sys
import time
from datetime import date
from pathlib import Path

import urllib3

from site_spider.config import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_OUTPUT,
    DEFAULT_RATE_LIMIT_MS,
    RENDER_TIMEOUT_MS,
)
from site_spider.core.crawler import crawl
from site_spider.errors import FatalCrawlError
from site_spider.extraction.seeds import filter_ignored, read_urls_from_file
from site_spider.extraction.sitemap import fetch_sitemap_urls
from site_spider.render.cookies import load_cookie_selectors
from site_spider.session import build_session
from site_spider.utils.log import ci_endgroup, ci_group, log, setup_logging
from site_spider.utils.url import host_of, sanitize_segment


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Site spider – renders every page of a web site in a "
                    "headless browser and archives it with link reports.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m site_spider https://example.com\n"
            "  python -m site_spider https://example.com --depth 3 --screenshot\n"
            "  python -m site_spider --file urls.txt --depth 0\n"
            "  python -m site_spider --sitemap https://example.com/sitemap.xml "
            "--ignore https://example.com/blog/\n"
        ),
    )
    parser.add_argument(
        "urls", nargs="*", metavar="URL",
        help="Seed URL(s); all must be on the same host as the first",
    )
    parser.add_argument(
        "--file", type=Path, metavar="PATH",
        help="Read seed URLs from a file (one per line, # for comments)",
    )
    parser.add_argument(
        "--sitemap", metavar="URL",
        help="Read seed URLs from a sitemap or sitemap index",
    )
    parser.add_argument(
        "--ignore", default="", metavar="PREFIXES",
        help="Comma-separated URL prefixes to drop from the seed list",
    )
    parser.add_argument(
        "--depth", type=int, default=DEFAULT_MAX_DEPTH,
        help=f"Maximum link depth from the seeds (0 = seeds only, default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--rate-limit", type=int, default=DEFAULT_RATE_LIMIT_MS, metavar="MS",
        help=f"Pause between page fetches in milliseconds (default: {DEFAULT_RATE_LIMIT_MS})",
    )
    parser.add_argument(
        "--no-images", dest="download_images", action="store_false", default=True,
        help="List page images but do not download them",
    )
    parser.add_argument(
        "--screenshot", action="store_true", default=False,
        help="Save a full-page WebP screenshot of every page",
    )
    parser.add_argument(
        "--output", type=Path,
        help=f"Output directory (default: {DEFAULT_OUTPUT}/<host>/<dd-mm-yyyy>)",
    )
    parser.add_argument(
        "--cookie-config", type=Path, metavar="PATH",
        help="JSON file mapping host → cookie banner selectors",
    )
    parser.add_argument(
        "--render-timeout", type=int, default=RENDER_TIMEOUT_MS, metavar="MS",
        help=f"Page load timeout in milliseconds (default: {RENDER_TIMEOUT_MS})",
    )
    parser.add_argument(
        "--no-verify-ssl", dest="verify_ssl", action="store_false", default=True,
        help="Disable TLS certificate verification",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable verbose debug logging",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file (without colours)",
    )
    args = parser.parse_args(argv)
    if not (args.urls or args.file or args.sitemap):
        parser.error("give at least one URL, --file or --sitemap")
    if args.depth < 0:
        parser.error("--depth must be >= 0")
    if args.rate_limit < 0:
        parser.error("--rate-limit must be >= 0")
    return args


def _with_scheme(url: str) -> str:
    if not url.startswith(("http://", "https://")):
        return "https://" + url
    return url


def default_output_dir(seed_url: str, today: date | None = None) -> Path:
    """``output/<host>/<dd-mm-yyyy>``; a re-run on the same day overwrites."""
    host = sanitize_segment(host_of(seed_url)) or "unknown_host"
    stamp = (today or date.today()).strftime("%d-%m-%Y")
    return Path(DEFAULT_OUTPUT) / host / stamp


def collect_seeds(args: argparse.Namespace, session) -> list[str]:
    seeds = [_with_scheme(u) for u in args.urls]
    if args.file:
        seeds.extend(_with_scheme(u) for u in read_urls_from_file(args.file))
    if args.sitemap:
        seeds.extend(fetch_sitemap_urls(session, _with_scheme(args.sitemap)))

    ignore = [p.strip() for p in args.ignore.split(",") if p.strip()]
    if ignore:
        kept = filter_ignored(seeds, ignore)
        log.info("Ignore list dropped %d seed(s)", len(seeds) - len(kept))
        seeds = kept
    return seeds


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_file=args.log_file)

    if not args.verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        log.warning("TLS certificate verification is DISABLED (--no-verify-ssl)")

    cookie_selectors = None
    if args.cookie_config:
        try:
            cookie_selectors = load_cookie_selectors(args.cookie_config)
        except (OSError, ValueError) as exc:
            log.error("Cannot load cookie config %s: %s", args.cookie_config, exc)
            sys.exit(1)
        log.info("Loaded cookie banner selectors for %d host(s)", len(cookie_selectors))

    session = build_session(verify_ssl=args.verify_ssl)

    try:
        seeds = collect_seeds(args, session)
    except OSError as exc:
        log.error("Cannot read seed file %s: %s", args.file, exc)
        sys.exit(1)
    if not seeds:
        log.error("No seed URLs to crawl")
        sys.exit(1)

    output_dir = args.output or default_output_dir(seeds[0])

    t0 = time.monotonic()
    ci_group(f"Crawl {host_of(seeds[0])}")
    try:
        crawl(
            seeds,
            max_depth=args.depth,
            rate_limit_ms=args.rate_limit,
            download_images=args.download_images,
            capture_screenshot=args.screenshot,
            output_dir=output_dir,
            session=session,
            cookie_selectors=cookie_selectors,
            render_timeout_ms=args.render_timeout,
        )
    except FatalCrawlError as exc:
        log.error("Crawl aborted: %s", exc)
        sys.exit(1)
    finally:
        ci_endgroup()
    elapsed = time.monotonic() - t0
    log.info("Total elapsed time: %.1f s", elapsed)


if __name__ == "__main__":
    main()
