"""Utility helpers for URL normalisation, output paths and logging."""

from site_spider.utils.url import (
    OutputLocation,
    host_of,
    normalize_url,
    output_location,
    sanitize_segment,
)
from site_spider.utils.log import setup_logging, log

__all__ = [
    "OutputLocation",
    "host_of",
    "normalize_url",
    "output_location",
    "sanitize_segment",
    "setup_logging",
    "log",
]
