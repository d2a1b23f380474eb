"""
Seed list helpers: URL files and ignore-prefix filtering.
"""

from pathlib import Path
from typing import Iterable


def read_urls_from_file(path: Path) -> list[str]:
    """One URL per line; blank lines and ``#`` comments are skipped."""
    urls: list[str] = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


def filter_ignored(urls: Iterable[str], prefixes: Iterable[str]) -> list[str]:
    """Drop every URL that starts with one of *prefixes*."""
    prefixes = tuple(p for p in prefixes if p)
    if not prefixes:
        return list(urls)
    return [u for u in urls if not u.startswith(prefixes)]
