"""
File storage helpers – writing artifacts below the output root.
"""

from pathlib import Path

from site_spider.config import MAX_FILENAME_LENGTH
from site_spider.errors import FatalCrawlError, FilesystemError
from site_spider.utils.log import log
from site_spider.utils.url import sanitize_segment


def save_file(local_path: Path, content: bytes) -> None:
    """Write *content* to *local_path*, creating parent directories."""
    # a NUL byte in the path raises ValueError, not OSError
    try:
        local_path.parent.mkdir(parents=True, exist_ok=True)
        local_path.write_bytes(content)
    except (OSError, ValueError) as exc:
        raise FilesystemError(f"cannot write {local_path}: {exc}") from exc
    log.debug("Saved → %s (%d bytes)", local_path, len(content))


def save_text(local_path: Path, text: str) -> None:
    """UTF-8 variant of :func:`save_file`."""
    save_file(local_path, text.encode("utf-8"))


def ensure_output_root(output_dir: Path) -> Path:
    """Create the crawl's output directory.

    Failure here means nothing can be archived, so it is fatal.
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FatalCrawlError(
            f"cannot create output directory {output_dir}: {exc}"
        ) from exc
    return output_dir


def safe_filename(
    name: str,
    fallback: str,
    tag: str | None = None,
    max_length: int = MAX_FILENAME_LENGTH,
) -> str:
    """Strip any directory part from *name* and replace characters that
    are unsafe in a file name; use *fallback* if nothing usable remains.

    *tag* is appended to the stem (``logo.png`` → ``logo__<tag>.png``)
    and survives the *max_length* cut.
    """
    name = Path(name.replace("\\", "/")).name
    if name in ("", ".", ".."):
        name = fallback
    stem, suffix = _split_suffix(sanitize_segment(name))
    if tag:
        suffix = f"__{tag}{suffix}"
    return stem[:max(max_length - len(suffix), 1)] + suffix


def _split_suffix(name: str) -> tuple[str, str]:
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or len(ext) > 8:
        return name, ""
    return stem, "." + ext
