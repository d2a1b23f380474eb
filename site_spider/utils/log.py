"""
Logging setup for the spider.

Console lines carry ``colorlog`` level colours plus an ANSI highlight
for the ``[CATEGORY]`` tag each message starts with (``[CRAWL]``,
``[BROKEN]``, ``[SAVE]`` …).  Console output goes through
``tqdm.write`` so it never tears the progress bar.  Under GitHub
Actions, warnings and errors become ``::warning::`` / ``::error::``
annotations and the crawl is folded into a ``::group::``.
"""

import logging
import os
from pathlib import Path

import colorlog
from tqdm import tqdm

log = logging.getLogger("site-spider")

_CONSOLE_FMT = "%(asctime)s [%(levelname)s] %(message)s"
_CONSOLE_DATEFMT = "%H:%M:%S"
_FILE_FMT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LEVEL_COLOURS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

# Third-party loggers that are only interesting with --debug
_NOISY_LOGGERS = ("urllib3", "PIL", "asyncio")

_CI: bool = os.environ.get("GITHUB_ACTIONS") == "true"

_RESET = "\033[0m"
_TAG_COLOURS: dict[str, str] = {
    "[CRAWL]": "\033[1;34m",
    "[PROBE]": "\033[90m",
    "[BROKEN]": "\033[1;31m",
    "[LEAF]": "\033[33m",
    "[RENDER]": "\033[36m",
    "[SAVE]": "\033[1;32m",
    "[IMG]": "\033[32m",
    "[SHOT]": "\033[1;35m",
    "[COOKIE]": "\033[35m",
    "[QUEUE]": "\033[37m",
    "[SKIP]": "\033[90m",
    "[ERR]": "\033[1;31m",
    "[REPORT]": "\033[1;36m",
}


def highlight_tags(msg: str) -> str:
    """Wrap every known ``[CATEGORY]`` tag in *msg* in its ANSI colour."""
    for tag, colour in _TAG_COLOURS.items():
        if tag in msg:
            msg = msg.replace(tag, f"{colour}{tag}{_RESET}")
    return msg


def ci_group(title: str) -> None:
    """Open a collapsible log group in GitHub Actions (no-op elsewhere)."""
    if _CI:
        tqdm.write(f"::group::{title}")


def ci_endgroup() -> None:
    if _CI:
        tqdm.write("::endgroup::")


class _TqdmHandler(logging.StreamHandler):
    """Stream handler that prints through ``tqdm.write``."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
            self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


class _TaggedColourFormatter(colorlog.ColoredFormatter):
    def format(self, record: logging.LogRecord) -> str:
        return highlight_tags(super().format(record))


class _ActionsFormatter(logging.Formatter):
    """Prefixes warnings and errors with GitHub workflow commands."""

    _COMMANDS = {
        logging.WARNING: "::warning::",
        logging.ERROR: "::error::",
        logging.CRITICAL: "::error::",
    }

    def format(self, record: logging.LogRecord) -> str:
        text = highlight_tags(super().format(record))
        return self._COMMANDS.get(record.levelno, "") + text


def _console_handler() -> logging.Handler:
    handler = _TqdmHandler()
    if _CI:
        handler.setFormatter(_ActionsFormatter(_CONSOLE_FMT, datefmt=_CONSOLE_DATEFMT))
    else:
        handler.setFormatter(_TaggedColourFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s %(message)s",
            datefmt=_CONSOLE_DATEFMT,
            log_colors=_LEVEL_COLOURS,
        ))
    return handler


def setup_logging(debug: bool = False, log_file: str | None = None) -> None:
    """Configure the ``site-spider`` logger.

    Parameters
    ----------
    debug : bool
        Log at DEBUG level and let third-party loggers through.
    log_file : str | None
        Also write records to this file, without colours.
    """
    log.setLevel(logging.DEBUG if debug else logging.INFO)
    log.handlers.clear()
    log.propagate = False
    log.addHandler(_console_handler())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
        log.addHandler(file_handler)
        log.info("Logging to file: %s", path.resolve())
