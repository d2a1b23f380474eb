"""
Configuration constants for the site spider.
"""

import re

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_OUTPUT = "output"
DEFAULT_MAX_DEPTH = 2
DEFAULT_RATE_LIMIT_MS = 1000   # pause after every task
DEFAULT_DOWNLOAD_IMAGES = True
DEFAULT_CAPTURE_SCREENSHOT = False

# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------
PROBE_TIMEOUT = 10             # seconds, HEAD status probe
IMAGE_TIMEOUT = 30             # seconds, image download
SITEMAP_TIMEOUT = 20           # seconds, sitemap and sitemap index download
RENDER_TIMEOUT_MS = 30_000     # headless browser navigation

# HEAD is refused by some servers; these answers fall back to a streamed GET
HEAD_FALLBACK_STATUS = frozenset({405, 501})

# Marker stored instead of a status code when no HTTP answer was received
STATUS_ERROR = "ERROR"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------
VIEWPORT = {"width": 1440, "height": 900}
RENDER_WAIT_UNTIL = "networkidle"
RENDER_SETTLE_MS = 2000        # pause after overlay dismissal
COOKIE_SELECTOR_TIMEOUT_MS = 5000
COOKIE_SETTLE_MS = 2000
SCROLL_STEP_PX = 100
SCROLL_INTERVAL_MS = 100
SCREENSHOT_SETTLE_MS = 2000
WEBP_QUALITY = 90

# ---------------------------------------------------------------------------
# Link classification
# ---------------------------------------------------------------------------
HTML_CONTENT_TYPES = frozenset({"text/html", "application/xhtml+xml"})

IMAGE_EXTENSIONS = (
    "jpg", "jpeg", "png", "gif", "svg", "webp", "bmp", "ico",
    "avif", "tif", "tiff",
)

_IMG_EXT_GROUP = "|".join(IMAGE_EXTENSIONS)

# photo.png, and disguised images such as photo.png.html
IMAGE_PATH_RE = re.compile(rf"\.(?:{_IMG_EXT_GROUP})(?:\.html?)?$", re.I)

# Query parameters whose *name* marks the URL as an image endpoint
IMAGE_QUERY_KEYS = frozenset({"img", "image"})

# Schemes a hyperlink may carry and still be crawled
CRAWLABLE_SCHEMES = frozenset({"http", "https"})

# Attributes rewritten to absolute URLs before the HTML is saved
REWRITE_ATTRS = ("src", "href")

# ---------------------------------------------------------------------------
# Report artifacts (written below the crawl output directory)
# ---------------------------------------------------------------------------
ALL_LINKS_FILE = "all-links.txt"
BROKEN_LINKS_FILE = "broken-links.txt"
INCOMING_LINKS_FILE = "incoming-links.json"
OUTGOING_LINKS_FILE = "outgoing-links.json"
SPIDER_REPORT_FILE = "spider-report.csv"
IMAGES_DIR = "images"
IMAGES_LIST_FILE = "images.txt"

# Nested sitemap indexes followed when seeding from a sitemap
SITEMAP_MAX_NESTING = 3

# WebP cannot encode images larger than this on either side
WEBP_MAX_DIMENSION = 16383

# Longest downloaded image file name kept (most file systems allow 255 bytes)
MAX_FILENAME_LENGTH = 120
