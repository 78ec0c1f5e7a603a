"""
Pin image extraction from raw Pinterest page markup.

Six independent strategies are tried in a fixed priority order and the
first hit wins. Each strategy is a pure function from HTML text to an
optional URL. Tag lookups go through BeautifulSoup's html.parser; no
script is run, so a redesign of Pinterest's markup can defeat all of them.
Strategies 2 and 5 scan the raw text, since inline JSON and bare CDN links
are not attributes of any particular tag.

Strategy 5 ranks candidates by the `/{width}x/` path segment used by the
i.pinimg.com CDN (236x, 564x, 736x, ...). That convention is specific to
Pinterest; URLs without it rank as width 0.
"""

import html as html_lib
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Sequence

from bs4 import BeautifulSoup

from .errors import ExtractionError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png', 'webp', 'gif')
_EXT = '(?:' + '|'.join(IMAGE_EXTENSIONS) + ')'

# Any absolute URL whose path ends in an allowed image extension
IMAGE_URL_PATTERN = re.compile(
    r'^https?://[^\s"\'<>]+\.' + _EXT + r'(?:\?[^\s"\'<>]*)?$',
    re.IGNORECASE,
)

# A URL on the Pinterest image CDN with an allowed extension
PIN_IMAGE_URL_PATTERN = re.compile(
    r'^https?://[^"\s]*i\.pinimg\.com[^"\s]*\.' + _EXT + '$',
    re.IGNORECASE,
)
DATA_SRC_URL_PATTERN = re.compile(
    r'^https://i\.pinimg\.com/[^"]+\.' + _EXT + '$',
    re.IGNORECASE,
)

OG_IMAGE_KEY = re.compile(r'^og:image$', re.IGNORECASE)

JSON_IMAGE_PATTERN = re.compile(
    r'"image"\s*:\s*"([^"]*i\.pinimg\.com[^"]*\.' + _EXT + ')"',
    re.IGNORECASE,
)
CDN_URL_PATTERN = re.compile(
    r'https://i\.pinimg\.com/[^"\'\s]+\.' + _EXT,
    re.IGNORECASE,
)
WIDTH_PATTERN = re.compile(r'/(\d+)x')

# Obfuscated class-name fragments Pinterest puts on the main pin <img>
PIN_IMAGE_CLASS_MARKERS = ('PcK', 'QLY', 'Rym', 'XiG', 'ojN', 'p6V')
PIN_IMAGE_CLASS_PATTERN = re.compile('|'.join(PIN_IMAGE_CLASS_MARKERS))
PIN_IMAGE_TEST_ID = 'pin-image'
PIN_IMAGE_TEST_ID_PATTERN = re.compile(re.escape(PIN_IMAGE_TEST_ID))


@dataclass(frozen=True)
class ExtractionResult:
    """The winning image URL and the strategy that found it."""
    image_url: str
    strategy: str

    def __post_init__(self):
        if not self.image_url or not IMAGE_URL_PATTERN.match(self.image_url):
            raise ValueError(f'Not an image URL: {self.image_url!r}')


class Strategy(NamedTuple):
    name: str
    find: Callable[[str], Optional[str]]


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


def _clean_url(url: str) -> str:
    # JSON string escapes and HTML entities both show up in inline data
    return html_lib.unescape(url.replace('\\/', '/')).strip()


def find_meta_image(html: str) -> Optional[str]:
    """Strategy 1: the og:image meta tag."""
    soup = _soup(html)
    tags = soup.find_all('meta', attrs={'property': OG_IMAGE_KEY})
    tags += soup.find_all('meta', attrs={'name': OG_IMAGE_KEY})
    for tag in tags:
        content = (tag.get('content') or '').strip()
        if IMAGE_URL_PATTERN.match(content):
            return content
    return None


def find_structured_data_image(html: str) -> Optional[str]:
    """Strategy 2: an "image" field in JSON-LD or inline JSON."""
    match = JSON_IMAGE_PATTERN.search(html)
    if match:
        return _clean_url(match.group(1))
    return None


def find_class_marker_image(html: str) -> Optional[str]:
    """Strategy 3: <img> whose class carries a known pin-image marker."""
    img = _soup(html).find('img', class_=PIN_IMAGE_CLASS_PATTERN, src=PIN_IMAGE_URL_PATTERN)
    return img['src'] if img else None


def find_test_id_image(html: str) -> Optional[str]:
    """Strategy 4: <img data-testid="...pin-image...">."""
    img = _soup(html).find('img', attrs={
        'data-testid': PIN_IMAGE_TEST_ID_PATTERN,
        'src': PIN_IMAGE_URL_PATTERN,
    })
    return img['src'] if img else None


def url_width(url: str) -> int:
    """Width encoded in a CDN path like /736x/, or 0 when there is none."""
    match = WIDTH_PATTERN.search(url)
    return int(match.group(1)) if match else 0


def find_largest_image(html: str) -> Optional[str]:
    """Strategy 5: the widest CDN URL anywhere in the page."""
    candidates = [match.group(0) for match in CDN_URL_PATTERN.finditer(html)]
    if not candidates:
        return None
    # sorted() is stable, so equal widths keep page order
    return sorted(candidates, key=url_width, reverse=True)[0]


def find_lazy_load_image(html: str) -> Optional[str]:
    """Strategy 6: a deferred-loading data-src attribute."""
    tag = _soup(html).find(attrs={'data-src': DATA_SRC_URL_PATTERN})
    return tag['data-src'] if tag else None


# Priority order matters: earlier strategies are more reliable
STRATEGIES: List[Strategy] = [
    Strategy('meta_og_image', find_meta_image),
    Strategy('json_ld', find_structured_data_image),
    Strategy('class_marker', find_class_marker_image),
    Strategy('test_id', find_test_id_image),
    Strategy('largest_candidate', find_largest_image),
    Strategy('lazy_load', find_lazy_load_image),
]


def extract(html: str, strategies: Optional[Sequence[Strategy]] = None) -> ExtractionResult:
    """
    Locate the main pin image in a Pinterest page.

    Args:
        html: Raw page markup
        strategies: Override the default ordered strategy list

    Returns:
        ExtractionResult from the first strategy that matched

    Raises:
        ExtractionError: If no strategy found an image URL
    """
    for strategy in (STRATEGIES if strategies is None else strategies):
        url = strategy.find(html or '')
        if not url:
            continue
        if not IMAGE_URL_PATTERN.match(url):
            logger.debug("Skipping %s candidate without image extension: %s", strategy.name, url)
            continue
        logger.info("Image found by %s strategy: %s", strategy.name, url)
        return ExtractionResult(image_url=url, strategy=strategy.name)

    logger.debug("No image found. Page starts with: %s", (html or '')[:2000])
    raise ExtractionError('no image found')
