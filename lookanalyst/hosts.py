"""
Host recognition for Pinterest pages and the Pinterest image CDN.
"""

import re
from urllib.parse import urlparse

PINTEREST_TLDS = [
    'com', 'co.uk', 'de', 'fr', 'it', 'es', 'nl', 'se', 'ch', 'co.in', 'br',
    'au', 'at', 'cl', 'jp', 'ru', 'ie', 'ca', 'mx', 'nz', 'pt', 'ph',
]

# Pin pages on any regional domain, or the pin.it shortlink
PINTEREST_URL_PATTERN = re.compile(
    r'^https://((\w+\.)?pinterest\.('
    + '|'.join(re.escape(tld) for tld in PINTEREST_TLDS)
    + r')/.+|pin\.it/.+)'
)

# Origin family served behind Pinterest bot protection
PINTEREST_HOST_PATTERN = re.compile(
    r'(^|\.)(pinimg\.com|pin\.it|pinterest\.('
    + '|'.join(re.escape(tld) for tld in PINTEREST_TLDS)
    + r'))$'
)


def is_pinterest_url(url: str) -> bool:
    """Check if URL is a Pinterest page or shortlink we can extract from."""
    if not url:
        return False
    return bool(PINTEREST_URL_PATTERN.match(url))


def is_pinterest_host(url: str) -> bool:
    """Check if URL points at pinterest.* or the pinimg.com CDN."""
    if not url:
        return False
    host = (urlparse(url).hostname or '').lower()
    return bool(PINTEREST_HOST_PATTERN.search(host))
