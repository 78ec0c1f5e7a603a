"""
HTTP retrieval with browser-like headers.

Pinterest rejects obvious bots, so every request carries a realistic
Chrome header set. Hosts from the Pinterest family additionally get the
Referer/Origin their own web client sends.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

import requests

from .config import MAX_REDIRECTS, PAGE_TIMEOUT
from .errors import NetworkError
from .hosts import is_pinterest_host

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'

# Top-level navigation, used for HTML pages
PAGE_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7',
    'Accept-Language': 'en-US,en;q=0.9',
    'Accept-Encoding': 'gzip, deflate',
    'DNT': '1',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
    'Sec-Fetch-Dest': 'document',
    'Sec-Fetch-Mode': 'navigate',
    'Sec-Fetch-Site': 'none',
    'Sec-Fetch-User': '?1',
    'Cache-Control': 'max-age=0',
    'sec-ch-ua': '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    'sec-ch-ua-mobile': '?0',
    'sec-ch-ua-platform': '"Windows"',
}

# Cross-site <img> subresource requests
IMAGE_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9,es;q=0.8',
    'Accept-Encoding': 'gzip, deflate',
    'DNT': '1',
    'Connection': 'keep-alive',
    'Sec-Fetch-Dest': 'image',
    'Sec-Fetch-Mode': 'no-cors',
    'Sec-Fetch-Site': 'cross-site',
    'Cache-Control': 'no-cache',
    'Pragma': 'no-cache',
}

# Hosts behind bot protection and the headers their own client sends
PROTECTED_HOST_HEADERS: List[Tuple[Callable[[str], bool], Dict[str, str]]] = [
    (is_pinterest_host, {
        'Referer': 'https://www.pinterest.com/',
        'Origin': 'https://www.pinterest.com',
    }),
]


@dataclass
class FetchedResource:
    """Body and metadata of a completed fetch."""
    url: str
    status_code: int
    content: bytes
    content_type: Optional[str] = None
    encoding: Optional[str] = None

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or 'utf-8', errors='replace')


def build_headers(url: str, base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Return the header set for URL, adding Referer/Origin for protected hosts."""
    headers = dict(base if base is not None else PAGE_HEADERS)
    for matches, extra in PROTECTED_HOST_HEADERS:
        if matches(url):
            headers.update(extra)
    return headers


@contextmanager
def open_url(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = PAGE_TIMEOUT,
    stream: bool = True,
) -> Iterator[requests.Response]:
    """
    Open URL and yield the response, closing it on exit.

    Follows up to MAX_REDIRECTS redirects. Any 2xx or 3xx final status is
    accepted; payload checks belong to the caller.

    Raises:
        NetworkError: On timeout, connection failure, too many redirects or
            a terminal 4xx/5xx status (status_code is set in that case).
    """
    session = requests.Session()
    session.max_redirects = MAX_REDIRECTS
    try:
        try:
            response = session.get(
                url,
                headers=headers if headers is not None else build_headers(url),
                timeout=timeout,
                allow_redirects=True,
                stream=stream,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(f'Request timed out: {url}', url=url) from e
        except requests.exceptions.TooManyRedirects as e:
            raise NetworkError(f'Too many redirects: {url}', url=url) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f'Request failed: {e}', url=url) from e

        try:
            if not 200 <= response.status_code < 400:
                raise NetworkError(
                    f'HTTP error: {response.status_code}',
                    url=url,
                    status_code=response.status_code,
                )
            yield response
        finally:
            response.close()
    finally:
        session.close()


def fetch(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = PAGE_TIMEOUT,
) -> FetchedResource:
    """Fetch URL fully into memory."""
    with open_url(url, headers=headers, timeout=timeout, stream=False) as response:
        try:
            content = response.content
        except requests.exceptions.RequestException as e:
            raise NetworkError(f'Failed reading response body: {e}', url=url) from e

        content_type = response.headers.get('Content-Type')
        # No charset header means UTF-8, not the ISO-8859-1 default of requests
        encoding = response.encoding if 'charset=' in (content_type or '').lower() else None

        logger.debug("Fetched %s (%s, %d bytes)", url, response.status_code, len(content))
        return FetchedResource(
            url=response.url or url,
            status_code=response.status_code,
            content=content,
            content_type=content_type,
            encoding=encoding,
        )
