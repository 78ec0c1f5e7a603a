"""
Image acquisition pipelines shared by the HTTP functions.

Direct URL:     download (proxy on 403) -> StagedImage
Pinterest page: fetch page (proxy on 403) -> extract -> download (proxy on 403)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import IMAGE_TIMEOUT, PAGE_TIMEOUT, PIN_IMAGE_TIMEOUT
from .extractor import extract
from .fetcher import IMAGE_HEADERS, PAGE_HEADERS, USER_AGENT, build_headers, fetch
from .hosts import is_pinterest_url
from .proxy import ProxyPolicy, with_proxy_fallback
from .staging import StagedImage, TransientStorage

logger = logging.getLogger(__name__)

PROXY_HEADERS = {'User-Agent': USER_AGENT}


@dataclass(frozen=True)
class ExtractionRequest:
    """A Pinterest page to resolve into a pin image."""
    page_url: str

    def __post_init__(self):
        if not self.page_url:
            raise ValueError('Pinterest URL is required')
        if not is_pinterest_url(self.page_url):
            raise ValueError(f'Not a Pinterest URL: {self.page_url}')


def _stage_with_fallback(
    url: str,
    storage: TransientStorage,
    prefix: str,
    timeout: float,
) -> StagedImage:
    def attempt(target: str, policy: Optional[ProxyPolicy]) -> StagedImage:
        if policy is None:
            return storage.download(
                target, prefix=prefix, timeout=timeout,
                headers=build_headers(url, IMAGE_HEADERS),
            )
        return storage.download(
            target, prefix='proxy-image', timeout=policy.timeout, headers=PROXY_HEADERS,
        )

    staged = with_proxy_fallback(url, attempt)
    staged.source_url = url
    return staged


def download_image(url: str, storage: TransientStorage) -> StagedImage:
    """Stage an image given its direct URL."""
    if not url:
        raise ValueError('Image URL is required')
    return _stage_with_fallback(url, storage, prefix='url-image', timeout=IMAGE_TIMEOUT)


def fetch_pin_page(page_url: str) -> str:
    """Fetch a pin page's HTML, going through the proxy if Pinterest refuses."""
    def attempt(target: str, policy: Optional[ProxyPolicy]) -> str:
        if policy is None:
            return fetch(target, headers=build_headers(page_url, PAGE_HEADERS), timeout=PAGE_TIMEOUT).text
        return fetch(target, headers=PROXY_HEADERS, timeout=policy.timeout).text

    return with_proxy_fallback(page_url, attempt)


def resolve_pin_image(page_url: str, storage: TransientStorage) -> StagedImage:
    """
    Resolve a Pinterest page to its main image and stage it.

    Raises:
        ValueError: page_url is empty or not a Pinterest URL
        NetworkError, ProxyError: page or image could not be fetched
        ExtractionError: no strategy found an image in the page
        InvalidContentError: the resolved URL did not serve an image
    """
    request = ExtractionRequest(page_url)
    html = fetch_pin_page(request.page_url)
    result = extract(html)

    staged = _stage_with_fallback(
        result.image_url, storage, prefix='pinterest', timeout=PIN_IMAGE_TIMEOUT,
    )
    staged.strategy = result.strategy
    logger.info("Staged pin image from %s at %s", request.page_url, staged.path)
    return staged
