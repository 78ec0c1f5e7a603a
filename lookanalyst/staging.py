"""
Transient storage for images awaiting analysis.

Every staged file is owned by a StagedImage that deletes it exactly once,
on release() or when its `with` block exits. Names combine a millisecond
timestamp with a random suffix; there is no locking between requests.
"""

import logging
import os
import random
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from .config import IMAGE_TIMEOUT, UPLOAD_DIR
from .errors import InvalidContentError, NetworkError, UploadTooLargeError
from .fetcher import IMAGE_HEADERS, build_headers, open_url

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# Accepted as image/* but rejected by Gemini
UNSUPPORTED_UPLOAD_TYPES = {'image/avif'}


def image_mime_type(content_type: Optional[str]) -> str:
    """
    Validate a Content-Type header and return its bare media type.

    Raises:
        InvalidContentError: If the header is missing or not image/*.
    """
    mime_type = (content_type or '').split(';')[0].strip().lower()
    if not mime_type.startswith('image/'):
        raise InvalidContentError(
            f'URL does not point to a valid image (content-type: {content_type or "missing"})',
            content_type=content_type,
        )
    return mime_type


def _remove_file(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to remove temp file %s: %s", path, e)


@dataclass
class StagedImage:
    """A downloaded or uploaded image held on local disk until released."""
    path: str
    mime_type: str
    source_url: Optional[str] = None
    strategy: Optional[str] = None
    released: bool = field(default=False, init=False)

    def read_bytes(self) -> bytes:
        with open(self.path, 'rb') as fh:
            return fh.read()

    def describe(self) -> Dict[str, Any]:
        return {
            'resolvedImageUrl': self.source_url,
            'localPath': self.path,
            'mimeType': self.mime_type,
        }

    def release(self) -> bool:
        """Delete the staged file. Returns False if it was already released."""
        if self.released:
            return False
        self.released = True
        _remove_file(self.path)
        return True

    def __enter__(self) -> 'StagedImage':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class TransientStorage:
    """Per-request file staging inside a shared upload directory."""

    def __init__(self, directory: str = UPLOAD_DIR):
        self.directory = directory

    def unique_path(self, prefix: str, extension: str = '.jpg') -> str:
        os.makedirs(self.directory, exist_ok=True)
        suffix = f'{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}'
        return os.path.join(self.directory, f'{prefix}-{suffix}{extension}')

    def stage_response(
        self,
        response: requests.Response,
        prefix: str,
        source_url: Optional[str] = None,
    ) -> StagedImage:
        """
        Stream an open response to disk.

        The content type is checked before anything is written, so a
        non-image payload never leaves a file behind.
        """
        mime_type = image_mime_type(response.headers.get('Content-Type'))
        path = self.unique_path(prefix)
        try:
            with open(path, 'wb') as fh:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
        except requests.exceptions.RequestException as e:
            _remove_file(path)
            raise NetworkError(f'Download interrupted: {e}', url=source_url) from e
        except BaseException:
            _remove_file(path)
            raise

        return StagedImage(path=path, mime_type=mime_type, source_url=source_url)

    def download(
        self,
        url: str,
        prefix: str = 'url-image',
        timeout: float = IMAGE_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
    ) -> StagedImage:
        """Download URL into transient storage."""
        if headers is None:
            headers = build_headers(url, IMAGE_HEADERS)
        with open_url(url, headers=headers, timeout=timeout, stream=True) as response:
            return self.stage_response(response, prefix, source_url=url)

    def store_upload(self, upload: Any, max_size: int, prefix: str = 'image') -> StagedImage:
        """
        Stage a multipart upload (werkzeug FileStorage or compatible).

        Raises:
            InvalidContentError: Not an image, or an image type Gemini rejects.
            UploadTooLargeError: More than max_size bytes.
        """
        mime_type = (upload.mimetype or '').lower()
        if not mime_type.startswith('image/') or mime_type in UNSUPPORTED_UPLOAD_TYPES:
            raise InvalidContentError(
                'Only image files are allowed (JPG, PNG, GIF, WebP)',
                content_type=mime_type or None,
            )

        extension = os.path.splitext(upload.filename or '')[1].lower()
        if not re.fullmatch(r'\.[a-z0-9]{1,5}', extension):
            extension = '.jpg'

        path = self.unique_path(prefix, extension)
        written = 0
        try:
            with open(path, 'wb') as fh:
                while True:
                    chunk = upload.stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > max_size:
                        raise UploadTooLargeError(max_size)
                    fh.write(chunk)
        except BaseException:
            _remove_file(path)
            raise

        return StagedImage(path=path, mime_type=mime_type)
