"""
Runtime configuration for LookAnalyst.

Values come from environment variables so each Cloud Function can be
configured independently at deploy time.
"""

import os


def _int_env(name: str, default: int) -> int:
    """Read an integer env var, falling back to default when unset or malformed."""
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.5-flash')

MAX_FILE_SIZE = _int_env('MAX_FILE_SIZE', 8 * 1024 * 1024)
UPLOAD_DIR = os.environ.get('UPLOAD_DIR', 'uploads')
FRONTEND_URL = os.environ.get('FRONTEND_URL', 'https://lookanalyst.up.railway.app')
PROXY_SERVICE_URL = os.environ.get('PROXY_SERVICE_URL', 'https://dl.klickpin.com')

# Timeouts in seconds
PAGE_TIMEOUT = 30
IMAGE_TIMEOUT = 45
PIN_IMAGE_TIMEOUT = 30
PROXY_TIMEOUT = 60

MAX_REDIRECTS = 5

SUPPORTED_LANGUAGES = ['es', 'en', 'pt', 'fr', 'it', 'de']
DEFAULT_LANGUAGE = 'es'

API_VERSION = '1.0.0'
