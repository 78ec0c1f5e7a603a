"""
Shared pytest fixtures for LookAnalyst tests.
"""

import io
import pytest
import sys
import importlib.util
from pathlib import Path

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load Cloud Function modules with unique names at module load time
_clothing_analyzer_module = _load_module_from_path(
    'clothing_analyzer_main',
    PROJECT_ROOT / 'clothing-analyzer' / 'main.py'
)

_pinterest_analyzer_module = _load_module_from_path(
    'pinterest_analyzer_main',
    PROJECT_ROOT / 'pinterest-analyzer' / 'main.py'
)

_api_docs_module = _load_module_from_path(
    'api_docs_main',
    PROJECT_ROOT / 'api-docs' / 'main.py'
)

PIN_IMAGE_URL = "https://i.pinimg.com/736x/5a/3b/9c/5a3b9c0d1e2f.jpg"
PIN_PAGE_URL = "https://www.pinterest.com/pin/5348093303823893/"

# Smallest valid JPEG header; content is never decoded in tests
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 64


# ============================================================================
# Cloud Function entry points
# ============================================================================

@pytest.fixture
def analyze_clothing():
    """Returns main entry point from clothing-analyzer."""
    return _clothing_analyzer_module.analyze_clothing


@pytest.fixture
def analyze_pinterest():
    """Returns main entry point from pinterest-analyzer."""
    return _pinterest_analyzer_module.analyze_pinterest


@pytest.fixture
def api_docs():
    """Returns main entry point from api-docs."""
    return _api_docs_module.api_docs


# ============================================================================
# Storage and configuration
# ============================================================================

@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Points the functions' transient storage at a per-test directory."""
    directory = tmp_path / "uploads"
    monkeypatch.setattr('lookanalyst.config.UPLOAD_DIR', str(directory))
    return directory


@pytest.fixture
def gemini_key(monkeypatch):
    """Configures a fake Gemini API key."""
    monkeypatch.setattr('lookanalyst.config.GEMINI_API_KEY', 'test-gemini-key')
    return 'test-gemini-key'


@pytest.fixture
def staged_files():
    """Lists files left in a storage directory."""
    def _list(directory):
        directory = Path(directory)
        if not directory.exists():
            return []
        return sorted(p.name for p in directory.iterdir())
    return _list


# ============================================================================
# Sample pages
# ============================================================================

@pytest.fixture
def pin_page_html():
    """Pin page where every strategy would find something."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <title>Outfit idea | Pinterest</title>
        <meta property="og:image" content="{PIN_IMAGE_URL}">
        <script type="application/ld+json">
        {{"@type": "SocialMediaPosting", "image": "https://i.pinimg.com/564x/aa/bb/cc/json.jpg"}}
        </script>
    </head>
    <body>
        <img class="hCL kVc L4E MIw PcK" src="https://i.pinimg.com/474x/11/22/33/class.jpg" alt="">
        <img data-testid="closeup-pin-image" src="https://i.pinimg.com/236x/44/55/66/testid.png">
        <a href="https://i.pinimg.com/1200x/77/88/99/large.jpg">full size</a>
        <div data-src="https://i.pinimg.com/170x/aa/bb/cc/lazy.webp"></div>
    </body>
    </html>
    """


@pytest.fixture
def no_image_html():
    return """
    <html>
    <head><title>Sign up | Pinterest</title></head>
    <body><div class="login">Log in to see more</div></body>
    </html>
    """


# ============================================================================
# Mock Flask request objects
# ============================================================================

class FakeUpload:
    """Stands in for werkzeug's FileStorage."""

    def __init__(self, data: bytes, filename='outfit.jpg', mimetype='image/jpeg'):
        self.stream = io.BytesIO(data)
        self.filename = filename
        self.mimetype = mimetype


@pytest.fixture
def fake_upload():
    return FakeUpload


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST', files=None, form=None, args=None, path='/'):
            self._json = json_data
            self.method = method
            self.files = files or {}
            self.form = form or {}
            self.args = args or {}
            self.path = path
            self.data = b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest


@pytest.fixture
def gemini_reply():
    """Patches the Gemini SDK so generate_content returns the given text."""
    from unittest.mock import MagicMock, patch

    patchers = []

    def _install(text=None, error=None):
        fake_genai = MagicMock()
        model = fake_genai.GenerativeModel.return_value
        if error is not None:
            model.generate_content.side_effect = error
        else:
            model.generate_content.return_value.text = text
        patcher = patch('lookanalyst.gemini.genai', fake_genai)
        patcher.start()
        patchers.append(patcher)
        return fake_genai

    yield _install

    for patcher in patchers:
        patcher.stop()
