"""
Shared pytest fixtures for Article Digest tests.
"""

import pytest
import sys
import importlib.util
from pathlib import Path

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent

TEST_IMAGE_MODELS = ['model-a', 'model-b', 'model-c', 'model-d']


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load Cloud Function modules with unique names at module load time
_article_parser_module = _load_module_from_path(
    'article_parser_main',
    PROJECT_ROOT / 'article-parser' / 'main.py'
)

_article_processor_module = _load_module_from_path(
    'article_processor_main',
    PROJECT_ROOT / 'article-processor' / 'main.py'
)

_article_translator_module = _load_module_from_path(
    'article_translator_main',
    PROJECT_ROOT / 'article-translator' / 'main.py'
)

_illustration_generator_module = _load_module_from_path(
    'illustration_generator_main',
    PROJECT_ROOT / 'illustration-generator' / 'main.py'
)


# ============================================================================
# Cloud Function entry points
# ============================================================================

@pytest.fixture
def parse_article():
    """Returns main entry point from article-parser."""
    return _article_parser_module.parse_article


@pytest.fixture
def process_article():
    """Returns main entry point from article-processor."""
    return _article_processor_module.process_article


@pytest.fixture
def translate_article():
    """Returns main entry point from article-translator."""
    return _article_translator_module.translate_article


@pytest.fixture
def generate_illustration():
    """Returns main entry point from illustration-generator."""
    return _illustration_generator_module.generate_illustration


@pytest.fixture
def article_parser_module():
    """Returns the loaded article-parser module (for patching)."""
    return _article_parser_module


# ============================================================================
# Environment
# ============================================================================

_ENV_VARS = [
    'OPENROUTER_API_KEY', 'HUGGINGFACE_API_KEY', 'OPENROUTER_API_URL', 'OPENROUTER_APP_TITLE',
    'PROCESS_MODEL', 'TRANSLATE_MODEL', 'ILLUSTRATION_PROMPT_MODEL', 'HUGGINGFACE_API_BASE',
    'IMAGE_MODELS', 'FETCH_TIMEOUT', 'AI_TIMEOUT', 'LOG_LEVEL',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Every test starts without any Article Digest configuration."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_keys(monkeypatch):
    """Configure both API keys and a predictable image model list."""
    monkeypatch.setenv('OPENROUTER_API_KEY', 'test-openrouter-key')
    monkeypatch.setenv('HUGGINGFACE_API_KEY', 'test-hf-key')
    monkeypatch.setenv('IMAGE_MODELS', ','.join(TEST_IMAGE_MODELS))


# ============================================================================
# Requests and payloads
# ============================================================================

@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST'):
            self._json = json_data
            self.method = method
            self.data = b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest


@pytest.fixture
def sample_article_html():
    """Article page with every metadata field present."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Why Cats Love Rooftops | Example News</title>
        <meta property="og:title" content="Why Cats Love Rooftops">
        <meta property="article:published_time" content="2024-12-15T10:00:00Z">
    </head>
    <body>
        <h1>Why Cats Love Rooftops (h1)</h1>
        <article>
            <p>Cats have always been drawn to high places.</p>
            <script>var tracking = "should not appear";</script>
            <p>Researchers say the view gives them a sense of safety.</p>
        </article>
    </body>
    </html>
    """


@pytest.fixture
def no_content_html():
    """Page with a title but none of the content selectors."""
    return """
    <html>
    <head><title>Landing page</title></head>
    <body><div class="hero"><p>Sign up today</p></div></body>
    </html>
    """


@pytest.fixture
def png_bytes():
    return b'\x89PNG\r\n\x1a\n' + b'\x00' * 32
