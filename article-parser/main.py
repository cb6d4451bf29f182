"""
Article Parser Cloud Function

Fetches an article page and returns its title, publish date and body text.

Responsibilities:
- Fetch the page with a browser-like User-Agent
- Extract title, date and content via selector fallback chains

Does NOT:
- Call any AI service
- Clean up boilerplate or stitch paginated articles
"""

import functions_framework
import logging
import os
import sys

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.article_utils import extract_article
from shared.config import configure_logging, load_settings
from shared.errors import ArticleDigestError
from shared.http_utils import (
    error_response,
    get_request_json,
    json_response,
    preflight_response,
    require_field,
    unexpected_error_response,
)

logger = logging.getLogger(__name__)


@functions_framework.http
def parse_article(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://example.com/article"
    }

    Returns {"date": ..., "title": ..., "content": ...}
    """
    if request.method == 'OPTIONS':
        return preflight_response()

    try:
        request_json = get_request_json(request)
        url = require_field(request_json, 'url', 'Нет URL')

        settings = load_settings()
        configure_logging(settings)

        article = extract_article(url, timeout=settings.fetch_timeout)
        return json_response(article.to_dict())

    except ArticleDigestError as e:
        logger.warning("Parse failed: %s", e.message)
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error while parsing article")
        return unexpected_error_response('Ошибка парсинга')
