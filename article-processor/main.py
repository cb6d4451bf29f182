"""
Article Processor Cloud Function

Turns an English article into Russian output with OpenRouter:
a summary, a numbered thesis list, or a Telegram post.

Flow: extract article -> build prompt -> chat completion -> cleaned text.
Calls run strictly one after another; nothing is retried.
"""

import functions_framework
import logging
import os
import sys

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.article_utils import extract_article
from shared.completion_utils import request_completion
from shared.config import configure_logging, load_settings
from shared.errors import ArticleDigestError, UnknownActionError
from shared.http_utils import (
    error_response,
    get_request_json,
    json_response,
    preflight_response,
    require_field,
    unexpected_error_response,
    wants_raw,
)
from shared.prompt_utils import ARTICLE_ACTIONS, build_prompt, compose_article_text

logger = logging.getLogger(__name__)


@functions_framework.http
def process_article(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://example.com/article",
        "actionType": "summary" | "theses" | "telegram",
        "options": {"include_raw": false}
    }

    Returns {"result": "...", "actionType": "..."}
    """
    if request.method == 'OPTIONS':
        return preflight_response()

    try:
        request_json = get_request_json(request)
        url = require_field(request_json, 'url', 'Нет URL')

        action_type = request_json.get('actionType')
        if action_type not in ARTICLE_ACTIONS:
            raise UnknownActionError(action_type, allowed=ARTICLE_ACTIONS)

        settings = load_settings()
        configure_logging(settings)
        api_key = settings.require_openrouter_key()

        # Step 1: extract article
        article = extract_article(url, timeout=settings.fetch_timeout)

        # Step 2: build prompt for the requested action
        prompt = build_prompt(action_type, compose_article_text(article))

        # Step 3: ask the model
        completion = request_completion(
            prompt.system,
            prompt.user,
            settings.process_model,
            api_key=api_key,
            api_url=settings.openrouter_api_url,
            timeout=settings.ai_timeout,
            app_title=settings.openrouter_app_title,
        )

        response = {'result': completion.text, 'actionType': action_type}
        if wants_raw(request_json):
            response['raw'] = completion.raw_response
        return json_response(response)

    except ArticleDigestError as e:
        logger.warning("Processing failed: %s", e.message)
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error while processing article")
        return unexpected_error_response('Ошибка обработки статьи')
