"""
Article Translator Cloud Function

Translates already extracted article text into Russian via OpenRouter,
keeping structure and Markdown intact.
"""

import functions_framework
import logging
import os
import sys

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.completion_utils import request_completion
from shared.config import configure_logging, load_settings
from shared.errors import ArticleDigestError
from shared.http_utils import (
    error_response,
    get_request_json,
    json_response,
    preflight_response,
    require_field,
    unexpected_error_response,
    wants_raw,
)
from shared.prompt_utils import TRANSLATE, build_prompt

logger = logging.getLogger(__name__)


@functions_framework.http
def translate_article(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "text": "Article text in English",
        "options": {"include_raw": false}
    }

    Returns {"result": "<russian translation>"}
    """
    if request.method == 'OPTIONS':
        return preflight_response()

    try:
        request_json = get_request_json(request)
        text = require_field(request_json, 'text', 'Нет текста для перевода')

        settings = load_settings()
        configure_logging(settings)
        api_key = settings.require_openrouter_key()

        prompt = build_prompt(TRANSLATE, text)
        completion = request_completion(
            prompt.system,
            prompt.user,
            settings.translate_model,
            api_key=api_key,
            api_url=settings.openrouter_api_url,
            timeout=settings.ai_timeout,
            app_title=settings.openrouter_app_title,
        )

        response = {'result': completion.text}
        if wants_raw(request_json):
            response['raw'] = completion.raw_response
        return json_response(response)

    except ArticleDigestError as e:
        logger.warning("Translation failed: %s", e.message)
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error while translating")
        return unexpected_error_response('Ошибка перевода')
