"""
Illustration Generator Cloud Function

Generates an illustration for an article:
1. Extract the article
2. Ask OpenRouter for an English text-to-image prompt
3. Sanitize the prompt
4. Generate the image with Hugging Face, falling back across candidate models

Returns the image as a data URI together with the prompt and model used.
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
from shared.errors import ArticleDigestError, FetchError
from shared.http_utils import (
    error_response,
    get_request_json,
    json_response,
    preflight_response,
    require_field,
    unexpected_error_response,
)
from shared.image_utils import generate_image, sanitize_image_prompt
from shared.prompt_utils import ILLUSTRATION_PROMPT, build_prompt, compose_article_text

logger = logging.getLogger(__name__)


@functions_framework.http
def generate_illustration(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://example.com/article"
    }

    Returns {"image": "data:image/png;base64,...", "prompt": "...", "model": "..."}
    """
    if request.method == 'OPTIONS':
        return preflight_response()

    try:
        request_json = get_request_json(request)
        url = require_field(request_json, 'url', 'Нет URL')

        settings = load_settings()
        configure_logging(settings)
        openrouter_key = settings.require_openrouter_key()
        huggingface_key = settings.require_huggingface_key()

        # Step 1: extract article
        try:
            article = extract_article(url, timeout=settings.fetch_timeout)
        except FetchError as e:
            raise FetchError('Не удалось загрузить статью по этой ссылке.') from e

        # Step 2: image prompt from the chat model
        prompt = build_prompt(ILLUSTRATION_PROMPT, compose_article_text(article, include_date=False))
        completion = request_completion(
            prompt.system,
            prompt.user,
            settings.illustration_prompt_model,
            api_key=openrouter_key,
            api_url=settings.openrouter_api_url,
            timeout=settings.ai_timeout,
            app_title=settings.openrouter_app_title,
            drop_filler=False,
        )
        logger.info("Image prompt from OpenRouter: %s", completion.text[:200])

        # Step 3: sanitize and generate
        image_prompt = sanitize_image_prompt(completion.text)
        image = generate_image(
            image_prompt,
            settings.image_models,
            api_key=huggingface_key,
            api_base=settings.huggingface_api_base,
            timeout=settings.ai_timeout,
        )
        return json_response(image.to_dict())

    except ArticleDigestError as e:
        logger.warning("Illustration failed: %s", e.message)
        return error_response(e)
    except Exception:
        logger.exception("Unexpected error while generating illustration")
        return unexpected_error_response('Неожиданная ошибка генерации иллюстрации')
