"""
OpenRouter chat-completion client and response cleanup.

Models are told not to add preambles or reasoning, but compliance is
unreliable, so every completion goes through clean_completion(). The cleanup
is best effort: rare residual preamble text is possible.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from .errors import EmptyResponseError, ResponseParseError, UpstreamAPIError

logger = logging.getLogger(__name__)

REASONING_BLOCK_PATTERN = re.compile(r'<think>.*?</think>', re.DOTALL)

# Heading, list item, numbered item or emoji at line start
CONTENT_START_PATTERN = re.compile(r'^(#|[\d•\-*]|[\U0001F300-\U0001F9FF])')

FILLER_LINE_PATTERN = re.compile(
    r"^(вот|это|ниже|следующ|here is|here's|this is|below is|the following)",
    re.IGNORECASE,
)

REGION_ERROR_MESSAGE = (
    'Сервис OpenRouter недоступен в вашем регионе. '
    'Попробуйте использовать VPN или обратитесь к администратору.'
)


@dataclass(frozen=True)
class CompletionResult:
    """Cleaned model output plus the untouched upstream payload."""

    text: str
    raw_response: Dict[str, Any] = field(default_factory=dict)


def strip_reasoning(text: str) -> str:
    """Remove <think>...</think> blocks. Text without one is returned unchanged."""
    if not text or '<think>' not in text:
        return text
    return REASONING_BLOCK_PATTERN.sub('', text).strip()


def strip_leading_filler(text: str) -> str:
    """
    Drop introductory lines such as "Вот резюме статьи:" or "Here is the post:".

    Scanning stops at the first line that starts with a heading/list/emoji
    marker or is not filler. If no line qualifies, text is returned as is.
    """
    lines = re.split(r'\r?\n', text)
    for idx, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if CONTENT_START_PATTERN.match(stripped) or not FILLER_LINE_PATTERN.match(stripped.lower()):
            return '\n'.join(lines[idx:]).strip()
    return text


def clean_completion(text: str, drop_filler: bool = True) -> str:
    """
    Apply reasoning removal, newline un-escaping and filler stripping, in that order.

    With drop_filler=False the filler step is skipped, for output whose first
    line is content even when it reads like an intro (English image prompts).
    """
    if not text:
        return ''
    text = strip_reasoning(text)
    text = text.replace('\\n', '\n')
    if not drop_filler:
        return text.strip()
    return strip_leading_filler(text)


def is_region_error(message: str) -> bool:
    lower = (message or '').lower()
    return (
        'not available in your region' in lower
        or 'access denied' in lower
        or ('region' in lower and 'not available' in lower)
    )


def humanize_error(message: str) -> str:
    """Replace region-restriction errors with a friendly hint; pass everything else through."""
    if is_region_error(message):
        return REGION_ERROR_MESSAGE
    return message


def extract_error_message(body: str) -> str:
    """Pull a readable message out of an OpenRouter error body."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return body

    if not isinstance(data, dict):
        return body

    error = data.get('error', data)
    if isinstance(error, dict):
        message = error.get('message') or error.get('code') or error
    else:
        message = error

    if not isinstance(message, str):
        message = json.dumps(message, ensure_ascii=False)
    return message


def _message_content(data: dict) -> str:
    """
    Return choices[0].message.content, or '' when the response carries none.

    Raises:
        ResponseParseError: a field along the path has the wrong type
    """
    choices = data.get('choices')
    if not choices:
        return ''
    if not isinstance(choices, list) or not isinstance(choices[0], dict):
        raise ResponseParseError('Неожиданная структура ответа от OpenRouter')

    message = choices[0].get('message')
    if message is None:
        return ''
    if not isinstance(message, dict):
        raise ResponseParseError('Неожиданная структура ответа от OpenRouter')

    content = message.get('content')
    if content is None:
        return ''
    if not isinstance(content, str):
        raise ResponseParseError('Неожиданная структура ответа от OpenRouter')
    return content


def request_completion(system_msg: str, user_msg: str, model: str, *,
                       api_key: str, api_url: str, timeout: int = 120,
                       app_title: Optional[str] = None,
                       drop_filler: bool = True) -> CompletionResult:
    """
    Send one chat-completion request and return the cleaned result.

    Raises:
        UpstreamAPIError: transport failure, non-success status, or error payload
        ResponseParseError: body is not valid JSON or has an unexpected structure
        EmptyResponseError: no message content in the response
    """
    headers = {
        'Authorization': f'Bearer {api_key}',
        'Content-Type': 'application/json',
    }
    if app_title:
        headers['X-Title'] = app_title

    payload = {
        'model': model,
        'messages': [
            {'role': 'system', 'content': system_msg},
            {'role': 'user', 'content': user_msg},
        ],
    }

    logger.info("Requesting completion from %s", model)

    try:
        response = requests.post(api_url, headers=headers, json=payload, timeout=timeout)
    except requests.exceptions.Timeout as e:
        logger.error("OpenRouter request timed out: %s", e)
        raise UpstreamAPIError('Превышено время ожидания ответа от OpenRouter', upstream_status=504) from e
    except requests.exceptions.RequestException as e:
        logger.error("OpenRouter request failed: %s", e)
        raise UpstreamAPIError('Не удалось связаться с OpenRouter', upstream_status=502) from e

    body = response.text

    if not response.ok:
        message = extract_error_message(body)
        logger.error("OpenRouter error (status %s): %s", response.status_code, message)
        logger.debug("Full OpenRouter response: %s", body)
        raise UpstreamAPIError(humanize_error(message), upstream_status=response.status_code, body=body)

    try:
        data = json.loads(body)
    except ValueError as e:
        logger.error("Could not parse OpenRouter response: %s", e)
        raise ResponseParseError('Ошибка парсинга ответа от OpenRouter') from e

    if not isinstance(data, dict):
        raise ResponseParseError('Ошибка парсинга ответа от OpenRouter')

    if data.get('error'):
        error = data['error']
        detail = error.get('message') if isinstance(error, dict) else None
        detail = detail or json.dumps(error, ensure_ascii=False)
        logger.error("OpenRouter error in response body: %s", detail)
        raise UpstreamAPIError(
            humanize_error(f'Ошибка OpenRouter: {detail}'),
            upstream_status=response.status_code,
            body=body,
        )

    content = _message_content(data)

    if not content:
        logger.error("Empty completion from %s: %s", model, json.dumps(data, ensure_ascii=False)[:2000])
        raise EmptyResponseError()

    text = clean_completion(content, drop_filler=drop_filler)
    if not text:
        # Nothing left once the reasoning block is gone
        logger.error("Completion from %s was empty after cleanup", model)
        raise EmptyResponseError()

    return CompletionResult(text=text, raw_response=data)
