"""
Image generation via the Hugging Face Inference API.

The prompt produced by the chat model is sanitized, then candidate models are
tried in priority order. Each attempt yields a tagged ImageAttempt; the loop
stops on the first success or on an authentication failure.
"""

import base64
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

import requests

from .errors import AllModelsExhaustedError, AuthError, InvalidPromptError

logger = logging.getLogger(__name__)

GUIDANCE_SCALE = 7.5
NUM_INFERENCE_STEPS = 30

MIN_PROMPT_LENGTH = 10
MAX_PROMPT_LENGTH = 500

DEFAULT_MIME_TYPE = 'image/png'

INTRO_PREFIX_PATTERN = re.compile(
    r"^(?:(?:here is|here's|this is)(?:\s+(?:the\s+|an?\s+|your\s+)?(?:image\s+)?prompt)?"
    r"|the prompt is|(?:image\s+)?prompt)\b\s*:?\s*",
    re.IGNORECASE,
)
LEADING_NON_ALPHA_PATTERN = re.compile(r'^[^a-zA-Z]*')
NON_PRINTABLE_PATTERN = re.compile(r'[^\x20-\x7E\n]')

# Messages surfaced when every model failed, keyed by the last failure status
EXHAUSTED_MESSAGES = {
    503: (503, 'Модель загружается, попробуйте через несколько секунд'),
    403: (403, 'API-ключ Hugging Face не имеет достаточных прав для использования '
               'Inference Providers API. Создайте новый токен с правами "Inference Providers" '
               'на https://huggingface.co/settings/tokens'),
    404: (404, 'Модель не найдена. Проверьте доступность модели.'),
    410: (404, 'Модель не найдена. Проверьте доступность модели.'),
}


class AttemptOutcome(str, Enum):
    SUCCESS = 'success'
    RETRYABLE = 'retryable'
    FATAL = 'fatal'


@dataclass(frozen=True)
class ImageAttempt:
    """Result of trying one model."""

    model: str
    outcome: AttemptOutcome
    status: Optional[int] = None
    error: Optional[str] = None
    content: bytes = b''
    mime_type: str = DEFAULT_MIME_TYPE


@dataclass(frozen=True)
class ImageResult:
    image_data_uri: str
    prompt_used: str
    model_used: str

    def to_dict(self) -> dict:
        return {
            'image': self.image_data_uri,
            'prompt': self.prompt_used,
            'model': self.model_used,
        }


def strip_prompt_preamble(raw: str) -> str:
    """
    Remove introductory phrases and leading non-letters.

    If that leaves fewer than MIN_PROMPT_LENGTH characters, the original text
    is kept instead: the cleanup must never destroy the only usable prompt.
    """
    original = (raw or '').strip()
    cleaned = INTRO_PREFIX_PATTERN.sub('', original, count=1)
    cleaned = LEADING_NON_ALPHA_PATTERN.sub('', cleaned).strip()

    if len(cleaned) < MIN_PROMPT_LENGTH:
        logger.warning("Prompt too short after cleanup, keeping original")
        return original
    return cleaned


def sanitize_image_prompt(raw: str) -> str:
    """
    Turn a chat-model answer into a prompt the image API accepts.

    Raises:
        InvalidPromptError: nothing usable remains
    """
    prompt = strip_prompt_preamble(raw)
    prompt = NON_PRINTABLE_PATTERN.sub('', prompt).strip()
    prompt = prompt[:MAX_PROMPT_LENGTH]

    if len(prompt) < MIN_PROMPT_LENGTH:
        logger.error("Prompt unusable after sanitizing. Original: %s", (raw or '')[:200])
        raise InvalidPromptError()
    return prompt


def to_data_uri(content: bytes, mime_type: Optional[str] = None) -> str:
    encoded = base64.b64encode(content).decode('ascii')
    return f'data:{mime_type or DEFAULT_MIME_TYPE};base64,{encoded}'


def _error_detail(response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f'HTTP {response.status_code}'
    if isinstance(data, dict):
        detail = data.get('error') or data.get('message')
        if detail:
            return str(detail)
    return f'HTTP {response.status_code}: {response.text}'


def attempt_model(prompt: str, model: str, *, api_key: str, api_base: str,
                  timeout: int = 120) -> ImageAttempt:
    """Issue one generation request and classify the outcome."""
    url = f"{api_base.rstrip('/')}/{model}"
    headers = {
        'Authorization': f'Bearer {api_key}',
        'Content-Type': 'application/json',
    }
    payload = {
        'inputs': prompt,
        'parameters': {
            'guidance_scale': GUIDANCE_SCALE,
            'num_inference_steps': NUM_INFERENCE_STEPS,
        },
    }

    try:
        response = requests.post(url, headers=headers, json=payload, timeout=timeout)
    except requests.exceptions.RequestException as e:
        return ImageAttempt(model=model, outcome=AttemptOutcome.RETRYABLE, error=str(e))

    status = response.status_code
    mime_type = (response.headers.get('Content-Type') or '').split(';')[0].strip()

    if response.ok:
        if mime_type == 'application/json' or not response.content:
            return ImageAttempt(model=model, outcome=AttemptOutcome.RETRYABLE, status=status,
                                error=f'No image in response: {response.text[:200]}')
        return ImageAttempt(model=model, outcome=AttemptOutcome.SUCCESS, status=status,
                            content=response.content, mime_type=mime_type or DEFAULT_MIME_TYPE)

    outcome = AttemptOutcome.FATAL if status == 401 else AttemptOutcome.RETRYABLE
    return ImageAttempt(model=model, outcome=outcome, status=status, error=_error_detail(response))


def exhausted_error(attempts: List[ImageAttempt]) -> AllModelsExhaustedError:
    last = attempts[-1] if attempts else None
    if last is not None and last.status in EXHAUSTED_MESSAGES:
        status_code, message = EXHAUSTED_MESSAGES[last.status]
    else:
        status_code = 500
        detail = last.error if last is not None else 'нет доступных моделей'
        message = f'Ошибка генерации изображения: {detail}'
    return AllModelsExhaustedError(message, last_error=last, attempts=attempts, status_code=status_code)


def generate_image(prompt: str, candidate_models: Iterable[str], *, api_key: str,
                   api_base: str, timeout: int = 120) -> ImageResult:
    """
    Try candidate models in order and return the first generated image.

    Raises:
        AuthError: a model answered 401; remaining models are not tried
        AllModelsExhaustedError: every model failed
    """
    attempts = []

    for model in candidate_models:
        logger.info("Trying image model %s", model)
        attempt = attempt_model(prompt, model, api_key=api_key, api_base=api_base, timeout=timeout)
        attempts.append(attempt)

        if attempt.outcome is AttemptOutcome.SUCCESS:
            logger.info("Image generated by %s (%d bytes)", model, len(attempt.content))
            return ImageResult(
                image_data_uri=to_data_uri(attempt.content, attempt.mime_type),
                prompt_used=prompt,
                model_used=model,
            )

        if attempt.outcome is AttemptOutcome.FATAL:
            logger.error("Hugging Face rejected credentials (model %s)", model)
            raise AuthError(upstream_status=attempt.status, body=attempt.error)

        logger.warning("Image model %s failed (status %s): %s", model, attempt.status, attempt.error)

    raise exhausted_error(attempts)
