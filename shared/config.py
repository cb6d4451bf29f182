"""
Runtime configuration for the Article Digest functions.

Values come from Cloud Function environment variables and are frozen into a
Settings instance per invocation, then passed to the components that need
them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .errors import ConfigurationError

OPENROUTER_API_URL = 'https://openrouter.ai/api/v1/chat/completions'
HUGGINGFACE_API_BASE = 'https://router.huggingface.co/hf-inference/models'

DEFAULT_PROCESS_MODEL = 'meta-llama/llama-3.2-3b-instruct:free'
DEFAULT_TRANSLATE_MODEL = 'deepseek/deepseek-r1-0528:free'
DEFAULT_ILLUSTRATION_PROMPT_MODEL = 'deepseek/deepseek-r1-0528:free'

# Newest / most capable first
DEFAULT_IMAGE_MODELS = (
    'black-forest-labs/FLUX.1-dev',
    'black-forest-labs/FLUX.1-schnell',
    'stabilityai/stable-diffusion-xl-base-1.0',
    'runwayml/stable-diffusion-v1-5',
)

DEFAULT_FETCH_TIMEOUT = 30
DEFAULT_AI_TIMEOUT = 120

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def _parse_models(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return DEFAULT_IMAGE_MODELS
    models = tuple(m.strip() for m in value.split(',') if m.strip())
    return models or DEFAULT_IMAGE_MODELS


def _parse_timeout(value: Optional[str], default: int) -> int:
    if not value:
        return default
    try:
        timeout = int(value)
    except ValueError:
        return default
    return timeout if timeout > 0 else default


@dataclass(frozen=True)
class Settings:
    """Immutable process-wide configuration."""

    openrouter_api_key: Optional[str] = None
    huggingface_api_key: Optional[str] = None
    openrouter_api_url: str = OPENROUTER_API_URL
    openrouter_app_title: Optional[str] = None
    process_model: str = DEFAULT_PROCESS_MODEL
    translate_model: str = DEFAULT_TRANSLATE_MODEL
    illustration_prompt_model: str = DEFAULT_ILLUSTRATION_PROMPT_MODEL
    huggingface_api_base: str = HUGGINGFACE_API_BASE
    image_models: Tuple[str, ...] = DEFAULT_IMAGE_MODELS
    fetch_timeout: int = DEFAULT_FETCH_TIMEOUT
    ai_timeout: int = DEFAULT_AI_TIMEOUT
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Settings':
        env = os.environ if environ is None else environ
        return cls(
            openrouter_api_key=env.get('OPENROUTER_API_KEY') or None,
            huggingface_api_key=env.get('HUGGINGFACE_API_KEY') or None,
            openrouter_api_url=env.get('OPENROUTER_API_URL') or OPENROUTER_API_URL,
            openrouter_app_title=env.get('OPENROUTER_APP_TITLE') or None,
            process_model=env.get('PROCESS_MODEL') or DEFAULT_PROCESS_MODEL,
            translate_model=env.get('TRANSLATE_MODEL') or DEFAULT_TRANSLATE_MODEL,
            illustration_prompt_model=(
                env.get('ILLUSTRATION_PROMPT_MODEL') or DEFAULT_ILLUSTRATION_PROMPT_MODEL
            ),
            huggingface_api_base=env.get('HUGGINGFACE_API_BASE') or HUGGINGFACE_API_BASE,
            image_models=_parse_models(env.get('IMAGE_MODELS')),
            fetch_timeout=_parse_timeout(env.get('FETCH_TIMEOUT'), DEFAULT_FETCH_TIMEOUT),
            ai_timeout=_parse_timeout(env.get('AI_TIMEOUT'), DEFAULT_AI_TIMEOUT),
            log_level=(env.get('LOG_LEVEL') or 'INFO').upper(),
        )

    def require_openrouter_key(self) -> str:
        if not self.openrouter_api_key:
            raise ConfigurationError('Нет API-ключа OpenRouter')
        return self.openrouter_api_key

    def require_huggingface_key(self) -> str:
        if not self.huggingface_api_key:
            raise ConfigurationError('Нет API-ключа Hugging Face')
        return self.huggingface_api_key


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from the environment (os.environ by default)."""
    return Settings.from_env(environ)


def configure_logging(settings: Settings) -> None:
    """Set up root logging once; Cloud Functions forwards stderr to Cloud Logging."""
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)
