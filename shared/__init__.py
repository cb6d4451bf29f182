"""Shared utilities for the Article Digest functions."""

from .config import (
    Settings,
    load_settings,
    configure_logging,
)

from .errors import (
    ArticleDigestError,
    InputValidationError,
    UnknownActionError,
    FetchError,
    UpstreamFetchError,
    ExtractionError,
    ConfigurationError,
    UpstreamAPIError,
    AuthError,
    AllModelsExhaustedError,
    ResponseParseError,
    ParseError,
    EmptyResponseError,
    InvalidPromptError,
)

from .article_utils import (
    ParsedArticle,
    clean_content,
    parse_article_html,
    fetch_html,
    extract_article,
)

from .prompt_utils import (
    ACTIONS,
    ARTICLE_ACTIONS,
    MAX_ARTICLE_CHARS,
    PromptPair,
    build_prompt,
    compose_article_text,
)

from .completion_utils import (
    CompletionResult,
    clean_completion,
    humanize_error,
    request_completion,
)

from .image_utils import (
    AttemptOutcome,
    ImageAttempt,
    ImageResult,
    sanitize_image_prompt,
    generate_image,
)

__all__ = [
    # Configuration
    'Settings',
    'load_settings',
    'configure_logging',
    # Errors
    'ArticleDigestError',
    'InputValidationError',
    'UnknownActionError',
    'FetchError',
    'UpstreamFetchError',
    'ExtractionError',
    'ConfigurationError',
    'UpstreamAPIError',
    'AuthError',
    'AllModelsExhaustedError',
    'ResponseParseError',
    'ParseError',
    'EmptyResponseError',
    'InvalidPromptError',
    # Article extraction
    'ParsedArticle',
    'clean_content',
    'parse_article_html',
    'fetch_html',
    'extract_article',
    # Prompts
    'ACTIONS',
    'ARTICLE_ACTIONS',
    'MAX_ARTICLE_CHARS',
    'PromptPair',
    'build_prompt',
    'compose_article_text',
    # Chat completion
    'CompletionResult',
    'clean_completion',
    'humanize_error',
    'request_completion',
    # Image generation
    'AttemptOutcome',
    'ImageAttempt',
    'ImageResult',
    'sanitize_image_prompt',
    'generate_image',
]
