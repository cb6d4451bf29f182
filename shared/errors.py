"""
Error taxonomy for the Article Digest functions.

Every error carries a user-readable (Russian) message and the HTTP status
the Cloud Function answers with. Handlers convert these into
{"error": message} bodies; anything else is treated as unexpected (500).
"""

from typing import Any, Dict, List, Optional


class ArticleDigestError(Exception):
    """Base class for all errors surfaced to the end user."""

    status_code = 500
    default_message = 'Внутренняя ошибка сервера'

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.message}


class InputValidationError(ArticleDigestError):
    """Missing or invalid request field."""

    status_code = 400
    default_message = 'Некорректный запрос'


class UnknownActionError(InputValidationError):
    """Requested action is not one of the known actions."""

    def __init__(self, action, allowed=None):
        self.action = action
        if allowed:
            message = f"Некорректный тип действия. Допустимые значения: {', '.join(allowed)}"
        else:
            message = f'Неизвестный тип действия: {action}'
        super().__init__(message)


class FetchError(ArticleDigestError):
    """Article URL could not be loaded (the user supplied it, so 400)."""

    status_code = 400
    default_message = 'Не удалось загрузить страницу'


UpstreamFetchError = FetchError


class ExtractionError(ArticleDigestError):
    """No usable article text found in the page."""

    status_code = 400
    default_message = 'Не удалось извлечь контент из статьи'


class ConfigurationError(ArticleDigestError):
    """A required credential or setting is missing."""

    status_code = 500
    default_message = 'Сервис не настроен'


class UpstreamAPIError(ArticleDigestError):
    """Chat or image provider answered with a failure."""

    status_code = 500
    default_message = 'Ошибка внешнего AI-сервиса'

    def __init__(self, message=None, upstream_status=None, body=None, status_code=None):
        self.upstream_status = upstream_status
        self.body = body
        super().__init__(message, status_code=status_code)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.upstream_status is not None:
            data['upstream_status'] = self.upstream_status
        return data


class AuthError(UpstreamAPIError):
    """Image provider rejected the credential; retrying other models is pointless."""

    status_code = 401
    default_message = 'Ошибка авторизации Hugging Face. Проверьте API-ключ.'


class AllModelsExhaustedError(UpstreamAPIError):
    """Every candidate image model failed."""

    default_message = 'Ни одна из моделей не смогла сгенерировать изображение'

    def __init__(self, message=None, last_error=None, attempts: Optional[List] = None, status_code=None):
        self.last_error = last_error
        self.attempts = attempts or []
        last_status = last_error.status if last_error is not None else None
        super().__init__(message, upstream_status=last_status, status_code=status_code)


class ResponseParseError(ArticleDigestError):
    """Upstream body was not valid JSON."""

    status_code = 500
    default_message = 'Ошибка парсинга ответа от AI'


ParseError = ResponseParseError


class EmptyResponseError(ArticleDigestError):
    """Upstream JSON carried no message content."""

    status_code = 500
    default_message = 'Пустой ответ от AI'


class InvalidPromptError(ArticleDigestError):
    """Nothing usable is left to send to the image API."""

    status_code = 500
    default_message = 'Не удалось создать валидный промпт для изображения'
