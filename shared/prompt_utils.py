"""
Prompt templates for Article Digest.

Every action has a fixed persona (system message) and a fixed user template.
build_prompt() is pure: identical input always yields identical output.
"""

from typing import NamedTuple

from .article_utils import ParsedArticle
from .errors import UnknownActionError

SUMMARY = 'summary'
THESES = 'theses'
TELEGRAM = 'telegram'
TRANSLATE = 'translate'
ILLUSTRATION_PROMPT = 'illustration-prompt'

ACTIONS = (SUMMARY, THESES, TELEGRAM, TRANSLATE, ILLUSTRATION_PROMPT)

# Actions accepted by the process endpoint
ARTICLE_ACTIONS = (SUMMARY, THESES, TELEGRAM)

# Article body is cut here before it is embedded in a prompt
MAX_ARTICLE_CHARS = 4000


class PromptPair(NamedTuple):
    system: str
    user: str


SYSTEM_MESSAGES = {
    SUMMARY: 'Ты — опытный аналитик и реферант. Твоя задача — создавать краткие и информативные резюме статей на русском языке.',
    THESES: 'Ты — эксперт по анализу текстов. Твоя задача — выделять основные тезисы и ключевые моменты из статей.',
    TELEGRAM: 'Ты — профессиональный копирайтер, специализирующийся на создании постов для социальных сетей, особенно для Telegram.',
    TRANSLATE: 'Ты — профессиональный переводчик, владеющий современным разговорным русским.',
    ILLUSTRATION_PROMPT: 'Ты — эксперт по созданию промптов для генерации изображений. Твоя задача — создавать детальные и точные промпты на английском языке для text-to-image моделей.',
}

USER_INSTRUCTIONS = {
    SUMMARY: [
        'Прочитай следующую англоязычную статью и создай краткое резюме на русском языке.',
        'Резюме должно включать:',
        '- Основную тему статьи',
        '- Ключевые идеи и аргументы',
        '- Основные выводы',
        '',
        'Формат: связный текст, без списков и маркировки.',
        'Не добавляй вводных фраз, начинай сразу с содержания.',
    ],
    THESES: [
        'Прочитай следующую англоязычную статью и выдели основные тезисы.',
        'Требования:',
        '- Представь тезисы в виде нумерованного списка',
        '- Каждый тезис должен быть кратким и содержательным',
        '- Охвати все ключевые моменты статьи',
        '- На русском языке',
        '',
        'Не добавляй вводных фраз, начинай сразу со списка тезисов.',
    ],
    TELEGRAM: [
        'На основе следующей англоязычной статьи создай пост для Telegram.',
        'Требования:',
        '- Привлекательный заголовок (можно использовать эмодзи)',
        '- Краткое и интересное содержание',
        '- Подходящий для Telegram формат (короткие абзацы, можно использовать эмодзи)',
        '- Длина примерно 1500-2000 символов',
        '- Можно добавить релевантные хештеги в конце',
        '- На русском языке',
        '',
        'Не добавляй пояснений перед постом, начинай сразу с заголовка.',
    ],
    TRANSLATE: [
        'Переведи текст на русский язык.',
        'Сохрани структуру, Markdown и форматирование.',
        'Не добавляй никаких пояснений, введения или обрамления.',
        'Верни только готовый перевод.',
    ],
    ILLUSTRATION_PROMPT: [
        'На основе следующей статьи создай детальный промпт на английском языке для генерации иллюстрации.',
        'Требования:',
        '- Промпт должен быть на английском языке',
        '- Описывай визуальные элементы, стиль, композицию',
        '- Укажи художественный стиль (реалистичный, цифровой арт, фотография и т.д.)',
        '- Длина промпта: 50-100 слов',
        '- Не добавляй пояснений, верни ТОЛЬКО промпт',
    ],
}


def compose_article_text(article: ParsedArticle, include_date: bool = True,
                         max_chars: int = MAX_ARTICLE_CHARS) -> str:
    """
    Assemble the article block embedded in prompts.

    The body is truncated to max_chars; anything beyond is dropped.
    Empty header fields are skipped.
    """
    parts = [
        f'Заголовок: {article.title}' if article.title else '',
        f'Дата: {article.date}' if include_date and article.date else '',
        'Содержание статьи:',
        article.content[:max_chars],
    ]
    return '\n'.join(part for part in parts if part)


def build_prompt(action: str, article_text: str) -> PromptPair:
    """
    Build the system/user message pair for an action.

    Args:
        action: One of ACTIONS
        article_text: Article block (or raw text for translation)

    Raises:
        UnknownActionError: action is not one of ACTIONS
    """
    if action not in ACTIONS:
        raise UnknownActionError(action)

    user = '\n'.join(USER_INSTRUCTIONS[action] + ['', article_text or ''])
    return PromptPair(system=SYSTEM_MESSAGES[action], user=user)
