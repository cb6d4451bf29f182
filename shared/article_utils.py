"""
Article extraction utilities for Article Digest.

Fetches a page and recovers title, publish date and body text using ordered
fallback chains of selectors. Best effort only; there is no readability scoring.
"""

import logging
import re
from dataclasses import asdict, dataclass
from typing import Callable, Iterable, Optional

import requests
from bs4 import BeautifulSoup

from .errors import ExtractionError, FetchError

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'

# Elements whose text is never readable article text
NON_TEXT_ELEMENTS = ['script', 'style', 'noscript']


@dataclass(frozen=True)
class ParsedArticle:
    """Title, date and body text recovered from one HTML document."""

    title: str
    date: str
    content: str

    def to_dict(self) -> dict:
        return asdict(self)


Extractor = Callable[[BeautifulSoup], Optional[str]]


def first_non_empty(soup: BeautifulSoup, extractors: Iterable[Extractor]) -> str:
    """Run extractors in order and return the first non-empty (trimmed) value."""
    for extract in extractors:
        value = extract(soup)
        if value and value.strip():
            return value.strip()
    return ''


def _meta_property(prop: str) -> Extractor:
    def extract(soup):
        tag = soup.find('meta', property=prop)
        return tag.get('content') if tag else None
    return extract


def _tag_text(name: str) -> Extractor:
    def extract(soup):
        tag = soup.find(name)
        return tag.get_text() if tag else None
    return extract


def _selector_text(selector: str) -> Extractor:
    def extract(soup):
        tag = soup.select_one(selector)
        return tag.get_text() if tag else None
    return extract


def _time_datetime(soup):
    tag = soup.find('time')
    return tag.get('datetime') if tag else None


DATE_EXTRACTORS = (
    _meta_property('article:published_time'),
    _time_datetime,
    _tag_text('time'),
)

TITLE_EXTRACTORS = (
    _meta_property('og:title'),
    _tag_text('h1'),
    _tag_text('title'),
)

CONTENT_EXTRACTORS = (
    _tag_text('article'),
    _selector_text('.post'),
    _selector_text('.content'),
)


def clean_content(text: str) -> str:
    """
    Normalize extracted body text.

    Literal "\\n" sequences become newlines, runs of two or more whitespace
    characters collapse into a single space, and the result is trimmed.
    """
    if not text:
        return ''
    text = text.replace('\\n', '\n')
    text = re.sub(r'\s{2,}', ' ', text)
    return text.strip()


def parse_article_html(html: str) -> ParsedArticle:
    """Parse HTML into a ParsedArticle. Missing fields come back as ''."""
    soup = BeautifulSoup(html or '', 'html.parser')

    for element in soup.find_all(NON_TEXT_ELEMENTS):
        element.decompose()

    return ParsedArticle(
        title=first_non_empty(soup, TITLE_EXTRACTORS),
        date=first_non_empty(soup, DATE_EXTRACTORS),
        content=clean_content(first_non_empty(soup, CONTENT_EXTRACTORS)),
    )


def fetch_html(url: str, timeout: int = 30) -> str:
    """Fetch a page with a browser-like User-Agent. Raises FetchError on failure."""
    headers = {
        'User-Agent': USER_AGENT,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
    }

    try:
        response = requests.get(url, headers=headers, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        logger.warning("Timed out fetching %s: %s", url, e)
        raise FetchError('Не удалось загрузить страницу: превышено время ожидания') from e
    except requests.exceptions.HTTPError as e:
        logger.warning("HTTP %s fetching %s", e.response.status_code, url)
        raise FetchError(f'Не удалось загрузить страницу (HTTP {e.response.status_code})') from e
    except requests.exceptions.RequestException as e:
        logger.warning("Request failed for %s: %s", url, e)
        raise FetchError() from e

    return response.text


def extract_article(url: str, timeout: int = 30) -> ParsedArticle:
    """
    Fetch and parse an article.

    Raises:
        FetchError: the page could not be loaded
        ExtractionError: no content selector produced any text
    """
    html = fetch_html(url, timeout=timeout)
    article = parse_article_html(html)

    if not article.content:
        logger.warning("No article content found at %s", url)
        raise ExtractionError()

    logger.info("Extracted article from %s: title=%r, %d chars", url, article.title[:80], len(article.content))
    return article
