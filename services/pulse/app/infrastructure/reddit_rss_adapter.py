"""
Adaptador de feeds RSS/Atom de Reddit.
Implementación concreta de la interfaz FeedCollector usando los feeds públicos
de búsqueda (no requiere credenciales).
"""
import asyncio
import calendar
import random
import re
import string
import time
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import quote

import feedparser
import httpx

from services.pulse.app import config
from services.pulse.app.domain.entities import RedditPost
from services.pulse.app.domain.exceptions import FeedParseError
from services.pulse.app.domain.interfaces import FeedCollector
from services.pulse.app.domain.text_normalizer import normalize_text, normalize_author
from shared.config.settings import settings
from shared.services.logging_config import get_logger


logger = get_logger(__name__)

_THREAD_ID_RE = re.compile(r'/comments/([a-z0-9]+)/', re.IGNORECASE)


def build_search_url(keyword: str, subreddit: str, limit: int) -> str:
    """URL de búsqueda restringida al subreddit."""
    return (
        f"{config.REDDIT_BASE_URL}/r/{subreddit}/search.rss"
        f"?q={quote(keyword)}&restrict_sr=on&limit={limit}&sort=relevance"
    )


def synthesize_post_id() -> str:
    """
    Id sintético para entradas sin identificador de hilo.
    Lleva guiones bajos, que nunca aparecen en los ids base-36 de Reddit.
    """
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"rss_{int(time.time() * 1000)}_{suffix}"


def extract_post_id(link: str, entry_id: Optional[str] = None) -> str:
    """Id del hilo desde el enlace; si no, el id de la entrada; si no, uno sintético."""
    match = _THREAD_ID_RE.search(link or "")
    if match:
        return match.group(1)
    if entry_id:
        return entry_id
    return synthesize_post_id()


def _entry_datetime(entry) -> datetime:
    parsed = entry.get('published_parsed') or entry.get('updated_parsed')
    if parsed:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc).replace(tzinfo=None)
    return datetime.utcnow()


def _permalink(link: str) -> str:
    return (link or "").replace(config.REDDIT_BASE_URL, '')


def _parse_atom_entry(entry, subreddit: str) -> RedditPost:
    """Entrada Atom (formato que usa Reddit)."""
    link = entry.get('link', '')
    author = entry.get('author_detail', {}).get('name') or entry.get('author') or 'unknown'
    contents = entry.get('content') or []
    body = contents[0].get('value', '') if contents else entry.get('summary', '')
    return RedditPost(
        id=extract_post_id(link, entry.get('id')),
        title=normalize_text(entry.get('title', '')),
        link=link,
        author=normalize_author(author),
        subreddit=subreddit,
        created=_entry_datetime(entry),
        content=normalize_text(body),
        permalink=_permalink(link),
    )


def _parse_rss_entry(entry, subreddit: str) -> RedditPost:
    """Item RSS 2.0."""
    link = entry.get('link', '')
    body = entry.get('description') or entry.get('summary', '')
    return RedditPost(
        id=extract_post_id(link, entry.get('id')),
        title=normalize_text(entry.get('title', '')),
        link=link,
        author=normalize_author(entry.get('author') or 'unknown'),
        subreddit=subreddit,
        created=_entry_datetime(entry),
        content=normalize_text(body),
        permalink=_permalink(link),
    )


def parse_feed(body: str, subreddit: str) -> List[RedditPost]:
    """
    Interpreta un feed de búsqueda: primero Atom, luego RSS 2.0.

    Raises:
        FeedParseError: si el documento no es un feed reconocible
    """
    feed = feedparser.parse(body)
    version = feed.get('version') or ''

    if version.startswith('atom'):
        parse_entry = _parse_atom_entry
    elif version.startswith('rss'):
        parse_entry = _parse_rss_entry
    elif not feed.entries:
        raise FeedParseError(f"Feed no reconocido para r/{subreddit}: {feed.get('bozo_exception', 'sin entradas')}")
    else:
        parse_entry = _parse_atom_entry

    return [parse_entry(entry, subreddit) for entry in feed.entries]


class RedditRSSCollector(FeedCollector):
    """
    Recolector de posts desde los feeds de búsqueda de Reddit.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = config.FEED_REQUEST_TIMEOUT_SECONDS,
                 max_retries: int = config.FEED_MAX_RETRIES,
                 retry_backoff: float = config.FEED_RETRY_BACKOFF_SECONDS):
        self._transport = transport
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff

    def get_relevant_subreddits(self, keyword: str) -> List[str]:
        """Elige subreddits por coincidencia de tema en la keyword."""
        lower_keyword = (keyword or "").lower()
        for topic, subreddits in config.DEFAULT_SUBREDDITS.items():
            if topic != 'default' and topic in lower_keyword:
                return list(subreddits)
        return list(config.DEFAULT_SUBREDDITS['default'])

    async def fetch_posts(self, keyword: str, subreddit: str, limit: int) -> List[RedditPost]:
        """
        Obtiene posts de r/<subreddit> que coinciden con la keyword.

        Args:
            keyword: Término de búsqueda
            subreddit: Subreddit donde buscar
            limit: Máximo de posts

        Returns:
            Lista de posts (vacía si todos los intentos fallan)
        """
        url = build_search_url(keyword, subreddit, limit)
        headers = {'User-Agent': settings.REDDIT_USER_AGENT}

        for attempt in range(1, self._max_retries + 1):
            try:
                async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout,
                                             headers=headers, follow_redirects=True) as client:
                    response = await client.get(url)
                    response.raise_for_status()

                posts = parse_feed(response.text, subreddit)[:limit]
                logger.info(f"📰 r/{subreddit}: {len(posts)} posts para '{keyword}'")
                return posts

            except FeedParseError as e:
                logger.error(f"❌ Feed inválido de r/{subreddit}: {e}")
                return []
            except httpx.HTTPError as e:
                logger.warning(f"⚠️ Intento {attempt}/{self._max_retries} falló para r/{subreddit}: {e}")
                if attempt < self._max_retries:
                    await asyncio.sleep(attempt * self._retry_backoff)
            except Exception as e:
                logger.error(f"❌ Error inesperado leyendo r/{subreddit}: {e}")
                return []

        logger.warning(f"⚠️ Todos los intentos fallaron para r/{subreddit}, retornando lista vacía")
        return []
