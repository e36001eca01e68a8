"""
Adaptador de hilos de comentarios de Reddit.
Lee la representación JSON pública del hilo (misma URL con sufijo .json).
"""
from datetime import datetime
from typing import List, Optional

import httpx

from services.pulse.app import config
from services.pulse.app.domain.entities import RedditPost, RedditComment
from services.pulse.app.domain.interfaces import ThreadCollector
from services.pulse.app.domain.text_normalizer import normalize_text, normalize_author
from shared.config.settings import settings
from shared.services.logging_config import get_logger


logger = get_logger(__name__)


def build_thread_url(post: RedditPost) -> str:
    return (post.link or "").rstrip('/') + '.json'


def parse_thread(payload, post: RedditPost, limit: int) -> List[RedditComment]:
    """
    Extrae comentarios de nivel superior del listado JSON del hilo.
    Omite entradas 'more' y cuerpos eliminados.
    """
    if not isinstance(payload, list) or len(payload) < 2:
        return []

    children = payload[1].get('data', {}).get('children', [])
    base_permalink = (post.permalink or "").rstrip('/')
    comments: List[RedditComment] = []

    for child in children:
        if len(comments) >= limit:
            break
        if child.get('kind') == 'more':
            continue
        data = child.get('data') or {}
        body = data.get('body')
        if not body or body.strip() in config.REMOVED_COMMENT_MARKERS:
            continue
        comment_id = data.get('id')
        if not comment_id:
            continue

        created_utc = data.get('created_utc')
        created = datetime.utcfromtimestamp(created_utc) if created_utc else datetime.utcnow()

        comments.append(RedditComment(
            id=comment_id,
            post_id=post.id,
            author=normalize_author(data.get('author') or 'unknown'),
            content=normalize_text(body),
            score=int(data.get('score') or 0),
            created=created,
            permalink=f"{base_permalink}/{comment_id}/",
            subreddit=post.subreddit,
        ))
    return comments


class RedditThreadCollector(ThreadCollector):
    """
    Recolector de comentarios de un post.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = config.THREAD_REQUEST_TIMEOUT_SECONDS):
        self._transport = transport
        self._timeout = timeout

    async def fetch_comments(self, post: RedditPost, limit: int) -> List[RedditComment]:
        """
        Obtiene hasta `limit` comentarios del post.
        Cualquier fallo de red o de formato retorna una lista vacía.
        """
        if limit <= 0 or not post.link:
            return []

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout,
                                         headers={'User-Agent': settings.REDDIT_USER_AGENT},
                                         follow_redirects=True) as client:
                response = await client.get(build_thread_url(post))
                response.raise_for_status()
                payload = response.json()

            comments = parse_thread(payload, post, limit)
            logger.info(f"💬 Post {post.id}: {len(comments)} comentarios")
            return comments

        except httpx.HTTPError as e:
            logger.warning(f"⚠️ No se pudieron obtener comentarios del post {post.id}: {e}")
            return []
        except Exception as e:
            logger.error(f"❌ Error procesando comentarios del post {post.id}: {e}")
            return []
