"""
Caso de uso para recolectar posts y comentarios de Reddit para una keyword.
"""
import asyncio
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from services.pulse.app import config
from services.pulse.app.domain.entities import RedditPost, RedditComment
from services.pulse.app.domain.interfaces import FeedCollector, ThreadCollector
from shared.services.logging_config import get_logger


logger = get_logger(__name__)


@dataclass
class FetchRedditDataResult:
    """Resultado de la fase de recolección."""
    posts: List[RedditPost] = field(default_factory=list)
    comments: List[RedditComment] = field(default_factory=list)
    subreddits: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    timed_out: bool = False


class FetchRedditDataUseCase:
    """
    Recolecta posts de varios subreddits y los comentarios de los primeros
    posts de cada uno. Las consultas se lanzan en paralelo, acotadas por un
    semáforo, y toda la fase tiene un timeout global.
    """

    def __init__(self,
                 feed_collector: FeedCollector,
                 thread_collector: ThreadCollector,
                 concurrency: int = config.FETCH_CONCURRENCY,
                 phase_timeout: float = config.FETCH_PHASE_TIMEOUT_SECONDS):
        self.feed_collector = feed_collector
        self.thread_collector = thread_collector
        self.concurrency = concurrency
        self.phase_timeout = phase_timeout

    async def _fetch_subreddit(self, semaphore: asyncio.Semaphore, keyword: str, subreddit: str,
                               limit: int, include_comments: bool,
                               max_comments_per_post: int) -> Tuple[List[RedditPost], List[RedditComment]]:
        async with semaphore:
            posts = await self.feed_collector.fetch_posts(keyword, subreddit, limit)

        comments: List[RedditComment] = []
        if include_comments and posts and max_comments_per_post > 0:
            targets = posts[:config.COMMENT_POSTS_PER_SUBREDDIT]
            results = await asyncio.gather(
                *[self.thread_collector.fetch_comments(post, max_comments_per_post) for post in targets],
                return_exceptions=True
            )
            for post, result in zip(targets, results):
                if isinstance(result, Exception):
                    logger.warning(f"⚠️ Comentarios omitidos para el post {post.id}: {result}")
                    continue
                comments.extend(result)
        return posts, comments

    async def execute(self,
                      keyword: str,
                      subreddits: Optional[List[str]] = None,
                      max_posts: int = config.DEFAULT_MAX_POSTS,
                      include_comments: bool = True,
                      max_comments_per_post: int = config.DEFAULT_MAX_COMMENTS_PER_POST) -> FetchRedditDataResult:
        """
        Ejecuta la recolección.

        Args:
            keyword: Keyword normalizada
            subreddits: Subreddits a consultar (None usa los de por defecto)
            max_posts: Máximo total de posts, repartido entre subreddits
            include_comments: Si se leen comentarios
            max_comments_per_post: Máximo de comentarios por post

        Returns:
            FetchRedditDataResult con los items obtenidos (parciales si hubo timeout)
        """
        channels = [s.strip() for s in (subreddits or []) if s and s.strip()]
        if not channels:
            channels = self.feed_collector.get_relevant_subreddits(keyword)

        result = FetchRedditDataResult(subreddits=channels)
        per_subreddit = max(1, math.ceil(max_posts / len(channels)))
        logger.info(f"📰 Recolectando '{keyword}' de {len(channels)} subreddits ({per_subreddit} posts c/u)")

        semaphore = asyncio.Semaphore(self.concurrency)
        tasks = {
            asyncio.ensure_future(self._fetch_subreddit(
                semaphore, keyword, channel, per_subreddit, include_comments, max_comments_per_post
            )): channel
            for channel in channels
        }
        done, pending = await asyncio.wait(tasks.keys(), timeout=self.phase_timeout)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            result.timed_out = True
            missing = sorted(tasks[task] for task in pending)
            message = f"Reddit fetch timed out after {self.phase_timeout:g}s for: {', '.join(missing)}"
            logger.warning(f"⚠️ {message}")
            result.errors.append(message)

        seen_posts = set()
        seen_comments = set()
        # Orden estable: el de los subreddits solicitados
        for task, channel in tasks.items():
            if task not in done:
                continue
            if task.exception() is not None:
                message = f"Error fetching r/{channel}: {task.exception()}"
                logger.error(f"❌ {message}")
                result.errors.append(message)
                continue
            posts, comments = task.result()
            for post in posts:
                if post.id not in seen_posts:
                    seen_posts.add(post.id)
                    result.posts.append(post)
            for comment in comments:
                if comment.id not in seen_comments:
                    seen_comments.add(comment.id)
                    result.comments.append(comment)

        result.posts = result.posts[:max_posts]
        logger.info(f"✅ Recolección de '{keyword}': {len(result.posts)} posts, {len(result.comments)} comentarios")
        return result
