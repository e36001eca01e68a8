"""
Caso de uso para guardar items enriquecidos y recalcular las estadísticas de la keyword.
"""
from dataclasses import dataclass, field
from typing import List, Sequence

from services.pulse.app import config
from services.pulse.app.domain.entities import (
    RedditPost, RedditComment, SentimentCounts, SubredditStat
)
from services.pulse.app.domain.exceptions import DuplicateItemError
from services.pulse.app.domain.interfaces import ContentRepository, KeywordRepository
from shared.services.logging_config import get_logger


logger = get_logger(__name__)


@dataclass
class StoreContentResult:
    """Resultado del caso de uso de guardado."""
    stored_posts: int = 0
    stored_comments: int = 0
    duplicates_skipped: int = 0

    @property
    def total_stored(self) -> int:
        return self.stored_posts + self.stored_comments


@dataclass
class KeywordStats:
    """Estadísticas agregadas de una keyword, recalculadas desde el almacenamiento."""
    sentiment: SentimentCounts = field(default_factory=SentimentCounts)
    volume: int = 0
    trending: bool = False
    top_subreddits: List[SubredditStat] = field(default_factory=list)


class StoreContentUseCase:
    """
    Inserta posts y comentarios deduplicando por id externo.
    Los duplicados se cuentan como omitidos, no como errores.
    """

    def __init__(self,
                 content_repository: ContentRepository,
                 keyword_repository: KeywordRepository):
        self.content_repository = content_repository
        self.keyword_repository = keyword_repository

    def execute(self, keyword: str, posts: Sequence[RedditPost],
                comments: Sequence[RedditComment]) -> StoreContentResult:
        """
        Guarda los items de una keyword.

        Args:
            keyword: Keyword normalizada
            posts: Posts con análisis asignado
            comments: Comentarios con análisis asignado

        Returns:
            StoreContentResult con guardados y duplicados
        """
        result = StoreContentResult()

        for post in posts:
            try:
                self.content_repository.save_post(post, keyword)
                result.stored_posts += 1
            except DuplicateItemError:
                logger.info(f"ℹ️ Post {post.id} ya existe, omitido")
                result.duplicates_skipped += 1

        for comment in comments:
            try:
                self.content_repository.save_comment(comment, keyword)
                result.stored_comments += 1
            except DuplicateItemError:
                logger.info(f"ℹ️ Comentario {comment.id} ya existe, omitido")
                result.duplicates_skipped += 1

        logger.info(
            f"💾 '{keyword}': {result.total_stored} guardados, {result.duplicates_skipped} duplicados omitidos"
        )
        return result

    def compute_stats(self, keyword: str) -> KeywordStats:
        """Recalcula sentimiento, volumen, tendencia y top subreddits desde el almacenamiento."""
        sentiment = self.content_repository.count_sentiments(keyword)
        volume = sentiment.total
        return KeywordStats(
            sentiment=sentiment,
            volume=volume,
            trending=volume > config.TRENDING_VOLUME_THRESHOLD,
            top_subreddits=self.content_repository.top_subreddits(keyword, config.TOP_SUBREDDITS_LIMIT),
        )

    def update_keyword_stats(self, keyword: str) -> KeywordStats:
        """Recalcula y persiste las estadísticas agregadas de la keyword."""
        stats = self.compute_stats(keyword)
        self.keyword_repository.update_stats(
            keyword,
            sentiment=stats.sentiment,
            volume=stats.volume,
            trending=stats.trending,
            top_subreddits=stats.top_subreddits,
        )
        logger.info(
            f"📊 '{keyword}': volumen {stats.volume}, "
            f"+{stats.sentiment.positive}/-{stats.sentiment.negative}/={stats.sentiment.neutral}"
            f"{' 🔥 trending' if stats.trending else ''}"
        )
        return stats
