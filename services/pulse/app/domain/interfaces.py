"""
Interfaces del dominio (puertos) que definen contratos para las dependencias externas.
Estas interfaces serán implementadas en la capa de infraestructura.
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from datetime import datetime
from .entities import (
    Analysis, AnalysisContext, RedditPost, RedditComment, Keyword,
    SentimentCounts, SubredditStat, FetchStatus
)


class FeedCollector(ABC):
    """
    Puerto para la recolección de posts desde feeds de Reddit.
    """

    @abstractmethod
    async def fetch_posts(self, keyword: str, subreddit: str, limit: int) -> List[RedditPost]:
        """
        Obtiene posts de un subreddit para una keyword.
        Nunca lanza excepciones: ante fallo retorna una lista vacía.
        """
        pass

    @abstractmethod
    def get_relevant_subreddits(self, keyword: str) -> List[str]:
        """Subreddits por defecto para una keyword."""
        pass


class ThreadCollector(ABC):
    """
    Puerto para la recolección de comentarios de un post.
    """

    @abstractmethod
    async def fetch_comments(self, post: RedditPost, limit: int) -> List[RedditComment]:
        """Obtiene hasta `limit` comentarios. Ante fallo retorna una lista vacía."""
        pass


class ContentAnalyzer(ABC):
    """
    Puerto para el servicio externo de análisis con IA.
    """

    @abstractmethod
    def is_enabled(self) -> bool:
        """Indica si el análisis con IA está disponible (flag + credencial)."""
        pass

    @abstractmethod
    async def analyze(self, text: str, context: AnalysisContext) -> Analysis:
        """
        Analiza un texto.
        Lanza RateLimitError ante cuota excedida y AnalysisServiceError ante otros fallos.
        """
        pass


class ContentRepository(ABC):
    """
    Puerto para el repositorio de posts y comentarios.
    """

    @abstractmethod
    def save_post(self, post: RedditPost, keyword: str) -> None:
        """Guarda un post; lanza DuplicateItemError si el id externo ya existe."""
        pass

    @abstractmethod
    def save_comment(self, comment: RedditComment, keyword: str) -> None:
        """Guarda un comentario; lanza DuplicateItemError si el id externo ya existe."""
        pass

    @abstractmethod
    def has_recent_data(self, keyword: str, since: datetime) -> bool:
        pass

    @abstractmethod
    def count_sentiments(self, keyword: Optional[str]) -> SentimentCounts:
        pass

    @abstractmethod
    def top_subreddits(self, keyword: Optional[str], limit: int) -> List[SubredditStat]:
        pass

    @abstractmethod
    def count_recent(self, keyword: str, since: datetime) -> int:
        pass

    @abstractmethod
    def query(self, item_type: str, filters: Dict[str, Any], sort_by: str,
              descending: bool, limit: int) -> List[Dict[str, Any]]:
        """
        Retorna como máximo `limit` items ya ordenados.
        `item_type` es 'posts' o 'comments'.
        """
        pass

    @abstractmethod
    def count(self, item_type: str, filters: Dict[str, Any]) -> int:
        pass


class KeywordRepository(ABC):
    """
    Puerto para el repositorio de keywords.
    """

    @abstractmethod
    def find_by_keyword(self, keyword: str) -> Optional[Keyword]:
        pass

    @abstractmethod
    def get_or_create(self, keyword: str) -> Keyword:
        pass

    @abstractmethod
    def update_status(self, keyword: str, status: FetchStatus,
                      last_fetched: Optional[datetime] = None,
                      next_scheduled_fetch: Optional[datetime] = None) -> None:
        pass

    @abstractmethod
    def update_stats(self, keyword: str, sentiment: SentimentCounts, volume: int,
                     trending: bool, top_subreddits: List[SubredditStat]) -> None:
        pass

    @abstractmethod
    def save_schedule(self, keyword: str, fetch_interval: int, auto_fetch: bool,
                      reset_failed: bool = True) -> Keyword:
        """
        Crea o actualiza la programación de una keyword y la reactiva.
        Con `reset_failed`, una keyword en estado failed vuelve a pending.
        """
        pass

    @abstractmethod
    def update_interval(self, keyword: str, fetch_interval: int) -> Optional[Keyword]:
        """Retorna None si la keyword no existe."""
        pass

    @abstractmethod
    def unschedule(self, keyword: str) -> bool:
        """Desactiva auto-fetch y borra el próximo fetch. False si no existe."""
        pass

    @abstractmethod
    def find_due(self, now: datetime, limit: int, exclude: List[str]) -> List[Keyword]:
        pass

    @abstractmethod
    def find_scheduled(self) -> List[Keyword]:
        pass

    @abstractmethod
    def find_with_volume(self) -> List[Keyword]:
        """Keywords activas con volumen > 0."""
        pass
