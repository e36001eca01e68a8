"""
Casos de uso de lectura: datos paginados, estadísticas y keywords en tendencia.
"""
import math
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional

from services.pulse.app import config
from services.pulse.app.domain.entities import SentimentClass, normalize_keyword
from services.pulse.app.domain.interfaces import ContentRepository, KeywordRepository
from shared.services.logging_config import get_logger


logger = get_logger(__name__)

ITEM_TYPES = ('posts', 'comments', 'both')
SORT_FIELDS = {
    'aggregateScore': 'weightedScore',
    'createdAt': 'createdAt',
    'externalScore': 'score',
}


def _serialize(item: Dict[str, Any]) -> Dict[str, Any]:
    for key in ('createdAt', 'storedAt'):
        value = item.get(key)
        if isinstance(value, datetime):
            item[key] = value.isoformat()
    return item


class QueryContentUseCase:
    """
    Consultas sobre el contenido almacenado.
    """

    def __init__(self,
                 content_repository: ContentRepository,
                 keyword_repository: KeywordRepository):
        self.content_repository = content_repository
        self.keyword_repository = keyword_repository

    def get_data(self,
                 keyword: Optional[str] = None,
                 item_type: str = 'both',
                 sentiment: Optional[str] = None,
                 subreddit: Optional[str] = None,
                 sort_by: str = 'aggregateScore',
                 sort_order: str = 'desc',
                 page: int = 1,
                 limit: int = 20) -> Dict[str, Any]:
        """
        Items paginados con filtros y orden.

        Args:
            keyword: Keyword (None = todas)
            item_type: posts, comments o both
            sentiment: positive, negative o neutral
            subreddit: Filtro por subreddit
            sort_by: aggregateScore, createdAt o externalScore
            sort_order: asc o desc
            page: Página (desde 1)
            limit: Items por página (máx. 100)

        Returns:
            Diccionario con items, paginación y estadísticas

        Raises:
            ValueError: si algún parámetro no es válido
        """
        if item_type not in ITEM_TYPES:
            raise ValueError(f"type must be one of {', '.join(ITEM_TYPES)}")
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"sortBy must be one of {', '.join(SORT_FIELDS)}")
        if sort_order not in ('asc', 'desc'):
            raise ValueError("sortOrder must be asc or desc")
        if sentiment is not None and sentiment not in {s.value for s in SentimentClass}:
            raise ValueError("sentiment must be positive, negative or neutral")

        page = max(1, page)
        limit = max(1, min(limit, config.MAX_QUERY_LIMIT))
        keyword = normalize_keyword(keyword) if keyword else None
        filters = {'keyword': keyword, 'sentiment': sentiment, 'subreddit': subreddit}
        descending = sort_order == 'desc'
        tables = ['posts', 'comments'] if item_type == 'both' else [item_type]

        # Cada tabla aporta como máximo page*limit items; se mezclan y se corta la página
        window = page * limit
        merged: List[Dict[str, Any]] = []
        counts = {}
        for table in tables:
            counts[table] = self.content_repository.count(table, filters)
            merged.extend(self.content_repository.query(table, filters, sort_by, descending, window))

        sort_field = SORT_FIELDS[sort_by]
        merged.sort(key=lambda item: item[sort_field], reverse=descending)
        start = (page - 1) * limit
        items = [_serialize(item) for item in merged[start:start + limit]]

        total_count = sum(counts.values())
        total_pages = math.ceil(total_count / limit) if total_count else 0
        return {
            'items': items,
            'pagination': {
                'page': page,
                'limit': limit,
                'totalCount': total_count,
                'totalPages': total_pages,
                'hasNext': page < total_pages,
                'hasPrev': page > 1,
            },
            'statistics': self.statistics(keyword),
        }

    def statistics(self, keyword: Optional[str] = None) -> Dict[str, Any]:
        """Totales, mezcla de sentimiento y top subreddits (de una keyword o globales)."""
        keyword = normalize_keyword(keyword) if keyword else None
        filters = {'keyword': keyword}
        total_posts = self.content_repository.count('posts', filters)
        total_comments = self.content_repository.count('comments', filters)
        sentiment = self.content_repository.count_sentiments(keyword)

        stats = {
            'keyword': keyword,
            'totalPosts': total_posts,
            'totalComments': total_comments,
            'totalItems': total_posts + total_comments,
            'sentiment': sentiment.to_dict(),
            'topSubreddits': [
                stat.to_dict() for stat in self.content_repository.top_subreddits(keyword, config.TOP_SUBREDDITS_LIMIT)
            ],
        }
        if keyword:
            record = self.keyword_repository.find_by_keyword(keyword)
            stats['trending'] = record.trending if record else False
            stats['fetchStatus'] = record.fetch_status.value if record else None
            stats['lastFetched'] = record.last_fetched.isoformat() if record and record.last_fetched else None
        return stats

    def trending(self, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Keywords ordenadas por actividad de las últimas 24 h, luego por total
        de items y por volumen.
        """
        limit = max(1, min(limit, config.MAX_QUERY_LIMIT))
        since = datetime.utcnow() - timedelta(hours=config.RECENT_DATA_WINDOW_HOURS)

        ranked = []
        for record in self.keyword_repository.find_with_volume():
            filters = {'keyword': record.keyword}
            total_items = (self.content_repository.count('posts', filters)
                           + self.content_repository.count('comments', filters))
            ranked.append({
                'keyword': record.keyword,
                'volume': record.volume,
                'sentiment': record.sentiment.to_dict(),
                'recentActivity': self.content_repository.count_recent(record.keyword, since),
                'totalItems': total_items,
                'trending': record.trending,
                'lastFetched': record.last_fetched.isoformat() if record.last_fetched else None,
            })

        ranked.sort(key=lambda entry: (-entry['recentActivity'], -entry['totalItems'], -entry['volume'], entry['keyword']))
        return ranked[:limit]
