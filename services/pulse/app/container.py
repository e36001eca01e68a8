"""
Grafo de dependencias del servicio Pulse.
Se construye una sola vez por proceso (en el lifespan de FastAPI).
"""
from dataclasses import dataclass
from typing import Optional

from services.pulse.app.application import (
    FetchRedditDataUseCase, EnrichContentUseCase, StoreContentUseCase,
    QueryContentUseCase, KeywordCycleUseCase, ScheduledFetchUseCase,
    KeywordSchedulingUseCase,
)
from services.pulse.app.domain.interfaces import (
    ContentAnalyzer, FeedCollector, ThreadCollector
)
from services.pulse.app.infrastructure.database_repository import (
    SqlAlchemyContentRepository, SqlAlchemyKeywordRepository
)
from services.pulse.app.infrastructure.gemini_adapter import GeminiContentAnalyzer
from services.pulse.app.infrastructure.keyword_lock import KeywordLockRegistry
from services.pulse.app.infrastructure.reddit_rss_adapter import RedditRSSCollector
from services.pulse.app.infrastructure.reddit_thread_adapter import RedditThreadCollector
from services.pulse.app.infrastructure.scheduler import KeywordScheduler
from shared.database.session import SessionLocal


@dataclass
class Container:
    """Dependencias compartidas por routers y scheduler."""
    keyword_cycle: KeywordCycleUseCase
    query: QueryContentUseCase
    scheduling: KeywordSchedulingUseCase
    scheduler: KeywordScheduler
    locks: KeywordLockRegistry
    analyzer: ContentAnalyzer
    session_factory: object


def build_container(session_factory=SessionLocal,
                    feed_collector: Optional[FeedCollector] = None,
                    thread_collector: Optional[ThreadCollector] = None,
                    analyzer: Optional[ContentAnalyzer] = None,
                    enrich_use_case: Optional[EnrichContentUseCase] = None,
                    scheduler_interval_minutes: Optional[int] = None) -> Container:
    """
    Construye el grafo de dependencias.
    Los parámetros opcionales permiten sustituir adaptadores externos.
    """
    locks = KeywordLockRegistry()
    content_repository = SqlAlchemyContentRepository(session_factory)
    keyword_repository = SqlAlchemyKeywordRepository(session_factory)
    analyzer = analyzer or GeminiContentAnalyzer()

    fetch_use_case = FetchRedditDataUseCase(
        feed_collector or RedditRSSCollector(),
        thread_collector or RedditThreadCollector(),
    )
    store_use_case = StoreContentUseCase(content_repository, keyword_repository)
    keyword_cycle = KeywordCycleUseCase(
        fetch_use_case=fetch_use_case,
        enrich_use_case=enrich_use_case or EnrichContentUseCase(analyzer),
        store_use_case=store_use_case,
        content_repository=content_repository,
        keyword_repository=keyword_repository,
        locks=locks,
    )
    scheduled_fetch = ScheduledFetchUseCase(keyword_cycle, keyword_repository, locks)

    return Container(
        keyword_cycle=keyword_cycle,
        query=QueryContentUseCase(content_repository, keyword_repository),
        scheduling=KeywordSchedulingUseCase(keyword_repository),
        scheduler=KeywordScheduler(scheduled_fetch, locks, scheduler_interval_minutes),
        locks=locks,
        analyzer=analyzer,
        session_factory=session_factory,
    )
