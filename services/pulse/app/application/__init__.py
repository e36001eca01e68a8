# Application layer - Use cases and business logic

# Exportar todos los casos de uso para facilitar las importaciones
from .fetch_reddit_data_use_case import FetchRedditDataUseCase, FetchRedditDataResult
from .enrich_content_use_case import EnrichContentUseCase, EnrichContentResult
from .store_content_use_case import StoreContentUseCase, StoreContentResult, KeywordStats
from .query_content_use_case import QueryContentUseCase
from .keyword_cycle_use_case import KeywordCycleUseCase
from .scheduled_fetch_use_case import ScheduledFetchUseCase, ScheduledFetchResult
from .keyword_scheduling_use_case import KeywordSchedulingUseCase

__all__ = [
    'FetchRedditDataUseCase',
    'FetchRedditDataResult',
    'EnrichContentUseCase',
    'EnrichContentResult',
    'StoreContentUseCase',
    'StoreContentResult',
    'KeywordStats',
    'QueryContentUseCase',
    'KeywordCycleUseCase',
    'ScheduledFetchUseCase',
    'ScheduledFetchResult',
    'KeywordSchedulingUseCase',
]
