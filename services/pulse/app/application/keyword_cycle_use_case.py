"""
Caso de uso para un ciclo completo de una keyword:
recolección → filtro → enriquecimiento → guardado → estadísticas.
"""
import time
from datetime import datetime, timedelta

from services.pulse.app import config
from services.pulse.app.domain.entities import FetchRequest, FetchResult, FetchStatus
from services.pulse.app.domain.exceptions import KeywordAlreadyProcessingError
from services.pulse.app.domain.interfaces import ContentRepository, KeywordRepository
from services.pulse.app.domain.relevance_filter import select_relevant
from services.pulse.app.infrastructure.keyword_lock import KeywordLockRegistry
from shared.services.logging_config import get_logger

from .enrich_content_use_case import EnrichContentUseCase
from .fetch_reddit_data_use_case import FetchRedditDataUseCase
from .store_content_use_case import StoreContentUseCase


logger = get_logger(__name__)


class KeywordCycleUseCase:
    """
    Ejecuta un ciclo para una keyword, manteniendo su estado
    pending → processing → completed | failed.

    Nunca lanza excepciones hacia quien lo invoca: siempre retorna un
    FetchResult con semántica de éxito parcial.
    """

    def __init__(self,
                 fetch_use_case: FetchRedditDataUseCase,
                 enrich_use_case: EnrichContentUseCase,
                 store_use_case: StoreContentUseCase,
                 content_repository: ContentRepository,
                 keyword_repository: KeywordRepository,
                 locks: KeywordLockRegistry):
        self.fetch_use_case = fetch_use_case
        self.enrich_use_case = enrich_use_case
        self.store_use_case = store_use_case
        self.content_repository = content_repository
        self.keyword_repository = keyword_repository
        self.locks = locks

    async def execute(self, request: FetchRequest) -> FetchResult:
        """
        Ejecuta el ciclo.

        Args:
            request: Parámetros del fetch (keyword ya normalizada)

        Returns:
            FetchResult con conteos, errores y estadísticas
        """
        started = time.monotonic()
        result = FetchResult(keyword=request.keyword)

        if not request.keyword:
            result.errors.append("Keyword is required")
            return result

        try:
            with self.locks.hold(request.keyword):
                await self._run_cycle(request, result)
        except KeywordAlreadyProcessingError as e:
            result.already_processing = True
            result.success = False
            result.errors.append(str(e))
        finally:
            result.processing_time_ms = int((time.monotonic() - started) * 1000)

        return result

    async def _run_cycle(self, request: FetchRequest, result: FetchResult) -> None:
        keyword = request.keyword
        logger.info(f"🚀 Iniciando ciclo para '{keyword}' (rol {request.caller_role.value})")

        try:
            record = self.keyword_repository.get_or_create(keyword)
            self.keyword_repository.update_status(keyword, FetchStatus.PROCESSING)

            since = datetime.utcnow() - timedelta(hours=config.RECENT_DATA_WINDOW_HOURS)
            if not request.force_refresh and self.content_repository.has_recent_data(keyword, since):
                logger.info(f"♻️ '{keyword}' tiene datos recientes, ciclo omitido")
                stats = self.store_use_case.compute_stats(keyword)
                self._complete(keyword, record.fetch_interval, fetched=False)
                result.skipped_fresh = True
                result.sentiment_stats = stats.sentiment
                result.top_channels = stats.top_subreddits
                result.success = True
                return

            fetched = await self.fetch_use_case.execute(
                keyword,
                subreddits=request.subreddits,
                max_posts=request.max_posts,
                include_comments=request.include_comments,
                max_comments_per_post=request.max_comments_per_post,
            )
            result.errors.extend(fetched.errors)
            result.fetched_posts = len(fetched.posts)
            result.fetched_comments = len(fetched.comments)

            posts, comments = select_relevant(fetched.posts, fetched.comments, keyword, request.caller_role)
            logger.info(f"🔎 '{keyword}': {len(posts)}/{len(fetched.posts)} posts y "
                        f"{len(comments)}/{len(fetched.comments)} comentarios tras el filtro")

            enriched = await self.enrich_use_case.execute(list(posts) + list(comments), keyword)
            result.errors.extend(enriched.errors)

            stored = self.store_use_case.execute(keyword, posts, comments)
            stats = self.store_use_case.update_keyword_stats(keyword)

            self._complete(keyword, record.fetch_interval)

            result.total_posts = len(posts)
            result.total_comments = len(comments)
            result.total_stored = stored.total_stored
            result.duplicates_skipped = stored.duplicates_skipped
            result.sentiment_stats = stats.sentiment
            result.top_channels = stats.top_subreddits
            result.success = True
            logger.info(f"✅ Ciclo de '{keyword}' completado: {stored.total_stored} items guardados")

        except Exception as e:
            logger.error(f"💥 Ciclo de '{keyword}' falló: {e}")
            result.success = False
            result.errors.append(f"Cycle failed: {e}")
            try:
                self.keyword_repository.update_status(keyword, FetchStatus.FAILED)
            except Exception as status_error:
                logger.error(f"❌ No se pudo marcar '{keyword}' como failed: {status_error}")

    def _complete(self, keyword: str, fetch_interval: int, fetched: bool = True) -> None:
        now = datetime.utcnow()
        self.keyword_repository.update_status(
            keyword,
            FetchStatus.COMPLETED,
            last_fetched=now if fetched else None,
            next_scheduled_fetch=now + timedelta(hours=fetch_interval),
        )
