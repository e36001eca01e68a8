"""
Caso de uso para la ejecución programada: procesa las keywords vencidas.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from services.pulse.app import config
from services.pulse.app.domain.entities import FetchRequest, FetchResult
from services.pulse.app.domain.interfaces import KeywordRepository
from services.pulse.app.infrastructure.keyword_lock import KeywordLockRegistry
from shared.services.logging_config import get_logger

from .keyword_cycle_use_case import KeywordCycleUseCase


logger = get_logger(__name__)


@dataclass
class ScheduledFetchResult:
    """Resultado de una ejecución programada."""
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    results: List[FetchResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self):
        return {
            'processed': self.processed,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'startedAt': self.started_at.isoformat(),
            'keywords': [
                {'keyword': r.keyword, 'success': r.success, 'totalStored': r.total_stored, 'errors': r.errors}
                for r in self.results
            ],
        }


class ScheduledFetchUseCase:
    """
    Selecciona hasta N keywords vencidas y ejecuta su ciclo de forma
    secuencial, con una pausa entre keywords.
    """

    def __init__(self,
                 cycle_use_case: KeywordCycleUseCase,
                 keyword_repository: KeywordRepository,
                 locks: KeywordLockRegistry,
                 batch_limit: int = config.SCHEDULED_KEYWORDS_PER_RUN,
                 keyword_delay: float = config.SCHEDULED_KEYWORD_DELAY_SECONDS):
        self.cycle_use_case = cycle_use_case
        self.keyword_repository = keyword_repository
        self.locks = locks
        self.batch_limit = batch_limit
        self.keyword_delay = keyword_delay

    async def execute(self) -> ScheduledFetchResult:
        """
        Ejecuta una pasada del scheduler.

        Returns:
            ScheduledFetchResult con el resultado por keyword
        """
        result = ScheduledFetchResult()
        due = self.keyword_repository.find_due(
            datetime.utcnow(), self.batch_limit, exclude=self.locks.active_keywords()
        )
        if not due:
            logger.info("⏰ No hay keywords pendientes de fetch")
            return result

        logger.info(f"⏰ Procesando {len(due)} keywords programadas: {', '.join(k.keyword for k in due)}")
        for index, record in enumerate(due):
            request = FetchRequest(
                keyword=record.keyword,
                max_posts=config.SCHEDULED_MAX_POSTS,
                include_comments=True,
                max_comments_per_post=config.SCHEDULED_MAX_COMMENTS_PER_POST,
                force_refresh=False,
            )
            try:
                cycle = await self.cycle_use_case.execute(request)
            except Exception as e:
                # Un fallo inesperado no debe impedir procesar el resto
                logger.error(f"💥 Error inesperado procesando '{record.keyword}': {e}")
                cycle = FetchResult(keyword=record.keyword, errors=[str(e)])

            result.results.append(cycle)
            result.processed += 1
            if cycle.success:
                result.succeeded += 1
            else:
                result.failed += 1

            if index < len(due) - 1:
                await asyncio.sleep(self.keyword_delay)

        logger.info(f"✅ Pasada programada: {result.succeeded} ok, {result.failed} con error")
        return result
