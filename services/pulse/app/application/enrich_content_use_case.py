"""
Caso de uso para enriquecer posts y comentarios con análisis.
"""
import asyncio
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Union

from services.pulse.app import config
from services.pulse.app.domain.entities import (
    Analysis, AnalysisContext, ItemType, RedditPost, RedditComment
)
from services.pulse.app.domain.exceptions import RateLimitError
from services.pulse.app.domain.fallback_analysis import fallback_analysis
from services.pulse.app.domain.interfaces import ContentAnalyzer
from shared.services.logging_config import get_logger


logger = get_logger(__name__)

ContentItem = Union[RedditPost, RedditComment]


@dataclass
class EnrichContentResult:
    """Resultado del caso de uso de enriquecimiento."""
    total_items: int = 0
    ai_analyzed: int = 0
    fallback_used: int = 0
    timed_out: bool = False
    quota_exceeded: bool = False
    errors: List[str] = field(default_factory=list)


@dataclass
class _RunState:
    """Estado compartido por los items de una misma ejecución."""
    quota_exceeded: bool = False
    ai_analyzed: int = 0
    fallback_used: int = 0


def build_context(item: ContentItem, keyword: str) -> AnalysisContext:
    item_type = ItemType.POST if isinstance(item, RedditPost) else ItemType.COMMENT
    return AnalysisContext(
        keyword=keyword,
        item_type=item_type,
        subreddit=item.subreddit,
        topic=item.title if isinstance(item, RedditPost) else None,
    )


class EnrichContentUseCase:
    """
    Orquesta el análisis en lotes con timeouts, backoff ante rate-limit y
    análisis local como respaldo. Siempre deja un Analysis en cada item.
    """

    def __init__(self,
                 analyzer: ContentAnalyzer,
                 batch_size: int = config.AI_BATCH_SIZE,
                 batch_delay: float = config.AI_INTER_BATCH_DELAY_SECONDS,
                 item_timeout: float = config.AI_ITEM_TIMEOUT_SECONDS,
                 overall_timeout: float = config.AI_OVERALL_TIMEOUT_SECONDS,
                 rate_limit_retries: int = config.AI_RATE_LIMIT_MAX_RETRIES,
                 rate_limit_backoff: float = config.AI_RATE_LIMIT_BACKOFF_SECONDS):
        self.analyzer = analyzer
        self.batch_size = max(1, batch_size)
        self.batch_delay = batch_delay
        self.item_timeout = item_timeout
        self.overall_timeout = overall_timeout
        self.rate_limit_retries = rate_limit_retries
        self.rate_limit_backoff = rate_limit_backoff

    def _fallback(self, item: ContentItem, context: AnalysisContext, state: _RunState) -> Analysis:
        state.fallback_used += 1
        return fallback_analysis(item.text, context)

    async def _analyze_item(self, item: ContentItem, keyword: str, state: _RunState) -> None:
        """
        Analiza un item con IA y asigna el resultado.
        Cualquier fallo deja el análisis local en su lugar.
        """
        context = build_context(item, keyword)

        for attempt in range(1, self.rate_limit_retries + 2):
            if state.quota_exceeded:
                item.analysis = self._fallback(item, context, state)
                return
            try:
                analysis = await asyncio.wait_for(
                    self.analyzer.analyze(item.text, context),
                    timeout=self.item_timeout
                )
                item.analysis = analysis
                state.ai_analyzed += 1
                return
            except asyncio.TimeoutError:
                logger.warning(f"⚠️ Timeout analizando {context.item_type.value} {item.id}, usando análisis local")
                item.analysis = self._fallback(item, context, state)
                return
            except RateLimitError as e:
                if attempt <= self.rate_limit_retries:
                    delay = attempt * self.rate_limit_backoff
                    logger.warning(f"⚠️ Rate limit de IA (intento {attempt}), esperando {delay:g}s: {e}")
                    await asyncio.sleep(delay)
                    continue
                logger.warning("⚠️ Cuota de IA agotada, el resto de la ejecución usará análisis local")
                state.quota_exceeded = True
                item.analysis = self._fallback(item, context, state)
                return
            except Exception as e:
                logger.warning(f"⚠️ Error de IA en {context.item_type.value} {item.id}, usando análisis local: {e}")
                item.analysis = self._fallback(item, context, state)
                return

    async def _run_batches(self, items: List[ContentItem], keyword: str, state: _RunState) -> None:
        total_batches = math.ceil(len(items) / self.batch_size)
        for index in range(0, len(items), self.batch_size):
            batch = items[index:index + self.batch_size]
            await asyncio.gather(*[self._analyze_item(item, keyword, state) for item in batch])
            logger.info(f"🧠 Lote {index // self.batch_size + 1}/{total_batches} analizado")
            if index + self.batch_size < len(items):
                await asyncio.sleep(self.batch_delay)

    async def execute(self, items: Sequence[ContentItem], keyword: str) -> EnrichContentResult:
        """
        Enriquece los items en su lugar (asigna `item.analysis`).

        Args:
            items: Posts y/o comentarios filtrados
            keyword: Keyword de origen

        Returns:
            EnrichContentResult con el desglose IA / local
        """
        items = list(items)
        result = EnrichContentResult(total_items=len(items))
        state = _RunState()

        if not items:
            return result

        if not self.analyzer.is_enabled():
            logger.info(f"🧠 IA deshabilitada: análisis local para {len(items)} items de '{keyword}'")
            for item in items:
                item.analysis = self._fallback(item, build_context(item, keyword), state)
        else:
            try:
                await asyncio.wait_for(self._run_batches(items, keyword, state), timeout=self.overall_timeout)
            except asyncio.TimeoutError:
                message = f"AI analysis timed out after {self.overall_timeout:g}s; remaining items used local analysis"
                logger.warning(f"⚠️ {message}")
                result.timed_out = True
                result.errors.append(message)

            for item in items:
                if item.analysis is None:
                    item.analysis = self._fallback(item, build_context(item, keyword), state)

        result.ai_analyzed = state.ai_analyzed
        result.fallback_used = state.fallback_used
        result.quota_exceeded = state.quota_exceeded
        logger.info(
            f"✅ Enriquecimiento de '{keyword}': {result.ai_analyzed} con IA, {result.fallback_used} locales"
        )
        return result
