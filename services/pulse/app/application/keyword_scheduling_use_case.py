"""
Caso de uso para administrar la programación de keywords.
"""
from typing import List, Optional

from services.pulse.app import config
from services.pulse.app.domain.entities import Keyword, normalize_keyword
from services.pulse.app.domain.interfaces import KeywordRepository
from shared.services.logging_config import get_logger


logger = get_logger(__name__)


def validate_interval(fetch_interval: int) -> int:
    if not config.MIN_FETCH_INTERVAL_HOURS <= fetch_interval <= config.MAX_FETCH_INTERVAL_HOURS:
        raise ValueError(
            f"fetchInterval must be between {config.MIN_FETCH_INTERVAL_HOURS} "
            f"and {config.MAX_FETCH_INTERVAL_HOURS} hours"
        )
    return fetch_interval


def _require_keyword(keyword: str) -> str:
    normalized = normalize_keyword(keyword)
    if not normalized:
        raise ValueError("Keyword is required")
    return normalized


class KeywordSchedulingUseCase:
    """
    Alta, modificación y baja de keywords en el scheduler.
    """

    def __init__(self, keyword_repository: KeywordRepository):
        self.keyword_repository = keyword_repository

    def schedule(self, keyword: str, fetch_interval: int = config.DEFAULT_FETCH_INTERVAL_HOURS,
                 auto_fetch: bool = True) -> Keyword:
        """
        Agrega o actualiza la programación de una keyword.
        Una keyword en estado failed vuelve a pending.

        Raises:
            ValueError: keyword vacía o intervalo fuera de rango
        """
        keyword = _require_keyword(keyword)
        validate_interval(fetch_interval)
        record = self.keyword_repository.save_schedule(keyword, fetch_interval, auto_fetch)
        logger.info(f"📅 Keyword '{keyword}' programada cada {fetch_interval}h (auto-fetch {auto_fetch})")
        return record

    def update_interval(self, keyword: str, fetch_interval: int) -> Optional[Keyword]:
        """Cambia solo el intervalo. Retorna None si la keyword no existe."""
        keyword = _require_keyword(keyword)
        validate_interval(fetch_interval)
        record = self.keyword_repository.update_interval(keyword, fetch_interval)
        if record:
            logger.info(f"📅 Intervalo de '{keyword}' actualizado a {fetch_interval}h")
        return record

    def unschedule(self, keyword: str) -> bool:
        """Quita la keyword del scheduler (se desactiva, nunca se borra)."""
        keyword = _require_keyword(keyword)
        removed = self.keyword_repository.unschedule(keyword)
        if removed:
            logger.info(f"🗑️ Keyword '{keyword}' retirada del scheduler")
        return removed

    def list_scheduled(self) -> List[Keyword]:
        return self.keyword_repository.find_scheduled()
