"""
Registro en memoria de keywords en procesamiento.
Garantiza un único ciclo en curso por keyword dentro del proceso.
"""
import threading
from contextlib import contextmanager
from typing import List

from services.pulse.app.domain.exceptions import KeywordAlreadyProcessingError
from shared.services.logging_config import get_logger


logger = get_logger(__name__)


class KeywordLockRegistry:
    """
    Conjunto de keywords en curso protegido por un mutex.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._active = set()

    def acquire(self, keyword: str) -> bool:
        """Marca la keyword como en curso. Retorna False si ya lo estaba."""
        with self._lock:
            if keyword in self._active:
                return False
            self._active.add(keyword)
            return True

    def release(self, keyword: str) -> None:
        with self._lock:
            self._active.discard(keyword)

    def is_locked(self, keyword: str) -> bool:
        with self._lock:
            return keyword in self._active

    def active_keywords(self) -> List[str]:
        with self._lock:
            return sorted(self._active)

    @contextmanager
    def hold(self, keyword: str):
        """
        Mantiene la keyword bloqueada durante el bloque `with`.
        Se libera en cualquier salida, incluidas las excepciones.

        Raises:
            KeywordAlreadyProcessingError: si otro ciclo ya la tiene
        """
        if not self.acquire(keyword):
            logger.warning(f"⚠️ Keyword '{keyword}' ya se está procesando, petición rechazada")
            raise KeywordAlreadyProcessingError(keyword)
        try:
            yield
        finally:
            self.release(keyword)
