"""
Scheduler para el servicio Pulse.
Gestiona la ejecución periódica de los ciclos de las keywords vencidas.
"""
import asyncio
from datetime import datetime
from typing import Optional, Dict, Any

from apscheduler.schedulers.background import BackgroundScheduler

from services.pulse.app.application.scheduled_fetch_use_case import ScheduledFetchUseCase, ScheduledFetchResult
from services.pulse.app.infrastructure.keyword_lock import KeywordLockRegistry
from shared.config.settings import settings
from shared.services.logging_config import get_logger


logger = get_logger(__name__)

JOB_ID = 'keyword_fetch'


class KeywordScheduler:
    """
    Gestiona la programación y ejecución periódica de los ciclos de keywords.
    Un único objeto por proceso, creado junto con el resto de dependencias.
    """

    def __init__(self,
                 scheduled_fetch_use_case: ScheduledFetchUseCase,
                 locks: KeywordLockRegistry,
                 interval_minutes: Optional[int] = None):
        self.scheduled_fetch_use_case = scheduled_fetch_use_case
        self.locks = locks
        self.interval_minutes = interval_minutes or settings.SCHEDULER_INTERVAL_MINUTES
        self._scheduler: Optional[BackgroundScheduler] = None
        self._last_run: Optional[datetime] = None
        self._last_result: Optional[ScheduledFetchResult] = None

    def _run_fetch_job(self) -> Optional[ScheduledFetchResult]:
        """
        Ejecuta una pasada de keywords vencidas como job del scheduler.
        Corre en un hilo del scheduler con su propio event loop.
        """
        logger.info("🚀 Ejecutando job de keywords programadas...")
        self._last_run = datetime.utcnow()
        try:
            result = asyncio.run(self.scheduled_fetch_use_case.execute())
            self._last_result = result
            if result.processed:
                logger.info(f"✅ Job completado: {result.succeeded}/{result.processed} keywords ok")
            return result
        except Exception as e:
            logger.error(f"💥 Error ejecutando job de keywords: {e}")
            return None

    def setup(self) -> 'KeywordScheduler':
        """
        Configura el scheduler con la tarea periódica.

        Returns:
            Self para encadenamiento
        """
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler()
            self._scheduler.add_job(
                self._run_fetch_job,
                'interval',
                minutes=self.interval_minutes,
                id=JOB_ID,
                name='Scheduled keyword fetch',
                max_instances=1,
                coalesce=True,
                misfire_grace_time=300  # 5 minutos de gracia si se pierde la ejecución
            )
            logger.info(f"✅ Scheduler configurado: keywords cada {self.interval_minutes} minutos")
        return self

    def start(self) -> bool:
        """Inicia el scheduler. Retorna False si ya estaba en ejecución."""
        if self.is_running:
            return False
        self.setup()
        self._scheduler.start()
        logger.info("✅ Keyword scheduler iniciado")
        return True

    def stop(self) -> bool:
        """Detiene el scheduler sin esperar al job en curso. Retorna False si no estaba en ejecución."""
        if not self.is_running:
            return False
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("🛑 Keyword scheduler detenido")
        return True

    def run_now(self) -> Optional[ScheduledFetchResult]:
        """Ejecuta una pasada inmediata en el hilo actual."""
        logger.info("⚡ Ejecución manual del scheduler")
        return self._run_fetch_job()

    @property
    def is_running(self) -> bool:
        """Verifica si el scheduler está en ejecución."""
        return self._scheduler is not None and self._scheduler.running

    def get_jobs_count(self) -> int:
        """Obtiene el número de jobs activos."""
        if self._scheduler:
            return len(self._scheduler.get_jobs())
        return 0

    def next_run_estimate(self) -> Optional[datetime]:
        if not self.is_running:
            return None
        job = self._scheduler.get_job(JOB_ID)
        return job.next_run_time if job else None

    def status(self) -> Dict[str, Any]:
        next_run = self.next_run_estimate()
        return {
            'isRunning': self.is_running,
            'intervalMinutes': self.interval_minutes,
            'nextRunEstimate': next_run.isoformat() if next_run else None,
            'lastRun': self._last_run.isoformat() if self._last_run else None,
            'lastResult': self._last_result.to_dict() if self._last_result else None,
            'activeKeywords': self.locks.active_keywords(),
            'jobsCount': self.get_jobs_count(),
        }
