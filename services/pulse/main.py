"""
Pulse Service - Ingesta y análisis de Reddit
Recolecta posts y comentarios públicos por keyword, filtra por relevancia,
enriquece con Gemini (o heurísticas locales) y programa refrescos periódicos.
"""
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.pulse.app.container import Container, build_container
from services.pulse.routers import health_router, reddit_router, scheduler_router
from shared.config.settings import settings
from shared.database.session import init_database
from shared.services.logging_config import setup_logging, get_logger

logger = get_logger(__name__)


def create_app(container_factory: Callable[[], Container] = build_container,
               init_db: Optional[Callable[[], None]] = init_database,
               auto_start_scheduler: Optional[bool] = None) -> FastAPI:
    """
    Crea la aplicación FastAPI del servicio Pulse.

    Args:
        container_factory: Construye el grafo de dependencias
        init_db: Inicializa las tablas (None para omitir)
        auto_start_scheduler: Sobrescribe settings.AUTO_START_SCHEDULER
    """
    start_scheduler = settings.AUTO_START_SCHEDULER if auto_start_scheduler is None else auto_start_scheduler

    # Gestor de Ciclo de Vida para FastAPI
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging()
        logger.info("🚀 Iniciando Vox Pulse...")
        if init_db is not None:
            init_db()

        container = container_factory()
        app.state.container = container

        if start_scheduler:
            try:
                container.scheduler.start()
                logger.info(f"⏰ Keywords vencidas: revisión cada {container.scheduler.interval_minutes} minutos")
            except Exception as e:
                logger.error(f"❌ Error al iniciar el scheduler: {e}")
        if not container.analyzer.is_enabled():
            logger.warning("⚠️ Análisis con IA deshabilitado: se usarán heurísticas locales")

        yield

        # Shutdown
        logger.info("🛑 Cerrando Vox Pulse...")
        try:
            container.scheduler.stop()
        except Exception as e:
            logger.error(f"❌ Error al detener el scheduler: {e}")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Ingesta de Reddit, filtrado por relevancia, análisis de sentimiento y programación de keywords",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(reddit_router)
    app.include_router(scheduler_router)
    return app


app = create_app()
