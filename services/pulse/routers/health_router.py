"""
Router para health checks del servicio Pulse
"""
from datetime import datetime

from fastapi import APIRouter, Depends

from services.pulse.app.container import Container
from shared.database.session import health_check as database_health_check

from .reddit_router import get_container

router = APIRouter(tags=["Health"])


@router.get("/")
def read_root():
    """Endpoint básico para verificar que el servicio está vivo."""
    return {
        "service": "pulse",
        "status": "alive",
        "description": "Ingesta de Reddit, filtrado por relevancia y análisis de sentimiento"
    }


@router.get("/health")
def health_check(container: Container = Depends(get_container)):
    """
    Health check: base de datos, scheduler y disponibilidad de la IA.
    """
    try:
        database_ok = database_health_check(container.session_factory)
        scheduler_running = container.scheduler.is_running
        return {
            "status": "healthy" if database_ok else "unhealthy",
            "service": "Vox Pulse",
            "database": "connected" if database_ok else "unreachable",
            "scheduler": "running" if scheduler_running else "stopped",
            "aiAnalysis": "enabled" if container.analyzer.is_enabled() else "fallback",
            "activeKeywords": container.locks.active_keywords(),
            "timestamp": datetime.now().isoformat()
        }
    except Exception as e:
        return {
            "status": "error",
            "service": "Vox Pulse",
            "error": str(e),
            "timestamp": datetime.now().isoformat()
        }
