"""
Routers para el servicio Pulse
"""

from .health_router import router as health_router
from .reddit_router import router as reddit_router
from .scheduler_router import router as scheduler_router

__all__ = ['health_router', 'reddit_router', 'scheduler_router']
