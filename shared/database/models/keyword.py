"""
Modelo para keywords monitorizadas.
Unidad de programación del scheduler y contenedor de estadísticas agregadas.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from .base import Base


class Keyword(Base):
    """
    Modelo para almacenar keywords, su ciclo de vida de fetch y sus estadísticas.
    Los posts/comentarios no dependen de esta tabla: se relacionan por el texto de la keyword.
    """
    __tablename__ = "keywords"

    id = Column(Integer, primary_key=True, index=True)
    keyword = Column(String(100), unique=True, index=True, nullable=False)  # Normalizada en minúsculas
    search_count = Column(Integer, default=0, nullable=False)
    last_searched = Column(DateTime, nullable=True)
    trending = Column(Boolean, default=False, index=True, nullable=False)

    # Estadísticas de sentimiento
    sentiment_positive = Column(Integer, default=0, nullable=False)
    sentiment_negative = Column(Integer, default=0, nullable=False)
    sentiment_neutral = Column(Integer, default=0, nullable=False)

    volume = Column(Integer, default=0, index=True, nullable=False)  # Total de items almacenados
    top_subreddits = Column(JSON, default=list, nullable=False)  # [{name, count, avgScore}]

    # Ciclo de vida del fetch: pending, processing, completed, failed
    fetch_status = Column(String(20), default='pending', index=True, nullable=False)
    last_fetched = Column(DateTime, nullable=True)
    next_scheduled_fetch = Column(DateTime, nullable=True, index=True)

    # Configuración
    is_active = Column(Boolean, default=True, index=True, nullable=False)
    auto_fetch = Column(Boolean, default=True, nullable=False)
    fetch_interval = Column(Integer, default=24, nullable=False)  # Horas entre fetches (1-168)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
