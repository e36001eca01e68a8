"""
Modelo para posts de Reddit enriquecidos con análisis.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from .base import Base


class RedditPost(Base):
    """
    Post de Reddit obtenido vía RSS, con su análisis completo embebido.
    La deduplicación se hace por reddit_id, nunca por keyword.
    """
    __tablename__ = "reddit_posts"

    id = Column(Integer, primary_key=True, index=True)
    reddit_id = Column(String(64), unique=True, index=True, nullable=False)
    title = Column(String(500), nullable=False)
    link = Column(String, nullable=False)
    author = Column(String(100), nullable=False)
    subreddit = Column(String(100), index=True, nullable=False)
    content = Column(Text, nullable=True)
    permalink = Column(String, nullable=False)
    reddit_score = Column(Integer, default=0, nullable=False)

    keyword = Column(String(100), index=True, nullable=False)  # Keyword que encontró el post
    analysis = Column(JSON, nullable=False)
    weighted_score = Column(Integer, default=0, index=True, nullable=False)

    # Metadatos de procesamiento
    processed = Column(Boolean, default=True, nullable=False)
    processing_attempts = Column(Integer, default=1, nullable=False)
    last_processed = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, index=True, nullable=False)

    published_at = Column(DateTime, nullable=False, index=True)  # Fecha de creación en Reddit
    stored_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)
    sentiment = Column(String(10), default='neutral', index=True, nullable=False)  # Copia de analysis.sentiment.classification
