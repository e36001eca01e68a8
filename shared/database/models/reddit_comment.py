"""
Modelo para comentarios de Reddit enriquecidos con análisis.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from .base import Base


class RedditComment(Base):
    """
    Comentario de un post de Reddit. Hereda el subreddit del post padre.
    """
    __tablename__ = "reddit_comments"

    id = Column(Integer, primary_key=True, index=True)
    reddit_id = Column(String(64), unique=True, index=True, nullable=False)
    post_id = Column(String(64), index=True, nullable=False)  # reddit_id del post padre
    author = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    permalink = Column(String, nullable=False)
    reddit_score = Column(Integer, default=0, nullable=False)
    subreddit = Column(String(100), index=True, nullable=False)

    keyword = Column(String(100), index=True, nullable=False)
    analysis = Column(JSON, nullable=False)
    weighted_score = Column(Integer, default=0, index=True, nullable=False)

    processed = Column(Boolean, default=True, nullable=False)
    processing_attempts = Column(Integer, default=1, nullable=False)
    last_processed = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, index=True, nullable=False)

    published_at = Column(DateTime, nullable=False, index=True)
    stored_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)
    sentiment = Column(String(10), default='neutral', index=True, nullable=False)
