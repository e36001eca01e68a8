"""
Módulo de base de datos compartida.
"""
from .session import SessionLocal, init_database, get_db_session
from . import models

from .models import Base, Keyword, RedditPost, RedditComment

__all__ = ['SessionLocal', 'init_database', 'get_db_session', 'models', 'Base',
           'Keyword', 'RedditPost', 'RedditComment']
