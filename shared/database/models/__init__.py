"""
Modelos de base de datos del proyecto.
Cada modelo está en su archivo individual para mejor organización.
"""
# Importar la base común
from .base import Base

# Importar todos los modelos para que estén disponibles
from .keyword import Keyword
from .reddit_post import RedditPost
from .reddit_comment import RedditComment

__all__ = [
    'Base',
    'Keyword',
    'RedditPost',
    'RedditComment'
]
