"""
Excepciones del dominio del servicio Pulse.
"""


class KeywordAlreadyProcessingError(RuntimeError):
    """Ya hay un ciclo en curso para la keyword; la petición se rechaza sin encolar."""

    def __init__(self, keyword: str):
        super().__init__(f'Keyword "{keyword}" is already being processed')
        self.keyword = keyword


class FeedParseError(ValueError):
    """El feed RSS/Atom no se pudo interpretar."""


class AnalysisServiceError(RuntimeError):
    """Fallo del servicio externo de análisis (llamada o respuesta inválida)."""


class RateLimitError(AnalysisServiceError):
    """El servicio externo de análisis devolvió rate-limit / cuota excedida."""


class DuplicateItemError(Exception):
    """Ya existe un item almacenado con el mismo id externo."""

    def __init__(self, reddit_id: str):
        super().__init__(f"Duplicate item: {reddit_id}")
        self.reddit_id = reddit_id
