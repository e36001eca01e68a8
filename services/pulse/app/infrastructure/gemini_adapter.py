"""
Adaptador de Google Gemini para el análisis de posts y comentarios.
Implementación concreta de la interfaz ContentAnalyzer.
"""
from typing import Callable, Optional

from google import genai

from services.pulse.app.domain.analysis_decoder import decode_analysis, parse_json_response
from services.pulse.app.domain.entities import Analysis, AnalysisContext, ItemType
from services.pulse.app.domain.exceptions import AnalysisServiceError, RateLimitError
from services.pulse.app.domain.interfaces import ContentAnalyzer
from shared.config.settings import settings
from shared.services.logging_config import get_logger


logger = get_logger(__name__)

MAX_PROMPT_TEXT_CHARS = 4000


def is_rate_limit_error(error: Exception) -> bool:
    """Detecta errores 429 / cuota agotada del servicio."""
    if getattr(error, 'code', None) == 429 or getattr(error, 'status_code', None) == 429:
        return True
    message = str(error)
    return 'RESOURCE_EXHAUSTED' in message or 'quota' in message.lower() or 'Too Many Requests' in message


class GeminiContentAnalyzer(ContentAnalyzer):
    """
    Implementación del analizador de contenido usando Google Gemini.
    Se crea un cliente por llamada porque cada ciclo corre en su propio event loop.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 enabled: Optional[bool] = None, client_factory: Callable = genai.Client):
        self._api_key = settings.GOOGLE_API_KEY if api_key is None else api_key
        self._model = model or settings.GEMINI_MODEL
        self._enabled = settings.AI_ANALYSIS_ENABLED if enabled is None else enabled
        self._client_factory = client_factory

        if not self.is_enabled():
            logger.warning("⚠️ Análisis con IA deshabilitado (flag o API key ausente); se usará análisis local")
        else:
            logger.info(f"✅ Análisis con Gemini habilitado (modelo {self._model})")

    def is_enabled(self) -> bool:
        return bool(self._enabled and self._api_key)

    def _build_prompt(self, text: str, context: AnalysisContext) -> str:
        """Construye el prompt para el análisis de un item."""
        item_label = "Reddit post" if context.item_type == ItemType.POST else "Reddit comment"
        subreddit = f"r/{context.subreddit}" if context.subreddit else "unknown subreddit"
        return f"""
        You are an analyst of public online discussions. Evaluate the following {item_label}
        from {subreddit}, collected for the search keyword "{context.keyword}".

        Return ONLY valid JSON with exactly this structure:

        {{
            "sentiment": {{
                "classification": "positive|negative|neutral",
                "confidence": 0-100,
                "positive_score": 0-100,
                "negative_score": 0-100,
                "neutral_score": 0-100
            }},
            "relevancy": {{
                "score": 0-100,
                "reasoning": "one sentence on how the text relates to the keyword",
                "keywords_matched": ["terms from the text related to the keyword"]
            }},
            "quality": {{
                "clarity": 0-100,
                "coherence": 0-100,
                "informativeness": 0-100,
                "overall_quality": 0-100
            }},
            "engagement": {{
                "score": 0-100,
                "factors": ["short tags such as informative, controversial, personal story"],
                "discussion_potential": 0-100
            }},
            "insights": {{
                "key_points": ["up to 3 key points"],
                "stance": "supporting|opposing|neutral|questioning|mixed",
                "tone": "formal|casual|emotional|analytical",
                "credibility_indicators": ["sources cited, data, first-hand experience..."]
            }},
            "contributor": {{
                "score": 0-100,
                "expertise_level": "novice|intermediate|expert",
                "contribution_type": "opinion|fact|experience|question"
            }}
        }}

        The three sentiment percentages must add up to 100.

        Text: "{text[:MAX_PROMPT_TEXT_CHARS]}"

        Respond ONLY with the JSON, without additional explanations:
        """

    async def analyze(self, text: str, context: AnalysisContext) -> Analysis:
        """
        Analiza un texto usando Gemini.

        Args:
            text: Texto del post o comentario
            context: Keyword, tipo de item y subreddit

        Returns:
            Analysis completo (los campos ausentes toman su valor por defecto)

        Raises:
            RateLimitError: si el servicio devuelve 429 o cuota agotada
            AnalysisServiceError: ante cualquier otro fallo
        """
        if not self.is_enabled():
            raise AnalysisServiceError("Análisis con IA deshabilitado")

        try:
            client = self._client_factory(api_key=self._api_key)
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=self._build_prompt(text, context)
            )
        except Exception as e:
            if is_rate_limit_error(e):
                raise RateLimitError(str(e)) from e
            raise AnalysisServiceError(f"Error llamando a Gemini: {e}") from e

        response_text = getattr(response, 'text', None)
        if not response_text or not response_text.strip():
            raise AnalysisServiceError(f"Respuesta vacía del modelo para: '{text[:50]}...'")

        return decode_analysis(parse_json_response(response_text))
