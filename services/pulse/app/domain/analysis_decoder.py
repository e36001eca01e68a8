"""
Decodificación y validación de la respuesta del servicio de IA.
Único punto donde se aplican los valores por defecto del análisis.
"""
import json
from enum import Enum
from typing import Any, Dict, List, Type, TypeVar

from .entities import (
    Analysis, SentimentFacet, RelevancyFacet, QualityFacet, EngagementFacet,
    InsightsFacet, ContributorFacet, SentimentClass, Stance, Tone,
    ExpertiseLevel, ContributionType, clamp_score
)
from .exceptions import AnalysisServiceError

E = TypeVar('E', bound=Enum)

MAX_LIST_ITEMS = 10


def parse_json_response(response_text: str) -> Dict[str, Any]:
    """
    Extrae el objeto JSON de la respuesta del modelo.
    Acepta respuestas envueltas en bloques de código markdown.

    Raises:
        AnalysisServiceError: si no hay un objeto JSON válido
    """
    text = (response_text or "").strip()
    if text.startswith('```'):
        lines = text.split('\n')
        # Quitar la línea de apertura (```json o ```) y el cierre
        lines = lines[1:]
        if lines and lines[-1].strip().startswith('```'):
            lines = lines[:-1]
        text = '\n'.join(lines).strip()

    if not text.startswith('{'):
        start = text.find('{')
        end = text.rfind('}')
        if start == -1 or end <= start:
            raise AnalysisServiceError("La respuesta no contiene un objeto JSON")
        text = text[start:end + 1]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise AnalysisServiceError(f"JSON inválido en la respuesta: {e}") from e
    if not isinstance(data, dict):
        raise AnalysisServiceError("La respuesta JSON no es un objeto")
    return data


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


def _enum(enum_cls: Type[E], value: Any, default: E) -> E:
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return default
    return default


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()][:MAX_LIST_ITEMS]


def decode_analysis(raw: Any) -> Analysis:
    """
    Convierte la respuesta cruda (posiblemente parcial) en un Analysis completo.

    Campos ausentes o inválidos toman su valor por defecto; los numéricos se
    acotan a [0, 100] y los enums desconocidos vuelven a su default.
    """
    if not isinstance(raw, dict):
        return Analysis()

    sentiment = _section(raw, 'sentiment')
    relevancy = _section(raw, 'relevancy')
    quality = _section(raw, 'quality')
    engagement = _section(raw, 'engagement')
    insights = _section(raw, 'insights')
    contributor = _section(raw, 'contributor')

    return Analysis(
        sentiment=SentimentFacet(
            classification=_enum(
                SentimentClass,
                sentiment.get('classification', sentiment.get('overall')),
                SentimentClass.NEUTRAL,
            ),
            confidence=clamp_score(sentiment.get('confidence'), 50),
            positive_score=clamp_score(sentiment.get('positive_score'), 33),
            negative_score=clamp_score(sentiment.get('negative_score'), 33),
            neutral_score=clamp_score(sentiment.get('neutral_score'), 34),
        ),
        relevancy=RelevancyFacet(
            score=clamp_score(relevancy.get('score'), 50),
            reasoning=str(relevancy.get('reasoning') or ""),
            keywords_matched=_string_list(relevancy.get('keywords_matched')),
        ),
        quality=QualityFacet(
            clarity=clamp_score(quality.get('clarity'), 50),
            coherence=clamp_score(quality.get('coherence'), 50),
            informativeness=clamp_score(quality.get('informativeness'), 50),
            overall_quality=clamp_score(quality.get('overall_quality'), 50),
        ),
        engagement=EngagementFacet(
            score=clamp_score(engagement.get('score'), 50),
            factors=_string_list(engagement.get('factors')),
            discussion_potential=clamp_score(engagement.get('discussion_potential'), 50),
        ),
        insights=InsightsFacet(
            key_points=_string_list(insights.get('key_points')),
            stance=_enum(Stance, insights.get('stance'), Stance.NEUTRAL),
            tone=_enum(Tone, insights.get('tone'), Tone.CASUAL),
            credibility_indicators=_string_list(insights.get('credibility_indicators')),
        ),
        contributor=ContributorFacet(
            score=clamp_score(contributor.get('score'), 50),
            expertise_level=_enum(ExpertiseLevel, contributor.get('expertise_level'), ExpertiseLevel.NOVICE),
            contribution_type=_enum(ContributionType, contributor.get('contribution_type'), ContributionType.OPINION),
        ),
    )
