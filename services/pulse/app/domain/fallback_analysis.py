"""
Análisis heurístico local.
Sustituto determinista y sin red del análisis con IA: se usa cuando la IA
está deshabilitada, falla, excede su timeout o agota su cuota.
"""
import re
from typing import List, Optional, Tuple

from .entities import (
    Analysis, AnalysisContext, SentimentFacet, RelevancyFacet, QualityFacet,
    EngagementFacet, InsightsFacet, ContributorFacet, SentimentClass, Stance,
    Tone, ExpertiseLevel, ContributionType, clamp_score
)

FALLBACK_REASONING = "Local heuristic analysis (AI unavailable)"

POSITIVE_WORDS = [
    'good', 'great', 'excellent', 'support', 'agree', 'positive', 'beneficial',
    'effective', 'important', 'necessary', 'solution', 'improve', 'better',
    'success', 'valuable',
]
NEGATIVE_WORDS = [
    'bad', 'terrible', 'disagree', 'oppose', 'negative', 'harmful', 'ineffective',
    'unnecessary', 'wrong', 'problematic', 'fail', 'worse', 'dangerous',
    'useless', 'stupid',
]
STOPWORDS = {
    'the', 'is', 'at', 'which', 'on', 'and', 'a', 'to', 'are', 'as', 'was',
    'with', 'for', 'be', 'have', 'this', 'that', 'will', 'you', 'they', 'of',
    'it', 'in', 'or', 'an', 'but', 'not', 'can', 'we', 'should', 'would',
    'could', 'there', 'their', 'about', 'from', 'what', 'when', 'just',
}

SENTIMENT_BASELINE = 50
SENTIMENT_WORD_WEIGHT = 8
POSITIVE_THRESHOLD = 60
NEGATIVE_THRESHOLD = 40
FALLBACK_CONFIDENCE = 60
MAX_KEY_TERMS = 5

_WORD_RE = re.compile(r'\b\w+\b')


def _tokens(text: str) -> List[str]:
    return _WORD_RE.findall((text or "").lower())


def extract_key_terms(text: str, limit: int = MAX_KEY_TERMS) -> List[str]:
    """Primeras palabras significativas (>3 caracteres, sin stopwords), sin repetir."""
    terms: List[str] = []
    for word in _tokens(text):
        if len(word) > 3 and word not in STOPWORDS and word not in terms:
            terms.append(word)
            if len(terms) >= limit:
                break
    return terms


def score_sentiment(text: str) -> int:
    """Score 0-100 a partir de listas de palabras positivas y negativas."""
    score = SENTIMENT_BASELINE
    for word in _tokens(text):
        if len(word) < 3:
            continue
        if any(positive in word for positive in POSITIVE_WORDS):
            score += SENTIMENT_WORD_WEIGHT
        if any(negative in word for negative in NEGATIVE_WORDS):
            score -= SENTIMENT_WORD_WEIGHT
    return clamp_score(score)


def classify_sentiment(score: int) -> SentimentClass:
    if score > POSITIVE_THRESHOLD:
        return SentimentClass.POSITIVE
    if score < NEGATIVE_THRESHOLD:
        return SentimentClass.NEGATIVE
    return SentimentClass.NEUTRAL


def score_relevancy(text: str, context: Optional[AnalysisContext]) -> Tuple[int, List[str]]:
    """
    Proporción de términos del contexto (keyword, tema, subreddit) presentes
    en el texto, escalada a 0-100.
    """
    if context is None:
        return 50, []
    context_text = " ".join(filter(None, [context.keyword, context.topic, context.subreddit]))
    context_terms = []
    for word in _tokens(context_text):
        if len(word) > 2 and word not in STOPWORDS and word not in context_terms:
            context_terms.append(word)
    if not context_terms:
        return 50, []

    words = set(_tokens(text))
    matched = [
        term for term in context_terms
        if any(term in word or (len(word) > 3 and word in term) for word in words)
    ]
    return clamp_score(len(matched) / len(context_terms) * 100), matched


def fallback_analysis(text: str, context: Optional[AnalysisContext] = None) -> Analysis:
    """
    Genera un análisis completo con heurísticas locales.

    Función pura: mismo texto y contexto producen el mismo resultado.
    Nunca lanza excepciones.

    Args:
        text: Texto del post o comentario
        context: Keyword y subreddit de origen (opcional)

    Returns:
        Analysis con todos los campos poblados
    """
    text = text if isinstance(text, str) else ""
    key_terms = extract_key_terms(text)

    sentiment_score = score_sentiment(text)
    classification = classify_sentiment(sentiment_score)
    relevancy_score, matched = score_relevancy(text, context)

    sentences = [s for s in re.split(r'[.!?]+', text) if s.strip()]
    clarity = 60 if len(text) > 50 else 40
    coherence = 60 if len(sentences) > 1 else 40
    informativeness = clamp_score(len(key_terms) * 15)
    overall_quality = clamp_score(len(text) / 10 + len(key_terms) * 10)

    is_question = '?' in text
    factors = []
    if is_question:
        factors.append('question')
    if len(text) > 200:
        factors.append('detailed')
    if key_terms:
        factors.append('informative')

    if classification == SentimentClass.POSITIVE:
        stance = Stance.SUPPORTING
    elif classification == SentimentClass.NEGATIVE:
        stance = Stance.OPPOSING
    elif is_question:
        stance = Stance.QUESTIONING
    else:
        stance = Stance.NEUTRAL

    if overall_quality > 80:
        expertise = ExpertiseLevel.EXPERT
    elif overall_quality > 60:
        expertise = ExpertiseLevel.INTERMEDIATE
    else:
        expertise = ExpertiseLevel.NOVICE

    if is_question:
        contribution_type = ContributionType.QUESTION
    elif informativeness > 70:
        contribution_type = ContributionType.FACT
    else:
        contribution_type = ContributionType.OPINION

    return Analysis(
        sentiment=SentimentFacet(
            classification=classification,
            confidence=FALLBACK_CONFIDENCE,
            positive_score=70 if classification == SentimentClass.POSITIVE else 15,
            negative_score=70 if classification == SentimentClass.NEGATIVE else 15,
            neutral_score=70 if classification == SentimentClass.NEUTRAL else 15,
        ),
        relevancy=RelevancyFacet(
            score=relevancy_score,
            reasoning=FALLBACK_REASONING,
            keywords_matched=matched,
        ),
        quality=QualityFacet(
            clarity=clarity,
            coherence=coherence,
            informativeness=informativeness,
            overall_quality=overall_quality,
        ),
        engagement=EngagementFacet(
            score=clamp_score((overall_quality + relevancy_score) / 2),
            factors=factors,
            discussion_potential=overall_quality,
        ),
        insights=InsightsFacet(
            key_points=key_terms[:3],
            stance=stance,
            tone=Tone.EMOTIONAL if ('!' in text or is_question) else Tone.ANALYTICAL,
            credibility_indicators=['detailed response'] if len(key_terms) > 2 and len(text) > 100 else [],
        ),
        contributor=ContributorFacet(
            score=overall_quality,
            expertise_level=expertise,
            contribution_type=contribution_type,
        ),
    )
