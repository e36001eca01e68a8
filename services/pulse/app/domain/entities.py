"""
Entidades de dominio para el servicio Pulse.
Representan los conceptos centrales del negocio sin dependencias externas.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum


class FetchStatus(str, Enum):
    """Estados del ciclo de vida de una keyword."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ItemType(str, Enum):
    """Tipos de contenido ingerido."""
    POST = "post"
    COMMENT = "comment"


class CallerRole(str, Enum):
    """Rol de quien solicita el fetch; decide la política de filtrado."""
    GENERAL = "general"
    NGO = "ngo"
    POLICYMAKER = "policymaker"

    @property
    def is_focused(self) -> bool:
        return self in (CallerRole.NGO, CallerRole.POLICYMAKER)


class SentimentClass(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Stance(str, Enum):
    SUPPORTING = "supporting"
    OPPOSING = "opposing"
    NEUTRAL = "neutral"
    QUESTIONING = "questioning"
    MIXED = "mixed"


class Tone(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    EMOTIONAL = "emotional"
    ANALYTICAL = "analytical"


class ExpertiseLevel(str, Enum):
    NOVICE = "novice"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class ContributionType(str, Enum):
    OPINION = "opinion"
    FACT = "fact"
    EXPERIENCE = "experience"
    QUESTION = "question"


# Peso de cada clasificación de sentimiento en el score ponderado
SENTIMENT_WEIGHTS = {
    SentimentClass.POSITIVE: 100,
    SentimentClass.NEUTRAL: 70,
    SentimentClass.NEGATIVE: 40,
}


def clamp_score(value: Any, default: int = 50) -> int:
    """Convierte a entero acotado en [0, 100]; valores no numéricos usan el default."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return int(round(max(0.0, min(100.0, number))))


@dataclass
class SentimentFacet:
    classification: SentimentClass = SentimentClass.NEUTRAL
    confidence: int = 50
    positive_score: int = 33
    negative_score: int = 33
    neutral_score: int = 34

    def __post_init__(self):
        self.confidence = clamp_score(self.confidence)
        self.positive_score = clamp_score(self.positive_score, 33)
        self.negative_score = clamp_score(self.negative_score, 33)
        self.neutral_score = clamp_score(self.neutral_score, 34)


@dataclass
class RelevancyFacet:
    score: int = 50
    reasoning: str = ""
    keywords_matched: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.score = clamp_score(self.score)


@dataclass
class QualityFacet:
    clarity: int = 50
    coherence: int = 50
    informativeness: int = 50
    overall_quality: int = 50

    def __post_init__(self):
        self.clarity = clamp_score(self.clarity)
        self.coherence = clamp_score(self.coherence)
        self.informativeness = clamp_score(self.informativeness)
        self.overall_quality = clamp_score(self.overall_quality)


@dataclass
class EngagementFacet:
    score: int = 50
    factors: List[str] = field(default_factory=list)
    discussion_potential: int = 50

    def __post_init__(self):
        self.score = clamp_score(self.score)
        self.discussion_potential = clamp_score(self.discussion_potential)


@dataclass
class InsightsFacet:
    key_points: List[str] = field(default_factory=list)
    stance: Stance = Stance.NEUTRAL
    tone: Tone = Tone.CASUAL
    credibility_indicators: List[str] = field(default_factory=list)


@dataclass
class ContributorFacet:
    score: int = 50
    expertise_level: ExpertiseLevel = ExpertiseLevel.NOVICE
    contribution_type: ContributionType = ContributionType.OPINION

    def __post_init__(self):
        self.score = clamp_score(self.score)


@dataclass
class Analysis:
    """
    Resultado de análisis con forma fija, embebido en cada post/comentario.
    Todos los numéricos están acotados a [0, 100] y ningún enum queda vacío.
    """
    sentiment: SentimentFacet = field(default_factory=SentimentFacet)
    relevancy: RelevancyFacet = field(default_factory=RelevancyFacet)
    quality: QualityFacet = field(default_factory=QualityFacet)
    engagement: EngagementFacet = field(default_factory=EngagementFacet)
    insights: InsightsFacet = field(default_factory=InsightsFacet)
    contributor: ContributorFacet = field(default_factory=ContributorFacet)

    def weighted_score(self) -> int:
        """Score agregado: relevancia 40%, calidad 30%, sentimiento 20%, engagement 10%."""
        score = (
            self.relevancy.score * 0.4
            + self.quality.overall_quality * 0.3
            + SENTIMENT_WEIGHTS[self.sentiment.classification] * 0.2
            + self.engagement.score * 0.1
        )
        return int(round(score))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['sentiment']['classification'] = self.sentiment.classification.value
        data['insights']['stance'] = self.insights.stance.value
        data['insights']['tone'] = self.insights.tone.value
        data['contributor']['expertise_level'] = self.contributor.expertise_level.value
        data['contributor']['contribution_type'] = self.contributor.contribution_type.value
        return data


@dataclass
class AnalysisContext:
    """Contexto con el que se analiza un item."""
    keyword: str
    item_type: ItemType = ItemType.POST
    subreddit: Optional[str] = None
    topic: Optional[str] = None


@dataclass
class RedditPost:
    """
    Post de nivel superior obtenido de un feed de Reddit.
    """
    id: str
    title: str
    link: str
    author: str
    subreddit: str
    created: datetime
    permalink: str
    content: str = ""
    score: int = 0
    analysis: Optional[Analysis] = None

    @property
    def text(self) -> str:
        """Texto completo a analizar: título más cuerpo."""
        return f"{self.title}\n\n{self.content}".strip()


@dataclass
class RedditComment:
    """
    Comentario de un post. Hereda el subreddit del post padre.
    """
    id: str
    post_id: str
    author: str
    content: str
    score: int
    created: datetime
    permalink: str
    subreddit: str = "unknown"
    analysis: Optional[Analysis] = None

    @property
    def text(self) -> str:
        return self.content


@dataclass
class SubredditStat:
    name: str
    count: int
    avg_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'count': self.count, 'avgScore': self.avg_score}


@dataclass
class SentimentCounts:
    positive: int = 0
    negative: int = 0
    neutral: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral

    def to_dict(self) -> Dict[str, int]:
        return {'positive': self.positive, 'negative': self.negative, 'neutral': self.neutral}


@dataclass
class Keyword:
    """
    Unidad de programación: término de búsqueda con su ciclo de vida y estadísticas.
    """
    keyword: str
    id: Optional[int] = None
    fetch_status: FetchStatus = FetchStatus.PENDING
    auto_fetch: bool = True
    fetch_interval: int = 24
    next_scheduled_fetch: Optional[datetime] = None
    last_fetched: Optional[datetime] = None
    sentiment: SentimentCounts = field(default_factory=SentimentCounts)
    volume: int = 0
    trending: bool = False
    top_subreddits: List[SubredditStat] = field(default_factory=list)
    is_active: bool = True
    search_count: int = 0

    def __post_init__(self):
        """Validaciones de dominio."""
        self.keyword = normalize_keyword(self.keyword)
        if not self.keyword:
            raise ValueError("La keyword no puede estar vacía")
        if not 1 <= self.fetch_interval <= 168:
            raise ValueError("El fetch_interval debe estar entre 1 y 168 horas")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'keyword': self.keyword,
            'fetchStatus': self.fetch_status.value,
            'autoFetch': self.auto_fetch,
            'fetchInterval': self.fetch_interval,
            'nextScheduledFetch': self.next_scheduled_fetch.isoformat() if self.next_scheduled_fetch else None,
            'lastFetched': self.last_fetched.isoformat() if self.last_fetched else None,
            'sentiment': self.sentiment.to_dict(),
            'volume': self.volume,
            'trending': self.trending,
            'topSubreddits': [stat.to_dict() for stat in self.top_subreddits],
            'isActive': self.is_active,
        }


def normalize_keyword(keyword: str) -> str:
    """Normaliza el texto de una keyword (clave única)."""
    return " ".join((keyword or "").split()).lower()


@dataclass
class FetchRequest:
    """Parámetros de un ciclo fetch-filtro-análisis-guardado para una keyword."""
    keyword: str
    subreddits: Optional[List[str]] = None
    max_posts: int = 20
    include_comments: bool = True
    max_comments_per_post: int = 10
    force_refresh: bool = False
    caller_role: CallerRole = CallerRole.GENERAL

    def __post_init__(self):
        self.keyword = normalize_keyword(self.keyword)


@dataclass
class FetchResult:
    """Resultado estructurado de un ciclo, con semántica de éxito parcial."""
    keyword: str
    success: bool = False
    total_posts: int = 0
    total_comments: int = 0
    total_stored: int = 0
    duplicates_skipped: int = 0
    errors: List[str] = field(default_factory=list)
    processing_time_ms: int = 0
    sentiment_stats: SentimentCounts = field(default_factory=SentimentCounts)
    top_channels: List[SubredditStat] = field(default_factory=list)
    skipped_fresh: bool = False
    fetched_posts: int = 0
    fetched_comments: int = 0
    already_processing: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'keyword': self.keyword,
            'totalPosts': self.total_posts,
            'totalComments': self.total_comments,
            'totalStored': self.total_stored,
            'duplicatesSkipped': self.duplicates_skipped,
            'errors': list(self.errors),
            'processingTimeMs': self.processing_time_ms,
            'sentimentStats': self.sentiment_stats.to_dict(),
            'topChannels': [stat.to_dict() for stat in self.top_channels],
            'skippedFresh': self.skipped_fresh,
            'fetchedPosts': self.fetched_posts,
            'fetchedComments': self.fetched_comments,
        }
