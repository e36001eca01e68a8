"""
Filtro de relevancia de posts y comentarios.
Dos políticas puras y deterministas, elegidas según el rol de quien pide el fetch.
"""
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, TypeVar, Union

from services.pulse.app import config
from .entities import CallerRole, RedditPost, RedditComment

Item = TypeVar('Item', RedditPost, RedditComment)


@dataclass
class RelevanceScore:
    """Desglose del score de la política enfocada."""
    relevance: int = 0
    domain_terms: List[str] = field(default_factory=list)
    trending_keywords: List[str] = field(default_factory=list)
    trending_topics: List[str] = field(default_factory=list)
    literal_match: bool = False
    priority_subreddit: bool = False

    @property
    def category_matches(self) -> int:
        return len(self.domain_terms) + len(self.trending_keywords)

    @property
    def matches_trending_topic(self) -> bool:
        return bool(self.trending_topics or self.trending_keywords)

    @property
    def sort_key(self) -> int:
        bonus = config.PRIORITY_SUBREDDIT_SORT_BONUS if self.priority_subreddit else 0
        return bonus + self.relevance


def _item_text(item: Union[RedditPost, RedditComment]) -> str:
    return (item.text or "").lower()


def score_focused(item: Union[RedditPost, RedditComment], keyword: str) -> RelevanceScore:
    """Calcula el score de relevancia de un item para la audiencia especializada."""
    text = _item_text(item)
    keyword = (keyword or "").lower()

    domain_terms = [term for term in config.DOMAIN_TERMS if term in text]
    trending_keywords: List[str] = []
    trending_topics: List[str] = []
    for topic, topic_keywords in config.TRENDING_TOPICS.items():
        if topic in text:
            trending_topics.append(topic)
        for topic_keyword in topic_keywords:
            if topic_keyword in text and topic_keyword not in trending_keywords:
                trending_keywords.append(topic_keyword)

    literal_match = bool(keyword) and keyword in text
    relevance = (
        len(domain_terms) * config.FOCUSED_DOMAIN_TERM_POINTS
        + len(trending_keywords) * config.FOCUSED_TRENDING_KEYWORD_POINTS
        + (config.FOCUSED_TRENDING_TOPIC_BONUS if trending_topics else 0)
        + (config.FOCUSED_LITERAL_KEYWORD_BONUS if literal_match else 0)
    )
    return RelevanceScore(
        relevance=relevance,
        domain_terms=domain_terms,
        trending_keywords=trending_keywords,
        trending_topics=trending_topics,
        literal_match=literal_match,
        priority_subreddit=(item.subreddit or "").lower() in config.PRIORITY_SUBREDDITS,
    )


def filter_broad(items: Sequence[Item], keyword: str, limit: int) -> List[Item]:
    """
    Política amplia: descarta textos cortos y ordena por popularidad más un
    bonus si el texto contiene la keyword.
    """
    keyword = (keyword or "").lower()

    def rank(item) -> int:
        bonus = config.BROAD_KEYWORD_MATCH_BONUS if keyword and keyword in _item_text(item) else 0
        return (item.score or 0) + bonus

    candidates = [item for item in items if len((item.text or "").strip()) >= config.BROAD_MIN_TEXT_LENGTH]
    return sorted(candidates, key=rank, reverse=True)[:limit]


def filter_focused(items: Sequence[Item], keyword: str, limit: int) -> List[Item]:
    """
    Política enfocada: conserva items con al menos dos coincidencias de
    categoría o que tocan un tema en tendencia, priorizando subreddits clave.
    """
    scored: List[Tuple[Item, RelevanceScore]] = []
    for item in items:
        score = score_focused(item, keyword)
        if score.category_matches >= config.FOCUSED_MIN_CATEGORY_MATCHES or score.matches_trending_topic:
            scored.append((item, score))
    scored.sort(key=lambda pair: pair[1].sort_key, reverse=True)
    return [item for item, _ in scored[:limit]]


def select_relevant(
    posts: Sequence[RedditPost],
    comments: Sequence[RedditComment],
    keyword: str,
    caller_role: CallerRole = CallerRole.GENERAL,
) -> Tuple[List[RedditPost], List[RedditComment]]:
    """
    Aplica la política correspondiente al rol.

    Returns:
        Tupla (posts, comentarios) seleccionados para enriquecer
    """
    policy = filter_focused if caller_role.is_focused else filter_broad
    return (
        policy(posts, keyword, config.MAX_FILTERED_POSTS),
        policy(comments, keyword, config.MAX_FILTERED_COMMENTS),
    )
