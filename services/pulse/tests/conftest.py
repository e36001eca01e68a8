"""
Fixtures compartidas para los tests del servicio Pulse.
"""
from datetime import datetime
from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from services.pulse.app.domain.entities import (
    Analysis, SentimentFacet, RelevancyFacet, QualityFacet, EngagementFacet,
    SentimentClass, RedditPost, RedditComment
)
from services.pulse.app.domain.interfaces import ContentAnalyzer, FeedCollector, ThreadCollector
from services.pulse.app.infrastructure.database_repository import (
    SqlAlchemyContentRepository, SqlAlchemyKeywordRepository
)
from shared.database.session import init_database


class DisabledAnalyzer(ContentAnalyzer):
    """Analizador sin IA: el enriquecimiento usa siempre el análisis local."""

    def __init__(self):
        self.calls = 0

    def is_enabled(self) -> bool:
        return False

    async def analyze(self, text, context):
        self.calls += 1
        raise AssertionError("analyze() no debe llamarse con la IA deshabilitada")


class FakeFeedCollector(FeedCollector):
    """Feed en memoria: posts por subreddit."""

    def __init__(self, posts_by_subreddit: Dict[str, List[RedditPost]],
                 default_subreddits: Optional[List[str]] = None):
        self.posts_by_subreddit = posts_by_subreddit
        self.default_subreddits = default_subreddits or list(posts_by_subreddit)
        self.calls: List[str] = []

    def get_relevant_subreddits(self, keyword):
        return list(self.default_subreddits)

    async def fetch_posts(self, keyword, subreddit, limit):
        self.calls.append(subreddit)
        return list(self.posts_by_subreddit.get(subreddit, []))[:limit]


class FakeThreadCollector(ThreadCollector):
    """Comentarios en memoria por id de post."""

    def __init__(self, comments_by_post: Optional[Dict[str, List[RedditComment]]] = None):
        self.comments_by_post = comments_by_post or {}
        self.calls: List[str] = []

    async def fetch_comments(self, post, limit):
        self.calls.append(post.id)
        return list(self.comments_by_post.get(post.id, []))[:limit]


def build_post(post_id: str, title: str, content: str = "", subreddit: str = "news",
               score: int = 0, created: Optional[datetime] = None) -> RedditPost:
    return RedditPost(
        id=post_id,
        title=title,
        link=f"https://www.reddit.com/r/{subreddit}/comments/{post_id}/slug/",
        author="tester",
        subreddit=subreddit,
        created=created or datetime(2024, 5, 1, 12, 0),
        permalink=f"/r/{subreddit}/comments/{post_id}/slug/",
        content=content,
        score=score,
    )


def build_comment(comment_id: str, content: str, post_id: str = "p1", subreddit: str = "news",
                  score: int = 0, created: Optional[datetime] = None) -> RedditComment:
    return RedditComment(
        id=comment_id,
        post_id=post_id,
        author="commenter",
        content=content,
        score=score,
        created=created or datetime(2024, 5, 1, 13, 0),
        permalink=f"/r/{subreddit}/comments/{post_id}/slug/{comment_id}/",
        subreddit=subreddit,
    )


def build_analysis(sentiment: SentimentClass = SentimentClass.NEUTRAL, relevancy: int = 50,
                   quality: int = 50, engagement: int = 50) -> Analysis:
    return Analysis(
        sentiment=SentimentFacet(classification=sentiment),
        relevancy=RelevancyFacet(score=relevancy),
        quality=QualityFacet(overall_quality=quality),
        engagement=EngagementFacet(score=engagement),
    )


@pytest.fixture
def make_post():
    return build_post


@pytest.fixture
def make_comment():
    return build_comment


@pytest.fixture
def make_analysis():
    return build_analysis


@pytest.fixture
def session_factory():
    """Base SQLite en memoria compartida por todas las sesiones del test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_database(bind=engine)
    yield sessionmaker(autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def content_repository(session_factory):
    return SqlAlchemyContentRepository(session_factory)


@pytest.fixture
def keyword_repository(session_factory):
    return SqlAlchemyKeywordRepository(session_factory)


@pytest.fixture
def solar_feed():
    """Feed del escenario 'solar power' para audiencias ONG."""
    return FakeFeedCollector({
        'environment': [
            build_post('sp1', 'Community solar power funding helps local families',
                       'The program gives public support to households', subreddit='environment', score=40),
            build_post('sp2', 'Random chatter about my lunch today here', subreddit='environment', score=90),
        ],
        'news': [
            build_post('sp3', 'Solar power panels installed on my roof this week', subreddit='news', score=5),
        ],
    })


@pytest.fixture
def solar_threads():
    return FakeThreadCollector({
        'sp1': [
            build_comment('sc1', 'Local community support for solar power is huge',
                          post_id='sp1', subreddit='environment', score=7),
            build_comment('sc2', 'lol', post_id='sp1', subreddit='environment'),
        ],
    })
