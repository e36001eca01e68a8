"""
Repositorios de base de datos para keywords, posts y comentarios.
Implementaciones concretas de ContentRepository y KeywordRepository.
"""
from datetime import datetime, timedelta
from typing import List, Optional, Dict, Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from services.pulse.app.domain.analysis_decoder import decode_analysis
from services.pulse.app.domain.entities import (
    RedditPost, RedditComment, Keyword, FetchStatus, SentimentCounts, SubredditStat
)
from services.pulse.app.domain.exceptions import DuplicateItemError
from services.pulse.app.domain.interfaces import ContentRepository, KeywordRepository
from shared.database.models import (
    Keyword as KeywordModel,
    RedditPost as RedditPostModel,
    RedditComment as RedditCommentModel,
)
from shared.database.session import SessionLocal, get_db_session
from shared.services.logging_config import get_logger


logger = get_logger(__name__)

ITEM_MODELS = {
    'posts': RedditPostModel,
    'comments': RedditCommentModel,
}

SORT_COLUMNS = {
    'aggregateScore': 'weighted_score',
    'createdAt': 'published_at',
    'externalScore': 'reddit_score',
}


def _apply_filters(query, model, filters: Dict[str, Any]):
    query = query.filter(model.is_active.is_(True))
    if filters.get('keyword'):
        query = query.filter(model.keyword == filters['keyword'])
    if filters.get('sentiment'):
        query = query.filter(model.sentiment == filters['sentiment'])
    if filters.get('subreddit'):
        query = query.filter(func.lower(model.subreddit) == filters['subreddit'].lower())
    return query


def _post_to_dict(model: RedditPostModel) -> Dict[str, Any]:
    return {
        'id': model.reddit_id,
        'type': 'post',
        'title': model.title,
        'link': model.link,
        'author': model.author,
        'subreddit': model.subreddit,
        'content': model.content or "",
        'permalink': model.permalink,
        'score': model.reddit_score,
        'keyword': model.keyword,
        'analysis': decode_analysis(model.analysis).to_dict(),
        'weightedScore': model.weighted_score,
        'processed': model.processed,
        'createdAt': model.published_at,
        'storedAt': model.stored_at,
    }


def _comment_to_dict(model: RedditCommentModel) -> Dict[str, Any]:
    return {
        'id': model.reddit_id,
        'type': 'comment',
        'postId': model.post_id,
        'author': model.author,
        'subreddit': model.subreddit,
        'content': model.content,
        'permalink': model.permalink,
        'score': model.reddit_score,
        'keyword': model.keyword,
        'analysis': decode_analysis(model.analysis).to_dict(),
        'weightedScore': model.weighted_score,
        'processed': model.processed,
        'createdAt': model.published_at,
        'storedAt': model.stored_at,
    }


class SqlAlchemyContentRepository(ContentRepository):
    """
    Implementación del repositorio de posts y comentarios usando SQLAlchemy.
    Cada operación abre y cierra su propia sesión.
    """

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory

    def _insert(self, model, reddit_id: str) -> None:
        with get_db_session(self._session_factory) as db:
            db.add(model)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                model_class = type(model)
                exists = db.query(model_class.id).filter(model_class.reddit_id == reddit_id).first()
                if exists is None:
                    logger.error(f"❌ Error de integridad guardando {reddit_id}: {e.orig}")
                    raise
                raise DuplicateItemError(reddit_id) from e

    def save_post(self, post: RedditPost, keyword: str) -> None:
        analysis = post.analysis
        now = datetime.utcnow()
        self._insert(RedditPostModel(
            reddit_id=post.id,
            title=post.title[:500],
            link=post.link,
            author=post.author,
            subreddit=post.subreddit,
            content=post.content,
            permalink=post.permalink,
            reddit_score=post.score,
            keyword=keyword,
            analysis=analysis.to_dict(),
            weighted_score=analysis.weighted_score(),
            processed=True,
            processing_attempts=1,
            last_processed=now,
            published_at=post.created,
            stored_at=now,
            sentiment=analysis.sentiment.classification.value,
        ), post.id)

    def save_comment(self, comment: RedditComment, keyword: str) -> None:
        analysis = comment.analysis
        now = datetime.utcnow()
        self._insert(RedditCommentModel(
            reddit_id=comment.id,
            post_id=comment.post_id,
            author=comment.author,
            content=comment.content,
            permalink=comment.permalink,
            reddit_score=comment.score,
            subreddit=comment.subreddit,
            keyword=keyword,
            analysis=analysis.to_dict(),
            weighted_score=analysis.weighted_score(),
            processed=True,
            processing_attempts=1,
            last_processed=now,
            published_at=comment.created,
            stored_at=now,
            sentiment=analysis.sentiment.classification.value,
        ), comment.id)

    def has_recent_data(self, keyword: str, since: datetime) -> bool:
        return self.count_recent(keyword, since) > 0

    def count_recent(self, keyword: str, since: datetime) -> int:
        with get_db_session(self._session_factory) as db:
            total = 0
            for model in ITEM_MODELS.values():
                total += db.query(func.count(model.id)).filter(
                    model.keyword == keyword,
                    model.is_active.is_(True),
                    model.stored_at >= since,
                ).scalar() or 0
            return total

    def count_sentiments(self, keyword: Optional[str]) -> SentimentCounts:
        """Conteo por clasificación; sin keyword cuenta todos los items."""
        counts = SentimentCounts()
        with get_db_session(self._session_factory) as db:
            for model in ITEM_MODELS.values():
                query = db.query(model.sentiment, func.count(model.id))
                rows = _apply_filters(query, model, {'keyword': keyword}).group_by(model.sentiment).all()
                for sentiment, count in rows:
                    if hasattr(counts, sentiment):
                        setattr(counts, sentiment, getattr(counts, sentiment) + count)
        return counts

    def top_subreddits(self, keyword: Optional[str], limit: int) -> List[SubredditStat]:
        """Subreddits por frecuencia, con el weighted score medio de sus items."""
        totals: Dict[str, List[float]] = {}
        with get_db_session(self._session_factory) as db:
            for model in ITEM_MODELS.values():
                query = db.query(model.subreddit, func.count(model.id), func.sum(model.weighted_score))
                rows = _apply_filters(query, model, {'keyword': keyword}).group_by(model.subreddit).all()
                for name, count, score_sum in rows:
                    entry = totals.setdefault(name, [0, 0.0])
                    entry[0] += count
                    entry[1] += float(score_sum or 0)

        stats = [
            SubredditStat(name=name, count=int(count), avg_score=int(round(score_sum / count)) if count else 0)
            for name, (count, score_sum) in totals.items()
        ]
        stats.sort(key=lambda stat: (-stat.count, stat.name))
        return stats[:limit]

    def query(self, item_type: str, filters: Dict[str, Any], sort_by: str,
              descending: bool, limit: int) -> List[Dict[str, Any]]:
        model = ITEM_MODELS[item_type]
        column = getattr(model, SORT_COLUMNS.get(sort_by, 'weighted_score'))
        order = column.desc() if descending else column.asc()
        tiebreak = model.id.desc() if descending else model.id.asc()
        to_dict = _post_to_dict if item_type == 'posts' else _comment_to_dict

        with get_db_session(self._session_factory) as db:
            rows = _apply_filters(db.query(model), model, filters).order_by(order, tiebreak).limit(limit).all()
            return [to_dict(row) for row in rows]

    def count(self, item_type: str, filters: Dict[str, Any]) -> int:
        model = ITEM_MODELS[item_type]
        with get_db_session(self._session_factory) as db:
            return _apply_filters(db.query(func.count(model.id)), model, filters).scalar() or 0


def _keyword_to_entity(model: KeywordModel) -> Keyword:
    """Convierte un modelo de base de datos a una entidad del dominio."""
    try:
        status = FetchStatus(model.fetch_status)
    except ValueError:
        logger.warning(f"Estado inválido en BD para '{model.keyword}': {model.fetch_status}")
        status = FetchStatus.PENDING

    return Keyword(
        id=model.id,
        keyword=model.keyword,
        fetch_status=status,
        auto_fetch=bool(model.auto_fetch),
        fetch_interval=model.fetch_interval,
        next_scheduled_fetch=model.next_scheduled_fetch,
        last_fetched=model.last_fetched,
        sentiment=SentimentCounts(
            positive=model.sentiment_positive,
            negative=model.sentiment_negative,
            neutral=model.sentiment_neutral,
        ),
        volume=model.volume,
        trending=bool(model.trending),
        top_subreddits=[
            SubredditStat(name=item.get('name', ''), count=item.get('count', 0), avg_score=item.get('avgScore', 0))
            for item in (model.top_subreddits or [])
        ],
        is_active=bool(model.is_active),
        search_count=model.search_count,
    )


class SqlAlchemyKeywordRepository(KeywordRepository):
    """
    Implementación del repositorio de keywords usando SQLAlchemy.
    """

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory

    def find_by_keyword(self, keyword: str) -> Optional[Keyword]:
        with get_db_session(self._session_factory) as db:
            model = db.query(KeywordModel).filter(KeywordModel.keyword == keyword).first()
            return _keyword_to_entity(model) if model else None

    def get_or_create(self, keyword: str) -> Keyword:
        """Obtiene la keyword (registrando la búsqueda) o la crea en estado pending."""
        now = datetime.utcnow()
        with get_db_session(self._session_factory) as db:
            model = db.query(KeywordModel).filter(KeywordModel.keyword == keyword).first()
            if model is None:
                model = KeywordModel(keyword=keyword, fetch_status=FetchStatus.PENDING.value,
                                     search_count=1, last_searched=now, top_subreddits=[])
                db.add(model)
                try:
                    db.commit()
                    logger.info(f"🆕 Keyword creada: '{keyword}'")
                except IntegrityError:
                    # Otra petición la creó en paralelo
                    db.rollback()
                    model = db.query(KeywordModel).filter(KeywordModel.keyword == keyword).one()
            else:
                model.search_count = (model.search_count or 0) + 1
                model.last_searched = now
                db.commit()
            db.refresh(model)
            return _keyword_to_entity(model)

    def update_status(self, keyword: str, status: FetchStatus,
                      last_fetched: Optional[datetime] = None,
                      next_scheduled_fetch: Optional[datetime] = None) -> None:
        with get_db_session(self._session_factory) as db:
            model = db.query(KeywordModel).filter(KeywordModel.keyword == keyword).first()
            if model is None:
                logger.warning(f"⚠️ Keyword '{keyword}' no encontrada al actualizar estado")
                return
            model.fetch_status = status.value
            if last_fetched is not None:
                model.last_fetched = last_fetched
            if next_scheduled_fetch is not None:
                model.next_scheduled_fetch = next_scheduled_fetch
            db.commit()

    def update_stats(self, keyword: str, sentiment: SentimentCounts, volume: int,
                     trending: bool, top_subreddits: List[SubredditStat]) -> None:
        with get_db_session(self._session_factory) as db:
            model = db.query(KeywordModel).filter(KeywordModel.keyword == keyword).first()
            if model is None:
                logger.warning(f"⚠️ Keyword '{keyword}' no encontrada al actualizar estadísticas")
                return
            model.sentiment_positive = sentiment.positive
            model.sentiment_negative = sentiment.negative
            model.sentiment_neutral = sentiment.neutral
            model.volume = volume
            model.trending = trending
            model.top_subreddits = [stat.to_dict() for stat in top_subreddits]
            db.commit()

    def save_schedule(self, keyword: str, fetch_interval: int, auto_fetch: bool,
                      reset_failed: bool = True) -> Keyword:
        with get_db_session(self._session_factory) as db:
            model = db.query(KeywordModel).filter(KeywordModel.keyword == keyword).first()
            if model is None:
                model = KeywordModel(keyword=keyword, fetch_status=FetchStatus.PENDING.value,
                                     top_subreddits=[])
                db.add(model)
            model.fetch_interval = fetch_interval
            model.auto_fetch = auto_fetch
            model.is_active = True
            if not auto_fetch:
                model.next_scheduled_fetch = None
            if reset_failed and model.fetch_status == FetchStatus.FAILED.value:
                model.fetch_status = FetchStatus.PENDING.value
            db.commit()
            db.refresh(model)
            return _keyword_to_entity(model)

    def update_interval(self, keyword: str, fetch_interval: int) -> Optional[Keyword]:
        with get_db_session(self._session_factory) as db:
            model = db.query(KeywordModel).filter(KeywordModel.keyword == keyword).first()
            if model is None:
                return None
            model.fetch_interval = fetch_interval
            if model.last_fetched is not None and model.auto_fetch:
                model.next_scheduled_fetch = model.last_fetched + timedelta(hours=fetch_interval)
            db.commit()
            db.refresh(model)
            return _keyword_to_entity(model)

    def unschedule(self, keyword: str) -> bool:
        with get_db_session(self._session_factory) as db:
            model = db.query(KeywordModel).filter(KeywordModel.keyword == keyword).first()
            if model is None:
                return False
            model.auto_fetch = False
            model.next_scheduled_fetch = None
            model.is_active = False
            db.commit()
            return True

    def find_due(self, now: datetime, limit: int, exclude: List[str]) -> List[Keyword]:
        """
        Keywords con fetch vencido, primero las menos recientemente obtenidas.

        Las keywords en proceso se excluyen por el registro de locks en memoria
        (`exclude`), no por el estado guardado: un estado `processing` que quedó
        tras un reinicio no tiene lock detrás y debe volver a ser elegible.
        """
        with get_db_session(self._session_factory) as db:
            query = db.query(KeywordModel).filter(
                KeywordModel.is_active.is_(True),
                KeywordModel.auto_fetch.is_(True),
                KeywordModel.fetch_status != FetchStatus.FAILED.value,
                (KeywordModel.next_scheduled_fetch.is_(None)) | (KeywordModel.next_scheduled_fetch <= now),
            )
            if exclude:
                query = query.filter(KeywordModel.keyword.notin_(exclude))
            models = query.order_by(
                KeywordModel.last_fetched.is_(None).desc(),
                KeywordModel.last_fetched.asc(),
                KeywordModel.id.asc(),
            ).limit(limit).all()
            return [_keyword_to_entity(model) for model in models]

    def find_scheduled(self) -> List[Keyword]:
        with get_db_session(self._session_factory) as db:
            models = db.query(KeywordModel).filter(
                KeywordModel.is_active.is_(True),
                KeywordModel.auto_fetch.is_(True),
            ).order_by(KeywordModel.keyword.asc()).all()
            return [_keyword_to_entity(model) for model in models]

    def find_with_volume(self) -> List[Keyword]:
        with get_db_session(self._session_factory) as db:
            models = db.query(KeywordModel).filter(
                KeywordModel.is_active.is_(True),
                KeywordModel.volume > 0,
            ).all()
            return [_keyword_to_entity(model) for model in models]
