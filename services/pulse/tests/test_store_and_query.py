"""
Tests para el guardado con deduplicación, las estadísticas y las consultas,
sobre una base SQLite en memoria.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from services.pulse.app.application.query_content_use_case import QueryContentUseCase
from services.pulse.app.application.store_content_use_case import StoreContentUseCase
from services.pulse.app.domain.entities import SentimentClass


@pytest.fixture
def store(content_repository, keyword_repository):
    return StoreContentUseCase(content_repository, keyword_repository)


@pytest.fixture
def query(content_repository, keyword_repository):
    return QueryContentUseCase(content_repository, keyword_repository)


def with_analysis(item, analysis):
    item.analysis = analysis
    return item


class TestStoreContentUseCase:
    """Tests de inserción y deduplicación por id externo."""

    def test_stores_posts_and_comments(self, store, make_post, make_comment, make_analysis):
        posts = [with_analysis(make_post('p1', 'Solar power for all'), make_analysis())]
        comments = [with_analysis(make_comment('c1', 'Nice work', post_id='p1'), make_analysis())]

        result = store.execute('solar power', posts, comments)

        assert result.stored_posts == 1
        assert result.stored_comments == 1
        assert result.total_stored == 2
        assert result.duplicates_skipped == 0

    def test_duplicates_are_skipped_not_failed(self, store, make_post, make_analysis):
        post = with_analysis(make_post('p1', 'Solar power for all'), make_analysis())
        store.execute('solar power', [post], [])

        result = store.execute('solar power', [post], [])

        assert result.total_stored == 0
        assert result.duplicates_skipped == 1

    def test_dedup_ignores_keyword(self, store, content_repository, make_post, make_analysis):
        post = with_analysis(make_post('p1', 'Solar power for all'), make_analysis())
        store.execute('solar power', [post], [])

        result = store.execute('renewable energy', [post], [])

        assert result.duplicates_skipped == 1
        assert content_repository.count('posts', {'keyword': 'renewable energy'}) == 0

    def test_keyword_stats_are_recomputed(self, store, keyword_repository, make_post, make_analysis):
        keyword_repository.get_or_create('solar power')
        posts = [
            with_analysis(make_post('p1', 'a', subreddit='environment'),
                          make_analysis(SentimentClass.POSITIVE, relevancy=100, quality=100, engagement=100)),
            with_analysis(make_post('p2', 'b', subreddit='environment'),
                          make_analysis(SentimentClass.NEGATIVE, relevancy=0, quality=0, engagement=0)),
            with_analysis(make_post('p3', 'c', subreddit='news'), make_analysis()),
        ]
        store.execute('solar power', posts, [])

        stats = store.update_keyword_stats('solar power')
        record = keyword_repository.find_by_keyword('solar power')

        assert stats.sentiment.to_dict() == {'positive': 1, 'negative': 1, 'neutral': 1}
        assert stats.volume == 3
        assert stats.trending is False
        # environment: (100 + 8) / 2 = 54
        assert [s.to_dict() for s in stats.top_subreddits] == [
            {'name': 'environment', 'count': 2, 'avgScore': 54},
            {'name': 'news', 'count': 1, 'avgScore': 54},
        ]
        assert record.volume == 3
        assert record.top_subreddits[0].name == 'environment'

    def test_trending_above_threshold(self, store, make_post, make_analysis):
        posts = [with_analysis(make_post(f'p{i}', 'title'), make_analysis()) for i in range(11)]
        store.execute('housing crisis', posts, [])

        assert store.compute_stats('housing crisis').trending is True

    def test_other_integrity_errors_are_not_duplicates(self, store, content_repository,
                                                       make_post, make_analysis):
        post = with_analysis(make_post('p1', 'Solar power for all'), make_analysis())
        post.created = None

        with pytest.raises(IntegrityError):
            content_repository.save_post(post, 'solar power')
        with pytest.raises(IntegrityError):
            store.execute('solar power', [post], [])
        assert content_repository.count('posts', {'keyword': 'solar power'}) == 0


class TestQueryContentUseCase:
    """Tests de consultas paginadas, filtros y estadísticas."""

    @pytest.fixture
    def seeded(self, store, keyword_repository, make_post, make_comment, make_analysis):
        keyword_repository.get_or_create('solar power')
        base = datetime(2024, 5, 1, 12, 0)
        posts = [
            with_analysis(make_post('p1', 'one', subreddit='environment', score=5, created=base),
                          make_analysis(SentimentClass.POSITIVE, relevancy=90)),
            with_analysis(make_post('p2', 'two', subreddit='News', score=50, created=base + timedelta(hours=1)),
                          make_analysis(SentimentClass.NEGATIVE, relevancy=10)),
            with_analysis(make_post('p3', 'three', subreddit='news', score=1, created=base + timedelta(hours=2)),
                          make_analysis(relevancy=50)),
        ]
        comments = [
            with_analysis(make_comment('c1', 'first', post_id='p1', subreddit='environment', score=30,
                                       created=base + timedelta(hours=3)),
                          make_analysis(SentimentClass.POSITIVE, relevancy=70)),
            with_analysis(make_comment('c2', 'second', post_id='p1', subreddit='environment', score=2,
                                       created=base + timedelta(hours=4)),
                          make_analysis(relevancy=20)),
        ]
        store.execute('solar power', posts, comments)
        store.update_keyword_stats('solar power')

    def test_merged_pagination(self, query, seeded):
        first = query.get_data('solar power', limit=2, page=1)
        last = query.get_data('solar power', limit=2, page=3)

        assert [item['id'] for item in first['items']] == ['p1', 'c1']
        assert first['pagination'] == {
            'page': 1, 'limit': 2, 'totalCount': 5, 'totalPages': 3, 'hasNext': True, 'hasPrev': False,
        }
        assert [item['id'] for item in last['items']] == ['p2']
        assert last['pagination']['hasNext'] is False
        assert last['pagination']['hasPrev'] is True

    def test_items_carry_type_and_serialized_dates(self, query, seeded):
        items = query.get_data('solar power', item_type='comments')['items']

        assert {item['type'] for item in items} == {'comment'}
        assert items[0]['postId'] == 'p1'
        assert isinstance(items[0]['createdAt'], str)
        assert items[0]['analysis']['sentiment']['classification'] == 'positive'

    def test_sort_by_recency_ascending(self, query, seeded):
        data = query.get_data('solar power', sort_by='createdAt', sort_order='asc')
        assert [item['id'] for item in data['items']] == ['p1', 'p2', 'p3', 'c1', 'c2']

    def test_sort_by_external_score(self, query, seeded):
        data = query.get_data('solar power', item_type='posts', sort_by='externalScore')
        assert [item['id'] for item in data['items']] == ['p2', 'p1', 'p3']

    def test_filters(self, query, seeded):
        positive = query.get_data('solar power', sentiment='positive')
        news = query.get_data('solar power', subreddit='NEWS')

        assert sorted(item['id'] for item in positive['items']) == ['c1', 'p1']
        assert sorted(item['id'] for item in news['items']) == ['p2', 'p3']

    def test_unknown_keyword_returns_empty_page(self, query, seeded):
        data = query.get_data('nothing here')

        assert data['items'] == []
        assert data['pagination']['totalCount'] == 0
        assert data['pagination']['totalPages'] == 0
        assert data['pagination']['hasNext'] is False

    def test_limit_is_capped(self, query, seeded):
        assert query.get_data('solar power', limit=1000)['pagination']['limit'] == 100

    @pytest.mark.parametrize("kwargs", [
        {'item_type': 'videos'},
        {'sort_by': 'popularity'},
        {'sort_order': 'sideways'},
        {'sentiment': 'angry'},
    ])
    def test_invalid_parameters(self, query, kwargs):
        with pytest.raises(ValueError):
            query.get_data('solar power', **kwargs)

    def test_statistics(self, query, seeded):
        stats = query.statistics('Solar Power')

        assert stats['keyword'] == 'solar power'
        assert stats['totalPosts'] == 3
        assert stats['totalComments'] == 2
        assert stats['sentiment'] == {'positive': 2, 'negative': 1, 'neutral': 2}
        assert stats['topSubreddits'][0]['name'] == 'environment'
        assert stats['fetchStatus'] == 'pending'

    def test_trending_ranks_by_recent_activity(self, query, store, keyword_repository, seeded,
                                               make_post, make_analysis):
        keyword_repository.get_or_create('housing')
        store.execute('housing', [with_analysis(make_post('h1', 'rent'), make_analysis())], [])
        store.update_keyword_stats('housing')

        ranked = query.trending(10)

        assert [entry['keyword'] for entry in ranked] == ['solar power', 'housing']
        assert ranked[0]['recentActivity'] == 5
        assert ranked[1]['totalItems'] == 1


class TestKeywordRepository:
    """Tests del ciclo de vida de keywords en la base de datos."""

    def test_get_or_create_counts_searches(self, keyword_repository):
        keyword_repository.get_or_create('solar power')
        record = keyword_repository.get_or_create('solar power')

        assert record.search_count == 2
        assert record.fetch_status.value == 'pending'

    def test_find_due_ordering_and_exclusions(self, keyword_repository):
        from services.pulse.app.domain.entities import FetchStatus

        now = datetime(2024, 5, 2, 12, 0)
        for keyword in ('never', 'old', 'recent', 'future', 'failed', 'busy', 'manual'):
            keyword_repository.save_schedule(keyword, 24, auto_fetch=keyword != 'manual')

        keyword_repository.update_status('old', FetchStatus.COMPLETED, last_fetched=now - timedelta(days=3),
                                         next_scheduled_fetch=now - timedelta(days=2))
        keyword_repository.update_status('recent', FetchStatus.COMPLETED, last_fetched=now - timedelta(days=1),
                                         next_scheduled_fetch=now - timedelta(hours=1))
        keyword_repository.update_status('future', FetchStatus.COMPLETED, last_fetched=now,
                                         next_scheduled_fetch=now + timedelta(hours=5))
        keyword_repository.update_status('failed', FetchStatus.FAILED)
        keyword_repository.update_status('busy', FetchStatus.PROCESSING)

        due = keyword_repository.find_due(now, 10, exclude=['busy'])
        assert [k.keyword for k in due] == ['never', 'old', 'recent']

        limited = keyword_repository.find_due(now, 1, exclude=['never', 'busy'])
        assert [k.keyword for k in limited] == ['old']

    def test_schedule_resets_failed(self, keyword_repository):
        from services.pulse.app.domain.entities import FetchStatus

        keyword_repository.save_schedule('housing', 24, True)
        keyword_repository.update_status('housing', FetchStatus.FAILED)

        record = keyword_repository.save_schedule('housing', 12, True)

        assert record.fetch_status == FetchStatus.PENDING
        assert record.fetch_interval == 12

    def test_stale_processing_status_is_due_again(self, keyword_repository):
        from services.pulse.app.domain.entities import FetchStatus
        from services.pulse.app.application.keyword_scheduling_use_case import KeywordSchedulingUseCase

        # Estado que deja un proceso interrumpido a mitad de ciclo, sin lock en memoria
        keyword_repository.save_schedule('solar power', 24, True)
        keyword_repository.update_status('solar power', FetchStatus.PROCESSING)
        KeywordSchedulingUseCase(keyword_repository).schedule('solar power', 1, True)

        due = keyword_repository.find_due(datetime(2100, 1, 1), 5, exclude=[])
        locked = keyword_repository.find_due(datetime(2100, 1, 1), 5, exclude=['solar power'])

        assert [k.keyword for k in due] == ['solar power']
        assert locked == []
