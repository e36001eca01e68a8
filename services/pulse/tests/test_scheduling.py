"""
Tests para la programación de keywords, la pasada programada y el scheduler.
"""
import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from services.pulse.app.application.keyword_scheduling_use_case import KeywordSchedulingUseCase
from services.pulse.app.application.scheduled_fetch_use_case import ScheduledFetchResult, ScheduledFetchUseCase
from services.pulse.app.domain.entities import FetchResult, FetchStatus, Keyword
from services.pulse.app.infrastructure.keyword_lock import KeywordLockRegistry
from services.pulse.app.infrastructure.scheduler import KeywordScheduler
from services.pulse.app.domain.exceptions import KeywordAlreadyProcessingError


class TestKeywordLockRegistry:

    def test_hold_is_exclusive_and_released(self):
        locks = KeywordLockRegistry()

        with locks.hold('solar power'):
            assert locks.is_locked('solar power')
            with pytest.raises(KeywordAlreadyProcessingError):
                with locks.hold('solar power'):
                    pass
            # Otra keyword no se ve afectada
            with locks.hold('housing'):
                assert locks.active_keywords() == ['housing', 'solar power']

        assert locks.active_keywords() == []

    def test_released_on_exception(self):
        locks = KeywordLockRegistry()

        with pytest.raises(RuntimeError):
            with locks.hold('solar power'):
                raise RuntimeError("boom")

        assert not locks.is_locked('solar power')


class TestKeywordSchedulingUseCase:

    @pytest.fixture
    def scheduling(self, keyword_repository):
        return KeywordSchedulingUseCase(keyword_repository)

    def test_schedule_new_keyword(self, scheduling):
        record = scheduling.schedule('  Housing  Crisis ', 12)

        assert record.keyword == 'housing crisis'
        assert record.fetch_interval == 12
        assert record.auto_fetch is True
        assert record.fetch_status == FetchStatus.PENDING
        assert [k.keyword for k in scheduling.list_scheduled()] == ['housing crisis']

    @pytest.mark.parametrize("interval", [0, 169, -3])
    def test_interval_bounds(self, scheduling, interval):
        with pytest.raises(ValueError):
            scheduling.schedule('housing', interval)

    def test_empty_keyword(self, scheduling):
        with pytest.raises(ValueError):
            scheduling.schedule('   ', 24)

    def test_update_interval_recomputes_next_fetch(self, scheduling, keyword_repository):
        scheduling.schedule('housing', 24)
        fetched_at = datetime(2024, 5, 1, 12, 0)
        keyword_repository.update_status('housing', FetchStatus.COMPLETED, last_fetched=fetched_at,
                                         next_scheduled_fetch=fetched_at + timedelta(hours=24))

        record = scheduling.update_interval('housing', 6)

        assert record.fetch_interval == 6
        assert record.next_scheduled_fetch == fetched_at + timedelta(hours=6)

    def test_update_interval_unknown_keyword(self, scheduling):
        assert scheduling.update_interval('missing', 6) is None

    def test_unschedule_deactivates(self, scheduling, keyword_repository):
        scheduling.schedule('housing', 24)

        assert scheduling.unschedule('housing') is True
        assert scheduling.list_scheduled() == []
        record = keyword_repository.find_by_keyword('housing')
        assert record.is_active is False
        assert record.auto_fetch is False
        assert record.next_scheduled_fetch is None

    def test_unschedule_unknown_keyword(self, scheduling):
        assert scheduling.unschedule('missing') is False

    def test_schedule_without_auto_fetch_is_not_listed(self, scheduling):
        scheduling.schedule('housing', 24, auto_fetch=False)
        assert scheduling.list_scheduled() == []


class TestScheduledFetchUseCase:

    @pytest.fixture
    def keyword_repository(self):
        repository = Mock()
        repository.find_due.return_value = [Keyword('solar power'), Keyword('housing')]
        return repository

    @pytest.fixture
    def cycle(self):
        cycle = Mock()
        cycle.execute = AsyncMock(side_effect=lambda request: FetchResult(keyword=request.keyword, success=True))
        return cycle

    def test_runs_due_keywords_sequentially(self, cycle, keyword_repository):
        locks = KeywordLockRegistry()
        locks.acquire('busy')
        use_case = ScheduledFetchUseCase(cycle, keyword_repository, locks, batch_limit=5, keyword_delay=0)

        result = asyncio.run(use_case.execute())

        assert result.processed == 2
        assert result.succeeded == 2
        _, limit = keyword_repository.find_due.call_args[0][:2]
        assert limit == 5
        assert keyword_repository.find_due.call_args.kwargs['exclude'] == ['busy']

        requests = [call.args[0] for call in cycle.execute.call_args_list]
        assert [r.keyword for r in requests] == ['solar power', 'housing']
        assert all(r.max_posts == 10 for r in requests)
        assert all(r.max_comments_per_post == 5 for r in requests)
        assert all(r.include_comments and not r.force_refresh for r in requests)

    def test_one_failure_does_not_stop_the_run(self, cycle, keyword_repository):
        cycle.execute.side_effect = [RuntimeError("boom"), FetchResult(keyword='housing', success=True)]
        use_case = ScheduledFetchUseCase(cycle, keyword_repository, KeywordLockRegistry(), keyword_delay=0)

        result = asyncio.run(use_case.execute())

        assert result.processed == 2
        assert result.failed == 1
        assert result.succeeded == 1
        assert result.to_dict()['keywords'][0]['errors'] == ['boom']

    def test_nothing_due(self, cycle):
        repository = Mock()
        repository.find_due.return_value = []
        use_case = ScheduledFetchUseCase(cycle, repository, KeywordLockRegistry(), keyword_delay=0)

        result = asyncio.run(use_case.execute())

        assert result.processed == 0
        cycle.execute.assert_not_called()


class TestKeywordScheduler:

    @pytest.fixture
    def use_case(self):
        use_case = Mock()
        use_case.execute = AsyncMock(return_value=ScheduledFetchResult(processed=1, succeeded=1))
        return use_case

    def test_run_now_records_last_result(self, use_case):
        scheduler = KeywordScheduler(use_case, KeywordLockRegistry(), interval_minutes=15)

        result = scheduler.run_now()
        status = scheduler.status()

        assert result.processed == 1
        assert status['isRunning'] is False
        assert status['intervalMinutes'] == 15
        assert status['lastRun'] is not None
        assert status['lastResult']['processed'] == 1
        assert status['nextRunEstimate'] is None

    def test_run_now_swallows_job_errors(self, use_case):
        use_case.execute.side_effect = RuntimeError("db down")
        scheduler = KeywordScheduler(use_case, KeywordLockRegistry(), interval_minutes=15)

        assert scheduler.run_now() is None

    def test_start_and_stop(self, use_case):
        scheduler = KeywordScheduler(use_case, KeywordLockRegistry(), interval_minutes=15)

        try:
            assert scheduler.start() is True
            assert scheduler.start() is False
            assert scheduler.is_running
            assert scheduler.get_jobs_count() == 1
            assert scheduler.status()['nextRunEstimate'] is not None
        finally:
            assert scheduler.stop() is True

        assert scheduler.stop() is False
        assert scheduler.is_running is False
