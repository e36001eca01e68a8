"""
Tests para las políticas de filtrado por relevancia.
"""
from services.pulse.app.domain.entities import CallerRole
from services.pulse.app.domain.relevance_filter import (
    filter_broad, filter_focused, score_focused, select_relevant
)


class TestBroadPolicy:
    """Política amplia: longitud mínima, popularidad y bonus por keyword."""

    def test_drops_short_texts(self, make_post):
        posts = [make_post('a', 'short'), make_post('b', 'A long enough title about housing')]
        assert [p.id for p in filter_broad(posts, 'housing', 5)] == ['b']

    def test_ranks_by_score_plus_keyword_bonus(self, make_post):
        posts = [
            make_post('a', 'Nothing relevant in this long title', score=5),
            make_post('b', 'Housing prices keep rising everywhere', score=0),
            make_post('c', 'Another long title with a high score', score=12),
        ]
        assert [p.id for p in filter_broad(posts, 'housing', 5)] == ['c', 'b', 'a']

    def test_ties_keep_input_order(self, make_post):
        posts = [make_post(f'p{i}', f'Equal title number {i} with padding') for i in range(4)]
        assert [p.id for p in filter_broad(posts, 'zzz', 5)] == ['p0', 'p1', 'p2', 'p3']

    def test_caps_results(self, make_post, make_comment):
        posts = [make_post(f'p{i}', f'A long enough title number {i}') for i in range(8)]
        comments = [make_comment(f'c{i}', f'A long enough comment number {i}') for i in range(12)]

        selected_posts, selected_comments = select_relevant(posts, comments, 'title', CallerRole.GENERAL)

        assert len(selected_posts) == 5
        assert len(selected_comments) == 10


class TestFocusedPolicy:
    """Política enfocada para ONGs y responsables de políticas públicas."""

    def test_scores_domain_terms_and_trending_keywords(self, make_post):
        post = make_post('a', 'Community solar power funding helps local families')
        score = score_focused(post, 'solar power')

        assert score.domain_terms == ['community', 'funding', 'local']
        assert score.trending_keywords == ['solar power']
        assert score.literal_match is True
        # 3 términos ×1 + 1 keyword de tendencia ×2 + keyword literal 3
        assert score.relevance == 8

    def test_trending_topic_phrase_bonus(self, make_post):
        post = make_post('a', 'Why climate action matters')
        score = score_focused(post, 'anything')

        assert score.trending_topics == ['climate action']
        assert score.relevance == 5
        assert score.matches_trending_topic

    def test_drops_off_topic_items(self, make_post):
        posts = [
            make_post('keep', 'Community solar power funding helps local families'),
            make_post('drop', 'I bought a new phone yesterday and love it'),
        ]
        assert [p.id for p in filter_focused(posts, 'solar power', 5)] == ['keep']

    def test_single_trending_keyword_is_enough(self, make_post):
        posts = [make_post('a', 'Solar power panels installed on my roof this week')]
        assert [p.id for p in filter_focused(posts, 'solar power', 5)] == ['a']

    def test_priority_subreddits_sort_first(self, make_post):
        posts = [
            make_post('rich', 'Community solar power funding for local public programs', subreddit='news'),
            make_post('priority', 'Solar power on my roof', subreddit='environment'),
        ]
        assert [p.id for p in filter_focused(posts, 'solar power', 5)] == ['priority', 'rich']

    def test_role_selects_policy(self, make_post):
        posts = [
            make_post('popular', 'I bought a new phone yesterday and love it', score=500),
            make_post('relevant', 'Community solar power funding helps local families'),
        ]

        broad, _ = select_relevant(posts, [], 'solar power', CallerRole.GENERAL)
        focused, _ = select_relevant(posts, [], 'solar power', CallerRole.NGO)
        policy, _ = select_relevant(posts, [], 'solar power', CallerRole.POLICYMAKER)

        assert [p.id for p in broad] == ['popular', 'relevant']
        assert [p.id for p in focused] == ['relevant']
        assert [p.id for p in policy] == ['relevant']

    def test_is_deterministic(self, make_post):
        posts = [make_post(f'p{i}', 'Community solar power funding helps local families') for i in range(6)]
        first = [p.id for p in filter_focused(posts, 'solar power', 5)]
        second = [p.id for p in filter_focused(posts, 'solar power', 5)]
        assert first == second == ['p0', 'p1', 'p2', 'p3', 'p4']
