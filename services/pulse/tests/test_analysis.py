"""
Tests para el modelo de análisis, su decodificación y el análisis local.
"""
import pytest

from services.pulse.app.domain.analysis_decoder import decode_analysis, parse_json_response
from services.pulse.app.domain.entities import (
    Analysis, AnalysisContext, SentimentClass, Stance, Tone, ContributionType, clamp_score
)
from services.pulse.app.domain.exceptions import AnalysisServiceError
from services.pulse.app.domain.fallback_analysis import (
    FALLBACK_REASONING, fallback_analysis, score_relevancy, extract_key_terms
)


class TestClampScore:

    @pytest.mark.parametrize("value,expected", [
        (-5, 0),
        (150, 100),
        (42.6, 43),
        ("77", 77),
        ("abc", 50),
        (None, 50),
        (True, 50),
        (float('nan'), 50),
    ])
    def test_clamp(self, value, expected):
        assert clamp_score(value) == expected


class TestWeightedScore:

    def test_default_analysis(self):
        # 50*0.4 + 50*0.3 + 70*0.2 + 50*0.1
        assert Analysis().weighted_score() == 54

    def test_weights(self, make_analysis):
        analysis = make_analysis(SentimentClass.POSITIVE, relevancy=80, quality=60, engagement=50)
        assert analysis.weighted_score() == 75

    def test_to_dict_uses_enum_values(self):
        data = Analysis().to_dict()
        assert data['sentiment']['classification'] == 'neutral'
        assert data['insights']['stance'] == 'neutral'
        assert data['insights']['tone'] == 'casual'
        assert data['contributor']['expertise_level'] == 'novice'
        assert data['contributor']['contribution_type'] == 'opinion'


class TestParseJsonResponse:

    def test_plain_json(self):
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_fenced_json(self):
        assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}

    def test_json_embedded_in_prose(self):
        assert parse_json_response('Here you go: {"a": {"b": 2}} thanks') == {"a": {"b": 2}}

    @pytest.mark.parametrize("text", ["no json here", "{broken", "", "[1, 2]"])
    def test_invalid_responses_raise(self, text):
        with pytest.raises(AnalysisServiceError):
            parse_json_response(text)


class TestDecodeAnalysis:

    def test_partial_response_gets_defaults(self):
        analysis = decode_analysis({"sentiment": {"classification": "POSITIVE", "confidence": 150}})

        assert analysis.sentiment.classification == SentimentClass.POSITIVE
        assert analysis.sentiment.confidence == 100
        assert analysis.sentiment.positive_score == 33
        assert analysis.sentiment.neutral_score == 34
        assert analysis.relevancy.score == 50
        assert analysis.insights.tone == Tone.CASUAL

    def test_accepts_overall_as_classification(self):
        analysis = decode_analysis({"sentiment": {"overall": "negative"}})
        assert analysis.sentiment.classification == SentimentClass.NEGATIVE

    def test_unknown_enums_fall_back(self):
        analysis = decode_analysis({"insights": {"stance": "angry", "tone": "formal"}})
        assert analysis.insights.stance == Stance.NEUTRAL
        assert analysis.insights.tone == Tone.FORMAL

    def test_non_dict_sections_are_ignored(self):
        analysis = decode_analysis({"sentiment": "positive", "quality": [1, 2]})
        assert analysis.sentiment.classification == SentimentClass.NEUTRAL
        assert analysis.quality.overall_quality == 50

    def test_lists_are_capped(self):
        analysis = decode_analysis({"relevancy": {"keywords_matched": [f"k{i}" for i in range(15)]}})
        assert len(analysis.relevancy.keywords_matched) == 10

    def test_non_dict_input_returns_defaults(self):
        assert decode_analysis("garbage") == Analysis()


class TestFallbackAnalysis:
    """Tests del análisis heurístico local."""

    def test_is_deterministic(self):
        context = AnalysisContext(keyword="solar power", subreddit="environment")
        text = "Solar power is a great solution for local communities."
        assert fallback_analysis(text, context) == fallback_analysis(text, context)

    def test_positive_text(self):
        analysis = fallback_analysis("This is a great and effective solution")

        assert analysis.sentiment.classification == SentimentClass.POSITIVE
        assert analysis.sentiment.positive_score == 70
        assert analysis.insights.stance == Stance.SUPPORTING
        assert analysis.relevancy.reasoning == FALLBACK_REASONING

    def test_negative_text(self):
        analysis = fallback_analysis("This is a terrible and harmful idea")

        assert analysis.sentiment.classification == SentimentClass.NEGATIVE
        assert analysis.insights.stance == Stance.OPPOSING

    def test_question_text(self):
        analysis = fallback_analysis("What do you think about solar power?")

        assert analysis.sentiment.classification == SentimentClass.NEUTRAL
        assert analysis.insights.stance == Stance.QUESTIONING
        assert analysis.insights.tone == Tone.EMOTIONAL
        assert analysis.contributor.contribution_type == ContributionType.QUESTION
        assert 'question' in analysis.engagement.factors

    def test_relevancy_against_context(self):
        score, matched = score_relevancy("Solar power is growing", AnalysisContext(keyword="solar power"))
        assert score == 100
        assert matched == ['solar', 'power']

        score, matched = score_relevancy("solar panels are cheap", AnalysisContext(keyword="solar power"))
        assert score == 50
        assert matched == ['solar']

    def test_relevancy_without_context(self):
        assert score_relevancy("anything", None) == (50, [])

    def test_key_terms_skip_stopwords_and_short_words(self):
        assert extract_key_terms("The community and the policy about funding") == ['community', 'policy', 'funding']

    def test_never_raises_on_bad_input(self):
        analysis = fallback_analysis(None)
        assert isinstance(analysis, Analysis)

    def test_scores_are_bounded(self):
        text = "great excellent support " * 200
        data = fallback_analysis(text).to_dict()
        numbers = [
            data['sentiment']['confidence'],
            data['quality']['overall_quality'],
            data['quality']['informativeness'],
            data['engagement']['score'],
            data['contributor']['score'],
        ]
        assert all(0 <= value <= 100 for value in numbers)
