"""Tests for the Gemini-backed insights, reports and match text parser."""

import pytest

from youth_football_mcp.insights import (
    INSIGHT_ERROR,
    REPORT_ERROR,
    InsightGenerator,
    _safe_json_load,
    build_report_prompt,
)


@pytest.fixture
def season(store_with_sample_data):
    store = store_with_sample_data
    return store.matches, store.players, store.coaches, store.tournaments


class TestInsights:
    def test_needs_three_matches(self, season, fake_model):
        matches, players, coaches, tournaments = season
        generator = InsightGenerator(model=fake_model)
        assert generator.generate_insights(matches[:2], players, coaches, tournaments) is None
        assert fake_model.prompts == []

    def test_parses_model_reply(self, season, model_factory):
        model = model_factory(reply=[
            {"title": "Bomber Giusti", "description": "7 gol in 5 partite.", "emoji": "⚽"},
            {"title": "Muro", "description": "Una porta inviolata.", "emoji": "🧱"},
        ])
        insights = InsightGenerator(model=model).generate_insights(*season)
        assert [i.title for i in insights] == ["Bomber Giusti", "Muro"]
        assert "Giusti" in model.prompts[0]

    def test_transport_failure_returns_sentinel(self, season, model_factory):
        model = model_factory(error=ConnectionError("boom"))
        assert InsightGenerator(model=model).generate_insights(*season) == [INSIGHT_ERROR]

    def test_malformed_reply_returns_sentinel(self, season, model_factory):
        model = model_factory(reply="non è json")
        assert InsightGenerator(model=model).generate_insights(*season) == [INSIGHT_ERROR]

    def test_without_api_key_returns_sentinel(self, season, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        generator = InsightGenerator()
        assert generator.model is None
        assert generator.generate_insights(*season) == [INSIGHT_ERROR]


class TestMatchReport:
    def test_report(self, store_with_sample_data, model_factory):
        store = store_with_sample_data
        model = model_factory(reply={"title": "Tripletta di Pasticci", "content": "Che partita!"})
        report = InsightGenerator(model=model).generate_match_report(
            store.get_match("M002"), store.matches, store.players
        )
        assert report.title == "Tripletta di Pasticci"
        assert report.content == "Che partita!"

    def test_prompt_includes_milestones(self, store_with_sample_data):
        store = store_with_sample_data
        prompt = build_report_prompt(store.get_match("M002"), store.matches, store.players)
        assert "Pietro Pasticci: Tripletta" in prompt
        assert "Autogol (1)" in prompt

    def test_incomplete_reply_returns_sentinel(self, store_with_sample_data, model_factory):
        store = store_with_sample_data
        model = model_factory(reply={"title": "Solo titolo"})
        report = InsightGenerator(model=model).generate_match_report(
            store.get_match("M002"), store.matches, store.players
        )
        assert report == REPORT_ERROR


class TestParseMatchText:
    def test_candidates_from_reply(self, season, model_factory):
        matches, players, coaches, tournaments = season
        model = model_factory(reply=[{
            "date": "2025-11-03",
            "tournamentName": "Campionato",
            "opponentName": "Prato",
            "homeScore": 2,
            "awayScore": 1,
            "coachNames": ["Rossi"],
            "attendees": ["Lenzi", "Magni"],
            "scorers": [{"lastName": "Magni", "goals": 1}, {"isOwnGoal": True, "goals": 1}],
        }])
        candidates = InsightGenerator(model=model).parse_match_text(
            "Aglianese - Prato 2-1", players, tournaments, coaches
        )
        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.opponent_name == "Prato"
        assert candidate.home_score == 2
        assert candidate.scorers[1].is_own_goal
        assert candidate.scorers[1].last_name is None

    def test_blank_text_skips_model(self, season, fake_model):
        matches, players, coaches, tournaments = season
        generator = InsightGenerator(model=fake_model)
        assert generator.parse_match_text("   ", players, tournaments, coaches) is None
        assert fake_model.prompts == []

    def test_failure_means_nothing_extracted(self, season, model_factory):
        matches, players, coaches, tournaments = season
        model = model_factory(error=RuntimeError("quota"))
        generator = InsightGenerator(model=model)
        assert generator.parse_match_text("testo", players, tournaments, coaches) is None


class TestSafeJsonLoad:
    def test_fenced_block(self):
        assert _safe_json_load('```json\n[{"a": 1}]\n```') == [{"a": 1}]

    def test_invalid(self):
        assert _safe_json_load("{oops") is None
