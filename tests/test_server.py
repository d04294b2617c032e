"""Tests for the MCP tool layer."""

import asyncio

import pytest

from youth_football_mcp import server
from youth_football_mcp.insights import InsightGenerator


@pytest.fixture
def tools(store_with_sample_data, fake_model, monkeypatch):
    """Point the server at the sample store and a fake model."""
    monkeypatch.setattr(server, "_store", store_with_sample_data)
    monkeypatch.setattr(server, "_generator", InsightGenerator(model=fake_model))
    return store_with_sample_data


def call(tool, *args, **kwargs) -> str:
    result = asyncio.run(tool(*args, **kwargs))
    assert len(result) == 1
    assert result[0].type == "text"
    return result[0].text


class TestRosterTools:
    def test_list_players_sorted_by_last_name(self, tools):
        text = call(server.list_players)
        assert "Giocatori (8)" in text
        assert text.index("Bonacchi") < text.index("Ricci")
        assert "#9 Gianni Giusti" in text

    def test_add_player(self, tools):
        text = call(server.add_player, "Nico", "Nuovo", 14)
        assert "Nico Nuovo" in text
        assert tools.players[-1].jersey_number == 14

    def test_add_player_without_active_team(self, tools):
        tools.active_team_id = None
        text = call(server.add_player, "Nico", "Nuovo")
        assert "No active team" in text

    def test_delete_unknown_player(self, tools):
        text = call(server.delete_player, "P999")
        assert "P999" in text

    def test_update_player(self, tools):
        call(server.update_player, "P008", jersey_number=11)
        assert tools.get_player("P008").jersey_number == 11
        assert tools.get_player("P008").last_name == "Ricci"

    def test_clear_jersey_number(self, tools):
        call(server.update_player, "P001", clear_jersey_number=True)
        assert tools.get_player("P001").jersey_number is None
        assert tools.get_player("P001").last_name == "Lenzi"

    def test_set_active_team(self, tools):
        team = tools.add_team("Juniores")
        text = call(server.set_active_team, team.team_id)
        assert "Juniores" in text
        assert call(server.list_players) == "Nessun giocatore registrato."


class TestTournamentTools:
    def test_duplicate_tournament(self, tools):
        text = call(server.add_tournament, "Amichevole")
        assert "already exists" in text

    def test_update_weight(self, tools):
        call(server.update_tournament, "TR003", presence_weight=0.5)
        assert tools.get_tournament("TR003").presence_weight == 0.5

    def test_list_tournaments(self, tools):
        assert "**Ponte 2000** (Peso: 0.33)" in call(server.list_tournaments)


class TestStatisticsTools:
    def test_team_summary(self, tools):
        text = call(server.get_team_summary)
        assert "Partite Giocate: 6" in text
        assert "V-P-S: 2-2-2" in text
        assert "Clean Sheets: 1" in text

    def test_unknown_tournament_summary(self, tools):
        assert "non trovato" in call(server.get_team_summary, "TR999")

    def test_goals_leaderboard(self, tools):
        text = call(server.get_leaderboard, "goals", limit=2)
        assert "1. Gianni Giusti - 7 gol" in text
        assert "2. Pietro Pasticci - 6 gol" in text
        assert "3." not in text

    def test_weighted_leaderboard(self, tools):
        text = call(server.get_leaderboard, "weighted_appearances")
        assert "Tommaso Ricci - 0.99" in text

    def test_invalid_metric(self, tools):
        assert "non valida" in call(server.get_leaderboard, "assists")

    def test_player_detail(self, tools):
        text = call(server.get_player_detail, "P006")
        assert "Presenze: 5" in text
        assert "Gol: 7" in text

    def test_coach_detail(self, tools):
        text = call(server.get_coach_detail, "CO001")
        assert "% Vittorie: 25%" in text
        assert "- Gianni Giusti: 7 gol" in text

    def test_opponent_detail(self, tools):
        text = call(server.get_opponent_detail, "Pistoiese")
        assert "V-P-S: 1-1-0" in text
        assert "Gol Fatti: 5" in text

    def test_dashboard(self, tools):
        text = call(server.get_dashboard)
        assert "Ultimi Risultati" in text
        assert "Montale" in text


class TestAITools:
    def test_import_commits_valid_matches(self, tools, fake_model):
        fake_model.reply = [
            {
                "date": "2025-11-03", "tournamentName": "Campionato", "opponentName": "Prato",
                "homeScore": 1, "awayScore": 0, "attendees": ["Lenzi", "Magni"],
                "scorers": [{"lastName": "Magni", "goals": 1}],
            },
            {
                "date": "2025-11-10", "tournamentName": "Campionato", "opponentName": "Montale",
                "homeScore": 2, "awayScore": 0, "attendees": ["Lenzi"],
                "scorers": [{"lastName": "Lenzi", "goals": 1}],
            },
        ]
        text = call(server.import_matches_from_text, "due partite")
        assert "Partite salvate: 1 su 2" in text
        assert "non corrisponde al risultato (2)" in text
        assert len(tools.matches) == 7
        assert tools.matches[0].opponent == "Prato"

    def test_import_dry_run(self, tools, fake_model):
        fake_model.reply = [{
            "date": "2025-11-03", "tournamentName": "Campionato", "opponentName": "Prato",
            "homeScore": 0, "awayScore": 0, "attendees": ["Lenzi"],
        }]
        text = call(server.import_matches_from_text, "una partita", commit=False)
        assert "Partite salvate: 0 su 1" in text
        assert len(tools.matches) == 6

    def test_import_nothing_found(self, tools, fake_model):
        fake_model.reply = []
        assert "non ha trovato" in call(server.import_matches_from_text, "ciao")

    def test_generate_insights_are_cached(self, tools, fake_model):
        fake_model.reply = [{"title": "Bomber", "description": "Giusti segna.", "emoji": "⚽"}]
        text = call(server.generate_insights)
        assert "**Bomber**" in text
        assert tools.cached_insights[0].title == "Bomber"
        assert "Bomber" in call(server.get_dashboard)

    def test_match_report_sentinel(self, tools, fake_model):
        fake_model.error = ConnectionError("offline")
        text = call(server.get_match_report, "M002")
        assert "Errore Report" in text


class TestMatchTools:
    def test_list_won_matches(self, tools):
        text = call(server.list_matches, outcome="won")
        assert "Partite (2)" in text
        assert "Prato" in text
        assert "Montale" not in text

    def test_invalid_outcome(self, tools):
        assert "non valido" in call(server.list_matches, outcome="abandoned")

    def test_integrity_report(self, tools):
        assert call(server.check_data_integrity) == "Nessuna incongruenza trovata."
        tools.matches[0].home_score = 5
        text = call(server.check_data_integrity)
        assert "Partite con incongruenze (1)" in text
        assert "non corrisponde al risultato (5)" in text

    def test_add_match(self, tools):
        text = call(
            server.add_match, "2025-11-03T10:00", "Prato", "TR001", 2, 1,
            coach_ids=["CO001"],
            starters=["P001", "P002"],
            substitutes=["P003"],
            scorers={"P002": 1},
            own_goals=1,
        )
        assert "Partita salvata" in text
        assert "vs Prato 2-1 (Campionato)" in text
        match = tools.matches[0]
        assert [a.role for a in match.attendees] == ["starter", "starter", "sub"]
        assert match.scorers[-1].is_own_goal

    def test_add_match_goal_sum_mismatch(self, tools):
        text = call(
            server.add_match, "2025-11-03", "Prato", "TR001", 3, 0,
            starters=["P001"], scorers={"P001": 1},
        )
        assert "Partita non salvata" in text
        assert "non corrisponde al risultato (3)" in text
        assert len(tools.matches) == 6

    def test_add_match_unknown_player(self, tools):
        text = call(server.add_match, "2025-11-03", "Prato", "TR001", 0, 0, starters=["P999"])
        assert "Player 'P999' not found" in text
        assert len(tools.matches) == 6

    def test_add_match_invalid_date(self, tools):
        assert "non valida" in call(server.add_match, "domenica", "Prato", "TR001", 0, 0)

    def test_update_match_score(self, tools):
        text = call(server.update_match, "M003", home_score=4, scorers={"P006": 3, "P002": 1})
        assert "Partita aggiornata" in text
        assert tools.get_match("M003").home_score == 4
        assert tools.get_match("M003").opponent == "Pistoiese"

    def test_update_match_integrity_error(self, tools):
        text = call(server.update_match, "M003", home_score=4)
        assert "Partita non salvata" in text
        assert "non corrisponde al risultato (4)" in text
        assert tools.get_match("M003").home_score == 3

    def test_update_match_keeps_own_goals(self, tools):
        call(server.update_match, "M002", scorers={"P003": 4})
        scorers = tools.get_match("M002").scorers
        assert [(s.goals, s.is_own_goal) for s in scorers] == [(4, False), (1, True)]

    def test_update_unknown_match(self, tools):
        assert "non trovata" in call(server.update_match, "M999", home_score=1)


class TestCoachTools:
    def test_update_coach(self, tools):
        text = call(server.update_coach, "CO003", " Bianchi Jr ")
        assert "Bianchi Jr" in text
        assert tools.get_coach("CO003").name == "Bianchi Jr"

    def test_update_unknown_coach(self, tools):
        assert "CO999" in call(server.update_coach, "CO999", "Nessuno")

    def test_update_coach_requires_name(self, tools):
        assert "obbligatorio" in call(server.update_coach, "CO003", "  ")
        assert tools.get_coach("CO003").name == "Bianchi"
