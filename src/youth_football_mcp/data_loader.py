"""Sample season data for demos and tests."""

from datetime import datetime
from typing import Any

from .models import (
    SUB,
    Attendee,
    Coach,
    Match,
    Player,
    Scorer,
    Team,
    Tournament,
)
from .store import EntityStore, MatchIntegrityError
from .validator import check_match_integrity


class DataLoader:
    """Load pre-built entities into an entity store, keeping their ids."""

    def __init__(self, store: EntityStore):
        self.store = store

    def load_team(self, team: Team) -> None:
        self.store.teams.append(team)

    def load_player(self, player: Player) -> None:
        self.store.get_team(player.team_id)
        self.store.players.append(player)

    def load_coach(self, coach: Coach) -> None:
        self.store.get_team(coach.team_id)
        self.store.coaches.append(coach)

    def load_tournament(self, tournament: Tournament) -> None:
        if tournament.presence_weight <= 0:
            raise ValueError(f"Presence weight must be positive, got {tournament.presence_weight}")
        self.store.tournaments.append(tournament)

    def load_match(self, match: Match) -> None:
        """Load a match, rejecting it when its scorers do not add up."""
        problems = check_match_integrity(match)
        if problems:
            raise MatchIntegrityError(problems)
        self.store.matches.append(match)


def _attend(*player_ids: str) -> list[Attendee]:
    return [Attendee(pid) for pid in player_ids]


def get_sample_data() -> dict[str, Any]:
    """Get a small youth season for demo purposes."""
    teams = [
        Team("T001", "Aglianese", "Neroverde", "Bianco"),
    ]

    tournaments = [
        Tournament("TR001", "Campionato", 1.0),
        Tournament("TR002", "Amichevole", 1.0),
        Tournament("TR003", "Ponte 2000", 0.33),  # short-format games
    ]

    players = [
        Player("P001", "Luca", "Lenzi", "T001", 1),
        Player("P002", "Marco", "Magni", "T001", 4),
        Player("P003", "Pietro", "Pasticci", "T001", 10),
        Player("P004", "Bruno", "Bonacchi", "T001", 8),
        Player("P005", "Paolo", "Polidori", "T001", 5),
        Player("P006", "Gianni", "Giusti", "T001", 9),
        Player("P007", "Filippo", "Fischietti", "T001", 3),
        Player("P008", "Tommaso", "Ricci", "T001", None),
    ]

    coaches = [
        Coach("CO001", "Rossi", "T001"),
        Coach("CO002", "Verdi", "T001"),
        Coach("CO003", "Bianchi", "T001"),
    ]

    matches = [
        Match(
            "M001", datetime(2025, 9, 15, 15, 0), "Tobbiana", "TR003", 8, 9,
            ["CO001"],
            _attend("P001", "P002", "P003", "P004", "P005", "P006", "P007", "P008"),
            [Scorer(4, "P006"), Scorer(2, "P004"), Scorer(2, "P003")],
        ),
        Match(
            "M002", datetime(2025, 9, 22, 15, 0), "Prato", "TR002", 5, 2,
            ["CO002"],
            _attend("P001", "P002", "P003", "P004", "P005", "P006"),
            [Scorer(3, "P003"), Scorer(1, "P001"), Scorer(1, is_own_goal=True)],
        ),
        Match(
            "M003", datetime(2025, 9, 29, 15, 0), "Pistoiese", "TR001", 3, 1,
            ["CO001"],
            _attend("P001", "P002", "P003", "P006", "P007"),
            [Scorer(2, "P006"), Scorer(1, "P002")],
        ),
        Match(
            "M004", datetime(2025, 10, 6, 15, 0), "Pistoiese", "TR001", 2, 2,
            ["CO001", "CO002"],
            _attend("P001", "P003", "P004", "P005") + [Attendee("P006", SUB)],
            [Scorer(1, "P006"), Scorer(1, "P004")],
        ),
        Match(
            "M005", datetime(2025, 10, 13, 15, 0), "Quarrata", "TR003", 0, 0,
            ["CO001"],
            _attend("P001", "P002", "P005", "P007", "P008"),
            [],
        ),
        Match(
            "M006", datetime(2025, 10, 20, 15, 0), "Montale", "TR003", 1, 3,
            ["CO002"],
            _attend("P002", "P003", "P006", "P008"),
            [Scorer(1, "P003")],
        ),
    ]

    return {
        "teams": teams,
        "tournaments": tournaments,
        "players": players,
        "coaches": coaches,
        "matches": matches,
    }


def load_sample_data(store: EntityStore) -> None:
    """Load all sample data into the store and persist it."""
    loader = DataLoader(store)
    data = get_sample_data()

    # Load in order respecting references
    for team in data["teams"]:
        loader.load_team(team)

    for tournament in data["tournaments"]:
        loader.load_tournament(tournament)

    for player in data["players"]:
        loader.load_player(player)

    for coach in data["coaches"]:
        loader.load_coach(coach)

    for match in data["matches"]:
        loader.load_match(match)

    store.matches.sort(key=lambda m: m.date, reverse=True)
    store.active_team_id = data["teams"][0].team_id
    store.save_all()
