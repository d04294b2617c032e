"""In-memory entity store backed by a key-value persistence collaborator."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Protocol
from uuid import uuid4

from .models import (
    STARTER,
    Attendee,
    Coach,
    Insight,
    Match,
    Player,
    Scorer,
    Team,
    Tournament,
)
from .stats import sort_matches
from .validator import ValidatedMatch, check_match_integrity

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    def load_collection(self, key: str, default: Any = None) -> Any: ...

    def save_collection(self, key: str, value: Any) -> None: ...


class StoreError(Exception):
    """Base class for entity store failures."""


class EntityNotFoundError(StoreError, KeyError):
    def __init__(self, kind: str, entity_id: Optional[str]):
        super().__init__(f"{kind} '{entity_id}' not found")
        self.kind = kind
        self.entity_id = entity_id

    def __str__(self) -> str:
        return self.args[0]


class NoActiveTeamError(StoreError):
    def __init__(self) -> None:
        super().__init__("No active team selected")


class DuplicateEntityError(StoreError, ValueError):
    pass


class MatchIntegrityError(StoreError, ValueError):
    def __init__(self, problems: list[str]):
        super().__init__("; ".join(problems))
        self.problems = problems


def _new_id() -> str:
    return uuid4().hex


class EntityStore:
    """Normalized collections of teams, players, coaches, tournaments and matches.

    Collections are loaded once from the backend and written back in full after
    every mutation (last write wins).
    """

    def __init__(self, db: KeyValueBackend):
        self.db = db
        self.teams: list[Team] = []
        self.players: list[Player] = []
        self.coaches: list[Coach] = []
        self.tournaments: list[Tournament] = []
        self.matches: list[Match] = []
        self.active_team_id: Optional[str] = None
        self.cached_insights: Optional[list[Insight]] = None

    def load(self) -> "EntityStore":
        """Read every collection from the backend."""
        self.teams = [Team.from_dict(d) for d in self.db.load_collection("teams", [])]
        self.players = [Player.from_dict(d) for d in self.db.load_collection("players", [])]
        self.coaches = [Coach.from_dict(d) for d in self.db.load_collection("coaches", [])]
        self.tournaments = [
            Tournament.from_dict(d) for d in self.db.load_collection("tournaments", [])
        ]
        self.matches = [Match.from_dict(d) for d in self.db.load_collection("matches", [])]
        self.active_team_id = self.db.load_collection("active_team_id", None)
        insights = self.db.load_collection("cached_insights", None)
        self.cached_insights = (
            None if insights is None else [Insight.from_dict(d) for d in insights]
        )
        logger.info(
            "Loaded %d teams, %d players, %d matches",
            len(self.teams),
            len(self.players),
            len(self.matches),
        )
        return self

    def _save(self, key: str) -> None:
        if key == "active_team_id":
            value: Any = self.active_team_id
        elif key == "cached_insights":
            value = None if self.cached_insights is None else [
                i.to_dict() for i in self.cached_insights
            ]
        else:
            value = [item.to_dict() for item in getattr(self, key)]
        self.db.save_collection(key, value)

    def save_all(self) -> None:
        """Write every collection back to the backend."""
        for key in ("teams", "players", "coaches", "tournaments", "matches"):
            self._save(key)
        self._save("active_team_id")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_team(self, team_id: Optional[str]) -> Team:
        return self._get(self.teams, "team_id", team_id, "Team")

    def get_player(self, player_id: str) -> Player:
        return self._get(self.players, "player_id", player_id, "Player")

    def get_coach(self, coach_id: str) -> Coach:
        return self._get(self.coaches, "coach_id", coach_id, "Coach")

    def get_tournament(self, tournament_id: str) -> Tournament:
        return self._get(self.tournaments, "tournament_id", tournament_id, "Tournament")

    def get_match(self, match_id: str) -> Match:
        return self._get(self.matches, "match_id", match_id, "Match")

    @staticmethod
    def _get(items, attr: str, entity_id, kind: str):
        for item in items:
            if getattr(item, attr) == entity_id:
                return item
        raise EntityNotFoundError(kind, entity_id)

    def players_for_team(self, team_id: Optional[str]) -> list[Player]:
        return [p for p in self.players if p.team_id == team_id]

    def coaches_for_team(self, team_id: Optional[str]) -> list[Coach]:
        return [c for c in self.coaches if c.team_id == team_id]

    def require_active_team(self) -> str:
        if self.active_team_id is None:
            raise NoActiveTeamError()
        return self.active_team_id

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def add_team(
        self,
        name: str,
        primary_color: Optional[str] = None,
        secondary_color: Optional[str] = None,
    ) -> Team:
        team = Team(_new_id(), name.strip(), primary_color, secondary_color)
        self.teams.append(team)
        self._save("teams")
        logger.debug("Added team %s", team.team_id)
        return team

    def set_active_team(self, team_id: Optional[str]) -> None:
        if team_id is not None:
            self.get_team(team_id)
        self.active_team_id = team_id
        self._save("active_team_id")

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def add_player(
        self,
        team_id: Optional[str],
        first_name: str,
        last_name: str,
        jersey_number: Optional[int] = None,
    ) -> Player:
        if team_id is None:
            raise NoActiveTeamError()
        self.get_team(team_id)
        player = Player(_new_id(), first_name.strip(), last_name.strip(), team_id, jersey_number)
        self.players.append(player)
        self._save("players")
        logger.debug("Added player %s", player.player_id)
        return player

    def update_player(self, player: Player) -> Player:
        self._replace(self.players, "player_id", player, "Player")
        self._save("players")
        return player

    def delete_player(self, player_id: str) -> None:
        """Remove a player and its attendance/scorer entries from every match."""
        self.get_player(player_id)
        self.players = [p for p in self.players if p.player_id != player_id]
        self.matches = [
            replace(
                m,
                attendees=[a for a in m.attendees if a.player_id != player_id],
                scorers=[s for s in m.scorers if s.player_id != player_id],
            )
            for m in self.matches
        ]
        self._save("players")
        self._save("matches")
        logger.debug("Deleted player %s", player_id)

    # ------------------------------------------------------------------
    # Coaches
    # ------------------------------------------------------------------

    def add_coach(self, team_id: Optional[str], name: str) -> Coach:
        if team_id is None:
            raise NoActiveTeamError()
        self.get_team(team_id)
        coach = Coach(_new_id(), name.strip(), team_id)
        self.coaches.append(coach)
        self._save("coaches")
        return coach

    def update_coach(self, coach: Coach) -> Coach:
        self._replace(self.coaches, "coach_id", coach, "Coach")
        self._save("coaches")
        return coach

    def delete_coach(self, coach_id: str) -> None:
        self.get_coach(coach_id)
        self.coaches = [c for c in self.coaches if c.coach_id != coach_id]
        self.matches = [
            replace(m, coach_ids=[c for c in m.coach_ids if c != coach_id])
            for m in self.matches
        ]
        self._save("coaches")
        self._save("matches")
        logger.debug("Deleted coach %s", coach_id)

    # ------------------------------------------------------------------
    # Tournaments
    # ------------------------------------------------------------------

    def _check_tournament(self, name: str, weight: float, tournament_id: Optional[str]) -> None:
        if weight <= 0:
            raise ValueError(f"Presence weight must be positive, got {weight}")
        for t in self.tournaments:
            if t.tournament_id != tournament_id and t.name.lower() == name.strip().lower():
                raise DuplicateEntityError(f"Tournament '{name}' already exists")

    def add_tournament(self, name: str, presence_weight: float = 1.0) -> Tournament:
        self._check_tournament(name, presence_weight, None)
        tournament = Tournament(_new_id(), name.strip(), float(presence_weight))
        self.tournaments.append(tournament)
        self._save("tournaments")
        return tournament

    def update_tournament(self, tournament: Tournament) -> Tournament:
        self._check_tournament(tournament.name, tournament.presence_weight, tournament.tournament_id)
        self._replace(self.tournaments, "tournament_id", tournament, "Tournament")
        self._save("tournaments")
        return tournament

    def delete_tournament(self, tournament_id: str) -> None:
        """Remove a tournament; its matches keep the dangling id and weigh 1."""
        self.get_tournament(tournament_id)
        self.tournaments = [t for t in self.tournaments if t.tournament_id != tournament_id]
        self._save("tournaments")

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def _check_match(self, match: Match) -> None:
        self.get_tournament(match.tournament_id)
        for coach_id in match.coach_ids:
            self.get_coach(coach_id)
        for player_id in match.attendee_ids():
            self.get_player(player_id)
        problems = check_match_integrity(match)
        if problems:
            raise MatchIntegrityError(problems)

    def add_match(
        self,
        date: datetime,
        opponent: str,
        tournament_id: str,
        home_score: int,
        away_score: int,
        coach_ids: Optional[list[str]] = None,
        attendees: Optional[list[Attendee]] = None,
        scorers: Optional[list[Scorer]] = None,
    ) -> Match:
        match = Match(
            match_id=_new_id(),
            date=date,
            opponent=opponent.strip(),
            tournament_id=tournament_id,
            home_score=home_score,
            away_score=away_score,
            coach_ids=list(coach_ids or []),
            attendees=list(attendees or []),
            scorers=list(scorers or []),
        )
        self._check_match(match)
        self.matches = sort_matches([*self.matches, match])
        self._save("matches")
        logger.debug("Added match %s vs %s", match.match_id, match.opponent)
        return match

    def add_validated_match(self, data: ValidatedMatch) -> Match:
        """Commit the output of the candidate validator."""
        return self.add_match(
            date=data.date,
            opponent=data.opponent,
            tournament_id=data.tournament.tournament_id,
            home_score=data.home_score,
            away_score=data.away_score,
            coach_ids=[c.coach_id for c in data.coaches],
            attendees=[Attendee(p.player_id, STARTER) for p in data.attendees],
            scorers=[
                Scorer(
                    goals=s.goals,
                    player_id=None if s.is_own_goal else s.player.player_id,
                    is_own_goal=s.is_own_goal,
                )
                for s in data.scorers
            ],
        )

    def update_match(self, match: Match) -> Match:
        match = replace(match, opponent=match.opponent.strip())
        self._check_match(match)
        self._replace(self.matches, "match_id", match, "Match")
        self.matches = sort_matches(self.matches)
        self._save("matches")
        return match

    def delete_match(self, match_id: str) -> None:
        self.get_match(match_id)
        self.matches = [m for m in self.matches if m.match_id != match_id]
        self._save("matches")

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------

    def cache_insights(self, insights: Optional[list[Insight]]) -> None:
        self.cached_insights = insights
        self._save("cached_insights")

    @staticmethod
    def _replace(items: list, attr: str, new_item, kind: str) -> None:
        key = getattr(new_item, attr)
        for index, item in enumerate(items):
            if getattr(item, attr) == key:
                items[index] = new_item
                return
        raise EntityNotFoundError(kind, key)
