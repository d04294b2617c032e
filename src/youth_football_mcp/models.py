"""Data models for the youth football team manager."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

STARTER = "starter"
SUB = "sub"


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).replace(tzinfo=None)


@dataclass
class Team:
    team_id: str
    name: str
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "name": self.name,
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Team":
        return cls(
            team_id=data["team_id"],
            name=data["name"],
            primary_color=data.get("primary_color"),
            secondary_color=data.get("secondary_color"),
        )


@dataclass
class Player:
    player_id: str
    first_name: str
    last_name: str
    team_id: str
    jersey_number: Optional[int] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "team_id": self.team_id,
            "jersey_number": self.jersey_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        return cls(
            player_id=data["player_id"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            team_id=data["team_id"],
            jersey_number=data.get("jersey_number"),
        )


@dataclass
class Coach:
    coach_id: str
    name: str
    team_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"coach_id": self.coach_id, "name": self.name, "team_id": self.team_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Coach":
        return cls(coach_id=data["coach_id"], name=data["name"], team_id=data["team_id"])


@dataclass
class Tournament:
    tournament_id: str
    name: str
    presence_weight: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "name": self.name,
            "presence_weight": self.presence_weight,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tournament":
        return cls(
            tournament_id=data["tournament_id"],
            name=data["name"],
            presence_weight=float(data.get("presence_weight", 1.0)),
        )


@dataclass
class Attendee:
    player_id: str
    role: str = STARTER  # 'starter' or 'sub'


@dataclass
class Scorer:
    goals: int
    player_id: Optional[str] = None
    is_own_goal: bool = False


@dataclass
class Match:
    match_id: str
    date: datetime
    opponent: str
    tournament_id: str
    home_score: int
    away_score: int
    coach_ids: list[str] = field(default_factory=list)
    attendees: list[Attendee] = field(default_factory=list)
    scorers: list[Scorer] = field(default_factory=list)

    @property
    def is_win(self) -> bool:
        return self.home_score > self.away_score

    @property
    def is_loss(self) -> bool:
        return self.home_score < self.away_score

    @property
    def is_draw(self) -> bool:
        return self.home_score == self.away_score

    def attendee_ids(self) -> list[str]:
        """Distinct attending player ids, in lineup order."""
        return list(dict.fromkeys(a.player_id for a in self.attendees))

    def attended_by(self, player_id: str) -> bool:
        return any(a.player_id == player_id for a in self.attendees)

    def goals_by(self, player_id: str) -> int:
        return sum(
            s.goals for s in self.scorers if not s.is_own_goal and s.player_id == player_id
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "date": self.date.isoformat(),
            "opponent": self.opponent,
            "tournament_id": self.tournament_id,
            "result": {"home": self.home_score, "away": self.away_score},
            "coach_ids": list(self.coach_ids),
            "attendees": [{"player_id": a.player_id, "role": a.role} for a in self.attendees],
            "scorers": [
                {"player_id": s.player_id, "goals": s.goals, "is_own_goal": s.is_own_goal}
                for s in self.scorers
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Match":
        result = data.get("result") or {}
        return cls(
            match_id=data["match_id"],
            date=_parse_datetime(data["date"]),
            opponent=data.get("opponent", ""),
            tournament_id=data["tournament_id"],
            home_score=int(result.get("home", 0)),
            away_score=int(result.get("away", 0)),
            coach_ids=list(data.get("coach_ids") or []),
            attendees=[
                Attendee(a["player_id"], a.get("role", STARTER))
                for a in data.get("attendees") or []
            ],
            scorers=[
                Scorer(
                    goals=int(s.get("goals", 0)),
                    player_id=s.get("player_id"),
                    is_own_goal=bool(s.get("is_own_goal", False)),
                )
                for s in _as_list(data.get("scorers"))
            ],
        )


@dataclass
class CandidateScorer:
    last_name: Optional[str] = None
    goals: Optional[int] = None
    is_own_goal: bool = False


@dataclass
class MatchCandidate:
    """A match extracted from free text; any field may be missing."""

    date: Optional[str] = None
    tournament_name: Optional[str] = None
    opponent_name: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    coach_names: list[str] = field(default_factory=list)
    attendees: list[str] = field(default_factory=list)
    scorers: list[CandidateScorer] = field(default_factory=list)
    parse_errors: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MatchCandidate":
        """Build a candidate from the loosely-typed JSON the parser returns."""
        return cls(
            date=data.get("date"),
            tournament_name=_optional_str(data.get("tournamentName") or data.get("tournament_name")),
            opponent_name=_optional_str(data.get("opponentName") or data.get("opponent_name")),
            home_score=_optional_int(data.get("homeScore", data.get("home_score"))),
            away_score=_optional_int(data.get("awayScore", data.get("away_score"))),
            coach_names=_str_list(data.get("coachNames") or data.get("coach_names")),
            attendees=_str_list(data.get("attendees")),
            scorers=[
                CandidateScorer(
                    last_name=_optional_str(s.get("lastName") or s.get("last_name")),
                    goals=_optional_int(s.get("goals")),
                    is_own_goal=bool(s.get("isOwnGoal") or s.get("is_own_goal")),
                )
                for s in _as_list(data.get("scorers"))
                if isinstance(s, dict)
            ],
            parse_errors=_str_list(data.get("parseErrors") or data.get("parse_errors")),
        )


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _str_list(value: Any) -> list[str]:
    return [s for s in (_optional_str(v) for v in _as_list(value)) if s]


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (ValueError, TypeError, OverflowError):
        return None


@dataclass
class Insight:
    title: str
    description: str
    emoji: str

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "description": self.description, "emoji": self.emoji}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Insight":
        return cls(
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            emoji=str(data.get("emoji", "")),
        )


@dataclass
class MatchReport:
    title: str
    content: str
