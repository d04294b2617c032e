"""Aggregation engine: summaries, leaderboards and opponent records.

Every function here is a pure computation over the collections passed in.
Nothing is cached; callers recompute on every request.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Sequence

from .models import Match, Player, Tournament

DEFAULT_MATCH_DURATION_MINUTES = 45

GOALS = "goals"
APPEARANCES = "appearances"
WEIGHTED_APPEARANCES = "weighted_appearances"
WIN_RATE = "win_rate"
METRICS = (GOALS, APPEARANCES, WEIGHTED_APPEARANCES, WIN_RATE)


@dataclass
class Summary:
    matches: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    clean_sheets: int = 0
    minutes_played: float = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against


@dataclass
class LeaderboardEntry:
    player: Player
    score: float


@dataclass
class OpponentRecord:
    opponent: str
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    history: list[Match] = field(default_factory=list)

    @property
    def matches(self) -> int:
        return len(self.history)


@dataclass
class OpponentSummary:
    name: str
    match_count: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0


def tournament_weights(tournaments: Iterable[Tournament]) -> dict[str, float]:
    return {t.tournament_id: t.presence_weight for t in tournaments}


def match_weight(match: Match, weights: dict[str, float]) -> float:
    """Presence weight of the match's tournament, 1 when it is unknown."""
    return weights.get(match.tournament_id) or 1.0


def filter_matches(matches: Sequence[Match], tournament_id: Optional[str] = None) -> list[Match]:
    """Matches of one tournament, or all of them when no id is given."""
    if tournament_id is None:
        return list(matches)
    return [m for m in matches if m.tournament_id == tournament_id]


def sort_matches(matches: Iterable[Match]) -> list[Match]:
    """Newest first."""
    return sorted(matches, key=lambda m: m.date, reverse=True)


def _tally(record, match: Match) -> None:
    record.goals_for += match.home_score
    record.goals_against += match.away_score
    if match.is_win:
        record.wins += 1
    elif match.is_loss:
        record.losses += 1
    else:
        record.draws += 1


def compute_summary(
    matches: Sequence[Match],
    tournaments: Iterable[Tournament] = (),
    nominal_duration: float = DEFAULT_MATCH_DURATION_MINUTES,
) -> Summary:
    """Aggregate results, goals, clean sheets and weighted minutes."""
    weights = tournament_weights(tournaments)
    summary = Summary(matches=len(matches))
    for match in matches:
        _tally(summary, match)
        if match.away_score == 0:
            summary.clean_sheets += 1
        summary.minutes_played += match_weight(match, weights) * nominal_duration
    return summary


@dataclass
class _PlayerTotals:
    played: int = 0
    wins: int = 0
    weighted: float = 0.0
    goals: int = 0


def _player_totals(
    matches: Sequence[Match],
    players: Sequence[Player],
    weights: dict[str, float],
) -> dict[str, _PlayerTotals]:
    totals = {p.player_id: _PlayerTotals() for p in players}
    for match in matches:
        weight = match_weight(match, weights)
        for player_id in match.attendee_ids():
            entry = totals.get(player_id)
            if entry is None:
                continue
            entry.played += 1
            entry.weighted += weight
            if match.is_win:
                entry.wins += 1
        for scorer in match.scorers:
            if scorer.is_own_goal or scorer.player_id is None:
                continue
            entry = totals.get(scorer.player_id)
            if entry is not None:
                entry.goals += scorer.goals
    return totals


def _score(totals: _PlayerTotals, metric: str) -> Optional[float]:
    if metric == GOALS:
        return totals.goals
    if metric == APPEARANCES:
        return totals.played
    if metric == WEIGHTED_APPEARANCES:
        return round(totals.weighted, 2)
    if totals.played == 0:
        return None
    return totals.wins / totals.played * 100


def rank(scores: Iterable[tuple[Player, float]]) -> list[LeaderboardEntry]:
    """Drop zero scores and sort descending, keeping input order for ties."""
    entries = [LeaderboardEntry(player, score) for player, score in scores if score > 0]
    return sorted(entries, key=lambda e: e.score, reverse=True)


def compute_leaderboard(
    matches: Sequence[Match],
    players: Sequence[Player],
    tournaments: Iterable[Tournament],
    metric: str,
) -> list[LeaderboardEntry]:
    """Rank players on ``metric`` over the given matches.

    Args:
        matches: The (already filtered) matches to aggregate
        players: Player collection; its order breaks ties
        tournaments: Tournament collection, for presence weights
        metric: One of ``goals``, ``appearances``, ``weighted_appearances``,
            ``win_rate``
    """
    if metric not in METRICS:
        raise ValueError(f"Unknown leaderboard metric '{metric}'")
    totals = _player_totals(matches, players, tournament_weights(tournaments))
    scores = []
    for player in players:
        score = _score(totals[player.player_id], metric)
        if score is not None:
            scores.append((player, score))
    return rank(scores)


def compute_opponent_stats(matches: Sequence[Match], opponent_name: str) -> OpponentRecord:
    """Head-to-head record against one opponent (exact, case-sensitive name)."""
    record = OpponentRecord(opponent=opponent_name)
    history = sort_matches(m for m in matches if m.opponent == opponent_name)
    for match in history:
        _tally(record, match)
    record.history = history
    return record


def list_opponents(matches: Sequence[Match]) -> list[OpponentSummary]:
    """Every opponent faced, most frequently met first."""
    by_name: dict[str, OpponentSummary] = {}
    for match in matches:
        if not match.opponent:
            continue
        entry = by_name.setdefault(match.opponent, OpponentSummary(name=match.opponent))
        entry.match_count += 1
        if match.is_win:
            entry.wins += 1
        elif match.is_loss:
            entry.losses += 1
        else:
            entry.draws += 1
    return sorted(by_name.values(), key=lambda o: o.match_count, reverse=True)


def matches_by_outcome(matches: Sequence[Match]) -> dict[str, list[Match]]:
    return {
        "won": [m for m in matches if m.is_win],
        "drawn": [m for m in matches if m.is_draw],
        "lost": [m for m in matches if m.is_loss],
    }


def split_fixtures(
    matches: Sequence[Match], now: datetime, recent: int = 3
) -> tuple[Optional[Match], list[Match]]:
    """Return the next upcoming match and the most recent past results."""
    ordered = sorted(matches, key=lambda m: m.date)
    upcoming = [m for m in ordered if m.date >= now]
    past = [m for m in ordered if m.date < now]
    past.reverse()
    return (upcoming[0] if upcoming else None), past[:recent]
