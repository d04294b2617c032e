"""Per-entity statistics: player, coach and opponent detail views."""

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import Match, Player, Tournament
from .stats import (
    LeaderboardEntry,
    OpponentRecord,
    compute_opponent_stats,
    match_weight,
    rank,
    sort_matches,
    tournament_weights,
)

APPEARANCE_MILESTONES = (10, 25, 50, 75, 100)
GOAL_MILESTONES = (10, 25, 50)


@dataclass
class PlayerDetail:
    player_id: str
    played_matches: list[Match] = field(default_factory=list)
    appearances: int = 0
    weighted_appearances: float = 0.0
    total_goals: int = 0


@dataclass
class CoachDetail:
    coach_id: str
    coached_matches: list[Match] = field(default_factory=list)
    wins: int = 0
    draws: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    win_percentage: str = "N/A"
    top_by_presence: list[LeaderboardEntry] = field(default_factory=list)
    top_by_goals: list[LeaderboardEntry] = field(default_factory=list)


@dataclass
class PlayerMilestones:
    player: Player
    milestones: list[str]


def player_detail(
    player_id: str, matches: Sequence[Match], tournaments: Iterable[Tournament]
) -> PlayerDetail:
    """All-time career numbers for one player; never tournament-filtered."""
    weights = tournament_weights(tournaments)
    played = sort_matches(m for m in matches if m.attended_by(player_id))
    weighted = sum(match_weight(m, weights) for m in played)
    return PlayerDetail(
        player_id=player_id,
        played_matches=played,
        appearances=len(played),
        weighted_appearances=round(weighted, 2),
        total_goals=sum(m.goals_by(player_id) for m in matches),
    )


def coach_detail(
    coach_id: str, matches: Sequence[Match], players: Sequence[Player]
) -> CoachDetail:
    """Record of the matches a coach was on the bench for.

    The two leaderboards only count those matches and break ties by the
    order of ``players``.
    """
    coached = sort_matches(m for m in matches if coach_id in m.coach_ids)
    detail = CoachDetail(coach_id=coach_id, coached_matches=coached)
    presence = {p.player_id: 0 for p in players}
    goals = {p.player_id: 0 for p in players}

    for match in coached:
        detail.goals_for += match.home_score
        detail.goals_against += match.away_score
        if match.is_win:
            detail.wins += 1
        elif match.is_loss:
            detail.losses += 1
        else:
            detail.draws += 1
        for player_id in match.attendee_ids():
            if player_id in presence:
                presence[player_id] += 1
        for scorer in match.scorers:
            if not scorer.is_own_goal and scorer.player_id in goals:
                goals[scorer.player_id] += scorer.goals

    if coached:
        detail.win_percentage = f"{detail.wins / len(coached) * 100:.0f}%"
    detail.top_by_presence = rank((p, presence[p.player_id]) for p in players)
    detail.top_by_goals = rank((p, goals[p.player_id]) for p in players)
    return detail


def opponent_detail(opponent_name: str, matches: Sequence[Match]) -> OpponentRecord:
    return compute_opponent_stats(matches, opponent_name)


def detect_milestones(
    match: Match, all_matches: Sequence[Match], players: Sequence[Player]
) -> list[PlayerMilestones]:
    """Career milestones reached by the attendees of ``match``.

    History is every match dated strictly before ``match``. Attendees that
    are no longer in ``players`` or reached nothing notable are left out.
    """
    by_id = {p.player_id: p for p in players}
    history = [m for m in all_matches if m.date < match.date]
    found = []

    for player_id in match.attendee_ids():
        player = by_id.get(player_id)
        if player is None:
            continue
        previous_apps = sum(1 for m in history if m.attended_by(player.player_id))
        previous_goals = sum(m.goals_by(player.player_id) for m in history)
        goals_now = match.goals_by(player.player_id)
        total_apps = previous_apps + 1
        total_goals = previous_goals + goals_now

        milestones = []
        if previous_apps == 0:
            milestones.append("Debutto")
        if previous_goals == 0 and goals_now > 0:
            milestones.append("Primo gol in carriera")
        if goals_now == 2:
            milestones.append("Doppietta")
        if goals_now >= 3:
            milestones.append("Tripletta")
        if total_apps in APPEARANCE_MILESTONES:
            milestones.append(f"{total_apps}ª presenza")
        for threshold in GOAL_MILESTONES:
            if previous_goals < threshold <= total_goals:
                milestones.append(f"Raggiunti {threshold} gol in carriera")

        if milestones:
            found.append(PlayerMilestones(player=player, milestones=milestones))
    return found
