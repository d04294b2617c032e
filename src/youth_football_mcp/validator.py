"""Validation of match candidates before they are committed to the store.

A candidate is checked in stages (date, tournament, result, coaches,
attendees, scorers) and, only when all of those pass, for cross-field
consistency. Each stage appends diagnostics; nothing here writes to the store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

import pandas as pd

from .models import Coach, Match, MatchCandidate, Player, Tournament

SUCCESS = "success"
ERROR = "error"
WARNING = "warning"


@dataclass
class ValidationMessage:
    status: str  # 'success', 'error' or 'warning'
    text: str


@dataclass
class ValidatedScorer:
    goals: int
    player: Optional[Player] = None
    is_own_goal: bool = False


@dataclass
class ValidatedMatch:
    date: datetime
    tournament: Tournament
    opponent: str
    home_score: int
    away_score: int
    coaches: list[Coach] = field(default_factory=list)
    attendees: list[Player] = field(default_factory=list)
    scorers: list[ValidatedScorer] = field(default_factory=list)


@dataclass
class ValidationResult:
    has_errors: bool
    messages: list[ValidationMessage]
    validated_data: Optional[ValidatedMatch] = None

    @property
    def errors(self) -> list[str]:
        return [m.text for m in self.messages if m.status == ERROR]


def parse_date(value: Any) -> Optional[datetime]:
    """Parse a candidate date; ``None`` when missing or unreadable."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime().replace(tzinfo=None)


def _find_by_name(items, attr: str, name: Optional[str]):
    if not name:
        return None
    wanted = str(name).strip().lower()
    return next((i for i in items if getattr(i, attr).lower() == wanted), None)


class _Run:
    """Accumulates the messages of a single validation."""

    def __init__(self) -> None:
        self.messages: list[ValidationMessage] = []
        self.has_errors = False

    def ok(self, text: str) -> None:
        self.messages.append(ValidationMessage(SUCCESS, text))

    def warn(self, text: str) -> None:
        self.messages.append(ValidationMessage(WARNING, text))

    def fail(self, text: str) -> None:
        self.has_errors = True
        self.messages.append(ValidationMessage(ERROR, text))


def validate_candidate(
    candidate: MatchCandidate,
    players: Sequence[Player],
    tournaments: Sequence[Tournament],
    coaches: Sequence[Coach],
) -> ValidationResult:
    """Resolve a candidate's names against known entities and check it."""
    run = _Run()

    for note in candidate.parse_errors:
        run.warn(note)

    match_date = parse_date(candidate.date)
    if match_date is None:
        run.fail("Data non trovata nel testo.")
    else:
        run.ok(f"Data: {match_date:%d/%m/%Y}")

    tournament = None
    if not candidate.tournament_name:
        run.fail("Nome torneo non trovato nel testo.")
    else:
        tournament = _find_by_name(tournaments, "name", candidate.tournament_name)
        if tournament is None:
            run.fail(
                f"Torneo '{candidate.tournament_name}' non trovato. "
                "Aggiungilo prima di importare la partita."
            )
        else:
            run.ok(f"Torneo: {tournament.name}")

    home, away = candidate.home_score, candidate.away_score
    if not candidate.opponent_name or home is None or away is None:
        run.fail("Risultato o avversario non trovato.")
    elif home < 0 or away < 0:
        run.fail(f"Risultato non valido: {home}-{away}.")
    else:
        run.ok(f"Risultato: {home} - {candidate.opponent_name} {away}")

    resolved_coaches = []
    coaches_ok = True
    for name in candidate.coach_names:
        coach = _find_by_name(coaches, "name", name)
        if coach is None:
            coaches_ok = False
            run.fail(f"Mister '{name}' non trovato.")
        elif all(c.coach_id != coach.coach_id for c in resolved_coaches):
            resolved_coaches.append(coach)
    if candidate.coach_names and coaches_ok:
        run.ok(f"Mister presenti: {', '.join(c.name for c in resolved_coaches)}")

    attendees = []
    unresolved = 0
    for last_name in candidate.attendees:
        player = _find_by_name(players, "last_name", last_name)
        if player is None:
            unresolved += 1
            run.fail(f"Giocatore '{last_name}' non trovato.")
        elif any(p.player_id == player.player_id for p in attendees):
            run.warn(f"Giocatore '{last_name}' ripetuto, contato una sola volta.")
        else:
            attendees.append(player)
    if not candidate.attendees:
        run.fail("Nessun giocatore presente trovato.")
    elif not unresolved:
        run.ok(f"{len(attendees)} giocatori presenti riconosciuti.")

    scorers = []
    for scorer in candidate.scorers:
        label = "Autogol" if scorer.is_own_goal else (scorer.last_name or "?")
        if scorer.goals is None or scorer.goals < 1:
            run.fail(f"Numero di gol non valido per il marcatore '{label}'.")
            continue
        if scorer.is_own_goal:
            scorers.append(ValidatedScorer(goals=scorer.goals, is_own_goal=True))
            continue
        player = _find_by_name(players, "last_name", scorer.last_name)
        if player is None:
            run.fail(f"Marcatore '{label}' non trovato.")
        else:
            scorers.append(ValidatedScorer(goals=scorer.goals, player=player))

    if run.has_errors:
        return ValidationResult(True, run.messages)

    total = sum(s.goals for s in scorers)
    if total != home:
        run.fail(
            f"La somma dei gol dei marcatori ({total}) "
            f"non corrisponde al risultato ({home})."
        )
    attendee_ids = {p.player_id for p in attendees}
    for scorer in scorers:
        if scorer.player is not None and scorer.player.player_id not in attendee_ids:
            run.fail(f"Il marcatore {scorer.player.last_name} non è nella lista dei presenti.")

    if run.has_errors:
        return ValidationResult(True, run.messages)

    validated = ValidatedMatch(
        date=match_date,
        tournament=tournament,
        opponent=str(candidate.opponent_name).strip(),
        home_score=home,
        away_score=away,
        coaches=resolved_coaches,
        attendees=attendees,
        scorers=scorers,
    )
    return ValidationResult(False, run.messages, validated)


def validate_candidates(
    candidates: Sequence[MatchCandidate],
    players: Sequence[Player],
    tournaments: Sequence[Tournament],
    coaches: Sequence[Coach],
) -> list[ValidationResult]:
    """Validate each candidate independently, preserving order."""
    return [validate_candidate(c, players, tournaments, coaches) for c in candidates]


def check_match_integrity(match: Match) -> list[str]:
    """Invariant violations of a built match; empty when it is consistent."""
    problems = []
    total = sum(s.goals for s in match.scorers)
    if total != match.home_score:
        problems.append(
            f"La somma dei gol dei marcatori ({total}) "
            f"non corrisponde al risultato ({match.home_score})."
        )
    attendee_ids = {a.player_id for a in match.attendees}
    if len(attendee_ids) != len(match.attendees):
        problems.append("Lo stesso giocatore compare più volte tra i presenti.")
    for scorer in match.scorers:
        if not scorer.is_own_goal and scorer.player_id not in attendee_ids:
            problems.append(f"Il marcatore {scorer.player_id} non è nella lista dei presenti.")
    if match.home_score < 0 or match.away_score < 0:
        problems.append(f"Risultato non valido: {match.home_score}-{match.away_score}.")
    return problems


def audit_matches(matches: Sequence[Match]) -> dict[str, list[str]]:
    """Map match id to its violations, for stored matches that break invariants."""
    report = {}
    for match in matches:
        problems = check_match_integrity(match)
        if problems:
            report[match.match_id] = problems
    return report
