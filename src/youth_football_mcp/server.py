"""MCP Server for the youth football team manager."""

import logging
import os
import sys
from dataclasses import replace
from datetime import datetime
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent

from .database import Neo4jDatabase
from .insights import InsightGenerator
from .models import STARTER, SUB, Attendee, Match, Player, Scorer, Tournament
from .resolvers import coach_detail, opponent_detail, player_detail
from .stats import (
    DEFAULT_MATCH_DURATION_MINUTES,
    METRICS,
    WEIGHTED_APPEARANCES,
    WIN_RATE,
    compute_leaderboard,
    compute_summary,
    filter_matches,
    list_opponents as compute_opponents,
    matches_by_outcome,
    split_fixtures,
)
from .store import EntityStore, MatchIntegrityError, StoreError
from .validator import ERROR, SUCCESS, audit_matches, parse_date, validate_candidates

logger = logging.getLogger(__name__)

# Initialize the server
server = FastMCP("youth-football-kb")

# Store and AI client (lazy initialization)
_store: Optional[EntityStore] = None
_generator: Optional[InsightGenerator] = None

STATUS_ICONS = {SUCCESS: "✅", ERROR: "❌"}
METRIC_TITLES = {
    "goals": ("Classifica Marcatori", "gol"),
    "appearances": ("Classifica Presenze", "pres."),
    "weighted_appearances": ("Classifica Presenze (Ponderata)", "pres."),
    "win_rate": ("Classifica % Vittorie", "%"),
}


def get_store() -> EntityStore:
    """Get or create the entity store, loading it from Neo4j."""
    global _store
    if _store is None:
        db = Neo4jDatabase()
        db.connect()
        db.create_constraints()
        _store = EntityStore(db).load()
    return _store


def get_generator() -> InsightGenerator:
    global _generator
    if _generator is None:
        _generator = InsightGenerator()
    return _generator


def match_duration() -> float:
    return float(os.getenv("MATCH_DURATION_MINUTES", DEFAULT_MATCH_DURATION_MINUTES))


def _reply(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def _roster(store: EntityStore) -> list[Player]:
    """Players of the active team, or every player when none is selected."""
    if store.active_team_id is None:
        return list(store.players)
    return store.players_for_team(store.active_team_id)


def _match_line(store: EntityStore, match: Match) -> str:
    tournament = next(
        (t.name for t in store.tournaments if t.tournament_id == match.tournament_id), "N/D"
    )
    return (
        f"- **{match.date:%d/%m/%Y}** vs {match.opponent} "
        f"{match.home_score}-{match.away_score} ({tournament}) [ID: {match.match_id}]\n"
    )


def _format_score(metric: str, score: float) -> str:
    if metric == WEIGHTED_APPEARANCES:
        return f"{score:.2f}"
    if metric == WIN_RATE:
        return f"{score:.0f}"
    return f"{score:g}"


# ============================================================================
# Team Tools
# ============================================================================


@server.tool()
async def list_teams() -> list[TextContent]:
    """List all teams, marking the active one."""
    store = get_store()
    if not store.teams:
        return _reply("Nessuna squadra registrata.")

    output = f"Squadre ({len(store.teams)}):\n\n"
    for team in store.teams:
        marker = " (attiva)" if team.team_id == store.active_team_id else ""
        output += f"- **{team.name}**{marker} [ID: {team.team_id}]\n"
    return _reply(output)


@server.tool()
async def add_team(
    name: str, primary_color: Optional[str] = None, secondary_color: Optional[str] = None
) -> list[TextContent]:
    """Create a team. The first team created becomes the active one.

    Args:
        name: Team name
        primary_color: Optional primary kit color
        secondary_color: Optional secondary kit color
    """
    store = get_store()
    team = store.add_team(name, primary_color, secondary_color)
    if store.active_team_id is None:
        store.set_active_team(team.team_id)
    return _reply(f"Squadra **{team.name}** creata [ID: {team.team_id}]")


@server.tool()
async def set_active_team(team_id: str) -> list[TextContent]:
    """Select the team new players and coaches are added to.

    Args:
        team_id: The unique team identifier
    """
    store = get_store()
    try:
        store.set_active_team(team_id)
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Squadra attiva: **{store.get_team(team_id).name}**")


# ============================================================================
# Player Tools
# ============================================================================


@server.tool()
async def list_players() -> list[TextContent]:
    """List the players of the active team, sorted by last name."""
    store = get_store()
    players = sorted(_roster(store), key=lambda p: (p.last_name.lower(), p.first_name.lower()))
    if not players:
        return _reply("Nessun giocatore registrato.")

    output = f"Giocatori ({len(players)}):\n\n"
    for player in players:
        jersey = f"#{player.jersey_number} " if player.jersey_number is not None else ""
        output += f"- {jersey}{player.full_name} [ID: {player.player_id}]\n"
    return _reply(output)


@server.tool()
async def add_player(
    first_name: str, last_name: str, jersey_number: Optional[int] = None
) -> list[TextContent]:
    """Add a player to the active team.

    Args:
        first_name: Player first name
        last_name: Player last name, used to recognise the player in match text
        jersey_number: Optional shirt number
    """
    store = get_store()
    if not first_name.strip() or not last_name.strip():
        return _reply("Nome e cognome sono obbligatori.")
    try:
        player = store.add_player(store.active_team_id, first_name, last_name, jersey_number)
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Giocatore **{player.full_name}** aggiunto [ID: {player.player_id}]")


@server.tool()
async def update_player(
    player_id: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    jersey_number: Optional[int] = None,
    clear_jersey_number: bool = False,
) -> list[TextContent]:
    """Change a player's name or jersey number.

    Args:
        player_id: The unique player identifier
        first_name: New first name
        last_name: New last name
        jersey_number: New shirt number (omit to keep the current one)
        clear_jersey_number: Remove the shirt number
    """
    store = get_store()
    try:
        player = store.get_player(player_id)
        updated = Player(
            player_id=player.player_id,
            first_name=(first_name or player.first_name).strip(),
            last_name=(last_name or player.last_name).strip(),
            team_id=player.team_id,
            jersey_number=(
                None if clear_jersey_number
                else jersey_number if jersey_number is not None
                else player.jersey_number
            ),
        )
        store.update_player(updated)
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Giocatore **{updated.full_name}** aggiornato.")


@server.tool()
async def delete_player(player_id: str) -> list[TextContent]:
    """Delete a player and remove them from every recorded match.

    Args:
        player_id: The unique player identifier
    """
    store = get_store()
    try:
        name = store.get_player(player_id).full_name
        store.delete_player(player_id)
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Giocatore **{name}** eliminato.")


@server.tool()
async def get_player_detail(player_id: str) -> list[TextContent]:
    """Get all-time statistics and match list for a player.

    Args:
        player_id: The unique player identifier
    """
    store = get_store()
    try:
        player = store.get_player(player_id)
    except StoreError:
        return _reply(f"Giocatore con ID '{player_id}' non trovato")

    detail = player_detail(player_id, store.matches, store.tournaments)

    output = f"**{player.full_name}**"
    if player.jersey_number is not None:
        output += f" (Numero {player.jersey_number})"
    output += "\n\n"
    output += f"- Presenze: {detail.appearances}\n"
    output += f"- Presenze ponderate: {detail.weighted_appearances:.2f}\n"
    output += f"- Gol: {detail.total_goals}\n"

    output += "\n**Partite giocate:**\n"
    if not detail.played_matches:
        output += "Nessuna partita giocata.\n"
    for match in detail.played_matches:
        output += _match_line(store, match)
    return _reply(output)


# ============================================================================
# Coach Tools
# ============================================================================


@server.tool()
async def list_coaches() -> list[TextContent]:
    """List the coaches of the active team."""
    store = get_store()
    coaches = (
        store.coaches if store.active_team_id is None
        else store.coaches_for_team(store.active_team_id)
    )
    if not coaches:
        return _reply("Nessun mister registrato.")

    output = f"Mister ({len(coaches)}):\n\n"
    for coach in coaches:
        output += f"- **{coach.name}** [ID: {coach.coach_id}]\n"
    return _reply(output)


@server.tool()
async def add_coach(name: str) -> list[TextContent]:
    """Add a coach to the active team.

    Args:
        name: Coach display name, used to recognise the coach in match text
    """
    store = get_store()
    if not name.strip():
        return _reply("Il nome del mister è obbligatorio.")
    try:
        coach = store.add_coach(store.active_team_id, name)
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Mister **{coach.name}** aggiunto [ID: {coach.coach_id}]")


@server.tool()
async def update_coach(coach_id: str, name: str) -> list[TextContent]:
    """Rename a coach.

    Args:
        coach_id: The unique coach identifier
        name: New display name
    """
    store = get_store()
    if not name.strip():
        return _reply("Il nome del mister è obbligatorio.")
    try:
        coach = store.get_coach(coach_id)
        store.update_coach(replace(coach, name=name.strip()))
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Mister **{name.strip()}** aggiornato.")


@server.tool()
async def delete_coach(coach_id: str) -> list[TextContent]:
    """Delete a coach and remove them from every recorded match.

    Args:
        coach_id: The unique coach identifier
    """
    store = get_store()
    try:
        name = store.get_coach(coach_id).name
        store.delete_coach(coach_id)
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Mister **{name}** eliminato.")


@server.tool()
async def get_coach_detail(coach_id: str, limit: int = 5) -> list[TextContent]:
    """Get the record and top players of a coach.

    Args:
        coach_id: The unique coach identifier
        limit: Maximum number of players per leaderboard (default 5)
    """
    store = get_store()
    try:
        coach = store.get_coach(coach_id)
    except StoreError:
        return _reply(f"Mister con ID '{coach_id}' non trovato")

    detail = coach_detail(coach_id, store.matches, store.players)

    output = f"**Mister {coach.name}**\n\n"
    output += f"- Partite: {len(detail.coached_matches)}\n"
    output += f"- % Vittorie: {detail.win_percentage}\n"
    output += f"- V-P-S: {detail.wins}-{detail.draws}-{detail.losses}\n"
    output += f"- Gol Fatti: {detail.goals_for}\n"
    output += f"- Gol Subiti: {detail.goals_against}\n"

    output += "\n**Giocatori più presenti:**\n"
    if not detail.top_by_presence:
        output += "Nessun dato\n"
    for entry in detail.top_by_presence[:limit]:
        output += f"- {entry.player.full_name}: {entry.score:g} pres.\n"

    output += "\n**Bomber del Mister:**\n"
    if not detail.top_by_goals:
        output += "Nessun dato\n"
    for entry in detail.top_by_goals[:limit]:
        output += f"- {entry.player.full_name}: {entry.score:g} gol\n"
    return _reply(output)


# ============================================================================
# Tournament Tools
# ============================================================================


@server.tool()
async def list_tournaments() -> list[TextContent]:
    """List tournaments with their presence weight."""
    store = get_store()
    if not store.tournaments:
        return _reply("Nessun torneo registrato.")

    output = f"Tornei ({len(store.tournaments)}):\n\n"
    for tournament in store.tournaments:
        output += (
            f"- **{tournament.name}** (Peso: {tournament.presence_weight:g}) "
            f"[ID: {tournament.tournament_id}]\n"
        )
    return _reply(output)


@server.tool()
async def add_tournament(name: str, presence_weight: float = 1.0) -> list[TextContent]:
    """Create a tournament.

    Args:
        name: Tournament name (unique, case-insensitive)
        presence_weight: Positive multiplier for appearances and minutes (default 1.0)
    """
    store = get_store()
    if not name.strip():
        return _reply("Il nome del torneo è obbligatorio.")
    try:
        tournament = store.add_tournament(name, presence_weight)
    except ValueError as exc:
        return _reply(str(exc))
    return _reply(f"Torneo **{tournament.name}** creato [ID: {tournament.tournament_id}]")


@server.tool()
async def update_tournament(
    tournament_id: str, name: Optional[str] = None, presence_weight: Optional[float] = None
) -> list[TextContent]:
    """Rename a tournament or change its presence weight.

    Args:
        tournament_id: The unique tournament identifier
        name: New name
        presence_weight: New positive weight
    """
    store = get_store()
    try:
        current = store.get_tournament(tournament_id)
        updated = Tournament(
            tournament_id=current.tournament_id,
            name=(name or current.name).strip(),
            presence_weight=presence_weight if presence_weight is not None else current.presence_weight,
        )
        store.update_tournament(updated)
    except (StoreError, ValueError) as exc:
        return _reply(str(exc))
    return _reply(f"Torneo **{updated.name}** aggiornato (Peso: {updated.presence_weight:g}).")


@server.tool()
async def delete_tournament(tournament_id: str) -> list[TextContent]:
    """Delete a tournament. Its matches are kept.

    Args:
        tournament_id: The unique tournament identifier
    """
    store = get_store()
    try:
        name = store.get_tournament(tournament_id).name
        store.delete_tournament(tournament_id)
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Torneo **{name}** eliminato.")


# ============================================================================
# Match Tools
# ============================================================================


@server.tool()
async def list_matches(
    tournament_id: Optional[str] = None, outcome: Optional[str] = None
) -> list[TextContent]:
    """List matches, newest first.

    Args:
        tournament_id: Optional tournament to filter by
        outcome: Optional result filter: won, drawn or lost
    """
    store = get_store()
    matches = filter_matches(store.matches, tournament_id)
    if outcome:
        groups = matches_by_outcome(matches)
        if outcome not in groups:
            return _reply(f"Esito '{outcome}' non valido. Usa una tra: {', '.join(groups)}")
        matches = groups[outcome]
    if not matches:
        return _reply("Nessuna partita registrata.")

    output = f"Partite ({len(matches)}):\n\n"
    for match in matches:
        output += _match_line(store, match)
    return _reply(output)


@server.tool()
async def check_data_integrity() -> list[TextContent]:
    """Report stored matches whose scorers do not add up or did not attend."""
    store = get_store()
    report = audit_matches(store.matches)
    if not report:
        return _reply("Nessuna incongruenza trovata.")

    output = f"Partite con incongruenze ({len(report)}):\n\n"
    for match_id, problems in report.items():
        output += _match_line(store, store.get_match(match_id))
        for problem in problems:
            output += f"  - {problem}\n"
    return _reply(output)


def _lineup(starters: Optional[list[str]], substitutes: Optional[list[str]]) -> list[Attendee]:
    return [Attendee(pid, STARTER) for pid in starters or []] + [
        Attendee(pid, SUB) for pid in substitutes or []
    ]


def _scorer_list(goals: Optional[dict[str, int]], own_goals: int) -> list[Scorer]:
    scorers = [Scorer(int(n), pid) for pid, n in (goals or {}).items()]
    if own_goals:
        scorers.append(Scorer(own_goals, is_own_goal=True))
    return scorers


def _match_error(exc: Exception) -> list[TextContent]:
    if isinstance(exc, MatchIntegrityError):
        return _reply("Partita non salvata:\n" + "".join(f"- {p}\n" for p in exc.problems))
    return _reply(str(exc))


@server.tool()
async def add_match(
    date: str,
    opponent: str,
    tournament_id: str,
    home_score: int,
    away_score: int,
    coach_ids: Optional[list[str]] = None,
    starters: Optional[list[str]] = None,
    substitutes: Optional[list[str]] = None,
    scorers: Optional[dict[str, int]] = None,
    own_goals: int = 0,
) -> list[TextContent]:
    """Record a match by hand.

    Args:
        date: Kick-off date and time (ISO 8601)
        opponent: Opponent name
        tournament_id: The tournament the match belongs to
        home_score: Goals scored by the team
        away_score: Goals conceded
        coach_ids: Coaches on the bench
        starters: Player ids of the starting lineup
        substitutes: Player ids of the substitutes
        scorers: Goals per player id; must add up to home_score with own_goals
        own_goals: Goals scored by the opponent into their own net
    """
    store = get_store()
    match_date = parse_date(date)
    if match_date is None:
        return _reply(f"Data '{date}' non valida.")
    if not opponent.strip():
        return _reply("Il nome dell'avversario è obbligatorio.")
    try:
        match = store.add_match(
            match_date,
            opponent,
            tournament_id,
            home_score,
            away_score,
            coach_ids=coach_ids,
            attendees=_lineup(starters, substitutes),
            scorers=_scorer_list(scorers, own_goals),
        )
    except (StoreError, ValueError) as exc:
        return _match_error(exc)
    return _reply("Partita salvata:\n" + _match_line(store, match))


@server.tool()
async def update_match(
    match_id: str,
    date: Optional[str] = None,
    opponent: Optional[str] = None,
    tournament_id: Optional[str] = None,
    home_score: Optional[int] = None,
    away_score: Optional[int] = None,
    coach_ids: Optional[list[str]] = None,
    starters: Optional[list[str]] = None,
    substitutes: Optional[list[str]] = None,
    scorers: Optional[dict[str, int]] = None,
    own_goals: Optional[int] = None,
) -> list[TextContent]:
    """Edit a recorded match. Omitted fields keep their current value.

    Args:
        match_id: The unique match identifier
        date: New date and time (ISO 8601)
        opponent: New opponent name
        tournament_id: New tournament
        home_score: New goals scored
        away_score: New goals conceded
        coach_ids: Replaces the coaches on the bench
        starters: Replaces the lineup together with substitutes
        substitutes: Replaces the lineup together with starters
        scorers: Replaces the player goals
        own_goals: Replaces the own goals count
    """
    store = get_store()
    try:
        match = store.get_match(match_id)
    except StoreError:
        return _reply(f"Partita con ID '{match_id}' non trovata")

    changes = {}
    if date is not None:
        changes["date"] = parse_date(date)
        if changes["date"] is None:
            return _reply(f"Data '{date}' non valida.")
    if opponent is not None:
        changes["opponent"] = opponent
    if tournament_id is not None:
        changes["tournament_id"] = tournament_id
    if home_score is not None:
        changes["home_score"] = home_score
    if away_score is not None:
        changes["away_score"] = away_score
    if coach_ids is not None:
        changes["coach_ids"] = list(coach_ids)
    if starters is not None or substitutes is not None:
        changes["attendees"] = _lineup(starters, substitutes)
    if scorers is not None or own_goals is not None:
        if scorers is None:
            scorers = {s.player_id: s.goals for s in match.scorers if not s.is_own_goal}
        if own_goals is None:
            own_goals = sum(s.goals for s in match.scorers if s.is_own_goal)
        changes["scorers"] = _scorer_list(scorers, own_goals)

    try:
        updated = store.update_match(replace(match, **changes))
    except (StoreError, ValueError) as exc:
        return _match_error(exc)
    return _reply("Partita aggiornata:\n" + _match_line(store, updated))


@server.tool()
async def delete_match(match_id: str) -> list[TextContent]:
    """Delete a match.

    Args:
        match_id: The unique match identifier
    """
    store = get_store()
    try:
        match = store.get_match(match_id)
        store.delete_match(match_id)
    except StoreError as exc:
        return _reply(str(exc))
    return _reply(f"Partita contro {match.opponent} eliminata.")


@server.tool()
async def get_dashboard() -> list[TextContent]:
    """Show the next match, the latest results and the cached AI insights."""
    store = get_store()
    next_match, recent = split_fixtures(store.matches, datetime.now())

    output = "**Dashboard**\n\n"
    if next_match:
        output += "**Prossima Partita:**\n" + _match_line(store, next_match) + "\n"

    output += "**Ultimi Risultati:**\n"
    if not recent:
        output += "Nessun risultato.\n"
    for match in recent:
        output += _match_line(store, match)

    if store.cached_insights:
        output += "\n**Analisi AI:**\n"
        for insight in store.cached_insights:
            output += f"- {insight.emoji} **{insight.title}**: {insight.description}\n"
    return _reply(output)


@server.tool()
async def list_opponents() -> list[TextContent]:
    """List every opponent faced with the overall record against them."""
    store = get_store()
    opponents = compute_opponents(store.matches)
    if not opponents:
        return _reply("Nessun avversario affrontato.")

    output = f"Avversari ({len(opponents)}):\n\n"
    for opponent in opponents:
        output += (
            f"- **{opponent.name}**: {opponent.match_count} partite, "
            f"V-P-S {opponent.wins}-{opponent.draws}-{opponent.losses}\n"
        )
    return _reply(output)


@server.tool()
async def get_opponent_detail(opponent_name: str) -> list[TextContent]:
    """Get head-to-head statistics against an opponent.

    Args:
        opponent_name: Exact opponent name as recorded in matches
    """
    store = get_store()
    record = opponent_detail(opponent_name, store.matches)
    if not record.history:
        return _reply(f"Nessuna partita contro '{opponent_name}'")

    output = f"**Dettaglio vs {opponent_name}**\n\n"
    output += f"- Partite: {record.matches}\n"
    output += f"- V-P-S: {record.wins}-{record.draws}-{record.losses}\n"
    output += f"- Gol Fatti: {record.goals_for}\n"
    output += f"- Gol Subiti: {record.goals_against}\n"

    output += "\n**Storico:**\n"
    for match in record.history:
        output += _match_line(store, match)
    return _reply(output)


# ============================================================================
# Statistics Tools
# ============================================================================


@server.tool()
async def get_team_summary(tournament_id: Optional[str] = None) -> list[TextContent]:
    """Get aggregate results, goals, clean sheets and minutes played.

    Args:
        tournament_id: Optional tournament to filter by (default: all)
    """
    store = get_store()
    matches = filter_matches(store.matches, tournament_id)
    summary = compute_summary(matches, store.tournaments, match_duration())

    output = "**Statistiche**"
    if tournament_id:
        try:
            output += f" ({store.get_tournament(tournament_id).name})"
        except StoreError:
            return _reply(f"Torneo con ID '{tournament_id}' non trovato")
    output += "\n\n"
    output += f"- Partite Giocate: {summary.matches}\n"
    output += f"- V-P-S: {summary.wins}-{summary.draws}-{summary.losses}\n"
    output += f"- Gol Fatti: {summary.goals_for}\n"
    output += f"- Gol Subiti: {summary.goals_against}\n"
    output += f"- Differenza Reti: {summary.goal_difference}\n"
    output += f"- Clean Sheets: {summary.clean_sheets}\n"
    output += f"- Minuti Giocati: {summary.minutes_played:g}\n"
    return _reply(output)


@server.tool()
async def get_leaderboard(
    metric: str = "goals", tournament_id: Optional[str] = None, limit: int = 10
) -> list[TextContent]:
    """Rank players by goals, appearances, weighted appearances or win rate.

    Args:
        metric: One of goals, appearances, weighted_appearances, win_rate
        tournament_id: Optional tournament to filter by (default: all)
        limit: Maximum number of players to return (default 10)
    """
    if metric not in METRICS:
        return _reply(f"Metrica '{metric}' non valida. Usa una tra: {', '.join(METRICS)}")

    store = get_store()
    matches = filter_matches(store.matches, tournament_id)
    entries = compute_leaderboard(matches, _roster(store), store.tournaments, metric)
    title, unit = METRIC_TITLES[metric]

    output = f"**{title}**\n\n"
    if not entries:
        output += "Nessun dato."
    for i, entry in enumerate(entries[:limit], 1):
        output += f"{i}. {entry.player.full_name} - {_format_score(metric, entry.score)} {unit}\n"
    return _reply(output)


# ============================================================================
# AI Tools
# ============================================================================


@server.tool()
async def import_matches_from_text(raw_text: str, commit: bool = True) -> list[TextContent]:
    """Extract matches from free text, validate them and save the valid ones.

    Args:
        raw_text: One or more match descriptions separated by '---'
        commit: Save the matches that pass validation (default True)
    """
    store = get_store()
    if not raw_text.strip():
        return _reply("Inserisci il testo della/e partita/e.")

    candidates = get_generator().parse_match_text(
        raw_text, store.players, store.tournaments, store.coaches
    )
    if not candidates:
        return _reply("L'AI non ha trovato partite valide nel testo.")

    results = validate_candidates(candidates, store.players, store.tournaments, store.coaches)
    output = ""
    saved = 0
    for i, result in enumerate(results, 1):
        state = "con errori" if result.has_errors else "valida"
        output += f"**Partita {i}** ({state})\n"
        for message in result.messages:
            output += f"- {STATUS_ICONS.get(message.status, '⚠️')} {message.text}\n"
        if commit and result.validated_data is not None:
            match = store.add_validated_match(result.validated_data)
            output += f"- Salvata [ID: {match.match_id}]\n"
            saved += 1
        output += "\n"

    output += f"Partite salvate: {saved} su {len(results)}"
    return _reply(output)


@server.tool()
async def generate_insights() -> list[TextContent]:
    """Ask the AI for fun statistical insights about the season."""
    store = get_store()
    insights = get_generator().generate_insights(
        store.matches, store.players, store.coaches, store.tournaments
    )
    if insights is None:
        return _reply("Servono almeno 3 partite per generare un'analisi AI.")

    store.cache_insights(insights)
    output = "**Analisi AI**\n\n"
    for insight in insights:
        output += f"- {insight.emoji} **{insight.title}**: {insight.description}\n"
    return _reply(output)


@server.tool()
async def get_match_report(match_id: str) -> list[TextContent]:
    """Get an AI-written report of a match.

    Args:
        match_id: The unique match identifier
    """
    store = get_store()
    try:
        match = store.get_match(match_id)
    except StoreError:
        return _reply(f"Partita con ID '{match_id}' non trovata")

    report = get_generator().generate_match_report(match, store.matches, store.players)
    output = f"**{report.title}**\n\n{report.content}\n\n"
    output += f"Risultato: {match.home_score}-{match.away_score} vs {match.opponent}\n"
    return _reply(output)


def main():
    """Run the MCP server over stdio."""
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting youth-football-kb MCP server")
    server.run()


if __name__ == "__main__":
    main()
