"""Gemini-backed insights, match reports and free-text match parsing.

Every call is a single best-effort attempt. When the model is unavailable or
answers with something unusable, a fixed fallback value is returned instead
and the failure is logged.
"""

import json
import logging
import os
from typing import Any, Optional, Sequence

import google.generativeai as genai

from .models import Coach, Insight, Match, MatchCandidate, MatchReport, Player, Tournament
from .resolvers import detect_milestones
from .stats import GOALS, compute_leaderboard, compute_summary

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "gemini-2.5-flash"
MIN_MATCHES_FOR_INSIGHTS = 3
RECENT_MATCHES_IN_PROMPT = 10

INSIGHT_ERROR = Insight(
    title="Errore",
    description="Impossibile contattare l'intelligenza artificiale.",
    emoji="🤖",
)
REPORT_ERROR = MatchReport(
    title="Errore Report",
    content="Impossibile generare il riassunto AI per questa partita.",
)

JSON_CONFIG = {"response_mime_type": "application/json"}


def _extract_text(resp: Any) -> str:
    text = getattr(resp, "text", None)
    if isinstance(text, str) and text.strip():
        return text
    try:
        parts = resp.candidates[0].content.parts
    except (AttributeError, IndexError, TypeError):
        return ""
    return "\n".join(p.text for p in parts if isinstance(getattr(p, "text", None), str))


def _safe_json_load(text: str) -> Any:
    s = (text or "").strip()
    if s.startswith("```"):
        chunks = s.split("```")
        if len(chunks) >= 3:
            s = chunks[1].strip()
            if s.startswith("json"):
                s = s[4:].strip()
    try:
        return json.loads(s)
    except json.JSONDecodeError:
        return None


def _player_name(players: Sequence[Player], player_id: Optional[str]) -> str:
    for player in players:
        if player.player_id == player_id:
            return player.full_name
    return "Sconosciuto"


def _scorers_line(match: Match, players: Sequence[Player]) -> str:
    if not match.scorers:
        return "Nessuno"
    return ", ".join(
        f"Autogol ({s.goals})" if s.is_own_goal else f"{_player_name(players, s.player_id)} ({s.goals})"
        for s in match.scorers
    )


def build_insight_prompt(
    matches: Sequence[Match],
    players: Sequence[Player],
    coaches: Sequence[Coach],
    tournaments: Sequence[Tournament],
) -> str:
    summary = compute_summary(matches, tournaments)
    top = compute_leaderboard(matches, players, tournaments, GOALS)[:3]
    top_line = "; ".join(f"{e.player.full_name}: {e.score} gol" for e in top) or "N/A"
    tournament_names = {t.tournament_id: t.name for t in tournaments}
    coach_names = {c.coach_id: c.name for c in coaches}

    lines = []
    for m in matches[:RECENT_MATCHES_IN_PROMPT]:
        bench = ", ".join(coach_names.get(cid, "?") for cid in m.coach_ids) or "N/A"
        lines.append(
            f"  - {m.date:%d/%m/%Y} vs {m.opponent} "
            f"(Torneo: {tournament_names.get(m.tournament_id, 'N/A')}), "
            f"Risultato: {m.home_score}-{m.away_score}. "
            f"Marcatori: {_scorers_line(m, players)}. Mister: {bench}. "
            f"Presenti: {len(m.attendees)} giocatori."
        )

    return (
        "Sei un telecronista di calcio giovanile, entusiasta e spiritoso.\n"
        "Dai dati seguenti ricava ALMENO 3 curiosità statistiche verificabili, "
        "specifiche e non banali.\n\n"
        f"- Risultati: {summary.wins} vittorie, {summary.draws} pareggi, "
        f"{summary.losses} sconfitte.\n"
        f"- Marcatori principali: {top_line}.\n"
        "- Ultime partite:\n" + "\n".join(lines) + "\n\n"
        "Rispondi SOLO con un array JSON di oggetti con le chiavi "
        '"title" (massimo 6 parole), "description" (massimo 2 frasi) ed "emoji".'
    )


def build_report_prompt(match: Match, all_matches: Sequence[Match], players: Sequence[Player]) -> str:
    milestones = detect_milestones(match, all_matches, players)
    milestone_lines = "\n".join(
        f"  - {m.player.full_name}: {', '.join(m.milestones)}" for m in milestones
    ) or "  - Nessuno"
    return (
        "Sei un cronista sportivo che racconta una partita di calcio giovanile con "
        "tono positivo. Scrivi un riassunto di 2-3 frasi concentrandoti su uno o due "
        "eventi significativi.\n\n"
        f"- Data: {match.date:%d/%m/%Y}\n"
        f"- Avversario: {match.opponent}\n"
        f"- Risultato: {match.home_score}-{match.away_score}\n"
        f"- Marcatori: {_scorers_line(match, players)}\n"
        f"- Traguardi:\n{milestone_lines}\n\n"
        'Rispondi SOLO con un oggetto JSON con le chiavi "title" (titolo di giornale, '
        'massimo 7 parole) e "content" (il riassunto in italiano).'
    )


def build_parse_prompt(
    raw_text: str,
    players: Sequence[Player],
    tournaments: Sequence[Tournament],
    coaches: Sequence[Coach],
) -> str:
    return (
        "Estrai i dati delle partite di calcio dal testo seguente. Le partite sono "
        "separate da '---'. Per ciascuna restituisci un oggetto JSON con le chiavi "
        "opzionali: date (ISO 8601), tournamentName, opponentName, homeScore, "
        "awayScore, coachNames (array), attendees (array di cognomi), scorers "
        "(array di {lastName, goals, isOwnGoal}), parseErrors (array).\n"
        "Ometti le chiavi che non trovi. 'Autogol' è un marcatore con isOwnGoal "
        "true e senza lastName.\n"
        f"Tornei noti: {', '.join(t.name for t in tournaments)}.\n"
        f"Mister noti: {', '.join(c.name for c in coaches)}.\n"
        f"Cognomi noti: {', '.join(p.last_name for p in players)}.\n\n"
        f'Testo:\n"""\n{raw_text}\n"""\n\n'
        "Rispondi SOLO con un array JSON, vuoto se non trovi nessuna partita."
    )


class InsightGenerator:
    """Thin wrapper around a Gemini model.

    ``model`` may be passed directly (anything with ``generate_content``);
    otherwise one is built from ``api_key`` / ``GEMINI_API_KEY``. Without
    either, every request returns its fallback value.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        model: Any = None,
    ):
        self.model_name = model_name or os.getenv("GEMINI_MODEL", DEFAULT_MODEL_NAME)
        self.model = model
        if self.model is None:
            key = api_key or os.getenv("GEMINI_API_KEY")
            if key:
                genai.configure(api_key=key)
                self.model = genai.GenerativeModel(self.model_name)

    def _ask_json(self, prompt: str) -> Any:
        if self.model is None:
            raise RuntimeError("No Gemini API key configured")
        resp = self.model.generate_content(prompt, generation_config=JSON_CONFIG)
        return _safe_json_load(_extract_text(resp))

    def generate_insights(
        self,
        matches: Sequence[Match],
        players: Sequence[Player],
        coaches: Sequence[Coach],
        tournaments: Sequence[Tournament],
    ) -> Optional[list[Insight]]:
        """Return at least one insight, or ``None`` when there is too little data."""
        if len(matches) < MIN_MATCHES_FOR_INSIGHTS:
            return None
        prompt = build_insight_prompt(matches, players, coaches, tournaments)
        try:
            data = self._ask_json(prompt)
        except Exception as exc:
            logger.warning("Insight generation failed: %s", exc, exc_info=True)
            return [INSIGHT_ERROR]
        if not isinstance(data, list):
            logger.warning("Insight generation returned malformed JSON")
            return [INSIGHT_ERROR]
        insights = [Insight.from_dict(item) for item in data if isinstance(item, dict)]
        return insights or [INSIGHT_ERROR]

    def generate_match_report(
        self, match: Match, all_matches: Sequence[Match], players: Sequence[Player]
    ) -> MatchReport:
        prompt = build_report_prompt(match, all_matches, players)
        try:
            data = self._ask_json(prompt)
        except Exception as exc:
            logger.warning("Match report generation failed: %s", exc, exc_info=True)
            return REPORT_ERROR
        if not isinstance(data, dict) or not data.get("title") or not data.get("content"):
            logger.warning("Match report returned malformed JSON")
            return REPORT_ERROR
        return MatchReport(title=str(data["title"]), content=str(data["content"]))

    def parse_match_text(
        self,
        raw_text: str,
        players: Sequence[Player],
        tournaments: Sequence[Tournament],
        coaches: Sequence[Coach],
    ) -> Optional[list[MatchCandidate]]:
        """Turn free text into match candidates; ``None`` when nothing was extracted."""
        if not raw_text or not raw_text.strip():
            return None
        prompt = build_parse_prompt(raw_text, players, tournaments, coaches)
        try:
            data = self._ask_json(prompt)
        except Exception as exc:
            logger.warning("Match text parsing failed: %s", exc, exc_info=True)
            return None
        if not isinstance(data, list):
            return None
        return [MatchCandidate.from_dict(item) for item in data if isinstance(item, dict)]
