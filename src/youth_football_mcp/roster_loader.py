"""Load a team roster (players, coaches, tournaments) from CSV files."""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from .store import DuplicateEntityError, EntityStore

logger = logging.getLogger(__name__)

PLAYERS_CSV = "players.csv"
COACHES_CSV = "coaches.csv"
TOURNAMENTS_CSV = "tournaments.csv"


def _clean(value) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


class RosterLoader:
    """Add the entities described by a directory of CSV files to a store.

    Expected columns:
        players.csv: first_name, last_name, jersey_number (optional)
        coaches.csv: name
        tournaments.csv: name, presence_weight (optional, default 1.0)

    Missing files are skipped; rows without the required fields are ignored.
    """

    def __init__(self, store: EntityStore, data_dir: Path):
        self.store = store
        self.data_dir = Path(data_dir)

    def load_all(self, team_id: Optional[str] = None) -> dict:
        """Load all roster files for ``team_id`` (default: the active team)."""
        team_id = team_id or self.store.require_active_team()
        self.store.get_team(team_id)

        stats = {
            "players": self._load_players(team_id),
            "coaches": self._load_coaches(team_id),
            "tournaments": self._load_tournaments(),
        }
        logger.info("Roster import into team %s: %s", team_id, stats)
        return stats

    def _read(self, filename: str) -> Optional[pd.DataFrame]:
        csv_path = self.data_dir / filename
        if not csv_path.exists():
            return None
        return pd.read_csv(csv_path)

    def _load_players(self, team_id: str) -> int:
        df = self._read(PLAYERS_CSV)
        if df is None:
            return 0

        known = {
            (p.first_name.lower(), p.last_name.lower())
            for p in self.store.players_for_team(team_id)
        }
        count = 0
        for _, row in df.iterrows():
            first_name = _clean(row.get("first_name"))
            last_name = _clean(row.get("last_name"))
            if not first_name or not last_name:
                continue
            if (first_name.lower(), last_name.lower()) in known:
                continue

            jersey = row.get("jersey_number")
            try:
                jersey_number = int(jersey) if pd.notna(jersey) else None
            except (ValueError, TypeError):
                jersey_number = None

            self.store.add_player(team_id, first_name, last_name, jersey_number)
            known.add((first_name.lower(), last_name.lower()))
            count += 1
        return count

    def _load_coaches(self, team_id: str) -> int:
        df = self._read(COACHES_CSV)
        if df is None:
            return 0

        known = {c.name.lower() for c in self.store.coaches_for_team(team_id)}
        count = 0
        for _, row in df.iterrows():
            name = _clean(row.get("name"))
            if not name or name.lower() in known:
                continue
            self.store.add_coach(team_id, name)
            known.add(name.lower())
            count += 1
        return count

    def _load_tournaments(self) -> int:
        df = self._read(TOURNAMENTS_CSV)
        if df is None:
            return 0

        count = 0
        for _, row in df.iterrows():
            name = _clean(row.get("name"))
            if not name:
                continue
            weight = row.get("presence_weight")
            try:
                presence_weight = float(weight) if pd.notna(weight) else 1.0
            except (ValueError, TypeError):
                logger.warning("Skipping tournament %r: bad weight %r", name, weight)
                continue
            try:
                self.store.add_tournament(name, presence_weight)
            except DuplicateEntityError:
                continue
            except ValueError as exc:
                logger.warning("Skipping tournament %r: %s", name, exc)
                continue
            count += 1
        return count
