# joker_arena/game_log.py
from __future__ import annotations

import csv
from typing import Any, Dict, Iterable, List, Optional

from .engine import GameEngine
from .rules import is_khisthi
from .state import RoundRecord

FIELDNAMES = [
    "game_id",
    "round_number",
    "cards_dealt",
    "dealer_id",
    "player_id",
    "player_name",
    "bid",
    "tricks",
    "khisthi",
    "round_score",
    "total_score",
]


def _is_round_complete(record: RoundRecord, num_players: int) -> bool:
    """Return True if the record holds a bid, tricks and a score for every player."""
    if len(record.scores) != num_players:
        return False
    if any(record.bids.get(pid) is None for pid in range(num_players)):
        return False
    return all(record.tricks.get(pid) is not None for pid in range(num_players))


def build_round_score_rows(
    engine: GameEngine,
    game_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Build a list of rows summarizing per-round scores for CSV export.

    Each row corresponds to (round, player) and has keys in FIELDNAMES. The
    running total is rebuilt from the recorded round scores, so after a full
    game the last row of each player equals that player's final score.
    """
    players = engine.players
    running_scores: Dict[int, int] = {p.id: 0 for p in players}
    rows: List[Dict[str, Any]] = []

    for record in engine.round_history:
        if not _is_round_complete(record, len(players)):
            continue

        for p, delta in zip(players, record.scores):
            bid = record.bids[p.id]
            tricks = record.tricks[p.id]
            running_scores[p.id] += delta

            rows.append(
                {
                    "game_id": game_id if game_id is not None else engine.game_label,
                    "round_number": record.round_number,
                    "cards_dealt": record.cards_dealt,
                    "dealer_id": record.dealer_id,
                    "player_id": p.id,
                    "player_name": p.name,
                    "bid": bid,
                    "tricks": tricks,
                    "khisthi": is_khisthi(bid, tricks),
                    "round_score": delta,
                    "total_score": running_scores[p.id],
                }
            )

    return rows


def write_rows_csv(rows: Iterable[Dict[str, Any]], path) -> int:
    """Write rows with FIELDNAMES columns to `path`; returns the row count."""
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for row in rows:
            writer.writerow({field: row.get(field) for field in FIELDNAMES})
            count += 1
    return count


def write_round_scores_csv(
    engine: GameEngine,
    path,
    game_id: Optional[str] = None,
) -> None:
    """
    Write per-round scores of one game to a CSV file.

    `path` can be a string or any path-like object accepted by `open`.
    """
    write_rows_csv(build_round_score_rows(engine, game_id=game_id), path)
