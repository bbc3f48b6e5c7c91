# joker_arena/verbose_logger.py
from __future__ import annotations

from pathlib import Path
from threading import Lock
from typing import List, Optional, Sequence


def _header(
    game_id: Optional[str],
    round_number: Optional[int],
    phase: Optional[str],
    extra: Sequence[str] = (),
) -> str:
    header_parts = list(extra)
    if game_id is not None:
        header_parts.append(f"Game: {game_id}")
    if round_number is not None:
        header_parts.append(f"Round: {round_number}")
    if phase is not None:
        header_parts.append(f"Phase: {phase}")
    return " | ".join(header_parts)


class TranscriptLogger:
    """Accumulates a turn-by-turn transcript of Joker games."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._entries: List[str] = []
        self._lock = Lock()

    def log_action(
        self,
        *,
        game_id: Optional[str],
        round_number: int,
        phase: str,
        player_name: str,
        value: int,
        legal: Sequence[int],
    ) -> None:
        header = _header(game_id, round_number, phase)
        entry = (
            f"[{header}] {player_name}: {value} "
            f"(legal: {', '.join(str(v) for v in legal)})"
        )
        with self._lock:
            self._entries.append(entry)

    def log_round(
        self,
        *,
        game_id: Optional[str],
        round_number: int,
        cards_dealt: int,
        dealer_name: str,
        lines: Sequence[str],
    ) -> None:
        header = _header(game_id, round_number, "scored")
        body = [
            f"=== {header} ===",
            f"Cards dealt: {cards_dealt} | Dealer: {dealer_name}",
            *lines,
        ]
        entry = "\n".join(body).strip()
        with self._lock:
            self._entries.append(entry)

    def flush(self) -> None:
        with self._lock:
            if not self._entries:
                return
            to_write = "\n".join(self._entries)
            self._entries.clear()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(to_write, encoding="utf-8")


class CorrectionLogger:
    """Captures only agent choices that had to be replaced with a legal one."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._entries: List[str] = []
        self._lock = Lock()

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def log_correction(
        self,
        *,
        agent_label: str,
        game_id: Optional[str],
        round_number: int,
        phase: str,
        chosen: object,
        replacement: int,
        legal: Sequence[int],
    ) -> None:
        header = _header(game_id, round_number, phase, extra=[f"Agent: {agent_label}"])
        lines = [
            f"=== {header} ===",
            f"Chosen: {chosen!r}",
            f"Legal: {list(legal)}",
            f"Replaced with: {replacement}",
        ]
        entry = "\n".join(lines).strip()
        with self._lock:
            self._entries.append(entry)

    def flush(self) -> None:
        with self._lock:
            if not self._entries:
                return
            to_write = "\n\n".join(self._entries)
            self._entries.clear()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(to_write, encoding="utf-8")
