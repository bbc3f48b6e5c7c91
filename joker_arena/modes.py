# joker_arena/modes.py
from __future__ import annotations

import enum


class _ParsableEnum(enum.Enum):
    """Enum that accepts its value or member name, case-insensitively."""

    @classmethod
    def parse(cls, text: str):
        normalized = text.strip().lower()
        for member in cls:
            if normalized in (member.value, member.name.lower()):
                return member
        choices = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown {cls.__name__} {text!r}; expected one of: {choices}")


class GameMode(_ParsableEnum):
    """Card schedule for the 24 rounds."""

    STANDARD = "standard"
    NINES = "nines"

    @property
    def label(self) -> str:
        return _GAME_MODE_LABELS[self]


class KhisthiMode(_ParsableEnum):
    """How a player who bid but took nothing is penalised."""

    SPECI = "speci"
    FIXED_200 = "fixed200"
    FIXED_500 = "fixed500"

    @property
    def label(self) -> str:
        return _KHISTHI_MODE_LABELS[self]


_GAME_MODE_LABELS = {
    GameMode.STANDARD: "Standard (8-9-8-9)",
    GameMode.NINES: "All Nines (4x4)",
}

_KHISTHI_MODE_LABELS = {
    KhisthiMode.SPECI: "Speci",
    KhisthiMode.FIXED_200: "-200",
    KhisthiMode.FIXED_500: "-500",
}


class GamePhase(enum.Enum):
    NOT_SETUP = "not_setup"
    BIDDING = "bidding"
    TAKING = "taking"
    GAME_COMPLETE = "game_complete"


class RoundEditError(enum.Enum):
    """Reasons a correction to a past round is refused by check_round_edit."""

    ROUND_OUT_OF_RANGE = "round_out_of_range"
    TRICKS_EXCEED_CARDS = "total_tricks_exceed_cards"
    TRICKS_BELOW_CARDS = "total_tricks_less_than_cards"
