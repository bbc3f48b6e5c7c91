# joker_arena/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class PlayerState:
    id: int  # seat index, 0..3
    name: str
    score: int = 0
    current_bid: Optional[int] = None
    current_tricks: Optional[int] = None
    is_dealer: bool = False
    # one entry per completed round
    round_scores: List[int] = field(default_factory=list)

    @property
    def has_bid(self) -> bool:
        return self.current_bid is not None

    @property
    def has_tricks(self) -> bool:
        return self.current_tricks is not None


@dataclass
class RoundRecord:
    """Bids, tricks and scores of one completed round."""

    round_number: int
    cards_dealt: int
    dealer_id: int
    bids: Dict[int, Optional[int]] = field(default_factory=dict)
    tricks: Dict[int, Optional[int]] = field(default_factory=dict)
    # aligned to seating order
    scores: List[int] = field(default_factory=list)


@dataclass
class RoundEntry:
    player: PlayerState
    bid: Optional[int]
    tricks: Optional[int]


@dataclass(frozen=True)
class BiddingStatus:
    """
    Table-level view of the bids placed so far.

    - under: tricks nobody has bid for yet (total below cards dealt).
    - over: how far the table overbid, capped at cards dealt.
    """
    total_bids: int
    cards_dealt: int
    under: int = 0
    over: int = 0

    @property
    def is_balanced(self) -> bool:
        return self.total_bids == self.cards_dealt
