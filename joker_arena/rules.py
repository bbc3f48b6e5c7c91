# joker_arena/rules.py
from __future__ import annotations

from typing import Iterable, Optional

from .modes import GameMode, KhisthiMode
from .state import BiddingStatus

TOTAL_ROUNDS = 24
NUM_PLAYERS = 4


def cards_in_round(mode: GameMode, round_number: int) -> int:
    """
    Number of cards dealt to each player in `round_number` (1-based).

    - STANDARD: 1..8 cards, four rounds of nines, 8..1 cards, four rounds of nines.
    - NINES: nine cards every round.

    Rounds outside 1..24 yield 0.
    """
    if mode == GameMode.NINES:
        return 9

    if 1 <= round_number <= 8:
        return round_number
    if 9 <= round_number <= 12:
        return 9
    if 13 <= round_number <= 20:
        return 21 - round_number
    if 21 <= round_number <= 24:
        return 9
    return 0


def is_khisthi(bid: int, tricks: int) -> bool:
    """A player bid something but took nothing."""
    return bid > 0 and tricks == 0


def khisthi_penalty(khisthi_mode: KhisthiMode, cards_dealt: int) -> int:
    if khisthi_mode == KhisthiMode.SPECI:
        return -100 * cards_dealt
    if khisthi_mode == KhisthiMode.FIXED_200:
        return -200
    return -500


def calculate_score(
    bid: int,
    tricks: int,
    cards_dealt: int,
    khisthi_mode: KhisthiMode,
) -> int:
    """
    Score one player's round:

    - Exact bid of 0: 50
    - Exact bid of every card dealt: 100 * bid
    - Any other exact bid: 50 + 50 * bid
    - Khisthi (bid > 0, took 0): penalty per khisthi_mode
    - Any other miss: 10 * abs(bid - tricks)
    """
    if bid == tricks:
        if bid == 0:
            return 50
        if bid == cards_dealt:
            return bid * 100
        return 50 + bid * 50

    if is_khisthi(bid, tricks):
        return khisthi_penalty(khisthi_mode, cards_dealt)
    return abs(bid - tricks) * 10


def bidding_status(bids: Iterable[Optional[int]], cards_dealt: int) -> BiddingStatus:
    """Summarise placed bids against the cards dealt; unset bids count as 0."""
    total = sum(b for b in bids if b is not None)
    if total < cards_dealt:
        return BiddingStatus(total, cards_dealt, under=cards_dealt - total)
    if total > cards_dealt:
        return BiddingStatus(total, cards_dealt, over=min(total - cards_dealt, cards_dealt))
    return BiddingStatus(total, cards_dealt)


def format_score(score: int) -> str:
    """Render a score in hundreds with one decimal, e.g. 150 -> "1.5"."""
    if score == 0:
        return "0.0"
    magnitude = abs(score)
    text = f"{magnitude // 100}.{(magnitude % 100) // 10}"
    return f"-{text}" if score < 0 else text
