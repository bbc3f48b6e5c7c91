# joker_arena/agents/base.py
from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class JokerAgent(Protocol):
    """
    Interface for automated Joker players.

    `observation` is a JSON-like dict containing:
      - game-level info (round, cards dealt, dealer, modes)
      - player info
      - everyone's bids and trick counts so far
      - "legal_bids" or "legal_trick_counts" for the current decision
    """

    def choose_bid(self, observation: Dict[str, Any]) -> int:
        """Return a bid from observation["legal_bids"]."""

        raise NotImplementedError

    def choose_tricks(self, observation: Dict[str, Any]) -> int:
        """
        Return the number of tricks taken this round.

        The observation includes "legal_trick_counts"; the engine completes the
        round on its own once the counts add up to the cards dealt.
        """
        raise NotImplementedError
