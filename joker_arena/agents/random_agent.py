# joker_arena/agents/random_agent.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict
import random

from .base import JokerAgent


@dataclass
class RandomJokerAgent(JokerAgent):
    """
    A baseline agent with a little structure:

    - choose_bid: aim for a fair share of the cards dealt, jittered by one,
      then snapped to the nearest legal bid.
    - choose_tricks: when the bid is still reachable, take it with probability
      `hit_rate`; otherwise pick uniformly among legal counts.
    """

    rng: random.Random
    hit_rate: float = 0.5

    def choose_bid(self, observation: Dict[str, Any]) -> int:
        legal = observation["legal_bids"]
        cards = observation["game"]["cards_dealt"]
        num_players = observation["game"]["num_players"]

        expected = round(cards / num_players)
        target = self.rng.randint(max(0, expected - 1), min(cards, expected + 1))
        return min(legal, key=lambda bid: (abs(bid - target), bid))

    def choose_tricks(self, observation: Dict[str, Any]) -> int:
        legal = observation["legal_trick_counts"]
        bid = observation["player"]["bid"]
        if bid in legal and self.rng.random() < self.hit_rate:
            return bid
        return self.rng.choice(legal)
