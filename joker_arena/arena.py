# joker_arena/arena.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .agents.base import JokerAgent
from .engine import GameEngine
from .modes import GameMode, KhisthiMode
from .rules import NUM_PLAYERS, format_score
from .state import PlayerState
from .verbose_logger import CorrectionLogger, TranscriptLogger

logger = logging.getLogger(__name__)


class GameArena:
    """
    Plays a full Joker game between pluggable agents.

    The arena only talks to GameEngine through its public API, exactly like a
    score-keeping UI would: ask who is next, offer them the legal numbers,
    submit their choice.
    """

    def __init__(
        self,
        agents: List[JokerAgent],
        player_names: Optional[List[str]] = None,
        game_mode: GameMode = GameMode.STANDARD,
        khisthi_mode: KhisthiMode = KhisthiMode.SPECI,
        game_label: Optional[str] = None,
        transcript: Optional[TranscriptLogger] = None,
        corrections: Optional[CorrectionLogger] = None,
    ) -> None:
        if len(agents) != NUM_PLAYERS:
            raise ValueError(f"Joker is played by exactly {NUM_PLAYERS} players")

        if player_names is None:
            player_names = [f"Player {i}" for i in range(len(agents))]
        if len(player_names) != len(agents):
            raise ValueError("player_names must match number of agents")

        self.agents: List[JokerAgent] = agents
        self.game_label = game_label
        self.transcript = transcript
        self.corrections = corrections

        self.engine = GameEngine(
            game_mode=game_mode,
            khisthi_mode=khisthi_mode,
            game_label=game_label,
        )
        for name in player_names:
            self.engine.add_player(name)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def play_game(self) -> GameEngine:
        """Play all 24 rounds from scratch and return the finished engine."""
        engine = self.engine
        engine.start_game()

        while not engine.is_game_complete:
            round_number = engine.current_round
            bidder = engine.get_next_bidder()
            if bidder is not None:
                self._bid_turn(bidder)
                continue

            taker = engine.get_next_taker()
            if taker is None:
                raise RuntimeError(
                    f"No player to act in round {round_number} of an unfinished game"
                )
            self._take_turn(taker)
            if engine.last_completed_round >= round_number:
                self._log_round_scores(round_number)

        return engine

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def _bid_turn(self, player: PlayerState) -> None:
        engine = self.engine
        legal = engine.legal_bids(player.id)
        obs = self._build_observation(player)
        obs.update({"phase": "bidding", "legal_bids": legal})

        bid = self.agents[player.id].choose_bid(obs)
        bid = self._checked_choice(player, "bidding", bid, legal)

        if self.transcript is not None:
            self.transcript.log_action(
                game_id=self.game_label,
                round_number=engine.current_round,
                phase="bidding",
                player_name=player.name,
                value=bid,
                legal=legal,
            )
        engine.set_bid(player.id, bid)

    def _take_turn(self, player: PlayerState) -> None:
        engine = self.engine
        legal = engine.legal_trick_counts(player.id)
        obs = self._build_observation(player)
        obs.update({"phase": "taking", "legal_trick_counts": legal})

        tricks = self.agents[player.id].choose_tricks(obs)
        tricks = self._checked_choice(player, "taking", tricks, legal)

        if self.transcript is not None:
            self.transcript.log_action(
                game_id=self.game_label,
                round_number=engine.current_round,
                phase="taking",
                player_name=player.name,
                value=tricks,
                legal=legal,
            )
        engine.set_tricks(player.id, tricks)

    def _checked_choice(
        self,
        player: PlayerState,
        phase: str,
        choice: Any,
        legal: List[int],
    ) -> int:
        if not legal:
            raise RuntimeError(f"{player.name} has no legal move while {phase}")
        if isinstance(choice, int) and not isinstance(choice, bool) and choice in legal:
            return choice

        # Auto-correct to the first legal number rather than abort the game.
        replacement = legal[0]
        logger.warning(
            "%s chose illegal %s value %r; using %d",
            player.name,
            phase,
            choice,
            replacement,
        )
        if self.corrections is not None:
            self.corrections.log_correction(
                agent_label=player.name,
                game_id=self.game_label,
                round_number=self.engine.current_round,
                phase=phase,
                chosen=choice,
                replacement=replacement,
                legal=legal,
            )
        return replacement

    def _log_round_scores(self, round_number: int) -> None:
        if self.transcript is None:
            return
        engine = self.engine
        record = engine.round_history[round_number - 1]
        lines = [
            f"{p.name}: bid {record.bids[p.id]}, took {record.tricks[p.id]}, "
            f"scored {format_score(score)} (total {format_score(p.score)})"
            for p, score in zip(engine.players, record.scores)
        ]
        self.transcript.log_round(
            game_id=self.game_label,
            round_number=round_number,
            cards_dealt=record.cards_dealt,
            dealer_name=engine.players[record.dealer_id].name,
            lines=lines,
        )

    # -------------------------------------------------------------------------
    # Observation builders
    # -------------------------------------------------------------------------

    def _build_observation(self, player: PlayerState) -> Dict[str, Any]:
        engine = self.engine
        dealer = engine.dealer
        status = engine.bidding_status()
        return {
            "game": {
                "game_id": self.game_label,
                "round_number": engine.current_round,
                "cards_dealt": engine.cards_in_current_round,
                "num_players": len(engine.players),
                "dealer_id": dealer.id if dealer is not None else None,
                "game_mode": engine.game_mode.value,
                "khisthi_mode": engine.khisthi_mode.value,
            },
            "player": {
                "id": player.id,
                "name": player.name,
                "score": player.score,
                "is_dealer": player.is_dealer,
                "bid": player.current_bid,
                "tricks": player.current_tricks,
            },
            "bids": {p.id: p.current_bid for p in engine.players},
            "tricks": {p.id: p.current_tricks for p in engine.players},
            "bidding_order": list(engine.bidding_order),
            "bidding_status": {
                "total_bids": status.total_bids,
                "under": status.under,
                "over": status.over,
            },
            "scores": {p.id: p.score for p in engine.players},
            "seating_order": [p.id for p in engine.players],
            "player_names": {p.id: p.name for p in engine.players},
        }
