# joker_arena/engine.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .modes import GameMode, GamePhase, KhisthiMode, RoundEditError
from .rules import (
    NUM_PLAYERS,
    TOTAL_ROUNDS,
    bidding_status,
    calculate_score,
    cards_in_round,
)
from .state import BiddingStatus, PlayerState, RoundEntry, RoundRecord

logger = logging.getLogger(__name__)

# (player_id, new_bid, new_tricks); None leaves the recorded value as is.
RoundUpdate = Tuple[int, Optional[int], Optional[int]]


class GameEngine:
    """
    Rules engine for a four-player game of Joker.

    This module is *pure* game logic: the caller drives it by adding players,
    submitting bids and trick counts, and reading scores back. Invalid or
    out-of-order input is ignored (the state is left unchanged) and queries
    return None or an empty list when nothing applies.
    """

    def __init__(
        self,
        game_mode: GameMode = GameMode.STANDARD,
        khisthi_mode: KhisthiMode = KhisthiMode.SPECI,
        game_label: Optional[str] = None,
    ) -> None:
        self.game_mode = game_mode
        self.khisthi_mode = khisthi_mode
        self.game_label = game_label

        self.players: List[PlayerState] = []
        self.current_round = 1
        self.is_game_setup = False
        self.is_bidding_complete = False
        self.is_round_complete = False
        self.is_game_complete = False
        # Player ids in the order their bids arrived this round.
        self.bidding_order: List[int] = []
        self.round_history: List[RoundRecord] = []

        self.is_undo_mode = False
        self.selected_undo_round: Optional[int] = None

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    @property
    def cards_in_current_round(self) -> int:
        return cards_in_round(self.game_mode, self.current_round)

    @property
    def dealer(self) -> Optional[PlayerState]:
        for p in self.players:
            if p.is_dealer:
                return p
        return None

    @property
    def last_completed_round(self) -> int:
        return len(self.round_history)

    @property
    def phase(self) -> GamePhase:
        if not self.is_game_setup:
            return GamePhase.NOT_SETUP
        if self.is_game_complete:
            return GamePhase.GAME_COMPLETE
        if self.is_bidding_complete:
            return GamePhase.TAKING
        return GamePhase.BIDDING

    def _is_active(self) -> bool:
        return self.is_game_setup and not self.is_game_complete

    def _player(self, player_id: int) -> Optional[PlayerState]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def _label(self) -> str:
        return f" for {self.game_label}" if self.game_label else ""

    # -------------------------------------------------------------------------
    # Game lifecycle
    # -------------------------------------------------------------------------

    def add_player(self, name: str) -> Optional[PlayerState]:
        if self.is_game_setup:
            logger.debug("Ignoring add_player(%r): game already started", name)
            return None
        if len(self.players) >= NUM_PLAYERS:
            logger.debug("Ignoring add_player(%r): table is full", name)
            return None

        player = PlayerState(id=len(self.players), name=name)
        self.players.append(player)
        return player

    def start_game(self) -> None:
        if len(self.players) != NUM_PLAYERS:
            logger.debug(
                "Ignoring start_game: need %d players, have %d",
                NUM_PLAYERS,
                len(self.players),
            )
            return

        self.is_game_setup = True
        self.current_round = 1
        self.is_round_complete = False
        self.is_game_complete = False
        self.is_bidding_complete = False
        self.bidding_order = []
        self.round_history = []
        self.exit_undo_mode()

        # Last seat deals the first round, so seat 0 bids first.
        last_seat = len(self.players) - 1
        for i, p in enumerate(self.players):
            p.is_dealer = i == last_seat
            p.score = 0
            p.current_bid = None
            p.current_tricks = None
            p.round_scores = []

        logger.info(
            "Started game%s (%s, khisthi %s)",
            self._label(),
            self.game_mode.value,
            self.khisthi_mode.value,
        )

    def start_round(self) -> None:
        """Pass the deal to the next seat and clear per-round state."""
        if not self.is_game_setup:
            logger.debug("Ignoring start_round: game not started")
            return

        for i, p in enumerate(self.players):
            if p.is_dealer:
                p.is_dealer = False
                self.players[(i + 1) % len(self.players)].is_dealer = True
                break

        for p in self.players:
            p.current_bid = None
            p.current_tricks = None
        self.is_round_complete = False
        self.is_bidding_complete = False
        self.bidding_order = []

    def reset_game(self) -> None:
        self.players = []
        self.current_round = 1
        self.is_game_setup = False
        self.is_round_complete = False
        self.is_game_complete = False
        self.is_bidding_complete = False
        self.bidding_order = []
        self.round_history = []
        self.exit_undo_mode()

    # -------------------------------------------------------------------------
    # Bidding
    # -------------------------------------------------------------------------

    def is_valid_bid(self, player_id: int, bid: int) -> bool:
        """
        Legality of `bid` for a player this round.

        A bid must lie in 0..cards dealt, and the dealer may never bring the
        table total to exactly the number of cards dealt.
        """
        player = self._player(player_id)
        if player is None:
            return False

        cards = self.cards_in_current_round
        if bid < 0 or bid > cards:
            return False

        if player.is_dealer:
            others = sum(
                p.current_bid
                for p in self.players
                if p.id != player.id and p.current_bid is not None
            )
            if others + bid == cards:
                return False
        return True

    def set_bid(self, player_id: int, bid: int) -> None:
        if not self._is_active():
            logger.debug("Ignoring bid from %s: no active game", player_id)
            return
        player = self._player(player_id)
        if player is None:
            logger.debug("Ignoring bid from unknown player %s", player_id)
            return
        if self.is_bidding_complete:
            logger.debug("Ignoring bid from %s: bidding is complete", player.name)
            return
        if not self.is_valid_bid(player_id, bid):
            logger.debug(
                "Rejected bid %d from %s in round %d",
                bid,
                player.name,
                self.current_round,
            )
            return

        player.current_bid = bid
        if player.id not in self.bidding_order:
            self.bidding_order.append(player.id)

        if all(p.has_bid for p in self.players):
            self.is_bidding_complete = True

    def get_next_bidder(self) -> Optional[PlayerState]:
        """First seat after the dealer, clockwise, that has not bid yet."""
        if not self._is_active() or self.is_bidding_complete:
            return None

        num_players = len(self.players)
        for dealer_index, p in enumerate(self.players):
            if p.is_dealer:
                break
        else:
            return None

        for offset in range(1, num_players + 1):
            candidate = self.players[(dealer_index + offset) % num_players]
            if not candidate.has_bid:
                return candidate

        # Everyone has bid; repair the flag.
        self.is_bidding_complete = True
        return None

    def legal_bids(self, player_id: int) -> List[int]:
        """All bids `player_id` may place right now (empty if it is not their turn to bid)."""
        player = self._player(player_id)
        if (
            player is None
            or not self._is_active()
            or self.is_bidding_complete
            or player.has_bid
        ):
            return []
        return [
            bid
            for bid in range(self.cards_in_current_round + 1)
            if self.is_valid_bid(player_id, bid)
        ]

    def bidding_status(self) -> BiddingStatus:
        return bidding_status(
            (p.current_bid for p in self.players),
            self.cards_in_current_round,
        )

    # -------------------------------------------------------------------------
    # Taking tricks
    # -------------------------------------------------------------------------

    def set_tricks(self, player_id: int, tricks: int) -> None:
        """
        Record how many tricks a player took.

        Completion rules, checked in this order:
        1. Declared tricks add up to the cards dealt: everyone still
           undeclared took 0 and the round is scored.
        2. The player was the last one undeclared: they take whatever is left.
        3. Everyone has declared: the round is scored.
        """
        if not self._is_active():
            logger.debug("Ignoring tricks from %s: no active game", player_id)
            return
        player = self._player(player_id)
        if player is None:
            logger.debug("Ignoring tricks from unknown player %s", player_id)
            return
        if not self.is_bidding_complete:
            logger.debug("Ignoring tricks from %s: bidding still open", player.name)
            return
        if tricks < 0:
            logger.debug("Rejected negative trick count from %s", player.name)
            return

        cards = self.cards_in_current_round
        others = sum(
            p.current_tricks
            for p in self.players
            if p.id != player.id and p.current_tricks is not None
        )
        undeclared = [p for p in self.players if not p.has_tricks]
        was_last = len(undeclared) == 1 and undeclared[0].id == player.id

        player.current_tricks = tricks

        if others + tricks == cards:
            for p in self.players:
                if p.current_tricks is None:
                    p.current_tricks = 0
            self._finalize_round()
            return

        remainder = cards - others
        if was_last and remainder >= 0:
            if remainder != tricks:
                logger.debug(
                    "Last taker %s must take the remaining %d trick(s), not %d",
                    player.name,
                    remainder,
                    tricks,
                )
            player.current_tricks = remainder
            self._finalize_round()
            return

        if all(p.has_tricks for p in self.players):
            self._finalize_round()

    def get_next_taker(self) -> Optional[PlayerState]:
        """Follow the bidding order for trick counts, the dealer always last."""
        if not self._is_active() or not self.is_bidding_complete:
            return None
        dealer = self.dealer
        if dealer is None:
            return None

        if not dealer.has_tricks and all(
            p.has_tricks for p in self.players if p.id != dealer.id
        ):
            return dealer

        for player_id in self.bidding_order:
            player = self._player(player_id)
            if player is not None and not player.has_tricks:
                return player
        return None

    def legal_trick_counts(self, player_id: int) -> List[int]:
        player = self._player(player_id)
        if (
            player is None
            or not self._is_active()
            or not self.is_bidding_complete
            or player.has_tricks
        ):
            return []

        others = sum(
            p.current_tricks
            for p in self.players
            if p.id != player.id and p.current_tricks is not None
        )
        remaining = self.cards_in_current_round - others
        undeclared = sum(1 for p in self.players if not p.has_tricks)
        if remaining > 0 and undeclared == 1:
            return [remaining]
        if remaining < 0:
            return []
        return list(range(remaining + 1))

    def current_player(self) -> Optional[PlayerState]:
        """Whoever the table is waiting on: the next bidder, else the next taker."""
        return self.get_next_bidder() or self.get_next_taker()

    # -------------------------------------------------------------------------
    # Round completion and scores
    # -------------------------------------------------------------------------

    def _finalize_round(self) -> None:
        cards = self.cards_in_current_round
        dealer = self.dealer
        record = RoundRecord(
            round_number=self.current_round,
            cards_dealt=cards,
            dealer_id=dealer.id if dealer is not None else len(self.players) - 1,
            bids={p.id: p.current_bid for p in self.players},
            tricks={p.id: p.current_tricks for p in self.players},
        )
        record.scores = self._score_record(record)

        for p, score in zip(self.players, record.scores):
            p.score += score
            p.round_scores.append(score)
        self.round_history.append(record)

        logger.info(
            "Finished round %d/%d%s",
            self.current_round,
            TOTAL_ROUNDS,
            self._label(),
        )

        if self.current_round >= TOTAL_ROUNDS:
            self.is_game_complete = True
            logger.info("Finished game%s", self._label())
        else:
            self.current_round += 1
            self.is_round_complete = True
            self.start_round()

    def _score_record(self, record: RoundRecord) -> List[int]:
        scores: List[int] = []
        for p in self.players:
            bid = record.bids.get(p.id)
            tricks = record.tricks.get(p.id)
            scores.append(
                calculate_score(
                    bid if bid is not None else 0,
                    tricks if tricks is not None else 0,
                    record.cards_dealt,
                    self.khisthi_mode,
                )
            )
        return scores

    def _rebuild_scores(self) -> None:
        """Replay every recorded round from scratch."""
        for p in self.players:
            p.score = 0
            p.round_scores = []
        for record in self.round_history:
            for p, score in zip(self.players, record.scores):
                p.score += score
                p.round_scores.append(score)

    def get_round_scores(self, round_number: int) -> Optional[List[int]]:
        record = self._record(round_number)
        if record is None:
            return None
        return list(record.scores)

    def standings(self) -> List[PlayerState]:
        return sorted(self.players, key=lambda p: p.score, reverse=True)

    def winner(self) -> Optional[PlayerState]:
        """Highest total once the game is over; ties go to the later seat."""
        if not self.is_game_complete or not self.players:
            return None
        return max(reversed(self.players), key=lambda p: p.score)

    # -------------------------------------------------------------------------
    # Undo / correction
    # -------------------------------------------------------------------------

    def _record(self, round_number: int) -> Optional[RoundRecord]:
        if 1 <= round_number <= len(self.round_history):
            return self.round_history[round_number - 1]
        return None

    def enter_undo_mode(self) -> None:
        if not self.round_history:
            logger.debug("Ignoring enter_undo_mode: no completed rounds")
            return
        self.is_undo_mode = True
        self.selected_undo_round = len(self.round_history)

    def exit_undo_mode(self) -> None:
        self.is_undo_mode = False
        self.selected_undo_round = None

    def select_undo_round(self, round_number: int) -> None:
        if not self.is_undo_mode or self._record(round_number) is None:
            logger.debug("Ignoring select_undo_round(%d)", round_number)
            return
        self.selected_undo_round = round_number

    def get_round_bids_and_takes(self, round_number: int) -> List[RoundEntry]:
        record = self._record(round_number)
        if record is None:
            return []
        return [
            RoundEntry(
                player=p,
                bid=record.bids.get(p.id),
                tricks=record.tricks.get(p.id),
            )
            for p in self.players
        ]

    def _merge_updates(
        self,
        record: RoundRecord,
        updates: Iterable[RoundUpdate],
    ) -> Tuple[Dict[int, Optional[int]], Dict[int, Optional[int]]]:
        bids = dict(record.bids)
        tricks = dict(record.tricks)
        for player_id, new_bid, new_tricks in updates:
            if self._player(player_id) is None:
                logger.debug("Skipping correction for unknown player %s", player_id)
                continue
            if new_bid is not None:
                if new_bid < 0:
                    logger.debug("Skipping negative bid correction for %s", player_id)
                else:
                    bids[player_id] = new_bid
            if new_tricks is not None:
                if new_tricks < 0:
                    logger.debug("Skipping negative trick correction for %s", player_id)
                else:
                    tricks[player_id] = new_tricks
        return bids, tricks

    def check_round_edit(
        self,
        round_number: int,
        updates: Iterable[RoundUpdate],
    ) -> Optional[RoundEditError]:
        """Return why a correction would leave the round inconsistent, or None."""
        record = self._record(round_number)
        if record is None:
            return RoundEditError.ROUND_OUT_OF_RANGE

        _, tricks = self._merge_updates(record, list(updates))
        total = sum(t for t in tricks.values() if t is not None)
        cards = cards_in_round(self.game_mode, round_number)
        if total > cards:
            return RoundEditError.TRICKS_EXCEED_CARDS
        if total < cards:
            return RoundEditError.TRICKS_BELOW_CARDS
        return None

    def update_round_bids_and_takes(
        self,
        round_number: int,
        updates: Iterable[RoundUpdate],
    ) -> None:
        record = self._record(round_number)
        if record is None:
            logger.debug("Ignoring correction of unplayed round %d", round_number)
            return

        record.bids, record.tricks = self._merge_updates(record, updates)
        record.cards_dealt = cards_in_round(self.game_mode, round_number)
        record.scores = self._score_record(record)
        self._rebuild_scores()
        logger.info("Corrected round %d%s", round_number, self._label())

    def apply_undo_changes(self) -> None:
        """
        Rewind the game to the selected round so it can be played again.

        The selected round and every later one are dropped from the history
        and scores are rebuilt from what remains; the deal goes back to whoever
        dealt the selected round.
        """
        if not self.is_undo_mode or self.selected_undo_round is None:
            logger.debug("Ignoring apply_undo_changes: not in undo mode")
            return
        target = self.selected_undo_round
        record = self._record(target)
        if record is None:
            self.exit_undo_mode()
            return

        del self.round_history[target - 1:]
        self._rebuild_scores()

        self.current_round = target
        for p in self.players:
            p.current_bid = None
            p.current_tricks = None
            p.is_dealer = p.id == record.dealer_id
        self.bidding_order = []
        self.is_bidding_complete = False
        self.is_round_complete = False
        self.is_game_complete = False
        self.exit_undo_mode()
        logger.info("Rewound to round %d%s", target, self._label())
