# tests/test_arena.py
import random
from typing import Any, Dict

import pytest

from joker_arena.agents.random_agent import RandomJokerAgent
from joker_arena.arena import GameArena
from joker_arena.modes import GameMode, KhisthiMode
from joker_arena.rules import calculate_score
from joker_arena.verbose_logger import CorrectionLogger, TranscriptLogger


def _make_arena(
    game_mode: GameMode = GameMode.STANDARD,
    khisthi_mode: KhisthiMode = KhisthiMode.SPECI,
    **kwargs,
) -> GameArena:
    agents = [RandomJokerAgent(rng=random.Random(100 + i)) for i in range(4)]
    names = [f"P{i}" for i in range(4)]
    return GameArena(
        agents=agents,
        player_names=names,
        game_mode=game_mode,
        khisthi_mode=khisthi_mode,
        **kwargs,
    )


class StubbornAgent:
    """Always asks for an impossible number."""

    def choose_bid(self, observation: Dict[str, Any]) -> int:
        return 99

    def choose_tricks(self, observation: Dict[str, Any]) -> int:
        return 99


def test_full_game_basic_invariants():
    engine = _make_arena(game_label="g1").play_game()

    assert engine.is_game_complete
    assert len(engine.round_history) == 24

    for record in engine.round_history:
        bids = [record.bids[pid] for pid in range(4)]
        tricks = [record.tricks[pid] for pid in range(4)]

        assert all(0 <= b <= record.cards_dealt for b in bids)
        # Every trick is taken by someone
        assert sum(tricks) == record.cards_dealt
        # The dealer never lets the bids add up
        assert sum(bids) != record.cards_dealt
        assert record.scores == [
            calculate_score(b, t, record.cards_dealt, KhisthiMode.SPECI)
            for b, t in zip(bids, tricks)
        ]

    totals = {p.id: 0 for p in engine.players}
    for record in engine.round_history:
        for pid, score in enumerate(record.scores):
            totals[pid] += score
    for p in engine.players:
        assert p.score == totals[p.id] == sum(p.round_scores)


def test_nines_game_deals_nine_cards_every_round():
    engine = _make_arena(game_mode=GameMode.NINES).play_game()
    assert {r.cards_dealt for r in engine.round_history} == {9}


def test_arena_requires_four_agents():
    agents = [RandomJokerAgent(rng=random.Random(i)) for i in range(3)]
    with pytest.raises(ValueError):
        GameArena(agents=agents)

    agents.append(RandomJokerAgent(rng=random.Random(3)))
    with pytest.raises(ValueError):
        GameArena(agents=agents, player_names=["A", "B"])


def test_default_player_names():
    arena = GameArena(agents=[RandomJokerAgent(rng=random.Random(i)) for i in range(4)])
    assert [p.name for p in arena.engine.players] == [
        "Player 0",
        "Player 1",
        "Player 2",
        "Player 3",
    ]


def test_illegal_choices_are_corrected_and_logged(tmp_path):
    corrections = CorrectionLogger(tmp_path / "corrections.log")
    arena = GameArena(
        agents=[StubbornAgent() for _ in range(4)],
        game_label="stubborn",
        corrections=corrections,
    )
    engine = arena.play_game()

    assert engine.is_game_complete
    assert corrections.count > 0

    corrections.flush()
    text = (tmp_path / "corrections.log").read_text(encoding="utf-8")
    assert "Chosen: 99" in text
    assert "Game: stubborn" in text


def test_transcript_records_every_round(tmp_path):
    transcript = TranscriptLogger(tmp_path / "transcript.log")
    _make_arena(game_label="t1", transcript=transcript).play_game()
    transcript.flush()

    text = (tmp_path / "transcript.log").read_text(encoding="utf-8")
    assert "Round: 1 | Phase: bidding" in text
    assert "=== Game: t1 | Round: 24 | Phase: scored ===" in text
    assert text.count("Phase: scored") == 24
