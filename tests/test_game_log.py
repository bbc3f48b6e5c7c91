# tests/test_game_log.py
import csv
import random

from joker_arena.agents.random_agent import RandomJokerAgent
from joker_arena.arena import GameArena
from joker_arena.game_log import (
    FIELDNAMES,
    build_round_score_rows,
    write_round_scores_csv,
)
from joker_arena.state import RoundRecord


def _make_sample_game():
    agents = [RandomJokerAgent(rng=random.Random(200 + i)) for i in range(4)]
    names = [f"P{i}" for i in range(4)]
    return GameArena(agents=agents, player_names=names, game_label="sample").play_game()


def test_build_round_score_rows_basic():
    engine = _make_sample_game()
    rows = build_round_score_rows(engine, game_id="test-game")

    assert len(rows) == 24 * 4

    sample = rows[0]
    for field in FIELDNAMES:
        assert field in sample
    assert sample["game_id"] == "test-game"
    assert sample["round_number"] == 1
    assert sample["cards_dealt"] == 1
    assert sample["dealer_id"] == 3

    # Last row per player carries the final score
    totals_from_rows = {}
    for row in rows:
        totals_from_rows[row["player_id"]] = row["total_score"]
    for p in engine.players:
        assert totals_from_rows[p.id] == p.score


def test_rows_default_to_engine_label_and_flag_khisthi():
    engine = _make_sample_game()
    rows = build_round_score_rows(engine)

    assert {row["game_id"] for row in rows} == {"sample"}
    for row in rows:
        assert row["khisthi"] == (row["bid"] > 0 and row["tricks"] == 0)


def test_write_round_scores_csv(tmp_path):
    engine = _make_sample_game()
    path = tmp_path / "scores.csv"

    write_round_scores_csv(engine, path, game_id="csv-game")

    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        assert reader.fieldnames == FIELDNAMES
        rows = list(reader)
    assert len(rows) == 24 * 4
    assert rows[-1]["round_number"] == "24"


def test_build_round_score_rows_skips_incomplete_round():
    engine = _make_sample_game()
    completed_rows = build_round_score_rows(engine, game_id="complete")

    engine.round_history.append(
        RoundRecord(round_number=25, cards_dealt=0, dealer_id=0)
    )

    rows_with_incomplete = build_round_score_rows(engine, game_id="mixed")
    assert len(rows_with_incomplete) == len(completed_rows)
