# tests/test_rules.py
import pytest

from joker_arena.modes import GameMode, KhisthiMode
from joker_arena.rules import (
    bidding_status,
    calculate_score,
    cards_in_round,
    format_score,
    is_khisthi,
)


def test_cards_in_round_standard_schedule():
    expected = {
        1: 1,
        5: 5,
        8: 8,
        9: 9,
        12: 9,
        13: 8,
        16: 5,
        20: 1,
        21: 9,
        24: 9,
    }
    for round_number, cards in expected.items():
        assert cards_in_round(GameMode.STANDARD, round_number) == cards

    schedule = [cards_in_round(GameMode.STANDARD, r) for r in range(1, 25)]
    assert schedule == (
        list(range(1, 9)) + [9] * 4 + list(range(8, 0, -1)) + [9] * 4
    )


def test_cards_in_round_nines_is_constant():
    assert all(cards_in_round(GameMode.NINES, r) == 9 for r in range(1, 25))


def test_cards_in_round_outside_game_is_zero():
    assert cards_in_round(GameMode.STANDARD, 0) == 0
    assert cards_in_round(GameMode.STANDARD, 25) == 0


def test_exact_bids():
    for mode in KhisthiMode:
        assert calculate_score(0, 0, 7, mode) == 50
        assert calculate_score(3, 3, 3, mode) == 300
        assert calculate_score(2, 2, 5, mode) == 150
    # Taking every card of a nine-card round
    assert calculate_score(9, 9, 9, KhisthiMode.SPECI) == 900
    assert calculate_score(1, 1, 9, KhisthiMode.SPECI) == 100


def test_khisthi_penalties():
    assert calculate_score(2, 0, 5, KhisthiMode.SPECI) == -500
    assert calculate_score(2, 0, 5, KhisthiMode.FIXED_200) == -200
    assert calculate_score(2, 0, 5, KhisthiMode.FIXED_500) == -500
    # Speci scales with the cards dealt
    assert calculate_score(3, 0, 9, KhisthiMode.SPECI) == -900
    assert calculate_score(1, 0, 1, KhisthiMode.SPECI) == -100


def test_misses_score_ten_per_trick_difference():
    for mode in KhisthiMode:
        assert calculate_score(3, 1, 5, mode) == 20
        assert calculate_score(1, 3, 5, mode) == 20
        # Bidding 0 and taking tricks is a miss, not khisthi
        assert calculate_score(0, 2, 5, mode) == 20


def test_calculate_score_is_pure():
    first = calculate_score(2, 1, 4, KhisthiMode.SPECI)
    second = calculate_score(2, 1, 4, KhisthiMode.SPECI)
    assert first == second == 10


def test_is_khisthi():
    assert is_khisthi(1, 0)
    assert not is_khisthi(0, 0)
    assert not is_khisthi(2, 1)


def test_bidding_status_under_over_and_balanced():
    under = bidding_status([1, 2, None, 0], 5)
    assert (under.total_bids, under.under, under.over) == (3, 2, 0)

    over = bidding_status([3, 3, 3, None], 5)
    assert (over.total_bids, over.under, over.over) == (9, 0, 4)

    # Overbid is capped at the cards dealt
    capped = bidding_status([5, 5, 5, 5], 5)
    assert capped.over == 5

    balanced = bidding_status([1, 1, 0, 0], 2)
    assert balanced.is_balanced
    assert (balanced.under, balanced.over) == (0, 0)


def test_format_score():
    assert format_score(0) == "0.0"
    assert format_score(150) == "1.5"
    assert format_score(-230) == "-2.3"
    assert format_score(1000) == "10.0"
    assert format_score(55) == "0.5"


def test_mode_parsing_and_labels():
    assert GameMode.parse("Nines") is GameMode.NINES
    assert GameMode.parse(" standard ") is GameMode.STANDARD
    assert KhisthiMode.parse("fixed500") is KhisthiMode.FIXED_500
    assert KhisthiMode.parse("FIXED_200") is KhisthiMode.FIXED_200

    assert GameMode.STANDARD.label == "Standard (8-9-8-9)"
    assert GameMode.NINES.label == "All Nines (4x4)"
    assert KhisthiMode.SPECI.label == "Speci"

    with pytest.raises(ValueError):
        KhisthiMode.parse("fixed300")
