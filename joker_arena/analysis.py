# joker_arena/analysis.py
"""Reports over the per-round score CSV written by the simulator."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .paths import resolve_results_path
from .rules import NUM_PLAYERS, TOTAL_ROUNDS

logger = logging.getLogger(__name__)


def load_scores(path) -> pd.DataFrame:
    return pd.read_csv(path)


def filter_complete_games(df: pd.DataFrame, rounds: int = TOTAL_ROUNDS) -> pd.DataFrame:
    """Keep only games with a row for every player in every round."""
    counts = df["game_id"].value_counts()
    valid_games = counts[counts == rounds * NUM_PLAYERS].index
    return df[df["game_id"].isin(valid_games)].copy()


def add_bid_miss(df: pd.DataFrame) -> pd.DataFrame:
    # negative -> took fewer than bid; positive -> took more
    df = df.copy()
    df["miss"] = df["tricks"] - df["bid"]
    return df


def round_over_under(df: pd.DataFrame) -> pd.DataFrame:
    """
    Per round, total bids against the cards dealt.

    round_miss < 0: the table underbid; round_miss > 0: it overbid. The dealer
    rule means round_miss is never 0 in a legal game.
    """
    per_round = (
        df.groupby(["game_id", "round_number", "cards_dealt"])
        .agg(total_bid=("bid", "sum"))
        .reset_index()
    )
    per_round["round_miss"] = per_round["total_bid"] - per_round["cards_dealt"]
    return per_round


def round_score_stats(df: pd.DataFrame) -> pd.DataFrame:
    """Mean running score per player and round with a 95% confidence interval."""
    stats = (
        df.groupby(["player_name", "round_number"])["total_score"]
        .agg(["mean", "std", "count"])
        .reset_index()
    )
    stats["std"] = stats["std"].fillna(0.0)
    stats["se"] = stats["std"] / np.sqrt(stats["count"])
    stats["ci95"] = 1.96 * stats["se"]
    return stats


def player_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per player: games played, wins, mean final score, exact-bid and khisthi rates."""
    last_round = df.groupby("game_id")["round_number"].transform("max")
    finals = df[df["round_number"] == last_round]
    top = finals.groupby("game_id")["total_score"].transform("max")
    winners = finals[finals["total_score"] == top]

    summary = (
        df.assign(
            exact=df["bid"] == df["tricks"],
            khisthi=df["khisthi"].astype(bool),
        )
        .groupby("player_name")
        .agg(exact_rate=("exact", "mean"), khisthi_rate=("khisthi", "mean"))
    )
    summary["games"] = finals.groupby("player_name")["game_id"].nunique()
    summary["mean_final_score"] = finals.groupby("player_name")["total_score"].mean()
    summary["wins"] = winners.groupby("player_name")["game_id"].nunique()
    summary["wins"] = summary["wins"].fillna(0).astype(int)
    return summary.reset_index().sort_values("mean_final_score", ascending=False)


def _integer_bins(values: pd.Series) -> np.ndarray:
    return np.arange(np.floor(values.min()) - 0.5, np.ceil(values.max()) + 1.5, 1.0)


def plot_bid_miss(df: pd.DataFrame):
    """One histogram of tricks - bid per player, sharing bins."""
    df = add_bid_miss(df)
    players = sorted(df["player_name"].unique())
    bins = _integer_bins(df["miss"])

    fig, axes = plt.subplots(1, len(players), figsize=(5 * len(players), 4), sharey=True)
    axes = np.atleast_1d(axes)
    for ax, name in zip(axes, players):
        ax.hist(df[df["player_name"] == name]["miss"], bins=bins, rwidth=0.8)
        ax.axvline(0, linestyle="--")  # exact-bid line
        ax.set_title(name)
        ax.set_xlabel("miss (tricks - bid)")
        ax.grid(True, axis="y", linestyle=":", alpha=0.5)
    axes[0].set_ylabel("Count")
    fig.suptitle("Bid miss by player\n(negative = under, positive = over)")
    fig.tight_layout()
    return fig


def plot_round_over_under(per_round: pd.DataFrame):
    values = per_round["round_miss"]
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.hist(values, bins=_integer_bins(values), rwidth=0.8)
    ax.axvline(0, linestyle="--")
    ax.set_xlabel("Round over/under (sum(bid) - cards_dealt)")
    ax.set_ylabel("Number of rounds")
    ax.set_title("Round-level over/under bidding")
    ax.grid(True, axis="y", linestyle=":", alpha=0.5)
    fig.tight_layout()
    return fig


def plot_round_score_stats(stats: pd.DataFrame):
    fig, ax = plt.subplots(figsize=(10, 6))
    for name in sorted(stats["player_name"].unique()):
        sub = stats[stats["player_name"] == name].sort_values("round_number")
        ax.errorbar(
            sub["round_number"],
            sub["mean"],
            yerr=sub["ci95"],
            marker="o",
            capsize=3,
            label=name,
        )
    ax.set_xlabel("Round")
    ax.set_ylabel("Mean running score")
    ax.set_title("Per-round mean running score with 95% CI")
    ax.grid(True)
    ax.legend()
    fig.tight_layout()
    return fig


def write_report(df: pd.DataFrame, out_dir: Path) -> List[Path]:
    """Save every chart as PNG under `out_dir` and return the written paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    charts = [
        ("bid_miss.png", plot_bid_miss(df)),
        ("round_over_under.png", plot_round_over_under(round_over_under(df))),
        ("round_scores.png", plot_round_score_stats(round_score_stats(df))),
    ]
    written: List[Path] = []
    for filename, fig in charts:
        path = out_dir / filename
        fig.savefig(path, dpi=150)
        plt.close(fig)
        written.append(path)
    return written


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Chart a Joker score CSV.")
    parser.add_argument(
        "--csv",
        type=str,
        default="joker_scores.csv",
        help="Score CSV written by joker-arena (default: joker_scores.csv).",
    )
    parser.add_argument(
        "--out-dir",
        type=str,
        default="report",
        help="Directory for the PNG charts (default: report).",
    )
    parser.add_argument(
        "--all-games",
        action="store_true",
        help="Include games that did not finish all 24 rounds.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...). Default: INFO.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    csv_path = resolve_results_path(args.csv)
    df = load_scores(csv_path)
    if not args.all_games:
        df = filter_complete_games(df)
    if df.empty:
        raise SystemExit(f"No complete games in {csv_path}")

    logger.info("Loaded %d rows from %d game(s)", len(df), df["game_id"].nunique())
    logger.info("Player summary:\n%s", player_summary(df).to_string(index=False))

    for path in write_report(df, resolve_results_path(args.out_dir)):
        logger.info("Wrote %s", path)


if __name__ == "__main__":
    main()
