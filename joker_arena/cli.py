# joker_arena/cli.py
from __future__ import annotations

import argparse
import asyncio
import logging
import random
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

from .agents import RandomJokerAgent
from .arena import GameArena
from .game_log import build_round_score_rows, write_rows_csv
from .modes import GameMode, KhisthiMode
from .paths import ensure_results_dir, resolve_results_path
from .rules import NUM_PLAYERS, format_score
from .verbose_logger import CorrectionLogger, TranscriptLogger

DEFAULT_PLAYER_NAMES = ["North", "East", "South", "West"]


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Simulate Joker games between random agents and log per-round "
            "scores to a CSV file."
        )
    )

    parser.add_argument(
        "--players",
        nargs=NUM_PLAYERS,
        default=DEFAULT_PLAYER_NAMES,
        metavar="NAME",
        help="Names of the four players in seating order (default: %(default)s).",
    )
    parser.add_argument(
        "--games",
        type=int,
        default=1,
        help="Number of full games to play (default: 1).",
    )
    parser.add_argument(
        "--game-mode",
        type=GameMode.parse,
        default=GameMode.STANDARD,
        help="Card schedule: standard or nines (default: standard).",
    )
    parser.add_argument(
        "--khisthi-mode",
        type=KhisthiMode.parse,
        default=KhisthiMode.SPECI,
        help="Khisthi penalty: speci, fixed200 or fixed500 (default: speci).",
    )
    parser.add_argument(
        "--hit-rate",
        type=float,
        default=0.5,
        help="Chance a random agent makes its bid when still possible (default: 0.5).",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default="joker_scores.csv",
        help="Path to the output CSV file (default: joker_scores.csv).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Base random seed for the agents and seating order.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...). Default: INFO.",
    )
    parser.add_argument(
        "--verbose-log",
        type=str,
        default=None,
        help="Optional path for a turn-by-turn transcript file.",
    )
    parser.add_argument(
        "--corrections-log",
        type=str,
        default=None,
        help="Optional path to capture only agent choices replaced as illegal.",
    )
    parser.add_argument(
        "--parallel-games",
        type=int,
        default=1,
        help="Max number of games to play concurrently (default: 1).",
    )

    return parser.parse_args(argv)


def _play_single_game(
    game_index: int,
    *,
    args: argparse.Namespace,
    transcript: Optional[TranscriptLogger],
    corrections: Optional[CorrectionLogger],
) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """Run one game synchronously (meant for thread execution)."""
    game_id = f"game-{game_index}"

    names = list(args.players)
    random.Random(args.seed + game_index).shuffle(names)
    logging.info("Seating order for %s: %s", game_id, ", ".join(names))

    agents = [
        RandomJokerAgent(
            rng=random.Random(args.seed + game_index * 1000 + i),
            hit_rate=args.hit_rate,
        )
        for i in range(len(names))
    ]
    arena = GameArena(
        agents=agents,
        player_names=names,
        game_mode=args.game_mode,
        khisthi_mode=args.khisthi_mode,
        game_label=game_id,
        transcript=transcript,
        corrections=corrections,
    )
    engine = arena.play_game()

    winner = engine.winner()
    logging.info(
        "Finished %s; winner %s with %s",
        game_id,
        winner.name if winner else "-",
        format_score(winner.score) if winner else "-",
    )
    rows = build_round_score_rows(engine, game_id=game_id)
    return rows, winner.name if winner else None


async def _play_single_game_async(
    game_index: int,
    *,
    args: argparse.Namespace,
    transcript: Optional[TranscriptLogger],
    corrections: Optional[CorrectionLogger],
) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    return await asyncio.to_thread(
        _play_single_game,
        game_index,
        args=args,
        transcript=transcript,
        corrections=corrections,
    )


async def async_main(argv: List[str] | None = None) -> None:
    args = parse_args(argv)
    ensure_results_dir()

    csv_path = resolve_results_path(args.csv)
    verbose_path = (
        resolve_results_path(args.verbose_log) if args.verbose_log else None
    )
    corrections_path = (
        resolve_results_path(args.corrections_log) if args.corrections_log else None
    )

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.games < 1:
        raise SystemExit(f"--games must be at least 1; got {args.games}")

    logging.info("Players: %s", ", ".join(args.players))
    logging.info(
        "Mode: %s, khisthi: %s",
        args.game_mode.label,
        args.khisthi_mode.label,
    )
    logging.info("Games to play: %d", args.games)
    logging.info("Output CSV: %s", csv_path)
    if verbose_path:
        logging.info("Transcript: %s", verbose_path)
    if corrections_path:
        logging.info("Corrections log: %s", corrections_path)

    parallel_games = max(1, min(args.parallel_games, args.games))
    logging.info("Running up to %d game(s) concurrently", parallel_games)

    transcript = TranscriptLogger(verbose_path) if verbose_path else None
    corrections = CorrectionLogger(corrections_path) if corrections_path else None

    all_rows: List[Dict[str, Any]] = []
    wins: Counter[str] = Counter()
    failed = 0

    for batch_start in range(0, args.games, parallel_games):
        batch_end = min(batch_start + parallel_games, args.games)
        tasks = [
            asyncio.create_task(
                _play_single_game_async(
                    game_index,
                    args=args,
                    transcript=transcript,
                    corrections=corrections,
                )
            )
            for game_index in range(batch_start, batch_end)
        ]

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logging.error("Game task failed: %s", result)
                failed += 1
                continue
            rows, winner = result
            all_rows.extend(rows)
            if winner is not None:
                wins[winner] += 1

    count = write_rows_csv(all_rows, csv_path)
    logging.info(
        "Finished %d/%d games; wrote %d rows to %s",
        args.games - failed,
        args.games,
        count,
        csv_path,
    )
    for name, won in wins.most_common():
        logging.info("Wins for %s: %d", name, won)

    if transcript:
        transcript.flush()
    if corrections:
        corrections.flush()


def main(argv: List[str] | None = None) -> None:
    asyncio.run(async_main(argv))


if __name__ == "__main__":
    main()
