"""
Evaluation Harness
==================

Runs agent submissions against the fixed seed bank and computes scores.

An episode is scored by whether the agent solved the board and, if so,
how many moves it used. Fewer moves is better.

Usage:
    python -m water_sort.evaluation.run_eval --agent contestants/team_name
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union
import numpy as np

from water_sort.logging_config import setup_logging
from water_sort.sort_core.env_gym import WaterSortEnv

logger = logging.getLogger(__name__)

# Level used for seeds listed without one
DEFAULT_LEVEL = 1

SeedEntry = Union[int, Tuple[int, int]]


@dataclass
class EvalResult:
    """Result for a single seed."""
    seed: int
    level: int
    solved: bool
    moves: int
    steps: int
    termination_reason: str
    elapsed_time: float
    actions: Optional[List[Tuple[int, int]]] = None


@dataclass
class EvalSummary:
    """
    Summary of evaluation across all seeds.

    Move statistics cover solved episodes only and are None when
    nothing was solved.
    """
    solve_rate: float
    solved_count: int
    mean_moves: Optional[float]
    std_moves: Optional[float]
    min_moves: Optional[int]
    max_moves: Optional[int]
    median_moves: Optional[float]
    total_time: float
    results: List[EvalResult]


def load_seed_bank(path: Optional[str] = None) -> List[Tuple[int, int]]:
    """
    Load the evaluation seed bank.

    The file holds a "seeds" list and an optional parallel "levels" list.

    Args:
        path: Path to seed_bank.json. Uses default if None.

    Returns:
        List of (seed, level) pairs.
    """
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    with open(path, "r") as f:
        data = json.load(f)

    seeds = data["seeds"]
    levels = data.get("levels") or [DEFAULT_LEVEL] * len(seeds)
    if len(levels) != len(seeds):
        raise ValueError(
            f"Seed bank has {len(seeds)} seeds but {len(levels)} levels"
        )
    return [(int(s), int(lv)) for s, lv in zip(seeds, levels)]


def load_agent(agent_path: str) -> Callable:
    """
    Load an agent from a path.

    Args:
        agent_path: Path to agent directory or agent.py file.

    Returns:
        Agent's act function.
    """
    agent_path = Path(agent_path)

    if agent_path.is_dir():
        agent_file = agent_path / "agent.py"
    else:
        agent_file = agent_path

    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    spec = importlib.util.spec_from_file_location("agent_module", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules["agent_module"] = module
    spec.loader.exec_module(module)

    # Look for WaterSortAgent class or act function
    if hasattr(module, "WaterSortAgent"):
        agent_class = getattr(module, "WaterSortAgent")
        agent_instance = agent_class()
        if hasattr(agent_instance, "act"):
            return agent_instance.act
        raise AttributeError("WaterSortAgent class must have an 'act' method")

    elif hasattr(module, "act"):
        return getattr(module, "act")

    else:
        raise AttributeError(
            "Agent module must have either 'WaterSortAgent' class with 'act' method "
            "or standalone 'act' function"
        )


def evaluate_single_seed(
    agent_fn: Callable,
    seed: int,
    level: int = DEFAULT_LEVEL,
    record_actions: bool = False,
    verbose: bool = False,
    config_path: Optional[str] = None
) -> EvalResult:
    """
    Evaluate agent on a single seed.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        seed: Random seed for level generation.
        level: Level to play.
        record_actions: If True, record all pours for replay.
        verbose: If True, print progress.
        config_path: Alternative game_config.yaml.

    Returns:
        EvalResult for this seed.
    """
    env = WaterSortEnv(config_path=config_path, level=level)

    obs, info = env.reset(seed=seed, options={"level": level})

    actions = [] if record_actions else None
    start_time = time.time()

    done = False
    while not done:
        action = agent_fn(obs)

        if record_actions:
            actions.append(env.decode_action(int(action)))

        obs, _, terminated, truncated, info = env.step(action)
        done = terminated or truncated

    elapsed = time.time() - start_time

    result = EvalResult(
        seed=seed,
        level=level,
        solved=bool(info["solved"]),
        moves=int(info["moves"]),
        steps=int(info["steps"]),
        termination_reason=info["terminated_reason"],
        elapsed_time=elapsed,
        actions=actions
    )

    env.close()

    logger.debug("Seed %d level %d: %s", seed, level, result.termination_reason)
    if verbose:
        print(f"  Seed {seed} (level {level}): solved={result.solved}, "
              f"moves={result.moves}, time={elapsed:.2f}s")

    return result


def _summarize(results: List[EvalResult], total_time: float) -> EvalSummary:
    solved_moves = [r.moves for r in results if r.solved]
    solve_rate = len(solved_moves) / len(results) if results else 0.0

    if not solved_moves:
        return EvalSummary(
            solve_rate=solve_rate,
            solved_count=0,
            mean_moves=None,
            std_moves=None,
            min_moves=None,
            max_moves=None,
            median_moves=None,
            total_time=total_time,
            results=results
        )

    return EvalSummary(
        solve_rate=solve_rate,
        solved_count=len(solved_moves),
        mean_moves=float(np.mean(solved_moves)),
        std_moves=float(np.std(solved_moves)),
        min_moves=int(min(solved_moves)),
        max_moves=int(max(solved_moves)),
        median_moves=float(np.median(solved_moves)),
        total_time=total_time,
        results=results
    )


def evaluate_agent(
    agent_fn: Callable,
    seeds: Optional[Sequence[SeedEntry]] = None,
    record_actions: bool = False,
    verbose: bool = True,
    config_path: Optional[str] = None
) -> EvalSummary:
    """
    Evaluate agent on all seeds in the seed bank.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        seeds: Seeds or (seed, level) pairs. Uses seed_bank.json if None.
        record_actions: If True, record actions for replay.
        verbose: If True, print progress.
        config_path: Alternative game_config.yaml.

    Returns:
        EvalSummary with aggregate statistics.
    """
    if seeds is None:
        seeds = load_seed_bank()

    entries = [
        (s, DEFAULT_LEVEL) if isinstance(s, int) else (int(s[0]), int(s[1]))
        for s in seeds
    ]

    if verbose:
        print(f"Evaluating on {len(entries)} seeds...")

    results: List[EvalResult] = []
    total_start = time.time()

    for i, (seed, level) in enumerate(entries):
        if verbose:
            print(f"[{i+1}/{len(entries)}] Running seed {seed}...")

        result = evaluate_single_seed(
            agent_fn,
            seed,
            level=level,
            record_actions=record_actions,
            verbose=verbose,
            config_path=config_path
        )
        results.append(result)

    total_time = time.time() - total_start
    summary = _summarize(results, total_time)

    logger.info(
        "Evaluation finished: %d/%d solved in %.2fs",
        summary.solved_count, len(results), total_time
    )

    if verbose:
        print()
        print("=" * 50)
        print("EVALUATION SUMMARY")
        print("=" * 50)
        print(f"Seeds evaluated: {len(entries)}")
        print(f"Solve rate:      {summary.solve_rate:.1%}")
        if summary.solved_count:
            print(f"Mean moves:      {summary.mean_moves:.2f}")
            print(f"Std deviation:   {summary.std_moves:.2f}")
            print(f"Min moves:       {summary.min_moves}")
            print(f"Max moves:       {summary.max_moves}")
            print(f"Median moves:    {summary.median_moves:.2f}")
        print(f"Total time:      {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(
    summary: EvalSummary,
    agent_name: str,
    output_path: str
) -> None:
    """Save evaluation results to JSON."""
    data = {
        "agent": agent_name,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "solve_rate": summary.solve_rate,
        "solved_count": summary.solved_count,
        "mean_moves": summary.mean_moves,
        "std_moves": summary.std_moves,
        "min_moves": summary.min_moves,
        "max_moves": summary.max_moves,
        "median_moves": summary.median_moves,
        "total_time": summary.total_time,
        "results": [
            {
                "seed": r.seed,
                "level": r.level,
                "solved": r.solved,
                "moves": r.moves,
                "steps": r.steps,
                "termination_reason": r.termination_reason,
                "elapsed_time": r.elapsed_time,
                **({"actions": [list(a) for a in r.actions]} if r.actions is not None else {})
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Evaluate a water sort agent")
    parser.add_argument(
        "--agent",
        type=str,
        required=True,
        help="Path to agent directory or agent.py file"
    )
    parser.add_argument(
        "--seeds",
        type=str,
        default=None,
        help="Path to seed bank JSON (uses default if not specified)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to game_config.yaml (uses default if not specified)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save results JSON"
    )
    parser.add_argument(
        "--record",
        action="store_true",
        help="Record actions for replay"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output verbosity"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level for the water_sort logger"
    )

    args = parser.parse_args()

    setup_logging(getattr(logging, args.log_level.upper(), logging.WARNING))

    print(f"Loading agent from {args.agent}...")
    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    seeds = None
    if args.seeds:
        seeds = load_seed_bank(args.seeds)

    summary = evaluate_agent(
        agent_fn,
        seeds=seeds,
        record_actions=args.record,
        verbose=not args.quiet,
        config_path=args.config
    )

    if args.output:
        agent_name = Path(args.agent).name
        save_results(summary, agent_name, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
