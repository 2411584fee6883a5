"""
Evaluation Harness
==================

Plays an agent through the fixed seed bank and reports score, survival and
catch statistics.

Usage:
    python -m skate_party.evaluation.run_eval --agent contestants/baseline_chaser
    python -m skate_party.evaluation.run_eval --agent my_agent.py --replay-dir replays/
"""

from __future__ import annotations

import argparse
import dataclasses
import importlib.util
import json
import sys
import time
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional
import numpy as np

from skate_party.catch_core.config_loader import GameConfig, load_config
from skate_party.catch_core.env_gym import SkatePartyEnv
from skate_party.catch_core.replay_recorder import ReplayRecorder

SEED_BANK_PATH = Path(__file__).with_name("seed_bank.json")


@dataclass
class EvalResult:
    """Outcome of one seeded session."""
    seed: int
    final_score: int
    best_combo: int
    catches: int
    misses: int
    survived_seconds: float
    end_reason: str           # "game_over" or "time_cap"
    elapsed_time: float       # Wall-clock seconds
    actions: Optional[List[List[float]]] = None

    @property
    def catch_rate(self) -> float:
        total = self.catches + self.misses
        return self.catches / total if total else 0.0


@dataclass
class EvalSummary:
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    mean_survival: float
    mean_catch_rate: float
    end_reasons: Dict[str, int]
    total_time: float
    results: List[EvalResult]


def load_seed_bank(path: Optional[str] = None) -> List[int]:
    with open(path or SEED_BANK_PATH, "r") as f:
        return [int(s) for s in json.load(f)["seeds"]]


def load_agent(agent_path: str) -> Callable:
    """
    Import an agent from a contestant directory or a single agent.py.

    The module provides either a SkatePartyAgent class with act(obs) or a
    module-level act(obs) function.
    """
    agent_file = Path(agent_path)
    if agent_file.is_dir():
        agent_file = agent_file / "agent.py"
    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    spec = importlib.util.spec_from_file_location("agent_module", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")
    module = importlib.util.module_from_spec(spec)
    sys.modules["agent_module"] = module
    spec.loader.exec_module(module)

    if hasattr(module, "SkatePartyAgent"):
        act = getattr(module.SkatePartyAgent(), "act", None)
        if act is None:
            raise AttributeError("SkatePartyAgent class must have an 'act' method")
        return act
    if hasattr(module, "act"):
        return module.act
    raise AttributeError(
        f"{agent_file} defines neither a SkatePartyAgent class nor an act function"
    )


def evaluate_single_seed(
    agent_fn: Callable,
    seed: int,
    config: Optional[GameConfig] = None,
    record_actions: bool = False,
    replay_dir: Optional[str] = None,
    verbose: bool = False
) -> EvalResult:
    """
    Play one session on a seed until game over or the session time cap.

    Args:
        agent_fn: Maps an observation dict to an action.
        seed: Session seed.
        config: Rule set. Uses default if None.
        record_actions: Keep the action list on the result.
        replay_dir: If given, also save a replay file there.
        verbose: Print a one-line result.
    """
    recorder = ReplayRecorder(SkatePartyEnv(config=config), agent_name=f"eval_s{seed}")
    obs, info = recorder.reset(seed=seed)

    start = time.perf_counter()
    terminated = truncated = False
    while not (terminated or truncated):
        obs, _, terminated, truncated, info = recorder.step(agent_fn(obs))
    wall = time.perf_counter() - start

    replay = recorder.get_replay_data()
    if replay_dir:
        recorder.save(Path(replay_dir) / f"seed_{seed}.json")
    recorder.close()

    result = EvalResult(
        seed=seed,
        final_score=int(info["score"]),
        best_combo=int(info["best_combo"]),
        catches=int(info["catches"]),
        misses=int(info["misses"]),
        survived_seconds=float(info["elapsed"]),
        end_reason=replay["end_reason"],
        elapsed_time=wall,
        actions=replay["actions"] if record_actions else None
    )

    if verbose:
        print(f"  Seed {seed}: score={result.final_score} combo={result.best_combo} "
              f"caught={result.catches}/{result.catches + result.misses} "
              f"survived={result.survived_seconds:.1f}s ({result.end_reason})")
    return result


def summarize(results: List[EvalResult], total_time: float) -> EvalSummary:
    scores = np.array([r.final_score for r in results])
    return EvalSummary(
        mean_score=float(scores.mean()),
        std_score=float(scores.std()),
        min_score=int(scores.min()),
        max_score=int(scores.max()),
        median_score=float(np.median(scores)),
        mean_survival=float(np.mean([r.survived_seconds for r in results])),
        mean_catch_rate=float(np.mean([r.catch_rate for r in results])),
        end_reasons=dict(Counter(r.end_reason for r in results)),
        total_time=total_time,
        results=results
    )


def print_summary(summary: EvalSummary) -> None:
    print()
    print("=" * 50)
    print(f"{len(summary.results)} seeds in {summary.total_time:.1f}s")
    print(f"Score:      {summary.mean_score:.1f} +/- {summary.std_score:.1f} "
          f"(median {summary.median_score:.1f}, range {summary.min_score}-{summary.max_score})")
    print(f"Survival:   {summary.mean_survival:.1f}s mean")
    print(f"Catch rate: {summary.mean_catch_rate:.1%}")
    print("Endings:    " + ", ".join(f"{k}={v}" for k, v in sorted(summary.end_reasons.items())))
    print("=" * 50)


def evaluate_agent(
    agent_fn: Callable,
    seeds: Optional[List[int]] = None,
    config: Optional[GameConfig] = None,
    record_actions: bool = False,
    replay_dir: Optional[str] = None,
    verbose: bool = True
) -> EvalSummary:
    """Evaluate agent_fn on every seed (the seed bank by default)."""
    if seeds is None:
        seeds = load_seed_bank()
    if not seeds:
        raise ValueError("Seed list is empty")

    start = time.perf_counter()
    results = []
    for i, seed in enumerate(seeds):
        if verbose:
            print(f"[{i + 1}/{len(seeds)}] seed {seed}")
        results.append(evaluate_single_seed(
            agent_fn, seed, config=config, record_actions=record_actions,
            replay_dir=replay_dir, verbose=verbose
        ))

    summary = summarize(results, time.perf_counter() - start)
    if verbose:
        print_summary(summary)
    return summary


def save_results(summary: EvalSummary, agent_name: str, output_path: str) -> None:
    """Write the summary and per-seed results (without actions) as JSON."""
    data = dataclasses.asdict(summary)
    for result in data["results"]:
        result.pop("actions")
    data["agent"] = agent_name
    data["timestamp"] = time.strftime("%Y-%m-%d %H:%M:%S")

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)
    print(f"Results saved to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Evaluate a Skate Party agent on the seed bank")
    parser.add_argument("--agent", required=True, help="Agent directory or agent.py file")
    parser.add_argument("--config", default=None, help="Rules YAML (default: game_config.yaml)")
    parser.add_argument("--seeds", default=None, help="Seed bank JSON (default: bundled bank)")
    parser.add_argument("--output", default=None, help="Write results JSON here")
    parser.add_argument("--replay-dir", default=None, help="Save one replay per seed here")
    parser.add_argument("--quiet", action="store_true", help="Only print the summary")
    args = parser.parse_args()

    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    summary = evaluate_agent(
        agent_fn,
        seeds=load_seed_bank(args.seeds) if args.seeds else None,
        config=load_config(args.config),
        replay_dir=args.replay_dir,
        verbose=not args.quiet
    )
    if args.quiet:
        print_summary(summary)

    if args.output:
        save_results(summary, Path(args.agent).stem, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
