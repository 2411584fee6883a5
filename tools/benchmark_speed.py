"""
Performance Benchmark
=====================

Measures simulation tick throughput for performance tuning.

Usage:
    python -m tools.benchmark_speed [--steps S] [--classic]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Optional
import numpy as np

from skate_party.catch_core.config_loader import GameConfig, load_classic_config, load_config
from skate_party.catch_core.env_gym import SkatePartyEnv
from skate_party.catch_core.game import CoreGame


def benchmark_core_game(
    num_steps: int = 1000,
    seed: int = 42,
    config: Optional[GameConfig] = None
) -> dict:
    """
    Benchmark raw CoreGame ticks without Gym overhead.

    Args:
        num_steps: Number of ticks.
        seed: Random seed.
        config: Rule set to simulate. Uses default if None.

    Returns:
        Dict with timing results.
    """
    if config is None:
        config = load_config()
    game = CoreGame(config=config, seed=seed)
    rng = np.random.default_rng(seed)
    min_x, max_x, min_y, max_y = game.avatar_bounds()

    game.start()
    start = time.perf_counter()

    for _ in range(num_steps):
        game.set_target(rng.uniform(min_x, max_x), rng.uniform(min_y, max_y))
        result = game.tick()
        if result.game_over:
            game.start()

    elapsed = time.perf_counter() - start

    return {
        "mode": "core_game",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_env(
    num_steps: int = 1000,
    seed: int = 42,
    config: Optional[GameConfig] = None
) -> dict:
    """
    Benchmark SkatePartyEnv steps including observation packing.

    Args:
        num_steps: Number of steps.
        seed: Random seed.
        config: Rule set to simulate. Uses default if None.

    Returns:
        Dict with timing results.
    """
    env = SkatePartyEnv(config=config)
    rng = np.random.default_rng(seed)

    obs, _ = env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        action = rng.uniform(-1, 1, size=2).astype(np.float32)
        obs, _, terminated, truncated, _ = env.step(action)
        if terminated or truncated:
            obs, _ = env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "env",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def run_all_benchmarks(steps: int = 5000, config: Optional[GameConfig] = None) -> list:
    """Run both benchmarks and print a summary table."""
    results = []

    print("=" * 60)
    print("SKATE PARTY SIMULATION BENCHMARK")
    print("=" * 60)
    print()

    for name, fn in (("CoreGame (raw)", benchmark_core_game), ("SkatePartyEnv", benchmark_env)):
        print(f"Benchmarking {name}...")
        result = fn(num_steps=steps, config=config)
        results.append(result)
        print(f"  Ticks/sec: {result['steps_per_second']:.1f}")
        print(f"  ms/tick:   {result['ms_per_step']:.3f}")
        print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Ticks/s':>12} {'ms/tick':>10}")
    print("-" * 44)

    for r in results:
        print(f"{r['mode']:<20} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.3f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Skate Party simulation speed")
    parser.add_argument("--steps", type=int, default=5000, help="Ticks per benchmark")
    parser.add_argument("--classic", action="store_true", help="Benchmark the classic rule set")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer ticks)")

    args = parser.parse_args()

    steps = 500 if args.quick else args.steps
    config = load_classic_config() if args.classic else load_config()

    run_all_benchmarks(steps=steps, config=config)

    return 0


if __name__ == "__main__":
    sys.exit(main())
