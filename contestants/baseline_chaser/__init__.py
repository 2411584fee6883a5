"""
Baseline Chaser Agent Package

A greedy agent that skates under whichever scoop lands first.
Serves as a benchmark and example.
"""

from .agent import SkatePartyAgent, create_agent

__all__ = ["SkatePartyAgent", "create_agent"]
