"""
Baseline Hint Agent Package

A greedy heuristic agent that scores every legal pour from the
observation and avoids revisiting board states. Serves as a benchmark
and example.
"""

from .agent import WaterSortAgent, create_agent

__all__ = ["WaterSortAgent", "create_agent"]
