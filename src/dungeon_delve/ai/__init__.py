"""
Monster pursuit: greedy single-axis stepping with a two-stage wall detour.
"""
from .pathing import StepOutcome, select_target, step_monster

__all__ = ["StepOutcome", "select_target", "step_monster"]
