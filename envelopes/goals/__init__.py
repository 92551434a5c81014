"""Mini README: Category goal tracking.

The ``tracker`` module turns a category's goal definition and its monthly
figures into a ``GoalProgress`` report. Goals are evaluated on demand and
never stored as progress.
"""

from .tracker import GoalProgress, GoalTracker, evaluate_goal

__all__ = ["GoalProgress", "GoalTracker", "evaluate_goal"]
