"""CLI helpers exposed for other modules."""

from .ui import SelectionCancelled, StepTracker, select_with_arrows

__all__ = ["SelectionCancelled", "StepTracker", "select_with_arrows"]
