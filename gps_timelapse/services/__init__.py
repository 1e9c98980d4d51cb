"""Service layer orchestrating scheduler runs."""

from .master_service import (
    MasterEvaluation,
    MasterEvaluator,
    MasterEvaluatorConfig,
    rank_candidates,
    summarize_candidate,
)

__all__ = [
    "MasterEvaluation",
    "MasterEvaluator",
    "MasterEvaluatorConfig",
    "rank_candidates",
    "summarize_candidate",
]
