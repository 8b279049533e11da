"""Static project analysis: stack detection, dependency graphs and heuristic scoring."""

__version__ = "1.0.0"

from .orchestrator import Orchestrator, run_analysis  # noqa: E402

__all__ = ["Orchestrator", "__version__", "run_analysis"]
