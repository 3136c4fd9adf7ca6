"""Local code-change review: static analysis plus an external AI reviewer."""

from .errors import ReviewError
from .orchestrator import EMPTY_RESULT, ReviewOrchestrator, ReviewState

__version__ = "0.1.0"

__all__ = ["EMPTY_RESULT", "ReviewError", "ReviewOrchestrator", "ReviewState", "__version__"]
