"""
Recommendations: personalized ranking from signals, and "more like this".

Public API: recommend, related, get_reasons.
- core: main orchestration (recommend).
- Submodules: profile, scoring, reasons, related.
"""

from .core import recommend
from .reasons import get_reasons
from .related import related

__all__ = [
    "recommend",
    "related",
    "get_reasons",
]
