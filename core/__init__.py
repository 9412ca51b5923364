"""Translation orchestration core.

This package contains the language heuristic, the result cache, per-actor throttling,
the backend suspension registry and the fallback chain that ties them together.
"""

from core.version import VERSION

__all__: list[str] = ["VERSION"]
