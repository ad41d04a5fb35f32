"""
Dependencies Engine - which blocks recompile when an SCSS partial changes.
"""

from blockforge.engines.dependencies.partial_tracker import PartialUsageTracker

__all__ = [
    "PartialUsageTracker",
]
