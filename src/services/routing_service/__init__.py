"""
Routing service — demo queries and route-result rendering.
"""

from .report import SAMPLE_QUERIES, render_route_result, run_examples

__all__ = [
    "SAMPLE_QUERIES",
    "render_route_result",
    "run_examples",
]
