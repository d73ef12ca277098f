"""
Nelder-Mead simplex method with four schedulers sharing one decision tree.
"""

from .async_nelder_mead import AsyncSimplexSequence, iterate_async, step_async
from .callback_nelder_mead import step_callback
from .engine import nelder_mead_plan
from .errors import InvalidSimplexError, ObjectiveFailure
from .nelder_mead import SimplexSequence, iterate, step
from .simplex import as_simplex, as_vertex, initial_simplex

__all__ = [
    "step", "step_async", "step_callback",
    "iterate", "iterate_async", "SimplexSequence", "AsyncSimplexSequence",
    "nelder_mead_plan", "as_simplex", "as_vertex", "initial_simplex",
    "InvalidSimplexError", "ObjectiveFailure",
]
