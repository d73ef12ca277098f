"""
Callback version of the Nelder-Mead method.

The objective is called as ``func(vertex, on_measured)`` and reports through
``on_measured(error, weight)``, possibly from another thread. Any truthy error
means failure. The simplex vertices are all requested at once; a counting join
resumes the plan when the last of them has reported. The plan is then
continued through the mirror and the expansion or contraction measurement.
"""
import logging
import threading
from typing import Callable, List, Sequence

from nmsimplex.optimization.engine import Plan, nelder_mead_plan
from nmsimplex.optimization.simplex import Vertex

logger = logging.getLogger(__name__)


class _CallbackRun:
    """One step: the plan, the objective and the caller's callback."""

    def __init__(self, plan: Plan, func: Callable, callback: Callable):
        self.plan = plan
        self.func = func
        self.callback = callback
        self._lock = threading.Lock()
        self._finished = False

    def start(self) -> None:
        self._resume(None)

    def _resume(self, weights) -> None:
        try:
            request = next(self.plan) if weights is None else self.plan.send(weights)
        except StopIteration as stop:
            self._finish(None, stop.value)
            return
        self._measure_batch(request)

    def _resume_or_finish(self, weights) -> None:
        # runs in whatever thread reported last, so plan errors must reach the caller
        try:
            self._resume(weights)
        except Exception as error:
            if self._finished:
                raise
            self._finish(error, None)

    def _measure_batch(self, batch) -> None:
        weights: List = [None] * len(batch)
        pending = [len(batch)]

        for index, vertex in enumerate(batch):
            def on_measured(error, weight=None, index=index):
                if error:
                    self._finish(error, None)
                    return
                with self._lock:
                    if self._finished:
                        return
                    weights[index] = weight
                    pending[0] -= 1
                    joined = pending[0] == 0
                if joined:
                    self._resume_or_finish(weights)

            with self._lock:
                if self._finished:
                    return
            try:
                self.func(vertex, on_measured)
            except Exception as error:
                # the caller's callback may already have run (and raised) inside func
                if self._finished:
                    raise
                self._finish(error, None)

    def _finish(self, error, result) -> None:
        with self._lock:
            if self._finished:
                return
            self._finished = True
        if error:
            self.plan.close()
            logger.debug(f"Step aborted: {error!r}")
        self.callback(error, result)


def step_callback(vertices: Sequence, func: Callable, callback: Callable, alpha: float = 1.,
                  gamma: float = 2., rho: float = 0.5, sigma: float = 0.5) -> None:
    """
    Callback Nelder-Mead method, one iteration.

    Parameters:
    vertices : sequence of N+1 vertices
        The current simplex.
    func : callable
        ``func(vertex, on_measured)`` evaluates a vertex and calls
        ``on_measured(error, weight)``. It should cache its results
        (see nmsimplex.model.memoize.memoize_callback).
    callback : callable
        Receives ``(error, None)`` or ``(None, next_vertices)``, exactly once.
    alpha, gamma, rho, sigma : float
        Reflection, expansion, contraction and shrink coefficients.

    Invalid vertices or coefficients raise InvalidSimplexError / ValueError
    right away, before anything is measured.
    """
    plan = nelder_mead_plan(vertices, alpha, gamma, rho, sigma)
    _CallbackRun(plan, func, callback).start()
