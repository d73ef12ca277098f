import logging
from typing import Callable, List, Sequence

from nmsimplex.config.optimizer_config import validate_coefficients
from nmsimplex.optimization.engine import Plan, nelder_mead_plan
from nmsimplex.optimization.simplex import Vertex, as_simplex

logger = logging.getLogger(__name__)


def run_plan(plan: Plan, measure_batch: Callable[[tuple], List[float]]) -> List[Vertex]:
    """
    Drive a plan to completion with a blocking batch evaluator.

    A failure of measure_batch closes the plan and propagates, so no partial
    simplex ever escapes.
    """
    try:
        request = next(plan)
        while True:
            request = plan.send(measure_batch(request))
    except StopIteration as stop:
        return stop.value
    finally:
        plan.close()


def step(vertices: Sequence, func: Callable, alpha: float = 1., gamma: float = 2.,
         rho: float = 0.5, sigma: float = 0.5) -> List[Vertex]:
    """
    Nelder-Mead method, one iteration.

    Parameters:
    vertices : sequence of N+1 vertices
        The current simplex.
    func : callable
        Weight of a vertex, smaller is better. It should cache its results
        (see nmsimplex.model.memoize), every vertex of the simplex is measured
        again on each call.目标函数，接收一个向量并返回一个标量
    alpha, gamma, rho, sigma : float
        Reflection, expansion, contraction and shrink coefficients.

    Returns:
    list of N+1 vertices
        The next iteration of the simplex.
    """
    plan = nelder_mead_plan(vertices, alpha, gamma, rho, sigma)
    return run_plan(plan, lambda batch: [func(vertex) for vertex in batch])


class SimplexSequence:
    """
    Lazy, endless sequence of Nelder-Mead iterations.

    Each ``next()`` runs one synchronous step from the current simplex and
    returns the new one. The sequence never stops on its own: the consumer
    decides when to stop pulling. The only state is ``vertices``, which may be
    reassigned to re-drive the sequence from another simplex.
    """

    def __init__(self, vertices: Sequence, func: Callable, alpha: float = 1., gamma: float = 2.,
                 rho: float = 0.5, sigma: float = 0.5):
        validate_coefficients(alpha, gamma, rho, sigma)
        self.vertices = as_simplex(vertices)
        self.func = func
        self.coefficients = (alpha, gamma, rho, sigma)

    def __iter__(self):
        return self

    def __next__(self) -> List[Vertex]:
        self.vertices = step(self.vertices, self.func, *self.coefficients)
        return self.vertices


def iterate(vertices: Sequence, func: Callable, alpha: float = 1., gamma: float = 2.,
            rho: float = 0.5, sigma: float = 0.5) -> SimplexSequence:
    """Endless iterator over successive simplices, see SimplexSequence."""
    return SimplexSequence(vertices, func, alpha, gamma, rho, sigma)
