"""
asyncio version of the Nelder-Mead method.

The objective may return a weight, any awaitable (coroutine, asyncio.Future,
Task) or a concurrent.futures.Future. The N+1 vertices of the simplex are
measured concurrently, the mirror and then the expansion or contraction one
after the other.
"""
import asyncio
import concurrent.futures
import inspect
import logging
from typing import Callable, List, Sequence

from nmsimplex.config.optimizer_config import validate_coefficients
from nmsimplex.optimization.engine import Plan, nelder_mead_plan
from nmsimplex.optimization.simplex import Vertex, as_simplex

logger = logging.getLogger(__name__)


async def measure(func: Callable, vertex: Vertex):
    """Weight of one vertex, whatever shape of future func hands back."""
    result = func(vertex)
    if isinstance(result, concurrent.futures.Future):
        result = asyncio.wrap_future(result)
    if inspect.isawaitable(result):
        result = await result
    return result


async def measure_batch(func: Callable, batch: Sequence[Vertex]) -> List[float]:
    """Measure every vertex of batch concurrently, fail on the first failure."""
    tasks = [asyncio.ensure_future(measure(func, vertex)) for vertex in batch]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


async def run_plan_async(plan: Plan, func: Callable) -> List[Vertex]:
    try:
        request = next(plan)
        while True:
            request = plan.send(await measure_batch(func, request))
    except StopIteration as stop:
        return stop.value
    finally:
        plan.close()


async def step_async(vertices: Sequence, func: Callable, alpha: float = 1., gamma: float = 2.,
                     rho: float = 0.5, sigma: float = 0.5) -> List[Vertex]:
    """
    Async Nelder-Mead method, one iteration.

    Parameters:
    vertices : sequence of N+1 vertices
        The current simplex.
    func : callable
        Async weight of a vertex, smaller is better. It should cache its
        results (see nmsimplex.model.memoize).
    alpha, gamma, rho, sigma : float
        Reflection, expansion, contraction and shrink coefficients.

    Returns:
    list of N+1 vertices
        The next iteration of the simplex.
    """
    plan = nelder_mead_plan(vertices, alpha, gamma, rho, sigma)
    return await run_plan_async(plan, func)


class AsyncSimplexSequence:
    """
    Endless async iterator of Nelder-Mead iterations (``async for``).

    Same contract as SimplexSequence: never exhausted, the consumer stops
    pulling, ``vertices`` is the only state.
    """

    def __init__(self, vertices: Sequence, func: Callable, alpha: float = 1., gamma: float = 2.,
                 rho: float = 0.5, sigma: float = 0.5):
        validate_coefficients(alpha, gamma, rho, sigma)
        self.vertices = as_simplex(vertices)
        self.func = func
        self.coefficients = (alpha, gamma, rho, sigma)

    def __aiter__(self):
        return self

    async def __anext__(self) -> List[Vertex]:
        self.vertices = await step_async(self.vertices, self.func, *self.coefficients)
        return self.vertices


def iterate_async(vertices: Sequence, func: Callable, alpha: float = 1., gamma: float = 2.,
                  rho: float = 0.5, sigma: float = 0.5) -> AsyncSimplexSequence:
    return AsyncSimplexSequence(vertices, func, alpha, gamma, rho, sigma)
