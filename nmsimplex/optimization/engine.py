"""
Nelder-Mead method: the decision tree of one iteration.

The iteration is written once, as a generator ("plan"). Whenever it needs
weights it yields a tuple of vertices and expects the list of their weights to
be sent back, in the same order. The schedulers in nelder_mead.py,
async_nelder_mead.py and callback_nelder_mead.py only differ in how they obtain
those weights, so every scheduler takes identical decisions for identical
weights.

Requests made by one plan, in order:
1. all N+1 vertices of the simplex (may be measured concurrently)
2. the mirror (reflection)
3. either the expansion or the contraction, never both

The plan finishes by returning the next simplex (N+1 vertices).
"""
import logging
from typing import Generator, List, Sequence, Tuple

from nmsimplex.config.optimizer_config import validate_coefficients
from nmsimplex.optimization.simplex import (
    Vertex, as_simplex, centroid, contract, expand, order_by_weight, reflect, shrink,
)

logger = logging.getLogger(__name__)

Plan = Generator[Tuple[Vertex, ...], List[float], List[Vertex]]


def nelder_mead_plan(vertices: Sequence, alpha: float = 1., gamma: float = 2.,
                     rho: float = 0.5, sigma: float = 0.5) -> Plan:
    """
    One Nelder-Mead iteration as a suspendable plan.

    Parameters:
    vertices : sequence of N+1 vertices
        The current simplex.当前单纯形
    alpha : float
        Reflection coefficient, > 0.反射系数
    gamma : float
        Expansion coefficient, > 1.扩展系数
    rho : float
        Contraction coefficient, in (0, 0.5].收缩系数
    sigma : float
        Shrink coefficient, in (0, 1).缩小系数

    Returns:
    list of N+1 vertices
        The next simplex, as StopIteration value.

    Invalid input raises before the first request, so nothing gets evaluated.
    """
    validate_coefficients(alpha, gamma, rho, sigma)
    simplex = as_simplex(vertices)
    return _plan(simplex, alpha, gamma, rho, sigma)


def _plan(simplex: List[Vertex], alpha, gamma, rho, sigma) -> Plan:
    # Order
    weights = yield tuple(simplex)
    simplex, weights = order_by_weight(simplex, weights)

    best, worser, worst = simplex[0], simplex[-2], simplex[-1]
    best_weight, worser_weight, worst_weight = weights[0], weights[-2], weights[-1]

    # Centroid of every vertex but the worst
    center = centroid(simplex[:-1])

    # Reflection
    mirror = reflect(center, worst, alpha)
    (mirror_weight,) = yield (mirror,)

    if best_weight <= mirror_weight <= worser_weight:
        logger.debug(f"reflect: {mirror_weight} within [{best_weight}, {worser_weight}]")
        return simplex[:-1] + [mirror]

    # Expansion
    if mirror_weight < best_weight:
        expansion = expand(center, mirror, gamma)
        (expansion_weight,) = yield (expansion,)
        if expansion_weight < mirror_weight:
            logger.debug(f"expand: {expansion_weight} < {mirror_weight}")
            return simplex[:-1] + [expansion]
        logger.debug(f"reflect after rejected expansion: {expansion_weight} >= {mirror_weight}")
        return simplex[:-1] + [mirror]

    # Contraction
    contraction = contract(center, worst, rho)
    (contraction_weight,) = yield (contraction,)
    if contraction_weight < worst_weight:
        logger.debug(f"contract: {contraction_weight} < {worst_weight}")
        return simplex[:-1] + [contraction]

    # Shrink
    logger.debug(f"shrink: contraction {contraction_weight} >= worst {worst_weight}")
    return shrink(best, simplex[1:], sigma)
