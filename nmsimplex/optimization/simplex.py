"""
单纯形的基本几何运算

Vertices are read-only float64 numpy vectors. Every operation builds new
vertices, nothing is modified in place.
"""
from typing import List, Sequence

import numpy as np

from nmsimplex.optimization.errors import InvalidSimplexError

Vertex = np.ndarray


def as_vertex(values) -> Vertex:
    """Copy values into a fresh read-only 1-D float64 vector."""
    vertex = np.array(values, dtype=float).reshape(-1)
    vertex.flags.writeable = False
    return vertex


def as_simplex(vertices: Sequence) -> List[Vertex]:
    """
    Convert and validate a simplex.

    A simplex of dimension N holds exactly N+1 vertices of length N with finite
    coordinates.

    Raises:
        InvalidSimplexError: 顶点数量或维度不合法
    """
    simplex = [as_vertex(v) for v in vertices]
    if len(simplex) < 2:
        raise InvalidSimplexError(f"A simplex needs at least 2 vertices, got {len(simplex)}")

    dim = simplex[0].shape[0]
    for i, vertex in enumerate(simplex):
        if vertex.shape[0] != dim:
            raise InvalidSimplexError(
                f"Vertex {i} has dimension {vertex.shape[0]}, expected {dim}")
        if not np.all(np.isfinite(vertex)):
            raise InvalidSimplexError(f"Vertex {i} has non-finite coordinates: {vertex}")
    if len(simplex) != dim + 1:
        raise InvalidSimplexError(
            f"A simplex in {dim} dimensions needs {dim + 1} vertices, got {len(simplex)}")
    return simplex


def initial_simplex(x_start, step: float = 0.1) -> List[Vertex]:
    """
    Build N+1 vertices around a starting point.

    The first vertex is x_start, vertex i+1 offsets coordinate i by step.
    """
    x_start = np.array(x_start, dtype=float).reshape(-1)
    vertices = [as_vertex(x_start)]
    for i in range(x_start.shape[0]):
        x = np.copy(x_start)
        x[i] = x[i] + step
        vertices.append(as_vertex(x))
    return vertices


def order_by_weight(vertices: Sequence[Vertex], weights: Sequence[float]):
    """Sort ascending by weight. Ties keep their input order."""
    order = sorted(range(len(vertices)), key=lambda i: weights[i])
    return [vertices[i] for i in order], [weights[i] for i in order]


def centroid(vertices: Sequence[Vertex]) -> Vertex:
    """Coordinate-wise mean."""
    return as_vertex(np.mean(np.stack(vertices), axis=0))


def reflect(center: Vertex, worst: Vertex, alpha: float) -> Vertex:
    return as_vertex(center + alpha * (center - worst))


def expand(center: Vertex, mirror: Vertex, gamma: float) -> Vertex:
    return as_vertex(center + gamma * (mirror - center))


def contract(center: Vertex, worst: Vertex, rho: float) -> Vertex:
    return as_vertex(center + rho * (worst - center))


def shrink(best: Vertex, others: Sequence[Vertex], sigma: float) -> List[Vertex]:
    """Pull every vertex towards best; best itself is kept unchanged as the first element."""
    return [best] + [as_vertex(best + sigma * (vertex - best)) for vertex in others]
