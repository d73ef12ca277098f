"""
演示用目标函数：猜字符串

A vertex encodes a string as character codes, one coordinate per character.
The weight of a vertex is the squared distance between its codes and the
codes of the target string.
"""
import asyncio
import logging
from typing import Callable, List, Optional

import numpy as np

from nmsimplex.optimization.simplex import Vertex, as_vertex

logger = logging.getLogger(__name__)

_ESCAPES = {
    '\b': '\\b',
    '\f': '\\f',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\v': '\\v',
}


def visible_str(text: str) -> str:
    """Escape control characters so the string stays on one log line."""
    return ''.join(_ESCAPES.get(c, c) for c in text)


def vertex_to_str(vertex) -> str:
    """Round half up, wrap into the 16-bit code range."""
    return ''.join(chr(int(np.floor(scalar + 0.5)) % 0x10000) for scalar in vertex)


def str_to_vertex(text: str) -> Vertex:
    return as_vertex([ord(c) for c in text])


def random_simplex(n_vertices: int, dim: int, scale: int = 0x0100,
                   rng: Optional[np.random.Generator] = None) -> List[Vertex]:
    """n_vertices random integer vertices with coordinates in [0, scale)."""
    rng = rng if rng is not None else np.random.default_rng()
    return [as_vertex(rng.integers(0, scale, size=dim)) for _ in range(n_vertices)]


def squared_distance(vertex, target) -> float:
    diff = np.asarray(vertex, dtype=float) - np.asarray(target, dtype=float)
    return float(np.sum(diff ** 2))


class StringTarget:
    """
    Objectives measuring how far a vertex is from a target string.

    Provides the three calling conventions: ``lose`` (direct return),
    ``lose_async`` (coroutine) and ``lose_callback`` (completion callback).
    ``evaluations`` counts the underlying computations.
    """

    def __init__(self, target: str):
        self.target_str = target
        self.target = str_to_vertex(target)
        self.evaluations = 0

    def lose(self, vertex) -> float:
        self.evaluations += 1
        loss = squared_distance(vertex, self.target)
        logger.debug(f"Vertex {visible_str(vertex_to_str(vertex))} loses {loss}")
        return loss

    async def lose_async(self, vertex) -> float:
        await asyncio.sleep(0)
        return self.lose(vertex)

    def lose_callback(self, vertex, callback: Callable) -> None:
        callback(None, self.lose(vertex))

    def matches(self, vertex) -> bool:
        return vertex_to_str(vertex) == self.target_str

    def find_match(self, vertices) -> Optional[Vertex]:
        for vertex in vertices:
            if self.matches(vertex):
                return vertex
        return None
