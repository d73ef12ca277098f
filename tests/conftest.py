import sys
from pathlib import Path

# Ensure package import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest


def square(vertex):
    return float(vertex[0]) ** 2


def sphere(vertex):
    return float(sum(float(x) ** 2 for x in vertex))


@pytest.fixture
def line_simplex():
    """1-D simplex [[0], [10]]."""
    return [[0.0], [10.0]]


@pytest.fixture
def triangle():
    return [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]
