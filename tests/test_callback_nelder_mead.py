"""
测试回调版本的Nelder-Mead迭代
"""
import threading

import numpy as np
import pytest

from conftest import sphere, square
from nmsimplex.model.memoize import memoize_callback
from nmsimplex.optimization.callback_nelder_mead import step_callback
from nmsimplex.optimization.errors import InvalidSimplexError, ObjectiveFailure, as_exception
from nmsimplex.optimization.nelder_mead import step


def as_lists(vertices):
    return [v.tolist() for v in vertices]


def square_callback(vertex, callback):
    callback(None, square(vertex))


def sphere_callback(vertex, callback):
    callback(None, sphere(vertex))


class Outcome:
    def __init__(self):
        self.calls = []
        self.done = threading.Event()

    def __call__(self, error, vertices):
        self.calls.append((error, vertices))
        self.done.set()


def test_contraction_on_a_line(line_simplex):
    outcome = Outcome()
    step_callback(line_simplex, square_callback, outcome)
    assert len(outcome.calls) == 1
    error, vertices = outcome.calls[0]
    assert error is None
    assert as_lists(vertices) == [[0.0], [5.0]]


def test_mirror_accepted_on_lower_boundary():
    requested = []

    def lose(vertex, callback):
        requested.append(vertex.tolist())
        square_callback(vertex, callback)

    outcome = Outcome()
    step_callback([[1.0], [3.0]], lose, outcome)
    error, vertices = outcome.calls[0]
    assert error is None
    assert as_lists(vertices) == as_lists(step([[1.0], [3.0]], square)) == [[1.0], [-1.0]]
    assert requested == [[1.0], [3.0], [-1.0]]


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_matches_synchronous_step(seed):
    rng = np.random.default_rng(seed)
    expected = produced = rng.normal(size=(3, 2)).tolist()
    for _ in range(15):
        expected = step(expected, sphere)
        outcome = Outcome()
        step_callback(produced, memoize_callback(sphere_callback), outcome)
        error, produced = outcome.calls[0]
        assert error is None
        assert as_lists(produced) == as_lists(expected)


def test_callbacks_from_worker_threads(triangle):
    def lose(vertex, callback):
        threading.Timer(0.001, callback, args=(None, sphere(vertex))).start()

    outcome = Outcome()
    step_callback(triangle, lose, outcome)
    assert outcome.done.wait(timeout=5)
    assert len(outcome.calls) == 1
    assert as_lists(outcome.calls[0][1]) == as_lists(step(triangle, sphere))


def test_initial_vertices_are_all_requested_before_join(triangle):
    pending = []

    def lose(vertex, callback):
        pending.append((vertex, callback))

    outcome = Outcome()
    step_callback(triangle, lose, outcome)
    assert len(pending) == 3
    # complete in reverse order, the join only fires after the last one
    for vertex, callback in reversed(pending[:3]):
        callback(None, sphere(vertex))
    assert len(pending) == 4
    assert pending[3][0].tolist() == [1.0, -1.0]
    assert outcome.calls == []


def test_reported_failure_is_delivered_once(triangle):
    failure = OSError("cluster down")

    def lose(vertex, callback):
        callback(failure, None)

    outcome = Outcome()
    step_callback(triangle, lose, outcome)
    assert outcome.calls == [(failure, None)]


def test_failure_on_mirror(triangle):
    def lose(vertex, callback):
        if vertex.tolist() == [1.0, -1.0]:
            callback(ValueError("mirror"), None)
        else:
            callback(None, sphere(vertex))

    outcome = Outcome()
    step_callback(triangle, lose, outcome)
    assert len(outcome.calls) == 1
    assert isinstance(outcome.calls[0][0], ValueError)
    assert outcome.calls[0][1] is None


def test_synchronous_raise_is_delivered(triangle):
    def lose(vertex, callback):
        raise ZeroDivisionError("objective bug")

    outcome = Outcome()
    step_callback(triangle, lose, outcome)
    assert len(outcome.calls) == 1
    assert isinstance(outcome.calls[0][0], ZeroDivisionError)


def test_callers_own_exception_is_not_swallowed(line_simplex):
    def explode(error, vertices):
        raise RuntimeError("caller bug")

    with pytest.raises(RuntimeError, match="caller bug"):
        step_callback(line_simplex, square_callback, explode)


def test_invalid_simplex_raises_immediately():
    outcome = Outcome()
    with pytest.raises(InvalidSimplexError):
        step_callback([[0.0]], square_callback, outcome)
    assert outcome.calls == []


def test_non_exception_failure_can_be_raised(line_simplex):
    def lose(vertex, callback):
        callback("quota exceeded", None)

    outcome = Outcome()
    step_callback(line_simplex, lose, outcome)
    error = as_exception(outcome.calls[0][0])
    assert isinstance(error, ObjectiveFailure)
    assert error.reason == "quota exceeded"
    with pytest.raises(ObjectiveFailure):
        raise error

    failure = KeyError("k")
    assert as_exception(failure) is failure


def test_plan_error_in_worker_thread_reaches_caller(triangle):
    def lose(vertex, callback):
        # a weight that cannot be ordered against the others
        weight = "heavy" if vertex.tolist() == [0.0, 1.0] else sphere(vertex)
        threading.Timer(0.001, callback, args=(None, weight)).start()

    outcome = Outcome()
    step_callback(triangle, lose, outcome)
    assert outcome.done.wait(timeout=5)
    assert len(outcome.calls) == 1
    assert isinstance(outcome.calls[0][0], TypeError)
    assert outcome.calls[0][1] is None


@pytest.mark.parametrize("no_error", [None, False, 0, ""])
def test_falsy_error_means_success(line_simplex, no_error):
    def lose(vertex, callback):
        callback(no_error, square(vertex))

    outcome = Outcome()
    step_callback(line_simplex, lose, outcome)
    assert len(outcome.calls) == 1
    error, vertices = outcome.calls[0]
    assert error is None
    assert as_lists(vertices) == [[0.0], [5.0]]
