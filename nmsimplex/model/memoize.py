"""
目标函数结果缓存 - 避免对同一顶点重复求值

Three wrappers share one cache layout (successes and captured failures, keyed by
the canonical serialization of the call arguments):

- MemoizedObjective: objective returns the weight or raises; an awaitable it hands
  back is awaited before anything is cached
- AsyncMemoizedObjective: objective is a coroutine function; the awaited outcome is cached
- CallbackMemoizedObjective: objective takes a trailing callback(error, weight)

A cached failure is replayed without calling the objective again. reset() clears
both successes and failures for every variant. Entries are never evicted
automatically.
"""

import functools
import inspect
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from nmsimplex.model.cache_key import args_cache_key

logger = logging.getLogger(__name__)

_MISSING = object()


def _noop_callback(error, result):
    pass


class _MemoCache:
    """Shared storage and statistics of the memoized wrappers."""

    def __init__(self, fn: Callable, hash_args: Callable = args_cache_key):
        functools.update_wrapper(self, fn)
        self._fn = fn
        self._hash_args = hash_args
        self._returns: Dict[str, Any] = {}
        self._throws: Dict[str, Tuple[Any, Any]] = {}
        # concurrent misses on the same key may both evaluate, last write wins
        self._lock = threading.Lock()
        self.hit_count = 0
        self.miss_count = 0
        self.failure_replay_count = 0

    def _lookup(self, key: str):
        """Return ('failure', (error, tb)), ('success', value) or ('miss', None)."""
        with self._lock:
            failure = self._throws.get(key, _MISSING)
            if failure is not _MISSING:
                self.failure_replay_count += 1
                logger.debug(f"Replaying cached failure for {key}")
                return 'failure', failure
            result = self._returns.get(key, _MISSING)
            if result is not _MISSING:
                self.hit_count += 1
                return 'success', result
            self.miss_count += 1
            return 'miss', None

    def _store_result(self, key: str, result: Any) -> None:
        with self._lock:
            self._returns[key] = result

    def _store_failure(self, key: str, error: Any) -> None:
        with self._lock:
            self._throws[key] = (error, getattr(error, '__traceback__', None))
        logger.debug(f"Captured failure for {key}: {error!r}")

    def reset(self) -> None:
        """Forget every cached success and failure."""
        with self._lock:
            n_returns, n_throws = len(self._returns), len(self._throws)
            self._returns.clear()
            self._throws.clear()
        logger.info(f"Cache of {getattr(self, '__name__', 'objective')} reset: "
                    f"dropped {n_returns} results, {n_throws} failures")

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total = self.hit_count + self.miss_count + self.failure_replay_count
            return {
                'size': len(self._returns),
                'failures': len(self._throws),
                'hits': self.hit_count,
                'misses': self.miss_count,
                'failure_replays': self.failure_replay_count,
                'hit_rate': (self.hit_count + self.failure_replay_count) / total if total > 0 else 0.0,
            }

    def __len__(self) -> int:
        return len(self._returns) + len(self._throws)


class MemoizedObjective(_MemoCache):
    """
    Memoize an objective that returns its weight directly.

    When the objective hands back an awaitable, the call returns a coroutine that
    awaits it and caches the outcome. Cache hits return the plain weight.
    """

    def __call__(self, *args, **kwargs):
        key = self._hash_args(args, kwargs)
        status, value = self._lookup(key)
        if status == 'failure':
            error, tb = value
            raise error.with_traceback(tb)
        if status == 'success':
            return value

        try:
            result = self._fn(*args, **kwargs)
        except Exception as error:
            self._store_failure(key, error)
            raise

        # e.g. a lambda returning a coroutine: cache the awaited outcome, never the awaitable
        if inspect.isawaitable(result):
            return self._settle(key, result)
        self._store_result(key, result)
        return result

    async def _settle(self, key: str, awaitable):
        try:
            result = await awaitable
        except Exception as error:
            self._store_failure(key, error)
            raise

        self._store_result(key, result)
        return result


class AsyncMemoizedObjective(MemoizedObjective):
    """Memoize a coroutine-function objective by caching the awaited outcome."""

    async def __call__(self, *args, **kwargs):
        key = self._hash_args(args, kwargs)
        status, value = self._lookup(key)
        if status == 'failure':
            error, tb = value
            raise error.with_traceback(tb)
        if status == 'success':
            return value

        return await self._settle(key, self._fn(*args, **kwargs))


class CallbackMemoizedObjective(_MemoCache):
    """
    Memoize an objective using the completion-callback convention.

    The wrapped function is called as ``wrapped(*args, callback)``. When the last
    positional argument is not callable, a no-op callback is used. The callback
    receives ``(error, None)`` or ``(None, weight)`` exactly once. Any truthy
    error reports a failure; None, False, 0 and the like mean success.
    """

    def __call__(self, *args, **kwargs):
        args = list(args)
        if args and callable(args[-1]):
            callback = args.pop()
        else:
            callback = _noop_callback

        key = self._hash_args(tuple(args), kwargs)
        status, value = self._lookup(key)
        if status == 'failure':
            callback(value[0], None)
            return
        if status == 'success':
            callback(None, value)
            return

        delivered = False

        def on_complete(error, result=None):
            nonlocal delivered
            if delivered:
                logger.warning(f"{getattr(self, '__name__', 'objective')} completed more than once "
                               f"for {key}, ignoring the extra completion")
                return
            delivered = True
            if error:
                self._store_failure(key, error)
                callback(error, None)
            else:
                self._store_result(key, result)
                callback(None, result)

        try:
            self._fn(*args, on_complete, **kwargs)
        except Exception as error:
            # raised after completion (e.g. by the caller's own callback): not ours to report
            if delivered:
                raise
            on_complete(error)


def memoize(fn: Optional[Callable] = None, *, hash_args: Callable = args_cache_key):
    """
    Make an objective cache its results.

    Usable as ``memoize(fn)`` or as a decorator, with or without arguments.
    Coroutine functions get an AsyncMemoizedObjective, everything else a
    MemoizedObjective.

    Args:
        fn: 目标函数
        hash_args: 由 (args, kwargs) 计算缓存键的函数
    """
    def decorator(func: Callable):
        if inspect.iscoroutinefunction(func):
            return AsyncMemoizedObjective(func, hash_args)
        return MemoizedObjective(func, hash_args)

    if fn is None:
        return decorator
    return decorator(fn)


def memoize_callback(fn: Optional[Callable] = None, *, hash_args: Callable = args_cache_key):
    """Make a completion-callback objective cache its results."""
    def decorator(func: Callable):
        return CallbackMemoizedObjective(func, hash_args)

    if fn is None:
        return decorator
    return decorator(fn)
