"""
Deterministic cache keys for memoized objective functions.

Keys are canonical JSON strings of the call arguments, so they never depend on
object identity or on Python's randomized hashing. Distinct arguments always
get distinct keys.

- sequences (lists, tuples, numpy arrays) keep their order
- a real number that a float represents exactly is rendered as repr(float(x)):
  1 and 1.0 share a key, bit-identical floats always share a key, no epsilon
  matching
- ints beyond float precision and exact numeric types (Decimal, Fraction) are
  tagged with their type and keep their exact digits
- dicts become sorted [key, value] pairs, so non-str keys stay typed
- JSON objects only ever appear as type tags; anything else raises TypeError
"""

import json
from decimal import Decimal
from fractions import Fraction
from typing import Any

import numpy as np


def _canon(x: Any) -> Any:
    """Canonicalize to JSON-safe primitives with stable float handling."""
    if isinstance(x, np.ndarray):
        return [_canon(v) for v in x.tolist()]

    if isinstance(x, np.generic):
        return _canon(x.item())

    if isinstance(x, dict):
        pairs = [[_canon(k), _canon(v)] for k, v in x.items()]
        pairs.sort(key=lambda pair: _dumps(pair[0]))
        return {"dict": pairs}

    if isinstance(x, (list, tuple)):
        return [_canon(v) for v in x]

    # bool is an int subclass, keep it distinct from 1 / 0
    if x is None or isinstance(x, (bool, str)):
        return x

    # json renders floats with repr(), which is round-trip exact;
    # NaN and +-inf come out as NaN / Infinity / -Infinity
    if isinstance(x, float):
        return x

    if isinstance(x, int):
        try:
            as_float = float(x)
        except OverflowError:
            return {"int": str(x)}
        return as_float if as_float == x else {"int": str(x)}

    if isinstance(x, Decimal):
        return {"Decimal": str(x)}

    if isinstance(x, Fraction):
        return {"Fraction": str(x)}

    if isinstance(x, complex):
        return {"complex": [x.real, x.imag]}

    raise TypeError(f"Cannot build a cache key from {type(x).__name__}: {x!r}")


def _dumps(canon: Any) -> str:
    """Serialize an already canonicalized value."""
    return json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def canonical_json(obj: Any) -> str:
    """Return canonical JSON string for obj (sorted keys, no whitespace)."""
    return _dumps(_canon(obj))


def args_cache_key(args: tuple, kwargs: dict | None = None) -> str:
    """Cache key for one call: positional arguments, plus keyword arguments when given."""
    if kwargs:
        return _dumps({"args": _canon(list(args)), "kwargs": _canon(kwargs)})
    return canonical_json(list(args))
