"""Exceptions raised by the simplex engines."""


class InvalidSimplexError(ValueError):
    """The vertices handed to an engine do not form a valid N+1 simplex."""


class ObjectiveFailure(RuntimeError):
    """
    A completion callback reported a failure that is not an exception instance.

    Exceptions reported by an objective are propagated as they are; this wrapper
    only exists so a non-exception failure value can still be raised.
    """

    def __init__(self, reason):
        super().__init__(f"objective reported failure: {reason!r}")
        self.reason = reason


def as_exception(error) -> BaseException:
    """Return error itself if it can be raised, otherwise wrap it in ObjectiveFailure."""
    if isinstance(error, BaseException):
        return error
    return ObjectiveFailure(error)
