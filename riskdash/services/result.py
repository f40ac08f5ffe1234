"""
Outcome of one narrative request: the generated text or the error that
replaced it. Failures are expected here (a service being down), so they are
carried as values and settled where the four requests are joined.
"""

from typing import Generic, TypeVar

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """Exactly one of value or error is set."""

    __slots__ = ("value", "error")

    def __init__(self, value: ValueT | None, error: ErrorT | None) -> None:
        if (value is None) == (error is None):
            raise ValueError("Result needs exactly one of value or error")
        self.value = value
        self.error = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value, None)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(None, error)

    def is_err(self) -> bool:
        return self.error is not None

    def unwrap_or(self, default: ValueT) -> ValueT:
        if self.error is not None or self.value is None:
            return default
        return self.value

    def __repr__(self) -> str:
        if self.error is not None:
            return f"Result.err({self.error!r})"
        return f"Result.ok({self.value!r})"
