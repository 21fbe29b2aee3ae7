"""
Result type for explicit success/failure handling.

The runner processes migrations one step at a time; each step returns
``Ok(value)`` or ``Err(error)`` and the loop stops at the first ``Err``.
This keeps the "halt before the next file" rule visible in the control
flow instead of hiding it in exception propagation.

Examples:
    >>> def parse(text: str) -> Result[int]:
    ...     try:
    ...         return Ok(int(text))
    ...     except ValueError as e:
    ...         return Err(e)
    >>> parse("42").unwrap()
    42
    >>> parse("x").is_err()
    True

Tags:
    result-type, error-handling, spine-migrate

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from spine_migrate.core.errors import MigrationError


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result carrying a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects (no-op for Ok)."""
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result carrying the exception that stopped the step."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def inspect_err(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with error for side effects, return self."""
        f(self.error)
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T]) -> Result[T]:
    """
    Execute a zero-argument function and wrap the outcome.

    Only ``MigrationError`` is captured; anything else is a bug and
    propagates unchanged.

    Examples:
        >>> try_result(lambda: 1 + 1)
        Ok(2)
    """
    try:
        return Ok(f())
    except MigrationError as e:
        return Err(e)


__all__ = [
    "Result",
    "Ok",
    "Err",
    "try_result",
]
