"""Result type for pure response decoders.

Decoders never raise: they return ``Success(value)`` or ``Failure(message)``
and the dispatcher turns a failure into a ``DecodeError``.

Usage:
    >>> def parse_count(raw: str) -> Result[int, str]:
    ...     if not raw.isdigit():
    ...         return Failure(f"not a count: {raw!r}")
    ...     return Success(int(raw))
    ...
    >>> match parse_count("12"):
    ...     case Success(value):
    ...         print(value)
    ...     case Failure(error):
    ...         print(error)
    12
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, NoReturn, TypeVar


T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A successful result holding a value of type T."""

    value: T

    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Map the success value through ``f``."""
        return Success(f(self.value))

    def map_error(self, f: Callable[[E], F]) -> Result[T, F]:
        result: Result[T, F] = Success(self.value)
        return result

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain a further fallible step."""
        return f(self.value)


@dataclass(frozen=True)
class Failure(Generic[E]):
    """A failed result holding an error of type E."""

    error: E

    def is_success(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """
        Raises:
            RuntimeError: Always, since Failure has no value.
        """
        raise RuntimeError(f"Called unwrap() on Failure: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        result: Result[U, E] = Failure(self.error)
        return result

    def map_error(self, f: Callable[[E], F]) -> Result[T, F]:
        return Failure(f(self.error))

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        result: Result[U, E] = Failure(self.error)
        return result


Result = Success[T] | Failure[E]
