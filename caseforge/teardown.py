"""Fixture values paired with guards that release resources when closed."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

_MISSING: Any = object()


class TearDown(ABC):
    """Something that releases a resource exactly when asked to."""

    @abstractmethod
    def tear_down(self) -> None:
        """Release the resource."""


class EmptyGuard(TearDown):
    """A guard that has nothing to release."""

    def tear_down(self) -> None:
        return None

    def __repr__(self) -> str:
        return "EmptyGuard()"


@dataclass
class GuardPair(TearDown):
    """Two guards released in order: first, then second."""

    first: TearDown
    second: TearDown

    def tear_down(self) -> None:
        self.first.tear_down()
        self.second.tear_down()


@dataclass
class TearDownClosure(TearDown):
    """A guard that calls a function when released."""

    func: Callable[[], Any]

    def tear_down(self) -> None:
        self.func()


class Fixture(Generic[T]):
    """A value together with the guard that cleans up after it.

    Closing the fixture, directly or by leaving a ``with`` block, releases
    the guard unless it has already been taken away with :meth:`guard`.
    """

    def __init__(self, inner: T, guard: TearDown) -> None:
        self._inner: Any = inner
        self._guard: Any = guard

    @classmethod
    def from_value(cls, inner: T) -> "Fixture[T]":
        """Wrap a value with a guard that does nothing."""
        return cls(inner, EmptyGuard())

    def take(self) -> T:
        """Move the value out of the fixture."""
        if self._inner is _MISSING:
            raise RuntimeError("fixture value already taken")
        inner, self._inner = self._inner, _MISSING
        return inner

    def guard(self) -> TearDown:
        """Move the guard out; the fixture will no longer release it."""
        if self._guard is _MISSING:
            raise RuntimeError("fixture guard already taken")
        guard, self._guard = self._guard, _MISSING
        return guard

    def compose(self, guard: TearDown) -> "Fixture[T]":
        """Build a fixture that releases this guard first, then ``guard``."""
        return Fixture(self.take(), GuardPair(self.guard(), guard))

    def close(self) -> None:
        """Release the guard if the fixture still holds it."""
        if self._guard is _MISSING:
            return
        guard, self._guard = self._guard, _MISSING
        guard.tear_down()

    def __enter__(self) -> "Fixture[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._inner is _MISSING:
            return "Fixture<None>"
        return f"Fixture<Some({self._inner!r})>"