"""Checks on test and fixture declarations, reported as compile errors."""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import chain
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence


class CompileError(Exception):
    """One problem in a declaration, tied to where it was found."""

    def __init__(self, message: str, span: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"CompileError({self.message!r}, span={self.span!r})"


class ErrorsList(Exception):
    """Several compile errors reported together, in order."""

    def __init__(self, errors: Iterable[CompileError] = ()) -> None:
        self.errors = list(errors)
        super().__init__(self.errors)

    def extend_from(self, other) -> None:
        """Append the errors of another list, a single error or any iterable."""
        if isinstance(other, ErrorsList):
            self.errors.extend(other.errors)
        elif isinstance(other, CompileError):
            self.errors.append(other)
        else:
            self.errors.extend(other)

    def __iter__(self) -> Iterator[CompileError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        return "\n".join(str(error) for error in self.errors)


def merge_errors(*steps: Callable[[], Any]) -> tuple:
    """Run every step; return their results, or raise all their errors together."""
    results = []
    errors = ErrorsList()
    for step in steps:
        try:
            results.append(step())
        except (ErrorsList, CompileError) as exc:
            errors.extend_from(exc)
    if errors:
        raise errors
    return tuple(results)


@dataclass(frozen=True)
class Argument:
    """A declared item that may name a function argument."""

    name: Optional[str]
    span: Any = None


@dataclass(frozen=True)
class Case:
    """One parametrized case: its values and optional description."""

    args: tuple
    description: Optional[str] = None
    span: Any = None


_GENERICS_RE = re.compile(r"\bfn\s+[A-Za-z_]\w*\s*<\s*[^>\s]")
_IMPL_TRAIT_RE = re.compile(r"(?:->|[:<,(&=\[]|\bmut\b)\s*impl\b")


def has_some_generics(signature: str) -> bool:
    """Whether a function has generic parameters or uses ``impl`` types."""
    return bool(_GENERICS_RE.search(signature) or _IMPL_TRAIT_RE.search(signature))


def missed_arguments(
    fn_args: Iterable[str], items: Iterable[Argument]
) -> Iterator[CompileError]:
    names = set(fn_args)
    for item in items:
        if item.name is not None and item.name not in names:
            yield CompileError(
                f"Missed argument: '{item.name}' should be a test function argument.",
                item.span,
            )


def duplicate_arguments(items: Iterable[Argument]) -> Iterator[CompileError]:
    seen = set()
    for item in items:
        if item.name is None:
            continue
        if item.name in seen:
            yield CompileError(
                f"Duplicate argument: '{item.name}' is already defined.", item.span
            )
        seen.add(item.name)


def invalid_cases(
    case_args: Sequence[Argument], cases: Iterable[Case]
) -> Iterator[CompileError]:
    n_args = len(case_args)
    for case in cases:
        if len(case.args) != n_args:
            yield CompileError(
                "Wrong case signature: should match the given parameters list.",
                case.span,
            )


def case_args_without_cases(
    case_args: Iterable[Argument], cases: Sequence[Case]
) -> Iterator[CompileError]:
    if cases:
        return
    for arg in case_args:
        yield CompileError("No cases for this argument.", arg.span)


def async_once(is_async: bool, once: Any) -> Iterator[CompileError]:
    """``once`` is the location of a once marker, or None when absent."""
    if is_async and once is not None:
        yield CompileError("Cannot apply #[once] to async fixture.", once)


def generics_once(signature: str, once: Any) -> Iterator[CompileError]:
    if has_some_generics(signature) and once is not None:
        yield CompileError("Cannot apply #[once] on generic fixture.", once)


def rstest_errors(
    fn_args: Iterable[str],
    items: Sequence[Argument],
    case_args: Sequence[Argument],
    cases: Sequence[Case],
) -> list[CompileError]:
    """All problems found in a test declaration."""
    return list(
        chain(
            missed_arguments(fn_args, items),
            duplicate_arguments(items),
            invalid_cases(case_args, cases),
            case_args_without_cases(case_args, cases),
        )
    )


def fixture_errors(
    signature: str,
    fn_args: Iterable[str],
    items: Sequence[Argument],
    is_async: bool,
    once: Any,
) -> list[CompileError]:
    """All problems found in a fixture declaration."""
    return list(
        chain(
            missed_arguments(fn_args, items),
            duplicate_arguments(items),
            async_once(is_async, once),
            generics_once(signature, once),
        )
    )