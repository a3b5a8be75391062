"""
Exceptions raised by the macro-expansion engine.

Every exception is an error record: it carries the identifier of the value
being evaluated (usually the key in a batch, None for a single string), the
offending PairElement when there is one, and a message.

Hierarchy:
- MacroError: base error record
- MacroConfigError: invalid delimiter profile or evaluator registration
- MacroBalanceError: open/close delimiters are not balanced
- MacroEvaluationError: an evaluator failed to compute its replacement
- MacroAggregateError: every error raised during one failed pass
- MacroRunawayError: the pass limit was reached without a fixed point
- MacroCycleError: key references form a cycle
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Self

if TYPE_CHECKING:
    from macroeval.models.dataModel import PairElement


class MacroError(Exception):
    """Base error record for the engine.

    Attributes:
        identifier: Key of the evaluated value, may be None
        element: The (identifier, value) pair being evaluated, may be None
        message: Human readable description
    """

    def __init__(
        self: Self,
        message: str,
        identifier: str | None = None,
        element: PairElement | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.identifier: str | None = identifier
        self.element: PairElement | None = element

    @classmethod
    def from_pair(
        cls, identifier: str | None, value: str | None, message: str
    ) -> Self:
        """Build an error record from a raw key/value pair."""
        from macroeval.models.dataModel import PairElement

        return cls(message, identifier=identifier, element=PairElement(identifier, value))

    def __str__(self: Self) -> str:
        if not self.identifier:
            return self.message
        return f"{self.identifier}: {self.message}"


class MacroConfigError(MacroError, ValueError):
    """Invalid delimiter profile, evaluator registration or lookup source."""


class MacroBalanceError(MacroError):
    """Text does not satisfy the open/close balance invariant."""


class MacroEvaluationError(MacroError):
    """An evaluator raised while computing a replacement."""


class MacroAggregateError(MacroError):
    """All errors raised during one failed pass, reported together."""

    def __init__(
        self: Self,
        errors: Iterable[MacroError],
        message: str | None = None,
        identifier: str | None = None,
        element: PairElement | None = None,
    ) -> None:
        self.errors: list[MacroError] = list(errors)
        if message is None:
            details: str = "; ".join(str(e) for e in self.errors)
            message = f"{len(self.errors)} error(s) during evaluation: {details}"
        super().__init__(message, identifier=identifier, element=element)


class MacroRunawayError(MacroError):
    """The fixed-point loop did not stabilize within the pass limit."""

    def __init__(
        self: Self,
        message: str,
        passes: int = 0,
        identifier: str | None = None,
        element: PairElement | None = None,
    ) -> None:
        super().__init__(message, identifier=identifier, element=element)
        self.passes: int = passes


class MacroCycleError(MacroRunawayError):
    """Key references form a cycle and can never resolve."""

    def __init__(self: Self, cycle: list[str]) -> None:
        self.cycle: list[str] = cycle
        super().__init__(
            f"Circular key reference: {' -> '.join(cycle)}",
            identifier=cycle[0] if cycle else None,
        )
