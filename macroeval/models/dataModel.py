"""
dataModel.py

This module defines the data models used throughout macroeval.

Features:
- The (identifier, value) pair that flows through evaluators
- A case-insensitive key/value store that keeps the original key casing
- The per-pass evaluation context
- Pydantic models for evaluation results and store documents

Usage:
Import these models to structure data passed between the engine, the
evaluators and the command line.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import ClassVar, Self

from pydantic import BaseModel, Field

from macroeval.lib.exceptions import MacroConfigError, MacroError


class PairElement:
    """A mutable (identifier, value) cell.

    The identifier is compared case-insensitively when used as a key, see
    `key`. The `EMPTY` sentinel has a None identifier and refuses any change
    to its value, guarding against its use as a real entry.

    Attributes:
        identifier: Name of the value, None only for the `EMPTY` sentinel
        value: Current text, rewritten in place during evaluation
    """

    EMPTY: ClassVar[PairElement]

    __slots__ = ("_identifier", "_value")

    def __init__(self: Self, identifier: str | None, value: str | None) -> None:
        self._identifier: str | None = identifier
        self._value: str | None = value

    @classmethod
    def from_pair(cls, pair: tuple[str, str | None]) -> Self:
        identifier, value = pair
        return cls(identifier, value)

    @property
    def identifier(self: Self) -> str | None:
        return self._identifier

    @property
    def key(self: Self) -> str | None:
        """Normalized identifier used for case-insensitive lookup."""
        return key_normalize(self._identifier)

    @property
    def value(self: Self) -> str | None:
        return self._value

    @value.setter
    def value(self: Self, value: str | None) -> None:
        if self._identifier is None:
            raise MacroError(
                "Cannot change the value of the empty PairElement",
                element=self,
            )
        self._value = value

    def to_pair(self: Self) -> tuple[str | None, str | None]:
        return (self._identifier, self._value)

    def __eq__(self: Self, other: object) -> bool:
        if not isinstance(other, PairElement):
            return NotImplemented
        return self.to_pair() == other.to_pair()

    def __hash__(self: Self) -> int:
        return hash((self._identifier, self._value))

    def __repr__(self: Self) -> str:
        return f"PairElement({self._identifier!r}, {self._value!r})"

    def __str__(self: Self) -> str:
        return f"({self._identifier}, {self._value})"


PairElement.EMPTY = PairElement(None, None)


def key_normalize(identifier: str | None) -> str | None:
    """Case-fold an identifier for use as a lookup key."""
    return identifier.upper() if identifier is not None else None


class PairStore(MutableMapping[str, "str | None"]):
    """Case-insensitive key/value store preserving the original key casing.

    Entries are held as PairElement records indexed by the normalized key, so
    ``store["fork count"]`` and ``store["Fork Count"]`` reach the same entry
    while iteration still yields the identifier as first written.
    """

    def __init__(self: Self, pairs: Mapping[str, str | None] | None = None) -> None:
        self._elements: dict[str, PairElement] = {}
        if pairs:
            for identifier, value in pairs.items():
                if key_normalize(identifier) in self._elements:
                    raise MacroConfigError.from_pair(
                        identifier, value, "Duplicate key (keys are case-insensitive)"
                    )
                self[identifier] = value

    def __getitem__(self: Self, identifier: str) -> str | None:
        return self._elements[key_normalize(identifier)].value

    def __setitem__(self: Self, identifier: str, value: str | None) -> None:
        element: PairElement | None = self._elements.get(key_normalize(identifier))
        if element is None:
            self._elements[key_normalize(identifier)] = PairElement(identifier, value)
        else:
            element.value = value

    def __delitem__(self: Self, identifier: str) -> None:
        del self._elements[key_normalize(identifier)]

    def __iter__(self: Self) -> Iterator[str]:
        return (element.identifier for element in self._elements.values())

    def __len__(self: Self) -> int:
        return len(self._elements)

    def element(self: Self, identifier: str) -> PairElement:
        """Return the stored record for ``identifier``."""
        return self._elements[key_normalize(identifier)]

    def __repr__(self: Self) -> str:
        return f"PairStore({dict(self.items())!r})"


@dataclass
class EvaluationContext:
    """Per-invocation working state handed to an evaluator.

    Attributes:
        element: The pair being evaluated
        handled: Set by the evaluator when it rewrote the element's value
        pass_count: Index of the current pass, for diagnostics
    """

    element: PairElement
    handled: bool = False
    pass_count: int = 0


class EvaluationResult(BaseModel):
    """Result of a non-raising evaluation.

    Attributes:
        text: The evaluated text, empty on failure
        error: Error message if evaluation failed
        success: Whether evaluation succeeded
    """

    text: str
    error: str | None = None
    success: bool = True


class StoreDocument(BaseModel):
    """On-disk JSON form of a key/value store.

    Attributes:
        values: Raw, unevaluated values by key
    """

    values: dict[str, str | None] = Field(
        default_factory=dict, description="Raw values by key."
    )
