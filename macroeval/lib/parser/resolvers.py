"""
Reference evaluators for macroeval.

Implements the two built-in constructs:
- IntegerDivide: ``{%Integer-divide::7::2%}`` -> ``3``
- KeyLookup: ``{%Fork Count%}`` -> value stored under "Fork Count"

Further evaluators are supplied by callers through the contract in
`macroeval.lib.parser.base`.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Final, Self

from macroeval.lib.delimiters import DEFAULT_PROFILE, DelimiterProfile
from macroeval.lib.exceptions import MacroCycleError, MacroEvaluationError
from macroeval.lib.log import LOG
from macroeval.lib.parser.base import PatternEvaluator
from macroeval.models.dataModel import EvaluationContext, PairElement, PairStore, key_normalize

INT_MIN: Final[int] = -(2**31)
INT_MAX: Final[int] = 2**31 - 1

_INTEGER: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")


def int_parse(text: str, element: PairElement) -> int:
    """Parse a signed 32-bit decimal integer.

    Raises:
        MacroEvaluationError: If the text is not an integer or is out of range
    """
    literal: str = text.strip()
    if not _INTEGER.fullmatch(literal):
        raise MacroEvaluationError(
            f"Malformed integer operand: {literal!r}",
            identifier=element.identifier,
            element=element,
        )
    value: int = int(literal)
    if not INT_MIN <= value <= INT_MAX:
        raise MacroEvaluationError(
            f"Integer operand out of range: {literal}",
            identifier=element.identifier,
            element=element,
        )
    return value


class IntegerDivide(PatternEvaluator):
    """Truncating integer division.

    Grammar: ``OPEN Integer-divide SEP <dividend> SEP <divisor> CLOSE``, keyword
    case-insensitive, whitespace allowed around the separators. The quotient
    is truncated toward zero, so ``-7 / 2`` is ``-3``. Operands and quotient
    are signed 32-bit; leaving that range (``-2147483648 / -1``) is an error.
    Division by zero is left to surface as ZeroDivisionError.
    """

    def __init__(self: Self, profile: DelimiterProfile = DEFAULT_PROFILE) -> None:
        super().__init__(profile)
        o, c, s = profile.open_pattern, profile.close_pattern, profile.separator_pattern
        operand: str = f"[^{o}{c}{s}]+?"
        self.pattern: re.Pattern[str] = re.compile(
            rf"{o}\s*Integer-divide\s*{s}\s*"
            rf"(?P<dividend>{operand})\s*{s}\s*"
            rf"(?P<divisor>{operand})\s*{c}",
            re.IGNORECASE | re.DOTALL,
        )

    def pattern_replace(
        self: Self, match: re.Match[str], element: PairElement, ctx: EvaluationContext
    ) -> str:
        dividend: int = int_parse(match.group("dividend"), element)
        divisor: int = int_parse(match.group("divisor"), element)
        quotient: int = abs(dividend) // abs(divisor)
        if (dividend < 0) != (divisor < 0):
            quotient = -quotient
        if not INT_MIN <= quotient <= INT_MAX:
            raise MacroEvaluationError(
                f"Integer overflow: {dividend} / {divisor}",
                identifier=element.identifier,
                element=element,
            )
        return str(quotient)


class KeyLookup(PatternEvaluator):
    """Replace ``OPEN name CLOSE`` with the value stored under ``name``.

    Names are matched case-insensitively. The store is copied at construction
    and resolved in place right away, so a value may refer to other keys by
    name: given ``{"A": "5", "B": "{%A%}"}`` the stored value of B becomes "5".

    A name that is absent, or present with a None value, is left as is.

    Attributes:
        entries: Resolved, case-insensitive copy of the source pairs

    Raises:
        MacroConfigError: If two source keys differ only by case
        MacroCycleError: If keys refer to each other in a cycle
    """

    def __init__(
        self: Self,
        pairs: Mapping[str, str | None],
        profile: DelimiterProfile = DEFAULT_PROFILE,
        detect_cycles: bool = True,
        pass_limit: int | None = None,
    ) -> None:
        super().__init__(profile)
        o, c, s = profile.open_pattern, profile.close_pattern, profile.separator_pattern
        self.pattern: re.Pattern[str] = re.compile(
            f"{o}(?P<name>[^{o}{c}{s}]*?){c}", re.DOTALL
        )
        self.entries: PairStore = PairStore(pairs)
        if detect_cycles:
            self.cycle_check()
        self.keys_resolve(pass_limit)

    def references(self: Self, identifier: str) -> list[str]:
        """Keys of this store that the value of ``identifier`` names directly."""
        value: str | None = self.entries.get(identifier)
        if value is None:
            return []
        names: list[str] = []
        for match in self.pattern.finditer(self.profile.to_equivalent(value) or ""):
            name: str = match.group("name")
            if name in self.entries:
                names.append(self.entries.element(name).identifier or name)
        return names

    def cycle_check(self: Self) -> None:
        """Depth-first search of direct key references.

        Raises:
            MacroCycleError: With the keys along the first cycle found
        """
        done: set[str] = set()
        path: list[str] = []
        on_path: set[str] = set()

        def visit(identifier: str) -> None:
            key: str = key_normalize(identifier) or ""
            if key in done:
                return
            if key in on_path:
                start: int = [key_normalize(p) for p in path].index(key)
                raise MacroCycleError(path[start:] + [identifier])
            on_path.add(key)
            path.append(identifier)
            for name in self.references(identifier):
                visit(name)
            path.pop()
            on_path.discard(key)
            done.add(key)

        for identifier in list(self.entries):
            visit(identifier)

    def keys_resolve(self: Self, pass_limit: int | None = None) -> None:
        """Run one batch evaluation of the stored values using this evaluator."""
        from macroeval.lib.engine import MacroEngine  # Import here to avoid circular import

        LOG(f"Resolving {len(self.entries)} key(s) in place")
        engine: MacroEngine = MacroEngine([self], self.profile, pass_limit=pass_limit)
        engine.evaluate_strings(self.entries)

    def pattern_replace(
        self: Self, match: re.Match[str], element: PairElement, ctx: EvaluationContext
    ) -> str:
        name: str = match.group("name")
        if name not in self.entries:
            return match.group(0)
        value: str | None = self.entries[name]
        if value is None:
            return match.group(0)
        return value
