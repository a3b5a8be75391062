r"""
Delimiter and separator handling for macro constructs.

A construct is a piece of text enclosed by an open and a close delimiter whose
arguments are split by a separator:

    {%Fork Count%}
    {%Integer-divide::7::2%}

Here "{%" and "%}" are the open and close delimiters and "::" is the separator.
These are the defaults; any other non-blank markers may be configured.

Multi-character markers make "does not contain the marker" patterns awkward to
express with a regular expression. Before any matching the markers are swapped
for single-character equivalents, so every pattern downstream can use a plain
negated character class such as ``[^\ue001\ue002]``. A marker that is already a
single character and not a regular expression metacharacter is its own
equivalent; anything else is replaced by a private-use sentinel.

Assumption: input text never contains the sentinel characters themselves.
Translation to and from the equivalent form is only a round trip under that
assumption; it is documented, not enforced.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property
from typing import Final, Self

from macroeval.lib.exceptions import MacroConfigError

DEFAULT_OPEN: Final[str] = "{%"
DEFAULT_CLOSE: Final[str] = "%}"
DEFAULT_SEPARATOR: Final[str] = "::"

# One private-use sentinel per role
OPEN_SENTINEL: Final[str] = "\ue001"
CLOSE_SENTINEL: Final[str] = "\ue002"
SEPARATOR_SENTINEL: Final[str] = "\ue003"

# "{" and "}" are missing on purpose: they match literally when not a quantifier
_RE_SPECIAL: Final[str] = ".$^[](|)*+?\\"


def is_reSpecialChar(char: str) -> bool:
    """Return True if ``char`` has special meaning to a regular expression."""
    return len(char) == 1 and char in _RE_SPECIAL


def _needs_sentinel(token: str) -> bool:
    return len(token) > 1 or is_reSpecialChar(token)


def _validate(open_delimiter: str, close_delimiter: str, separator: str) -> None:
    """Reject blank markers and a separator that collides with a delimiter.

    An open delimiter equal to the close delimiter is allowed.
    """
    if not isinstance(open_delimiter, str) or not open_delimiter.strip():
        raise MacroConfigError("Open delimiter cannot be None, empty or white-space")
    if not isinstance(close_delimiter, str) or not close_delimiter.strip():
        raise MacroConfigError("Close delimiter cannot be None, empty or white-space")
    if not isinstance(separator, str) or not separator.strip():
        raise MacroConfigError("Separator cannot be None, empty or white-space")
    if separator.casefold() == open_delimiter.casefold():
        raise MacroConfigError("Separator cannot equal open-delimiter")
    if separator.casefold() == close_delimiter.casefold():
        raise MacroConfigError("Separator cannot equal close-delimiter")


@dataclass(frozen=True)
class DelimiterProfile:
    """Immutable (open, close, separator) triple with derived equivalents.

    Equality is structural and case sensitive over the three markers, so two
    independently built profiles with the same markers are interchangeable.

    Attributes:
        open_delimiter: Marker opening a construct
        close_delimiter: Marker closing a construct
        separator: Marker separating a construct's arguments

    Raises:
        MacroConfigError: If a marker is blank or the separator equals a delimiter
    """

    open_delimiter: str = DEFAULT_OPEN
    close_delimiter: str = DEFAULT_CLOSE
    separator: str = DEFAULT_SEPARATOR

    def __post_init__(self: Self) -> None:
        _validate(self.open_delimiter, self.close_delimiter, self.separator)

    def __str__(self: Self) -> str:
        return f'("{self.open_delimiter}", "{self.close_delimiter}", "{self.separator}")'

    @property
    def open_equivalent(self: Self) -> str:
        if _needs_sentinel(self.open_delimiter):
            return OPEN_SENTINEL
        return self.open_delimiter

    @property
    def close_equivalent(self: Self) -> str:
        if _needs_sentinel(self.close_delimiter):
            return CLOSE_SENTINEL
        return self.close_delimiter

    @property
    def separator_equivalent(self: Self) -> str:
        if _needs_sentinel(self.separator):
            return SEPARATOR_SENTINEL
        return self.separator

    @property
    def open_pattern(self: Self) -> str:
        """Open equivalent, escaped for use inside a regular expression."""
        return re.escape(self.open_equivalent)

    @property
    def close_pattern(self: Self) -> str:
        """Close equivalent, escaped for use inside a regular expression."""
        return re.escape(self.close_equivalent)

    @property
    def separator_pattern(self: Self) -> str:
        """Separator equivalent, escaped for use inside a regular expression."""
        return re.escape(self.separator_equivalent)

    @cached_property
    def _simple_construct(self: Self) -> re.Pattern[str]:
        # OPEN, non-empty body free of OPEN/CLOSE (arguments optional), CLOSE
        o, c = self.open_pattern, self.close_pattern
        return re.compile(f"{o}[^{o}{c}]+{c}", re.DOTALL)

    def to_equivalent(self: Self, text: str | None) -> str | None:
        """Swap every marker in ``text`` for its single-character equivalent."""
        if text is None:
            return None
        if _needs_sentinel(self.open_delimiter):
            text = text.replace(self.open_delimiter, OPEN_SENTINEL)
        if _needs_sentinel(self.close_delimiter):
            text = text.replace(self.close_delimiter, CLOSE_SENTINEL)
        if _needs_sentinel(self.separator):
            text = text.replace(self.separator, SEPARATOR_SENTINEL)
        return text

    def from_equivalent(self: Self, text: str | None) -> str | None:
        """Inverse of `to_equivalent` on text free of sentinel characters."""
        if text is None:
            return None
        if _needs_sentinel(self.separator):
            text = text.replace(SEPARATOR_SENTINEL, self.separator)
        if _needs_sentinel(self.close_delimiter):
            text = text.replace(CLOSE_SENTINEL, self.close_delimiter)
        if _needs_sentinel(self.open_delimiter):
            text = text.replace(OPEN_SENTINEL, self.open_delimiter)
        return text

    def _depths(self: Self, text: str) -> tuple[int, int, bool]:
        """Scan equivalent-form text.

        Returns:
            (final depth, maximum depth, whether depth ever went negative)
        """
        depth: int = 0
        deepest: int = 0
        negative: bool = False
        o, c = self.open_equivalent, self.close_equivalent
        for char in text:
            if char == o:
                depth += 1
                deepest = max(deepest, depth)
            elif char == c:
                depth -= 1
                if depth < 0:
                    negative = True
        return depth, deepest, negative

    def is_balanced(self: Self, text: str | None) -> bool:
        """Check every open delimiter has a properly nested close delimiter.

        None and empty text are balanced. When the open and close markers
        cannot be told apart the check is impossible and always passes.
        """
        if self.open_equivalent == self.close_equivalent:
            return True
        if self.open_delimiter == self.close_delimiter:
            return True
        if not text:
            return True
        depth, _, negative = self._depths(self.to_equivalent(text) or "")
        return depth == 0 and not negative

    def is_simple_expression(self: Self, text: str | None) -> bool:
        """True if ``text`` holds at least one construct and none are nested.

        ``{%id::v%}`` and ``{%key%}`` are simple; ``{%id::{%inner::v%}%}`` is not.
        """
        if not text:
            return False
        equivalent: str = self.to_equivalent(text) or ""
        if not self._simple_construct.search(equivalent):
            return False
        if self.open_equivalent == self.close_equivalent:
            return True
        _, deepest, _ = self._depths(equivalent)
        return deepest <= 1


DEFAULT_PROFILE: Final[DelimiterProfile] = DelimiterProfile()
