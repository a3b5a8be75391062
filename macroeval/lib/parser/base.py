r"""
Evaluator contract for the macro-expansion engine.

An evaluator is a pluggable rewrite rule. It recognizes one construct grammar
and, when the construct occurs in a value, replaces it with computed text.
Evaluators are registered with an engine in order; registration order breaks
ties when more than one evaluator could rewrite the same text.

The contract:
- `profile`: the DelimiterProfile the evaluator's patterns were built from.
  It must equal the profile of the engine it is registered with.
- `evaluate(element, ctx)`: inspect ``element.value``; if the construct is not
  present leave ``ctx.handled`` False, otherwise rewrite ``element.value`` and
  set ``ctx.handled`` True. Raising is allowed; the engine collects the error.

`PatternEvaluator` factors out the usual case of a single regular expression
over the equivalent form of the text, leaving subclasses to supply the pattern
and the replacement for one match.

Example:
    class Upper(PatternEvaluator):
        def __init__(self, profile=DEFAULT_PROFILE):
            super().__init__(profile)
            p = profile
            self.pattern = re.compile(
                f"{p.open_pattern}upper{p.separator_pattern}"
                f"(?P<text>[^{p.open_pattern}{p.close_pattern}]*){p.close_pattern}"
            )

        def pattern_replace(self, match, element, ctx):
            return match.group("text").upper()
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Protocol, Self, runtime_checkable

from macroeval.lib.delimiters import DEFAULT_PROFILE, DelimiterProfile
from macroeval.models.dataModel import EvaluationContext, PairElement


@runtime_checkable
class Evaluator(Protocol):
    """Protocol every pluggable rewrite rule implements."""

    profile: DelimiterProfile

    def evaluate(self: Self, element: PairElement, ctx: EvaluationContext) -> None:
        """Rewrite ``element.value`` if it holds this evaluator's construct.

        Args:
            element: Pair whose value is inspected and possibly rewritten
            ctx: Working state; ``ctx.handled`` reports whether a rewrite happened

        Raises:
            MacroError: Or any other exception, when the replacement cannot
                be computed
        """
        ...


class PatternEvaluator(ABC):
    """Default partial implementation of the evaluator contract.

    Subclasses set `pattern`, a compiled expression written against the
    profile's single-character equivalents (see `DelimiterProfile.open_pattern`
    and friends), and implement `pattern_replace`.

    Attributes:
        profile: Delimiter profile the pattern was built from
        pattern: Expression matched against the equivalent form of the value
    """

    pattern: re.Pattern[str]

    def __init__(self: Self, profile: DelimiterProfile = DEFAULT_PROFILE) -> None:
        self.profile: DelimiterProfile = profile

    @abstractmethod
    def pattern_replace(
        self: Self, match: re.Match[str], element: PairElement, ctx: EvaluationContext
    ) -> str:
        """Return the replacement for one match.

        The replacement may use either the original markers or their
        equivalents; returning ``match.group(0)`` leaves the match unchanged.
        """

    def pre_evaluate_base(self: Self, text: str) -> str:
        """Alter the equivalent-form text right before it is matched."""
        return text

    def post_evaluate_base(self: Self, text: str) -> str:
        """Undo `pre_evaluate_base` on the rewritten text."""
        return text

    def evaluate(self: Self, element: PairElement, ctx: EvaluationContext) -> None:
        ctx.handled = False

        text: str | None = element.value
        if text is None or not text.strip():
            return

        pre_text: str = self.pre_evaluate_base(self.profile.to_equivalent(text) or "")
        if not self.pattern.search(pre_text):
            return

        # Replacements may carry the original markers, normalize before comparing
        replacement: str = self.profile.to_equivalent(
            self.pattern.sub(lambda m: self.pattern_replace(m, element, ctx), pre_text)
        ) or ""
        if replacement == pre_text:
            return

        element.value = self.profile.from_equivalent(self.post_evaluate_base(replacement))
        ctx.handled = True

    def __repr__(self: Self) -> str:
        return f"{type(self).__name__}(profile={self.profile})"
