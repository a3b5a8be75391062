"""
Evaluation engine for macroeval.

Orchestrates a registered, ordered list of evaluators over either a single
string or a whole mapping of named values, rewriting constructs until a fixed
point is reached.

Single string (`evaluate_string`):
1. Check delimiter balance
2. Offer the text to each evaluator in registration order; the first one to
   rewrite it ends the pass, and the next pass starts on the new text
3. Stop when a pass rewrites nothing

Mapping (`evaluate_strings`):
1. Check delimiter balance of every value
2. Put the values holding a simple construct on a worklist
3. Give each worklist entry one pass per round, writing rewrites back into the
   mapping at once so later entries see them; drop entries nothing rewrote

Error policy:
- Every error raised during a pass is collected; if any were, the call fails
  with one MacroAggregateError once the pass ends, even if another evaluator
  in that pass succeeded
- Exceeding the pass limit raises MacroRunawayError
- A failed mapping evaluation leaves the mapping as it was before the call

Example:
    engine = MacroEngine([IntegerDivide(), KeyLookup(values)])
    engine.evaluate_string("{%Integer-divide::{%Fork Count%}::2%}")
"""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping
from typing import Final, Self

from macroeval.config.settings import appsettings
from macroeval.lib.delimiters import DEFAULT_PROFILE, DelimiterProfile
from macroeval.lib.exceptions import (
    MacroAggregateError,
    MacroBalanceError,
    MacroConfigError,
    MacroError,
    MacroEvaluationError,
    MacroRunawayError,
)
from macroeval.lib.log import LOG
from macroeval.lib.parser.base import Evaluator
from macroeval.models.dataModel import EvaluationContext, EvaluationResult, PairElement

# Identifier of the element wrapping a single evaluated string
TEXT_KEY: Final[str] = ""


class MacroEngine:
    """Fixed-point rewrite engine over a registered list of evaluators.

    The engine holds no lock. Evaluators may be added or removed between
    calls, never during one.

    Attributes:
        profile: Delimiter profile every registered evaluator must share
        pass_limit: Passes allowed before the evaluation counts as a runaway
    """

    def __init__(
        self: Self,
        evaluators: Iterable[Evaluator] | None = None,
        profile: DelimiterProfile = DEFAULT_PROFILE,
        pass_limit: int | None = None,
    ) -> None:
        """Initialize the engine and register ``evaluators`` in order.

        Raises:
            MacroConfigError: If the profile is missing, the pass limit is not
                positive, or an evaluator does not share the profile
        """
        if profile is None:
            raise MacroConfigError("Delimiter profile may not be None")
        self.profile: DelimiterProfile = profile
        self.pass_limit: int = pass_limit if pass_limit is not None else appsettings.pass_limit
        if self.pass_limit < 1:
            raise MacroConfigError(f"Pass limit must be positive: {self.pass_limit}")
        self._evaluators: list[Evaluator] = []
        self.add_evaluators(evaluators)

    @property
    def evaluators(self: Self) -> tuple[Evaluator, ...]:
        """Registered evaluators in registration order."""
        return tuple(self._evaluators)

    def add_evaluators(self: Self, evaluators: Iterable[Evaluator] | None) -> None:
        """Append evaluators to the registration order.

        Raises:
            MacroConfigError: If an entry is None, does not implement the
                evaluator contract, or carries a different profile
        """
        if evaluators is None:
            return
        for evaluator in evaluators:
            if evaluator is None:
                raise MacroConfigError("Evaluator list contains None")
            if not isinstance(evaluator, Evaluator):
                raise MacroConfigError(
                    f"{type(evaluator).__name__} does not implement evaluate(element, ctx)"
                )
            if evaluator.profile is None:
                raise MacroConfigError(f"{type(evaluator).__name__} has no delimiter profile")
            if evaluator.profile != self.profile:
                raise MacroConfigError(
                    f"{type(evaluator).__name__} delimiter: {evaluator.profile} is invalid. "
                    f"Expected delimiter: {self.profile}"
                )
            self._evaluators.append(evaluator)
            LOG(f"Registered {type(evaluator).__name__}")

    def remove_evaluators(self: Self, evaluators: Iterable[Evaluator] | None) -> None:
        """Unregister evaluators; ones not registered are ignored."""
        if evaluators is None:
            return
        for evaluator in evaluators:
            if evaluator in self._evaluators:
                self._evaluators.remove(evaluator)

    def clear(self: Self) -> None:
        """Unregister every evaluator."""
        self._evaluators.clear()

    # Hooks for subclasses that need to scrub text around evaluation

    def pre_evaluate(self: Self, text: str | None) -> str | None:
        """Transform text before evaluation and after every rewrite."""
        return text

    def post_evaluate(self: Self, text: str | None) -> str | None:
        """Undo `pre_evaluate` on the final text."""
        return text

    def pre_evaluate_pairs(self: Self, pairs: MutableMapping[str, str | None]) -> None:
        """Mapping counterpart of `pre_evaluate`, applied in place."""

    def post_evaluate_pairs(self: Self, pairs: MutableMapping[str, str | None]) -> None:
        """Mapping counterpart of `post_evaluate`, applied in place."""

    def balance_check(self: Self, text: str | None) -> str | None:
        """Return ``text`` unchanged if balanced.

        Raises:
            MacroBalanceError: If the delimiters are not balanced
        """
        if not self.profile.is_balanced(text):
            raise MacroBalanceError.from_pair(None, text, "Delimiters are not balanced.")
        return text

    def balance_checkPairs(self: Self, pairs: MutableMapping[str, str | None]) -> None:
        """Check every value of the mapping.

        Raises:
            MacroBalanceError: Naming the first key whose value is unbalanced
        """
        for identifier, value in pairs.items():
            if not self.profile.is_balanced(value):
                raise MacroBalanceError.from_pair(
                    identifier, value, "Delimiters are not balanced."
                )

    def evaluate_string(self: Self, text: str | None) -> str | None:
        """Evaluate every construct in ``text`` until nothing more rewrites.

        Args:
            text: Text holding constructs

        Returns:
            The evaluated text

        Raises:
            MacroBalanceError: If delimiters are unbalanced before or after a rewrite
            MacroAggregateError: If any evaluator raised during a pass
            MacroRunawayError: If no fixed point is reached within the pass limit
        """
        pre_text: str | None = self.balance_check(self.pre_evaluate(text))
        eval_text: str | None = self._evaluate_pure(pre_text)
        return self.post_evaluate(eval_text)

    def evaluate_stringSafe(self: Self, text: str | None) -> EvaluationResult:
        """Non-raising `evaluate_string` for callers that report errors as data."""
        try:
            return EvaluationResult(text=self.evaluate_string(text) or "")
        except MacroError as e:
            LOG(f"Evaluation failed: {e}")
            return EvaluationResult(text="", error=str(e), success=False)

    def evaluate_strings(self: Self, pairs: MutableMapping[str, str | None]) -> None:
        """Resolve a mapping of named values as a unit, in place.

        Only values holding a simple construct at the start are evaluated;
        values with nested constructs are left for `evaluate_string`.

        Raises:
            MacroBalanceError: Naming the key whose value is unbalanced
            MacroAggregateError: If any evaluator raised during an entry's pass
            MacroRunawayError: If entries still rewrite after the pass limit

        On any of these errors ``pairs`` is restored to its content at the
        time of the call.
        """
        snapshot: dict[str, str | None] = dict(pairs.items())
        try:
            self.pre_evaluate_pairs(pairs)
            self.balance_checkPairs(pairs)
            self._evaluate_pairsPure(pairs)
            self.post_evaluate_pairs(pairs)
        except MacroError:
            LOG(f"Batch evaluation failed, restoring {len(snapshot)} value(s)")
            pairs.clear()
            pairs.update(snapshot)
            raise

    def _offer(self: Self, element: PairElement, pass_count: int) -> str | None:
        """Run one pass over ``element``.

        Evaluators work on a copy, so a failed pass leaves ``element`` as it was.

        Returns:
            The rewritten value of the first evaluator that handled the
            element, or None if none did

        Raises:
            MacroAggregateError: If any evaluator raised during the pass
        """
        errors: list[MacroError] = []
        rewritten: str | None = None
        for evaluator in list(self._evaluators):
            work: PairElement = PairElement(element.identifier, element.value)
            ctx: EvaluationContext = EvaluationContext(work, pass_count=pass_count)
            try:
                evaluator.evaluate(work, ctx)
            except MacroError as e:
                errors.append(e)
                continue
            except Exception as e:
                error: MacroEvaluationError = MacroEvaluationError(
                    f"{type(evaluator).__name__} failed on {element.value!r}, "
                    f"pass {pass_count}: {type(e).__name__}: {e}",
                    identifier=element.identifier or None,
                    element=PairElement(element.identifier, element.value),
                )
                error.__cause__ = e
                errors.append(error)
                continue
            if ctx.handled:
                LOG(f"Pass {pass_count}: {type(evaluator).__name__} rewrote {element.value!r}")
                rewritten = self.profile.from_equivalent(work.value)
                break

        if errors:
            LOG(f"Pass {pass_count} failed with {len(errors)} error(s)")
            raise MacroAggregateError(
                errors,
                identifier=element.identifier or None,
                element=PairElement(element.identifier, element.value),
            )
        return rewritten

    def _evaluate_pure(self: Self, text: str | None) -> str | None:
        if not self._evaluators:
            return text

        element: PairElement = PairElement(TEXT_KEY, text)
        for pass_count in range(self.pass_limit):
            rewritten: str | None = self._offer(element, pass_count)
            if rewritten is None:
                LOG(f"Fixed point reached after {pass_count} rewrite(s)")
                return self.profile.from_equivalent(element.value)
            element = PairElement(TEXT_KEY, self.balance_check(self.pre_evaluate(rewritten)))

        LOG(f"Runaway evaluation of {text!r}")
        raise MacroRunawayError(
            f"No fixed point after {self.pass_limit} passes",
            passes=self.pass_limit,
            element=PairElement(TEXT_KEY, element.value),
        )

    def _evaluate_simple(self: Self, element: PairElement, pass_count: int) -> bool:
        """One pass over a worklist entry; True if its value was rewritten."""
        if not self.profile.is_simple_expression(element.value):
            return False
        rewritten: str | None = self._offer(element, pass_count)
        if rewritten is None:
            return False
        element.value = rewritten
        return True

    def _evaluate_pairsPure(self: Self, pairs: MutableMapping[str, str | None]) -> None:
        if not self._evaluators:
            return

        worklist: list[PairElement] = [
            PairElement(identifier, value)
            for identifier, value in pairs.items()
            if self.profile.is_simple_expression(value)
        ]

        for pass_count in range(self.pass_limit):
            if not worklist:
                return
            remaining: list[PairElement] = []
            for element in worklist:
                if not self._evaluate_simple(element, pass_count):
                    continue
                pairs[element.identifier] = element.value
                self.pre_evaluate_pairs(pairs)
                self.balance_checkPairs(pairs)
                element.value = pairs[element.identifier]
                remaining.append(element)
            worklist = remaining

        if worklist:
            keys: str = ", ".join(str(e.identifier) for e in worklist)
            LOG(f"Runaway evaluation of keys: {keys}")
            raise MacroRunawayError(
                f"Keys still rewriting after {self.pass_limit} passes: {keys}",
                passes=self.pass_limit,
                identifier=worklist[0].identifier,
                element=worklist[0],
            )
