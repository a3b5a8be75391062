"""Tests for the evaluator contract and PatternEvaluator."""

import re
import pytest
from macroeval.lib.delimiters import DEFAULT_PROFILE, DelimiterProfile
from macroeval.lib.parser import Evaluator, PatternEvaluator
from macroeval.models.dataModel import EvaluationContext, PairElement


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


class Echo(PatternEvaluator):
    """Replaces a construct with itself, written with the original markers."""

    def __init__(self, profile=DEFAULT_PROFILE):
        super().__init__(profile)
        self.pattern = re.compile(f"{profile.open_pattern}echo{profile.close_pattern}")

    def pattern_replace(self, match, element, ctx):
        return "{%echo%}"


class Bracketed(Upper):
    """Upper that sees the text wrapped in brackets."""

    def pre_evaluate_base(self, text):
        return f"[{text}]"

    def post_evaluate_base(self, text):
        return text[1:-1]


def run(evaluator, value: str | None) -> tuple[PairElement, EvaluationContext]:
    element = PairElement("key", value)
    ctx = EvaluationContext(element, handled=True)
    evaluator.evaluate(element, ctx)
    return element, ctx


def test_pattern_evaluator_satisfies_protocol():
    assert isinstance(Upper(), Evaluator)
    assert not isinstance(object(), Evaluator)


def test_pattern_evaluator_is_abstract():
    with pytest.raises(TypeError):
        PatternEvaluator()


def test_evaluate_rewrites_match():
    element, ctx = run(Upper(), "say {%upper::hello%} twice {%upper::bye%}")
    assert ctx.handled
    assert element.value == "say HELLO twice BYE"


@pytest.mark.parametrize("value", [None, "", "   ", "no construct", "{%lower::x%}"])
def test_evaluate_leaves_unmatched(value):
    element, ctx = run(Upper(), value)
    assert ctx.handled is False
    assert element.value == value


def test_self_replacement_is_not_handled():
    element, ctx = run(Echo(), "a {%echo%} b")
    assert ctx.handled is False
    assert element.value == "a {%echo%} b"


def test_evaluate_returns_original_markers():
    class Wrap(Upper):
        def pattern_replace(self, match, element, ctx):
            return "{%" + match.group("text") + "%}"

    element, ctx = run(Wrap(), "{%upper::key%}")
    assert ctx.handled
    assert element.value == "{%key%}"


def test_base_hooks_wrap_matching():
    element, ctx = run(Bracketed(), "{%upper::abc%}")
    assert ctx.handled
    assert element.value == "ABC"


def test_custom_profile():
    profile = DelimiterProfile("<", ">", ",")
    element, ctx = run(Upper(profile), "<upper,abc>")
    assert ctx.handled
    assert element.value == "ABC"
    assert repr(Upper(profile)) == 'Upper(profile=("<", ">", ","))'
