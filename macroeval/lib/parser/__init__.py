"""
Evaluator package for macroeval.

Provides the evaluator contract and the built-in rewrite rules.
"""

from .base import Evaluator, PatternEvaluator
from .resolvers import IntegerDivide, KeyLookup

__all__ = ["Evaluator", "PatternEvaluator", "IntegerDivide", "KeyLookup"]
