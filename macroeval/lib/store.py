"""
Configuration value access backed by the macro-expansion engine.

`ConfigValues` wraps a key/value source so that a value may reference other
keys or compute derived numbers at the moment it is read:

    {
        "values": {
            "Philosopher Count": "5",
            "Fork Count": "{%Philosopher Count%}",
            "Max philosophers to eat simultaneously":
                "{%Integer-divide::{%Philosopher Count%}::2%}"
        }
    }

Features:
- Loading the source from a mapping or a JSON store file
- Raw value evaluation with IntegerDivide and KeyLookup registered in that order
- Integer extraction with fallback to a default
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Self

from pydantic import ValidationError

from macroeval.config.settings import appsettings, profile_fromSettings
from macroeval.lib.delimiters import DelimiterProfile
from macroeval.lib.engine import MacroEngine
from macroeval.lib.exceptions import MacroConfigError
from macroeval.lib.log import LOG
from macroeval.lib.parser import IntegerDivide, KeyLookup
from macroeval.models.dataModel import PairStore, StoreDocument


def store_load(path: Path) -> dict[str, str | None]:
    """
    Read a JSON store file.

    Args:
        path: File holding a StoreDocument

    Returns:
        dict: Raw values by key

    Raises:
        MacroConfigError: If the file is missing or not a valid store document
    """
    if not path.exists():
        raise MacroConfigError(f"Store file not found: {path}")
    try:
        document: StoreDocument = StoreDocument.model_validate_json(path.read_text())
    except ValidationError as e:
        LOG(f"Invalid store file {path}: {e}")
        raise MacroConfigError(f"Invalid store file {path}: {e}") from e
    return document.values


class ConfigValues:
    """Evaluated access to a key/value source.

    Attributes:
        raw: The unevaluated source, case-insensitive
        engine: Engine with IntegerDivide and KeyLookup registered
    """

    def __init__(
        self: Self,
        pairs: Mapping[str, str | None],
        profile: DelimiterProfile | None = None,
        pass_limit: int | None = None,
    ) -> None:
        profile = profile or profile_fromSettings(appsettings)
        self.raw: PairStore = PairStore(pairs)
        self.lookup: KeyLookup = KeyLookup(self.raw, profile, pass_limit=pass_limit)
        self.engine: MacroEngine = MacroEngine(
            [IntegerDivide(profile), self.lookup], profile, pass_limit=pass_limit
        )

    @classmethod
    def from_file(cls, path: Path, **kwargs) -> Self:
        return cls(store_load(path), **kwargs)

    def keys(self: Self) -> list[str]:
        return list(self.raw)

    def value_get(self: Self, key: str) -> str | None:
        """Evaluate the raw value stored under ``key``.

        Raises:
            KeyError: If the key is not in the source
            MacroError: If evaluation fails
        """
        return self.engine.evaluate_string(self.raw[key])

    def values_resolve(self: Self) -> dict[str, str | None]:
        """Evaluate every key, in source order."""
        return {key: self.value_get(key) for key in self.raw}

    def integer_extract(self: Self, key: str, default: int) -> int:
        """Evaluate ``key`` as a positive integer.

        Falls back to ``default`` when the key is missing, the value does not
        evaluate to an integer, or the integer is zero or negative.
        """
        if key not in self.raw:
            LOG(
                f"{key} configuration variable is not defined. Using default {default}",
                level="WARNING",
            )
            return default

        value: str | None = self.value_get(key)
        try:
            number: int = int((value or "").strip())
        except ValueError:
            LOG(
                f'{key} configuration variable does not evaluate to an integer: "{value}". '
                f"Using default {default}",
                level="WARNING",
            )
            return default

        if number <= 0:
            LOG(
                f"{key} configuration variable may not be 0 or negative: {number}. "
                f"Using default {default}",
                level="WARNING",
            )
            return default
        return number

    def as_json(self: Self) -> str:
        """Evaluated values serialized as a StoreDocument."""
        return json.dumps(StoreDocument(values=self.values_resolve()).model_dump(), indent=4)
