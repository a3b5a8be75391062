"""
macroeval Main Module.

This module serves as the main entry point for macroeval, a text
macro-expansion engine that rewrites {%...%} constructs in configuration
values until nothing more can be rewritten.

Features:
- Evaluates constructs in text given on the command line
- Reads and resolves a JSON key/value store
- Extracts positive integers with a fallback default

Usage:
    Evaluate text:
        $ macroeval eval "{%Integer-divide::7::2%}"

    Evaluate a stored key:
        $ macroeval get --store values.json "Fork Count"
        $ macroeval get --store values.json --integer --default 5 "Fork Count"

    Show the whole store:
        $ MACRO_STORE_FILE=values.json macroeval resolve

Environment:
    MACRO_BEQUIET, MACRO_PASS_LIMIT, MACRO_OPEN_DELIMITER,
    MACRO_CLOSE_DELIMITER, MACRO_SEPARATOR, MACRO_STORE_FILE
"""

from typing import Final
from macroeval.commands.app import cli
from macroeval.lib.log import LOG

__version__: Final[str] = "0.1.0"


def main() -> None:
    """Main entry point for the command line."""
    LOG(f"macroeval {__version__}")
    cli.main(prog_name="macroeval")


if __name__ == "__main__":
    main()
