"""
Engine logging using Loguru.

Every module of macroeval reports through `LOG`, which writes to a single
stderr sink bound to the "MACROEVAL" application. What gets logged:

- evaluator registration with an engine
- each accepted rewrite, with the pass number and the evaluator class
- the fixed point, failed passes and runaway aborts
- store loading and integer extraction falling back to a default

Debug records are dropped while `appsettings.beQuiet` is set; records at
WARNING and above are always written.

Example:
    from macroeval.lib.log import LOG
    LOG("Pass 3: IntegerDivide rewrote the value")
    LOG("Fork Count is not an integer. Using default 5", level="WARNING")

Environment:
- Set `MACRO_BEQUIET=True` to suppress debug output.
"""

from loguru import logger
from typing import Any
import sys

# Records from the engine carry app="MACROEVAL"
app_logger = logger.bind(app="MACROEVAL")

logger_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<yellow>{name: >28}</yellow>::"
    "<cyan>{function: <24}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

app_logger.remove()
app_logger.add(
    sys.stderr,
    format=logger_format,
    filter=lambda record: record["extra"].get("app") == "MACROEVAL",
)


def LOG(message: str, *args: Any, level: str = "DEBUG", **kwargs: Any) -> None:
    """
    Log an engine event on behalf of the caller.

    :param message: The log message. It is only formatted when ``args`` or
        ``kwargs`` are given, so text holding ``{%...%}`` is safe as is.
    :param level: Loguru level name; DEBUG records obey `beQuiet`.
    """
    from macroeval.config.settings import appsettings  # Import here to avoid circular import

    if level == "DEBUG" and appsettings.beQuiet:
        return
    app_logger.opt(depth=1).log(level, message, *args, **kwargs)
