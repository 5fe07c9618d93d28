import sys
import traceback
from typing import Any

from uvicorn.server import logger

from util.config import config

__LEVELS = {"trace": 0, "debug": 1, "info": 2, "warning": 3, "error": 4}


def _should_log(level: str) -> bool:
    if config.log_level == "local":
        return True  # everything goes out locally
    current_level = __LEVELS.get(config.log_level, 2)
    request_level = __LEVELS.get(level.lower(), 2)
    return request_level >= current_level


def _format_args(*args: Any) -> tuple[str, list[Exception]]:
    exceptions = []
    formatted_parts = []

    for arg in args:
        if isinstance(arg, Exception):
            exceptions.append(arg)
            formatted_parts.append(f"! {type(arg).__name__}: {arg}")
        elif isinstance(arg, (list, tuple)):
            formatted_parts.append(", ".join(str(item) for item in arg) or "(none)")
        else:
            formatted_parts.append(str(arg))

    if not formatted_parts:
        return "", exceptions
    if len(formatted_parts) == 1:
        return formatted_parts[0], exceptions

    # connect the message lines with a tree
    head_lines = "\n ├─ ".join(formatted_parts[:-1])
    return f"{head_lines}\n └─ {formatted_parts[-1]}", exceptions


def _emit(level: str, message: str):
    if config.log_level == "local":
        print(f"[{level[0]}] {message}")
        return
    match level:
        case "TRACE" | "DEBUG":
            logger.debug(message)
        case "INFO":
            logger.info(message)
        case "WARNING":
            logger.warning(message)
        case "ERROR":
            logger.error(message)


def _emit_trace(exception: Exception):
    trace = exception.__traceback__
    if not trace:
        return
    indented_trace = "".join(("    " + line.strip() + "\n") for line in traceback.format_tb(trace)).rstrip()
    if config.log_level == "local":
        print(indented_trace, file = sys.stderr)
    else:
        logger.error(f"Details:\n{indented_trace}")


def _log_message(level: str, message: str, exceptions: list[Exception]) -> str:
    if _should_log(level):
        _emit(level, message)
    # traces go out on every level, they are never filtered
    for exception in exceptions:
        _emit_trace(exception)
    return message


def t(*args: Any) -> str:
    message, exceptions = _format_args(*args)
    return _log_message("TRACE", message, exceptions)


def d(*args: Any) -> str:
    message, exceptions = _format_args(*args)
    return _log_message("DEBUG", message, exceptions)


def i(*args: Any) -> str:
    message, exceptions = _format_args(*args)
    return _log_message("INFO", message, exceptions)


def w(*args: Any) -> str:
    message, exceptions = _format_args(*args)
    return _log_message("WARNING", message, exceptions)


def e(*args: Any) -> str:
    message, exceptions = _format_args(*args)
    return _log_message("ERROR", message, exceptions)
