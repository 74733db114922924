"""
Exception logging helpers for upstream failures.

Failures raised by httpx and Playwright are sometimes wrapped in exception
groups (anyio task groups); these helpers unpack them and never raise.
"""

import logging


def _safe_str(obj) -> str:
    """
    Convert an object to string, falling back to repr and then to the type name.
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def _sub_exceptions(exception) -> list:
    try:
        return list(getattr(exception, "exceptions", None) or [])
    except Exception:
        return []


def describe_exception(exception: Exception) -> str:
    """
    Describe an exception for a client facing error body.

    httpx transport errors frequently stringify to an empty message, so the
    exception type is used in that case.
    """
    if exception is None:
        return "unknown"
    text = _safe_str(exception)
    return text or type(exception).__name__


def format_exception_message(exception: Exception) -> str:
    """
    Format an exception message, including sub-exceptions for exception groups.

    Args:
        exception: The exception to format

    Returns:
        A formatted string describing the exception
    """
    if exception is None:
        return "None"
    sub_exceptions = _sub_exceptions(exception)
    if not sub_exceptions:
        return describe_exception(exception)
    joined = "; ".join(
        f"{type(sub).__name__}: {describe_exception(sub)}" for sub in sub_exceptions
    )
    return f"{describe_exception(exception)} (Sub-exceptions: {joined})"


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its traceback, one record per sub-exception for groups.
    Designed to never throw, even for broken exception objects.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Proxy]", "[Render]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    try:
        safe_prefix = _safe_str(prefix) if prefix is not None else ""
        sub_exceptions = _sub_exceptions(exception)
        if not sub_exceptions:
            logger.log(
                level,
                f"{safe_prefix} Exception: {describe_exception(exception)}",
                exc_info=exception if exception is not None else False,
            )
            return

        logger.log(
            level,
            f"{safe_prefix} Exception with {len(sub_exceptions)} sub-exceptions: "
            f"{describe_exception(exception)}",
        )
        for i, sub_exc in enumerate(sub_exceptions):
            logger.log(
                level,
                f"{safe_prefix} Sub-exception {i+1}: {type(sub_exc).__name__}: "
                f"{describe_exception(sub_exc)}",
                exc_info=sub_exc,
            )
    except Exception:
        try:
            logger.log(logging.ERROR, f"{prefix} Exception logging failed")
        except Exception:
            # Logging itself is broken; nothing left to report to
            pass
