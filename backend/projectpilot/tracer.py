"""
Follow-Through Tracer

Step-by-step tracing of a consultancy turn: user input, gateway call,
state merge, persistence. Silent unless FOLLOW_THROUGH is enabled.
"""
import functools
import inspect
import logging
from datetime import datetime
from typing import Any, Callable

from .config import settings

# Dedicated logger so traces can be routed separately from app logs
tracer = logging.getLogger("followthrough")


def _preview(data: Any, max_len: int = 60) -> str:
    """Short single-line preview of a value."""
    if data is None:
        return "<None>"
    text = " ".join(str(data).split())
    if len(text) > max_len:
        return f"{text[:max_len]}..."
    return text


def _emit(icon: str, step: str, module: str, detail: str = "") -> None:
    if not settings.follow_through:
        return
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] {icon} [{module}] {step}"
    if detail:
        line = f"{line}: {detail}"
    tracer.info(line)


def trace_input(module: str, input_name: str, value: Any):
    """Log a value entering a module."""
    _emit("→", f"INPUT {input_name}", module, _preview(value))


def trace_step(module: str, description: str):
    """Log a general processing step."""
    _emit("•", "STEP", module, description)


def trace_call(module: str, function: str, args_preview: str = ""):
    """Log an outgoing call."""
    detail = f"calling {function}()"
    if args_preview:
        detail += f" with {args_preview}"
    _emit("▶", "CALL", module, detail)


def trace_result(module: str, function: str, success: bool, result_preview: Any = None):
    """Log the outcome of a call."""
    detail = f"{function}() {'✓ SUCCESS' if success else '✗ FAILED'}"
    if result_preview is not None:
        detail += f" => {_preview(result_preview)}"
    _emit("◀", "RESULT", module, detail)


def trace_output(module: str, output_name: str, value: Any):
    """Log a value leaving a module."""
    _emit("←", f"OUTPUT {output_name}", module, _preview(value))


def trace_section(title: str):
    """Divider between major stages of a turn."""
    if not settings.follow_through:
        return
    bar = "─" * 40
    tracer.info(f"\n{bar}\n  {title.upper()}\n{bar}")


def traced(module: str):
    """
    Trace entry and exit of a coroutine function.

    Usage:
        @traced("llm.gateway")
        async def next_step(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        if not inspect.iscoroutinefunction(func):
            raise TypeError("traced() only wraps coroutine functions")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.follow_through:
                return await func(*args, **kwargs)

            trace_call(module, func.__name__)
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                trace_result(module, func.__name__, False, f"{type(e).__name__}: {e}")
                raise
            trace_result(module, func.__name__, True, result)
            return result

        return wrapper

    return decorator


def setup_follow_through_logging():
    """Configure the follow-through logger."""
    if not settings.follow_through:
        return

    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter("%(message)s"))

    tracer.addHandler(handler)
    tracer.setLevel(logging.INFO)
    tracer.propagate = False  # Keep traces out of the root logger

    tracer.info("=" * 50)
    tracer.info("  FOLLOW-THROUGH MODE ENABLED")
    tracer.info("=" * 50)
