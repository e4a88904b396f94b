"""
stock_engines.tracer -- STOCK_ENGINE_TRACE records for engine calls.

Each decorated engine call produces exactly one INFO record on
``stock_kernel.engines.tracer`` carrying:

    engine_name, engine_version   which rule set ran
    input_fingerprint             16 hex chars of SHA-256 over the chosen
                                  arguments, stable across processes
    outcome                       "ok" or "error" (plus error_code)
    duration_ms                   wall time of the call

Arguments are resolved against the wrapped function's signature, so a
fingerprint field may be passed positionally or by keyword.  The logger is
obtained from the standard ``logging`` module directly; engines never import
kernel logging setup.

Usage::

    @traced_engine("opening_stock", "1.0", fingerprint_fields=("command",))
    def set_silo_opening_stock(state, command, context):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

TRACE_TYPE = "STOCK_ENGINE_TRACE"

_logger = logging.getLogger("stock_kernel.engines.tracer")


def _canonical(value: Any) -> str:
    """Stable text form of an engine argument."""
    match value:
        case None:
            return "null"
        case Enum():
            return _canonical(value.value)
        case bool() | int() | Decimal() | str():
            return str(value)
        case date():
            return value.isoformat()
        case Mapping():
            body = ",".join(
                f"{key}:{_canonical(value[key])}" for key in sorted(value, key=str)
            )
            return "{" + body + "}"
        case list() | tuple():
            return "[" + ",".join(_canonical(v) for v in value) + "]"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        body = ",".join(
            f"{f.name}:{_canonical(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({body})"
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """SHA-256 prefix over ``name=value`` pairs; absent names hash as null."""
    text = "|".join(
        f"{name}={_canonical(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:16]


def _emit(fields: dict[str, Any], started: float, **result: Any) -> None:
    fields["duration_ms"] = round((time.perf_counter() - started) * 1000, 3)
    fields.update(result)
    _logger.info(TRACE_TYPE, extra=fields)


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Wrap a pure engine function so every call emits one trace record."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(
                    fingerprint_fields, bound.arguments
                )
            fields: dict[str, Any] = {
                "trace_type": TRACE_TYPE,
                "engine_name": engine_name,
                "engine_version": engine_version,
                "function": func.__qualname__,
                "input_fingerprint": fingerprint,
            }
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                _emit(
                    fields,
                    started,
                    outcome="error",
                    error_code=getattr(exc, "code", type(exc).__name__),
                )
                raise
            _emit(fields, started, outcome="ok")
            return result

        return wrapper

    return decorator
