"""
backoffice_engines.tracer -- ``@traced_engine`` and BACKOFFICE_ENGINE_TRACE.

Every public calculation in ``backoffice_engines`` is wrapped so that each
call leaves one structured log record behind: which engine ran, at which
version, how long it took, and a fingerprint of the inputs that determine
its result.  Two calls with the same fingerprint and version must produce
the same output, so a disputed invoice total can be traced back to the
exact inputs that produced it without logging the inputs themselves.

Fingerprint rules:
    - Only the parameters named in ``fingerprint_fields`` contribute.
    - Positional and keyword spellings of a call fingerprint identically.
    - Mapping keys are sorted; sequence order is kept.
    - Dataclasses contribute their fields; enums contribute their value.
    - A named parameter that was not passed counts as ``null``.
    - SHA-256 over the canonical text, truncated to 16 hex characters.

Usage:
    @traced_engine("tax", "1.0", fingerprint_fields=("subtotal", "tax_rate_percent"))
    def apply_tax(subtotal, tax_rate_percent):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, TypeVar

from backoffice_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_MESSAGE = "BACKOFFICE_ENGINE_TRACE"

F = TypeVar("F", bound=Callable[..., Any])


@functools.singledispatch
def _canonical(value: Any) -> str:
    if is_dataclass(value) and not isinstance(value, type):
        return _canonical({f.name: getattr(value, f.name) for f in fields(value)})
    return str(value)


@_canonical.register(type(None))
def _(value: None) -> str:
    return "null"


@_canonical.register
def _(value: str) -> str:
    # str-valued enums dispatch here before Enum
    return str(value.value) if isinstance(value, Enum) else value


@_canonical.register
def _(value: Enum) -> str:
    return str(value.value)


@_canonical.register(list)
@_canonical.register(tuple)
def _(value: list | tuple) -> str:
    return "[" + ",".join(_canonical(v) for v in value) + "]"


@_canonical.register(dict)
def _(value: Mapping) -> str:
    pairs = sorted((str(k), _canonical(v)) for k, v in value.items())
    return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """16 hex characters identifying the selected arguments."""
    canonical = "|".join(
        f"{name}={_canonical(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[F], F]:
    """Wrap a pure engine function so each call emits BACKOFFICE_ENGINE_TRACE."""

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 3)

            _logger.info(
                TRACE_MESSAGE,
                extra={
                    "trace_type": TRACE_MESSAGE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": elapsed_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
