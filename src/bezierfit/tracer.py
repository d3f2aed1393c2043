"""
Hierarchical runtime tracing for bezierfit.

Nested spans with timing and compact argument summaries, written to stderr
and optionally to a file. Disabled by default: library calls stay silent
until configure_tracer(enabled=True) is called.
"""

import functools
import hashlib
import json
import sys
import time
from collections import namedtuple
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np
from pydantic import BaseModel


LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}

# One open span: where it was entered and when.
_OpenSpan = namedtuple("_OpenSpan", ["func", "module", "started"])


@dataclass
class TracerConfig:
    """Output settings; the sink is reopened on every configure()."""

    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False
    _sink: object = field(default=None, repr=False, compare=False)

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        self.close()
        self.enabled = enabled
        self.level = level.upper()
        self.file_path = file_path
        self.json_output = json_output
        if enabled and file_path:
            self._sink = open(file_path, "w", encoding="utf-8")

    def threshold(self):
        return LEVELS.get(self.level, LEVELS["INFO"])

    def close(self):
        if self._sink is not None:
            self._sink.close()
            self._sink = None


class Tracer:
    """
    Nested span logger used by the fitting and merge routines.

    Every line carries a millisecond timestamp, the level, indentation for
    the current span depth and the module:function that emitted it. With
    json_output set, each text line is followed by a JSON record of the
    same event.
    """

    def __init__(self):
        self.config = TracerConfig()
        self._open = []

    @property
    def depth(self):
        return len(self._open)

    def enabled_for(self, level):
        return self.config.enabled and LEVELS.get(level, LEVELS["INFO"]) <= self.config.threshold()

    def _emit(self, line):
        print(line, file=sys.stderr)
        sink = self.config._sink
        if sink is not None:
            sink.write(line + "\n")
            sink.flush()

    def _record(self, level, module, func, message, meta=None):
        if not self.enabled_for(level):
            return

        now = datetime.now()
        stamp = f"{now:%H:%M:%S}.{now.microsecond // 1000:03d}"
        where = f"{module}:{func}" if func else module
        self._emit(f"{stamp} {level:<5} {'  ' * self.depth}{where}  {message}")

        if self.config.json_output:
            self._emit(json.dumps({
                "timestamp": stamp,
                "level": level,
                "depth": self.depth,
                "module": module,
                "function": func,
                "message": message,
                "meta": {key: summarize(value) for key, value in (meta or {}).items()},
            }))

    def _close(self):
        opened = self._open.pop()
        return (time.perf_counter() - opened.started) * 1000

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Trace a block as a named span.

        Logs ``start`` with the summarized keyword arguments on entry and
        ``end ok`` with the elapsed milliseconds on exit. An exception is
        logged at ERROR with its type and message, then re-raised.
        """
        if not self.config.enabled:
            yield
            return

        self._record("INFO", module, name, _join("start", meta), meta)
        self._open.append(_OpenSpan(name, module, time.perf_counter()))
        try:
            yield
        except Exception as exc:
            ms = self._close()
            reason = f"{type(exc).__name__}: {str(exc)[:100]}"
            self._record("ERROR", module, name, f"failed dt={ms:.0f}ms error={reason}")
            raise
        ms = self._close()
        self._record("INFO", module, name, f"end ok dt={ms:.0f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a single line attributed to the innermost open span."""
        if not self.enabled_for(level):
            return
        owner = self._open[-1] if self._open else _OpenSpan("", "", 0.0)
        self._record(level, owner.module, owner.func, _join(message, meta), meta)


def _join(message, meta):
    pairs = " ".join(f"{key}={summarize(value)}" for key, value in meta.items())
    return f"{message} {pairs}".strip()


def summarize(obj, max_len=200):
    """
    One-line description of obj for span and event metadata, at most max_len chars.

    Short float arrays (control points) print their values; longer arrays
    print dtype, shape and a content hash. Points print as coordinates,
    segments as their endpoints and curves as their segment kinds.
    """
    try:
        text = _describe(obj)
    except Exception:
        text = f"<{type(obj).__name__}>"
    return text if len(text) <= max_len else text[:max_len - 3] + "..."


def _digest(data):
    return hashlib.md5(data).hexdigest()[:8]


def _describe_array(arr):
    shape = "x".join(map(str, arr.shape))
    if arr.dtype.kind == "f" and 0 < arr.size <= 8:
        return f"ndarray({shape},[{','.join(format(v, '.4g') for v in arr.ravel())}])"
    digest = _digest(arr.tobytes()) if arr.size < 1000 else "-"
    return f"ndarray({arr.dtype},{shape},h={digest})"


def _describe_model(model):
    kind = type(model).__name__
    if kind == "Point":
        return str(model)
    if kind == "BezierCurve":
        kinds = ",".join(type(seg).__name__ for seg in model.segments[:5])
        return f"BezierCurve(segments={len(model.segments)},kinds=[{kinds}],closed={model.is_closed})"
    if hasattr(model, "first_point"):
        return f"{kind}({model.first_point}->{model.last_point})"
    return f"{kind}(fields={list(type(model).model_fields)[:3]}...)"


def _describe(obj):
    if obj is None:
        return "None"
    if isinstance(obj, np.ndarray):
        return _describe_array(obj)
    if isinstance(obj, BaseModel):
        return _describe_model(obj)
    if isinstance(obj, str):
        return repr(obj) if len(obj) <= 50 else f"str(len={len(obj)},h={_digest(obj.encode())})"
    if isinstance(obj, (list, tuple)):
        head = f",first={type(obj[0]).__name__}" if obj else ""
        return f"{type(obj).__name__}(len={len(obj)}{head})"
    if isinstance(obj, dict):
        return f"dict(len={len(obj)},keys=[{','.join(map(str, list(obj)[:5]))}])"
    if isinstance(obj, float) and not isinstance(obj, bool):
        return format(obj, ".6g")
    if isinstance(obj, (bool, int, np.integer, np.floating)):
        return str(obj)
    return f"<{type(obj).__name__}>"


def trace(label=None):
    """
    Run the decorated function inside a span named after it.

    The first positional argument is summarized as ``arg0``.
    """
    def decorator(func):
        module = (func.__module__ or "").rpartition(".")[2]
        name = label or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)
            meta = {"arg0": args[0]} if args else {}
            with _tracer.span(name, module=module, **meta):
                return func(*args, **kwargs)

        return wrapper
    return decorator


_tracer = Tracer()


def get_tracer():
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Reconfigure the process-wide tracer, closing any previous trace file."""
    _tracer.config.configure(enabled=enabled, level=level, file_path=file_path, json_output=json_output)
