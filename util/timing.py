# util/timing.py
import time
from contextlib import contextmanager
from typing import Any, Iterator
import logging


def _fields(kv: dict) -> str:
    return "".join(f" {k}={v}" for k, v in kv.items())


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "ai.evaluate", backend="openai", model="gpt-4o-mini"):
          ...
    On success emits one INFO:    "<name>.done ms=<int> key=val ..."
    On error emits one WARNING:   "<name>.failed ms=<int> err=<ExcType> key=val ..."
    and re-raises. Only the exception type is logged, never its message,
    since backend errors can echo prompt text.
    """
    t0 = time.perf_counter()
    try:
        yield
    except BaseException as e:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        logger.warning("%s.failed ms=%d err=%s%s", name, dt_ms, type(e).__name__, _fields(kv))
        raise
    dt_ms = int((time.perf_counter() - t0) * 1000)
    logger.info("%s.done ms=%d%s", name, dt_ms, _fields(kv))
