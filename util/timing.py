import time
from contextlib import contextmanager
from typing import Iterator, Any
import logging


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "poll.cycle", trigger="periodic"):
          ...
    Emits "<name>.done ms=<int> key=val ..." on success, "<name>.error ..." when
    the block raises (the exception still propagates).
    """
    t0 = time.perf_counter()
    suffix = "".join(f" {k}={v}" for k, v in kv.items())
    try:
        yield
    except BaseException:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        logger.warning("%s.error ms=%d%s", name, dt_ms, suffix)
        raise
    dt_ms = int((time.perf_counter() - t0) * 1000)
    logger.debug("%s.done ms=%d%s", name, dt_ms, suffix)
