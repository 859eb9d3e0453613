"""Loguru-style logging facade backed by stdlib logging + rich.

Usage::

    from gcenode.observability.logger import logger

    log = logger.bind(provider="gce")
    log.info("Created instance {name}", name="web-1")

Records are routed to the stdlib logger of the calling module, so the usual
``logging`` configuration (levels, filters) still applies underneath the
``gcenode`` root.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_root = logging.getLogger("gcenode")

_FILE_FORMAT = (
    "%(asctime)s.%(msecs)03d | %(levelname)-8s | "
    "%(name)s:%(funcName)s:%(lineno)d - %(message)s"
)


def _format_message(msg: str, args: tuple[object, ...], kwargs: dict[str, object]) -> str:
    if kwargs:
        return msg.format(**kwargs)
    if args:
        return msg.format(*args)
    return msg


class BoundLogger:
    """Logger carrying extra context fields onto every record."""

    __slots__ = ("_extras",)

    def __init__(self, extras: dict[str, object] | None = None) -> None:
        self._extras = extras or {}

    def bind(self, **kwargs: object) -> BoundLogger:
        return BoundLogger({**self._extras, **kwargs})

    def _log(self, level: int, message: str, /, *args: object, **kwargs: object) -> None:
        exc_info = kwargs.pop("exc_info", False)
        # 0 = _log, 1 = public level method, 2 = caller
        frame = sys._getframe(2)
        module = frame.f_globals.get("__name__", "gcenode")
        target = logging.getLogger(module)
        if not target.isEnabledFor(level):
            return
        record = target.makeRecord(
            name=target.name,
            level=level,
            fn=frame.f_code.co_filename,
            lno=frame.f_lineno,
            msg=_format_message(message, args, kwargs),
            args=(),
            exc_info=sys.exc_info() if exc_info else None,
            func=frame.f_code.co_name,
        )
        record.filename = os.path.basename(frame.f_code.co_filename)
        for k, v in self._extras.items():
            setattr(record, k, v)
        record.extras = self._extras  # type: ignore[attr-defined]
        target.handle(record)

    def trace(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(TRACE, message, *args, **kwargs)

    def debug(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, /, *args: object, **kwargs: object) -> None:
        self._log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, /, *args: object, **kwargs: object) -> None:
        kwargs["exc_info"] = True
        self._log(logging.ERROR, message, *args, **kwargs)


class _Sinks:
    """Registry of handlers attached to the gcenode root logger."""

    def __init__(self) -> None:
        self._counter = 0
        self._handlers: dict[int, logging.Handler] = {}

    def add(self, sink: str | TextIO, *, level: str = "DEBUG") -> int:
        numeric_level = logging.getLevelName(level.upper())
        if not isinstance(numeric_level, int):
            numeric_level = logging.DEBUG

        match sink:
            case str() as path:
                handler: logging.Handler = logging.FileHandler(path)
                handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            case stream:
                handler = RichHandler(
                    level=numeric_level,
                    console=Console(file=stream),
                    show_time=True,
                    show_level=True,
                    show_path=True,
                    markup=False,
                    rich_tracebacks=True,
                )
        handler.setLevel(numeric_level)

        _root.addHandler(handler)
        self._counter += 1
        self._handlers[self._counter] = handler
        return self._counter

    def remove(self, handler_id: int | None = None) -> None:
        if handler_id is None:
            for h in self._handlers.values():
                _root.removeHandler(h)
                h.close()
            self._handlers.clear()
            return
        if h := self._handlers.pop(handler_id, None):
            _root.removeHandler(h)
            h.close()


class LoguruCompat(BoundLogger):
    """Module-level logger: a BoundLogger with sink management."""

    __slots__ = ("_sinks",)

    def __init__(self) -> None:
        super().__init__()
        self._sinks = _Sinks()

    def add(self, sink: str | TextIO, *, level: str = "DEBUG") -> int:
        return self._sinks.add(sink, level=level)

    def remove(self, handler_id: int | None = None) -> None:
        self._sinks.remove(handler_id)

    def enable(self, name: str = "gcenode") -> None:
        logging.getLogger(name).disabled = False

    def disable(self, name: str = "gcenode") -> None:
        logging.getLogger(name).disabled = True


logger = LoguruCompat()


def configure_logging(level: str = "INFO", path: str | None = None) -> None:
    """Replace all gcenode sinks with a console sink and an optional file sink."""
    logger.remove()
    logger.add(sys.stderr, level=level)
    if path:
        logger.add(path, level=level)


_root.setLevel(TRACE)
_root.propagate = False
