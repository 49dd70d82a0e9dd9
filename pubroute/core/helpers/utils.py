import contextlib
import functools
import importlib
import logging
import pkgutil
import sys
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import Generator

from pubroute.core.helpers.shutdown import ShutdownSignal

SHUTDOWN_SIGNALS = (
    signal.SIGINT,
    signal.SIGTERM,
)

if sys.platform == "win32":
    SHUTDOWN_SIGNALS += (signal.SIGBREAK,)


@contextlib.contextmanager
def setup_signal_handler(shutdown: ShutdownSignal) -> Generator[ShutdownSignal, None, None]:
    """
    Route SIGINT/SIGTERM to `shutdown.signal()` while the context is active.

    Signals captured meanwhile are replayed with the original handlers on
    exit, so that the process still terminates with the expected status.
    """
    if threading.current_thread() is not threading.main_thread():
        yield shutdown
        return

    captured_signals: list[signal.Signals | int] = []

    def handle(sig: int, frame: FrameType | None) -> None:
        captured_signals.append(sig)
        shutdown.signal()

    original_handlers = {
        sig: signal.signal(sig, handle)
        for sig in SHUTDOWN_SIGNALS
    }

    try:
        yield shutdown
    finally:
        for sig, old in original_handlers.items():
            signal.signal(sig, old)

        for sig in reversed(captured_signals):
            if original_handlers[sig] is not handle:
                signal.raise_signal(sig)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s',
    )


def scan(package: str):
    """
    Decorator that imports every module of `package` before running the
    decorated function, so that processors register themselves.
    """
    def decorator(func: Callable):

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            py_package = importlib.import_module(package)

            for module_info in pkgutil.iter_modules(py_package.__path__):
                module_name = f"{package}.{module_info.name}"
                importlib.import_module(module_name)

            return func(*args, **kwargs)

        return wrapper

    return decorator
