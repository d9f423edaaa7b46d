"""Uncaught thread exception handling for test runs.

Background threads that die with an exception are reported through
threading.excepthook. UncaughtExceptionHandler filters that stream for
tests:

- RuntimeErrors raised because an executor was already shut down are
  dropped. They are expected noise while a test tears down its pools.
- RuntimeErrors raised because no new thread could be started trigger a
  dump of every thread's stack at ERROR level, which is usually the only
  way to find out who is leaking threads.

Everything else goes to the parent hook unchanged.

The handler is never installed implicitly. Install it for a bounded scope:

    with UncaughtExceptionHandler():
        run_workers()

or pair install()/uninstall() in setup and teardown.
"""

from __future__ import annotations

import sys
import threading
import traceback
from collections.abc import Callable, Iterable, Mapping
from types import FrameType, TracebackType

import structlog

logger = structlog.get_logger(__name__)

ExceptHook = Callable[[threading.ExceptHookArgs], object]

# Message fragments of the RuntimeErrors this handler special-cases
SHUTDOWN_MARKER = "cannot schedule new futures"
THREAD_EXHAUSTED_MARKER = "can't start new thread"


class UncaughtExceptionHandler:
    """Filtering threading.excepthook with scoped installation.

    Args:
        parent: Hook to delegate to. Defaults to the hook that is active
            when install() is called.
    """

    def __init__(self, parent: ExceptHook | None = None) -> None:
        self._parent = parent
        self._previous: ExceptHook | None = None
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def __call__(self, args: threading.ExceptHookArgs) -> None:
        exc = args.exc_value
        thread_name = args.thread.name if args.thread is not None else None
        if isinstance(exc, RuntimeError):
            message = str(exc)
            if SHUTDOWN_MARKER in message:
                logger.debug(
                    "uncaught_exception.shutdown_ignored",
                    thread=thread_name,
                    error=message,
                )
                return
            if THREAD_EXHAUSTED_MARKER in message:
                print_stack_dump()

        parent = self._parent or self._previous or threading.__excepthook__
        parent(args)

    def install(self) -> None:
        """Install as threading.excepthook, remembering the current hook.

        Raises:
            RuntimeError: If this handler is already installed.
        """
        if self._installed:
            raise RuntimeError("UncaughtExceptionHandler is already installed")
        self._previous = threading.excepthook
        threading.excepthook = self
        self._installed = True
        logger.debug("uncaught_exception.handler_installed")

    def uninstall(self) -> None:
        """Restore the hook that was active before install()."""
        if not self._installed:
            return
        if threading.excepthook is not self:
            logger.warning(
                "uncaught_exception.hook_replaced",
                current=repr(threading.excepthook),
            )
        threading.excepthook = self._previous or threading.__excepthook__
        self._previous = None
        self._installed = False
        logger.debug("uncaught_exception.handler_uninstalled")

    def __enter__(self) -> UncaughtExceptionHandler:
        self.install()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.uninstall()


def print_stack_dump() -> None:
    """Log the current stack of every live thread at ERROR level."""
    logger.error("uncaught_exception.thread_dump", stacks=format_thread_stacks())


def format_thread_stacks(
    frames: Mapping[int, FrameType] | None = None,
    threads: Iterable[threading.Thread] | None = None,
) -> str:
    """Dump threads and their current stack, innermost frame first.

    Args:
        frames: Thread ident to topmost frame. Defaults to sys._current_frames().
        threads: Threads to describe. Defaults to threading.enumerate().

    Returns:
        Multi-line dump, one numbered header per thread.

    Example:
        >>> print(format_thread_stacks({}, [threading.main_thread()]))  # doctest: +SKIP
        <BLANKLINE>
           1) Thread[id=140..., name=MainThread, daemon=False]
                at (empty stack)
    """
    if frames is None:
        frames = sys._current_frames()  # noqa: SLF001
    if threads is None:
        threads = threading.enumerate()

    lines: list[str] = []
    for count, thread in enumerate(threads, start=1):
        lines.append(f"\n  {count:2d}) {_thread_name(thread)}")
        frame = frames.get(thread.ident) if thread.ident is not None else None
        if frame is None:
            lines.append("\n        at (empty stack)")
            continue
        for entry in reversed(traceback.extract_stack(frame)):
            lines.append(f"\n        at {entry.name}({entry.filename}:{entry.lineno})")
    return "".join(lines)


def _thread_name(thread: threading.Thread) -> str:
    return f"Thread[id={thread.ident}, name={thread.name}, daemon={thread.daemon}]"


__all__ = [
    "UncaughtExceptionHandler",
    "format_thread_stacks",
    "print_stack_dump",
]
