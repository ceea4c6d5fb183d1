"""Coordinated startup and shutdown of several network listeners.

The API and the metrics endpoint are separate uvicorn servers sharing one
event loop. The coordinator owns signal handling for all of them: on
SIGINT/SIGTERM every listener stops accepting and drains in-flight
requests; listeners still running after the grace period are forced
closed.
"""

import asyncio
import contextlib
import signal
from collections.abc import Iterator, Sequence
from typing import Protocol

import uvicorn

from textcache.logging_config import get_logger

logger = get_logger(__name__)


class Listener(Protocol):
    """What the coordinator needs from a server (uvicorn.Server satisfies it)."""

    should_exit: bool
    force_exit: bool

    async def serve(self) -> None: ...


class ManagedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to ShutdownCoordinator."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class ShutdownCoordinator:
    """Runs listeners concurrently and shuts them down together.

    Example:
        ```python
        coordinator = ShutdownCoordinator([api_server, metrics_server], grace_period=5)
        asyncio.run(coordinator.run())
        ```
    """

    def __init__(
        self,
        listeners: Sequence[Listener],
        grace_period: float = 5.0,
        signals: Sequence[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        """Initialize the coordinator.

        Args:
            listeners: Servers to run; each must expose ``serve()`` and the
                ``should_exit`` / ``force_exit`` flags.
            grace_period: Seconds to wait for in-flight requests before forcing.
            signals: Signals that trigger shutdown.
        """
        self._listeners = list(listeners)
        self._grace_period = grace_period
        self._signals = tuple(signals)
        self._stop = asyncio.Event()

    def request_shutdown(self) -> None:
        """Begin shutdown (called from signal handlers, or directly)."""
        if not self._stop.is_set():
            logger.info("Shutdown requested")
        self._stop.set()

    async def run(self) -> None:
        """Serve until a signal arrives or any listener exits, then shut down.

        Raises:
            Exception: The first error raised by a listener, after shutdown
        """
        loop = asyncio.get_running_loop()
        installed: list[signal.Signals] = []
        for sig in self._signals:
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Windows event loops and non-main threads
                logger.debug("Signal handler unavailable", signal=sig.name)

        tasks = [asyncio.create_task(listener.serve()) for listener in self._listeners]
        stop_waiter = asyncio.create_task(self._stop.wait())

        try:
            await asyncio.wait([*tasks, stop_waiter], return_when=asyncio.FIRST_COMPLETED)
            if not self._stop.is_set():
                logger.warning("A listener exited, shutting down the others")
            await self._shutdown(tasks)
        finally:
            stop_waiter.cancel()
            for sig in installed:
                loop.remove_signal_handler(sig)

        for task in tasks:
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()  # type: ignore[misc]

    async def _shutdown(self, tasks: list[asyncio.Task]) -> None:
        logger.info("Shutting down listeners", grace_period=self._grace_period)
        for listener in self._listeners:
            listener.should_exit = True

        pending = {task for task in tasks if not task.done()}
        if pending:
            _, pending = await asyncio.wait(pending, timeout=self._grace_period)

        if pending:
            logger.warning("Grace period expired, forcing listeners closed", remaining=len(pending))
            for listener in self._listeners:
                listener.force_exit = True
            _, pending = await asyncio.wait(pending, timeout=1.0)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        logger.info("All listeners stopped")
