"""Server lifecycle: Starting -> Serving -> Draining -> Stopped.

The manager owns a uvicorn server whose own signal capture is disabled;
interrupts are routed to :meth:`LifecycleManager.request_shutdown`
instead, which starts a drain bounded by ``shutdown_timeout``. New
connections are refused as soon as draining starts. If in-flight requests
outlive the deadline they are cut off and the overrun is logged.
"""

import asyncio
import contextlib
import enum
import logging
import signal
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Extra time granted on top of the drain deadline for uvicorn to cancel
# leftover tasks and run the lifespan shutdown.
FORCE_EXIT_GRACE = 1.0

# Floor for the drain deadline handed to uvicorn, in seconds
MIN_GRACEFUL_SHUTDOWN = 0.1


class ServerState(str, enum.Enum):
    STARTING = "starting"
    SERVING = "serving"
    DRAINING = "draining"
    STOPPED = "stopped"


class _GatewayServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the lifecycle manager."""

    def __init__(self, config: uvicorn.Config, on_started: Callable[[], None]):
        super().__init__(config)
        self._on_started = on_started

    @contextlib.contextmanager
    def capture_signals(self):
        yield

    async def startup(self, sockets=None) -> None:
        await super().startup(sockets=sockets)
        if not self.should_exit:
            self._on_started()


class LifecycleManager:
    """Runs the gateway app until an interrupt, then drains and stops.

    Usage:
        manager = LifecycleManager(app, host="0.0.0.0", port=8080)
        asyncio.run(manager.run())
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = "0.0.0.0",
        port: int = 8080,
        shutdown_timeout: float = 5.0,
        keep_alive_timeout: int = 120,
        log_level: str = "info",
    ):
        self.shutdown_timeout = shutdown_timeout
        self.state = ServerState.STARTING
        self._serving = asyncio.Event()
        self._interrupted = asyncio.Event()
        config = uvicorn.Config(
            app,
            host=host,
            port=port,
            timeout_keep_alive=keep_alive_timeout,
            timeout_graceful_shutdown=max(shutdown_timeout, MIN_GRACEFUL_SHUTDOWN),
            log_level=log_level.lower(),
        )
        self.server = _GatewayServer(config, on_started=self._mark_serving)

    def _mark_serving(self) -> None:
        self.state = ServerState.SERVING
        self._serving.set()
        logger.info(
            "Translation gateway running on http://%s:%d",
            self.server.config.host,
            self.server.config.port,
        )

    def request_shutdown(self) -> None:
        """Signal an interrupt. Safe to call more than once."""
        if not self._interrupted.is_set():
            logger.info("Shutdown requested, draining connections...")
        self._interrupted.set()

    async def wait_until_serving(self) -> None:
        await self._serving.wait()

    def install_signal_handlers(self) -> None:
        """Route SIGINT/SIGTERM to :meth:`request_shutdown`."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except (NotImplementedError, RuntimeError):
                # Windows event loops: fall back to plain signal handlers
                signal.signal(
                    sig, lambda *_: loop.call_soon_threadsafe(self.request_shutdown)
                )

    async def run(self, install_signals: bool = True) -> None:
        """Serve until interrupted, then drain and stop."""
        if install_signals:
            self.install_signal_handlers()

        serve_task = asyncio.ensure_future(self.server.serve())
        interrupt_task = asyncio.ensure_future(self._interrupted.wait())
        try:
            await asyncio.wait(
                {serve_task, interrupt_task}, return_when=asyncio.FIRST_COMPLETED
            )
            if serve_task.done():
                # Exited on its own; a failed bind never gets here because
                # uvicorn calls sys.exit from startup
                serve_task.result()
                return

            self.state = ServerState.DRAINING
            self.server.should_exit = True
            done, _ = await asyncio.wait(
                {serve_task}, timeout=self.shutdown_timeout + FORCE_EXIT_GRACE
            )
            if not done:
                logger.warning(
                    "Drain deadline of %.1fs elapsed with requests in flight, "
                    "forcing shutdown",
                    self.shutdown_timeout,
                )
                self.server.force_exit = True
                serve_task.cancel()
                await asyncio.wait({serve_task})
            elif serve_task.exception() is not None:
                logger.error("Server stopped with an error: %r", serve_task.exception())
        finally:
            interrupt_task.cancel()
            self.state = ServerState.STOPPED
            logger.info("Server stopped")
