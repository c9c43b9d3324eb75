"""
Blog Posts API: Process Lifecycle
==================================

What:  Starts and stops the whole service: store connection plus HTTP listener.
How:   BlogServer owns a Database and a uvicorn.Server running in a task on
       the current event loop. start() returns once the socket is bound;
       stop() closes the listener and then the store, in that order.
Who:   The `blog-api` console script (main()), and tests that need a real
       listener.

State machine:
    stopped → starting → listening → stopping → stopped

    A failure while starting (store unreachable, port taken) disposes the
    store and returns to stopped before the error propagates.
"""

import asyncio
import enum
import logging
import socket
from typing import Optional

import uvicorn

from blog_api.config import Settings, settings as default_settings
from blog_api.database import Database
from blog_api.main import create_app, setup_logging

logger = logging.getLogger(__name__)


class ServerState(str, enum.Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    LISTENING = "listening"
    STOPPING = "stopping"


class BlogServer:
    """
    Explicit handle on a running service instance.

    Usage:
        server = BlogServer(settings)
        await server.start()
        ...
        await server.stop()
    """

    # Polling interval while waiting for uvicorn to bind
    STARTUP_POLL_INTERVAL = 0.05

    def __init__(
        self,
        config: Optional[Settings] = None,
        database: Optional[Database] = None,
    ):
        self.config = config or default_settings
        self.database = database
        self.state = ServerState.STOPPED
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._socket: Optional[socket.socket] = None

    @property
    def port(self) -> Optional[int]:
        """The port actually bound (differs from config.port when that is 0)."""
        if self._socket is None:
            return None
        return self._socket.getsockname()[1]

    def _bind_socket(self) -> socket.socket:
        """
        Bind the listening socket here rather than inside uvicorn, which
        calls sys.exit(1) on bind errors. A taken port surfaces as OSError.
        """
        family = socket.AF_INET6 if ":" in self.config.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.config.host, self.config.port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock

    async def start(self) -> None:
        """
        Connect the store, then bind the HTTP listener.

        Raises:
            RuntimeError: start() called while not stopped, or the app
                          failed its startup before listening
            OSError:      the listener could not bind
            Any store connection error, unchanged
        """
        if self.state is not ServerState.STOPPED:
            raise RuntimeError(f"Cannot start server in state '{self.state.value}'")

        self.state = ServerState.STARTING
        if self.database is None:
            self.database = Database.from_settings(self.config)

        try:
            await self.database.connect()
            if self.config.db_create_all:
                await self.database.create_all()

            self._socket = self._bind_socket()
            app = create_app(self.config, database=self.database)
            uvicorn_config = uvicorn.Config(
                app,
                host=self.config.host,
                port=self.port,
                log_config=None,  # keep the logging set up by setup_logging()
                lifespan="on",
            )
            self._server = uvicorn.Server(uvicorn_config)
            self._serve_task = asyncio.create_task(self._server.serve(sockets=[self._socket]))
            await self._wait_until_listening()
        except BaseException:
            await self._release()
            raise

        self.state = ServerState.LISTENING
        logger.info("Your app is listening on %s:%s", self.config.host, self.port)

    async def _wait_until_listening(self) -> None:
        while not self._server.started:
            if self._serve_task.done():
                # Re-raises whatever ended the task, if it raised
                self._serve_task.result()
                raise RuntimeError(f"Server exited before listening on port {self.port}")
            await asyncio.sleep(self.STARTUP_POLL_INTERVAL)

    async def wait_closed(self) -> None:
        """Block until the listener exits (e.g. after SIGINT/SIGTERM)."""
        if self._serve_task is not None:
            await asyncio.shield(self._serve_task)

    async def stop(self) -> None:
        """Close the listener, then disconnect the store. No-op unless listening."""
        if self.state is not ServerState.LISTENING:
            return

        self.state = ServerState.STOPPING
        logger.info("Closing server")
        try:
            self._server.should_exit = True
            if not self._serve_task.done():
                await self._serve_task
        finally:
            await self._release()

    async def _release(self) -> None:
        if self._serve_task is not None and not self._serve_task.done():
            self._serve_task.cancel()
        if self._socket is not None:
            self._socket.close()
        await self.database.dispose()
        self._server = None
        self._serve_task = None
        self._socket = None
        self.state = ServerState.STOPPED


async def _run(config: Settings) -> None:
    server = BlogServer(config)
    await server.start()
    try:
        await server.wait_closed()
    finally:
        await server.stop()


def main() -> None:
    """Console entry point: `blog-api`."""
    setup_logging(default_settings.log_level)
    try:
        asyncio.run(_run(default_settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
