import asyncio
import contextlib
import logging
import socket
from typing import Dict, List, Optional

import uvicorn

from greeter.errors import TransportError
from greeter.mcp.server.base_server import BaseMCPServer
from greeter.typing.transport import (
    ListenAddress,
    Listener,
    NetworkTransport,
    TransportMode,
    TransportPlan,
    TransportState,
)

logger = logging.getLogger(__name__)

_LISTENER_LABELS = {
    NetworkTransport.STREAMABLE_HTTP: "MCP handler",
    NetworkTransport.SSE: "MCP SSE handler",
}


class ListenerServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the process."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def bind_socket(address: ListenAddress) -> socket.socket:
    """Bind a listening TCP socket for ``address``.

    Raises:
        OSError: If the address cannot be bound
    """
    family = socket.AF_INET6 if address.is_ipv6 else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((address.host, address.port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


class TransportSelector:
    """Runs one server behind the transports a ``TransportPlan`` selects.

    stdio runs on the calling task and takes exclusive control. Network
    listeners each run in their own task and share the server's read-only
    registry; the first listener to fail or exit ends the run, the others
    are shut down, and ``TransportError`` is raised.
    """

    def __init__(
        self,
        server: BaseMCPServer,
        plan: TransportPlan,
        shutdown_timeout: Optional[float] = None,
    ) -> None:
        self.server = server
        self.plan = plan
        self.shutdown_timeout = shutdown_timeout or server.config.shutdown_timeout
        self.state = TransportState.UNSTARTED
        self.mode: Optional[TransportMode] = None
        self.tasks: List[asyncio.Task] = []
        self._listener_servers: Dict[NetworkTransport, uvicorn.Server] = {}
        self._stopping = False

    async def run(self) -> None:
        """Serve until stdio closes or the first network listener stops.

        Raises:
            TransportError: If a transport fails or a listener exits unasked
            RuntimeError: If called more than once
        """
        if self.state is not TransportState.UNSTARTED:
            raise RuntimeError(f"Transport selector already {self.state.value}")

        async with self.server.lifecycle():
            try:
                if self.plan.is_stdio:
                    await self._run_stdio()
                else:
                    await self._run_network()
            finally:
                self.state = TransportState.STOPPED
                logger.info("All transports stopped")

    def _set_running(self, mode: TransportMode) -> None:
        self.mode = mode
        self.state = TransportState.RUNNING

    async def _run_stdio(self) -> None:
        self._set_running(TransportMode.STDIO)
        logger.info("Serving MCP on stdin/stdout")

        try:
            await self.server.run_stdio()
        except Exception as e:
            raise TransportError("stdio", str(e) or type(e).__name__, e) from e

        logger.info("stdio stream closed")

    async def _run_network(self) -> None:
        if not self.plan.listeners:
            logger.warning("No transports configured, nothing to start")
            return

        self._set_running(TransportMode.NETWORK)
        for listener in self.plan.listeners:
            task = asyncio.create_task(
                self._serve(listener), name=f"transport_{listener.transport.value}"
            )
            self.tasks.append(task)

        logger.info("If you want to use stdin/stdout, pass the --stdio flag")

        try:
            done, _ = await asyncio.wait(self.tasks, return_when=asyncio.FIRST_COMPLETED)
            error = self._first_failure(done)
        finally:
            await self.stop_all()

        if error is not None:
            raise error

    def _first_failure(self, done) -> Optional[TransportError]:
        failure: Optional[TransportError] = None
        for listener, task in zip(self.plan.listeners, self.tasks):
            if task not in done or task.cancelled():
                continue

            exc = task.exception()
            if failure is not None:
                continue
            if isinstance(exc, TransportError):
                failure = exc
            elif exc is not None:
                failure = TransportError(
                    listener.transport.value, str(exc) or type(exc).__name__, exc
                )
            elif not self._stopping:
                failure = TransportError(
                    listener.transport.value, f"listener on {listener.address} exited"
                )
        return failure

    async def _serve(self, listener: Listener) -> None:
        name = listener.transport.value
        try:
            sock = bind_socket(listener.address)
        except OSError as e:
            raise TransportError(name, f"cannot listen on {listener.address}: {e}", e) from e

        try:
            app = self.server.http_app(listener.transport)
            config = uvicorn.Config(
                app,
                host=listener.address.host,
                port=listener.address.port,
                log_config=None,
                log_level=self.server.config.log_level.lower(),
                timeout_graceful_shutdown=max(1, int(self.shutdown_timeout)),
            )
            uvicorn_server = ListenerServer(config)
            self._listener_servers[listener.transport] = uvicorn_server

            logger.info(
                f"{_LISTENER_LABELS[listener.transport]} listening at {listener.address}"
            )
            await uvicorn_server.serve(sockets=[sock])
        finally:
            sock.close()

    def stop(self) -> None:
        """Ask every running listener to shut down."""
        self._stopping = True
        for uvicorn_server in self._listener_servers.values():
            uvicorn_server.should_exit = True

    async def stop_all(self) -> None:
        """Stop listeners and cancel whatever outlives the shutdown timeout."""
        self.stop()

        pending = [task for task in self.tasks if not task.done()]
        if not pending:
            return

        logger.info(f"Stopping {len(pending)} remaining transport(s)...")
        try:
            await asyncio.wait_for(
                asyncio.gather(*pending, return_exceptions=True),
                timeout=self.shutdown_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Some transports did not stop within timeout")
