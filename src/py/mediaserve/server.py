import asyncio
import socket
import threading
import time
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, Literal, NamedTuple

from .config import HOST, LOG_REQUESTS, PORT
from .http.model import (
	HTTPBodyFile,
	HTTPBodyWriter,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPResponse,
)
from .http.parser import HTTPParser
from .model import Application, Service, mount
from .utils.limits import LimitType, unlimit
from .utils.logging import debug, event, exception, info, logged, warning


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	host: str = HOST
	port: int = PORT
	backlog: int = 1_024
	# Polling timeout for accepting new connections, so that the stop
	# condition and signals are checked regularly.
	polling: float = 1.0
	readsize: int = 64_000
	# Idle time after which a kept-alive connection is closed
	keepalive: float = 120.0
	logRequests: bool = LOG_REQUESTS
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


OPTIONS: ServerOptions = ServerOptions()

SERVER_BAD_REQUEST: bytes = (
	b"HTTP/1.1 400 Bad Request\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 11\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Bad Request"
)


class AIOSocketBodyWriter(HTTPBodyWriter):
	"""Specialized body writer to work with AIO sockets."""

	def __init__(self, client: "socket.socket", loop: asyncio.AbstractEventLoop) -> None:
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop

	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		if chunk:
			await self.loop.sock_sendall(self.client, chunk)
		return True

	async def _writeFile(self, body: HTTPBodyFile, size: int = 64_000) -> bool:
		# NOTE: A count of 0 means the whole file for `sock_sendfile`
		if body.length <= 0:
			return True
		with open(body.path, "rb") as f:
			await self.loop.sock_sendfile(self.client, f, body.offset, body.length)
		return True


class AIOSocketServer:
	"""AsyncIO backend using sockets directly."""

	@classmethod
	async def OnRequest(
		cls,
		app: Application,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Asynchronous worker, processing the requests of a client connection
		until it is closed, times out or asks not to be kept alive."""
		parser: HTTPParser = HTTPParser()
		writer: AIOSocketBodyWriter = AIOSocketBodyWriter(client, loop)
		status: HTTPProcessingStatus = HTTPProcessingStatus.Processing
		req_count: int = 0
		keep_alive: bool = True
		try:
			while keep_alive:
				try:
					chunk: bytes = await asyncio.wait_for(
						loop.sock_recv(client, options.readsize),
						timeout=options.keepalive,
					)
				except asyncio.TimeoutError:
					status = HTTPProcessingStatus.Timeout
					break
				if not chunk:
					status = HTTPProcessingStatus.NoData
					break
				# With pipelining, a chunk may hold more than one request
				for atom in parser.feed(chunk):
					if atom is HTTPProcessingStatus.BadFormat:
						status = atom
						warning("Malformed request", Client=f"{id(client):x}")
						await writer.write(SERVER_BAD_REQUEST)
						keep_alive = False
						break
					elif isinstance(atom, HTTPRequest):
						req_count += 1
						# A request with a pending body or no keep-alive
						# is the last one on the connection.
						close: bool = (
							parser.isClosed or atom.hasRemaining or not atom.keepAlive
						)
						res = await cls.SendResponse(
							atom, app, writer, close=close, options=options
						)
						if close or res.shouldClose:
							keep_alive = False
							break
					else:
						status = atom
			logged(debug) and debug(
				"Connection closed",
				Client=f"{id(client):x}",
				Status=status.name,
				Requests=req_count,
			)
		except (BrokenPipeError, ConnectionResetError) as e:
			debug("Client disconnected", Client=f"{id(client):x}", Error=str(e))
		except Exception as e:
			exception(e)
		finally:
			client.close()

	@staticmethod
	async def SendResponse(
		request: HTTPRequest,
		app: Application,
		writer: HTTPBodyWriter,
		*,
		close: bool = False,
		options: ServerOptions = OPTIONS,
	) -> HTTPResponse:
		"""Processes the request within the application and sends a response
		using the given writer. Unexpected errors yield a `500` response, and
		`HEAD` requests only get the head of the response."""
		started: float = time.monotonic()
		try:
			res: HTTPResponse = await app.process(request)
		except Exception as e:
			exception(e, f"Unexpected error processing {request.method} {request.path}")
			res = request.fail()
		if close:
			res.setHeader("Connection", "close")
		try:
			await writer.write(res.head())
			if request.method != "HEAD":
				await writer.write(res.body)
		except (BrokenPipeError, ConnectionResetError):
			warning("Client closed the connection", Method=request.method, Path=request.path)
			res.shouldClose = True
		if options.logRequests:
			event(
				"Request",
				res.status,
				Method=request.method,
				Path=request.path,
				Duration=f"{1000 * (time.monotonic() - started):0.1f}ms",
				Agent=request.header("User-Agent") or "",
			)
		return res

	@classmethod
	async def Serve(cls, app: Application, options: ServerOptions = OPTIONS) -> None:
		"""Main server coroutine."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		server.bind((options.host, options.port))
		# The backlog is the number of connections accepted before they are
		# refused.
		server.listen(options.backlog)
		server.setblocking(False)

		tasks: set[asyncio.Task[None]] = set()
		loop = asyncio.get_running_loop()
		state = ServerState()
		# Signal handlers can only be registered from the main thread
		if options.stopSignals and threading.current_thread() is threading.main_thread():
			loop.add_signal_handler(SIGINT, state.stop)
			loop.add_signal_handler(SIGTERM, state.stop)
		loop.set_exception_handler(state.onException)

		await app.start()
		info("Media server listening", icon="🚀", Host=options.host, Port=options.port)
		try:
			while state.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling
					)
				except asyncio.TimeoutError:
					continue
				except OSError as e:
					# Too many open files, we wait for connections to close
					if e.errno == 24:
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				client.setblocking(False)
				task = loop.create_task(
					cls.OnRequest(app, client, loop=loop, options=options)
				)
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)
			await app.stop()


def run(
	*components: Application | Service,
	host: str = HOST,
	port: int = PORT,
	backlog: int = OPTIONS.backlog,
	keepalive: float = OPTIONS.keepalive,
	logRequests: bool = LOG_REQUESTS,
	condition: Callable[[], bool] | None = None,
) -> None:
	"""High level function to run the server."""
	unlimit(LimitType.Files)
	options = ServerOptions(
		host=host,
		port=port,
		backlog=backlog,
		keepalive=keepalive,
		logRequests=logRequests,
		condition=condition,
	)
	app = mount(*components)
	try:
		asyncio.run(AIOSocketServer.Serve(app, options))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("Stopped")


# EOF
