from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Literal, NamedTuple, TypeAlias

from ..utils.io import DEFAULT_ENCODING
from ..utils.primitives import TPrimitive
from .api import ResponseFactory
from .ranges import FileSlice
from .status import HTTP_STATUS, HTTP_NO_BODY

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


def headervalue(name: str, value: Any) -> str:
	"""Returns the value as a string, raising a `ValueError` when it would
	break out of its header line."""
	res: str = str(value)
	if "\r" in res or "\n" in res:
		raise ValueError(f"Header {name} has a line break in its value: {res!r}")
	return res


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	"""Represents a request status line"""

	method: str
	path: str
	query: str
	protocol: str


class HTTPHeaders(NamedTuple):
	"""Wraps HTTP headers, keeping key information for response/request processing."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None


class HTTPProcessingStatus(Enum):
	"""Internal parser/processor state management"""

	Processing = 0
	Complete = 2
	Timeout = 10
	NoData = 11
	BadFormat = 12


# Type alias for what the parser produces
HTTPAtom: TypeAlias = "HTTPProcessingStatus | HTTPRequest"

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""To be raised by handlers to generate an error response, by default
	a 500 error. The message is for the logs, clients only get the generic
	status message."""

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str | None = None,
		payload: TPrimitive | None = None,
	):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status
		self.contentType: str | None = contentType
		self.payload: TPrimitive | bytes | None = payload


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


class HTTPBodyBlob(NamedTuple):
	"""Represents a part (or a whole) body as bytes."""

	payload: bytes = b""
	length: int = 0
	# NOTE: Bytes that were announced but not read, a request with a
	# remaining body can't be followed by another one on the connection.
	remaining: int | None = None

	@staticmethod
	def FromBytes(data: bytes) -> "HTTPBodyBlob":
		return HTTPBodyBlob(payload=data, length=len(data))

	@property
	def raw(self) -> bytes:
		return self.payload


class HTTPBodyFile(NamedTuple):
	"""Represents an HTTP body streamed from a slice of a file."""

	path: Path
	offset: int = 0
	length: int = 0


# The different types of bodies that are managed
THTTPBody: TypeAlias = HTTPBodyBlob | HTTPBodyFile


class HTTPBodyWriter(ABC):
	"""A generic writer for response bodies."""

	async def write(self, body: THTTPBody | bytes | None) -> bool:
		"""Writes the given type of body."""
		if isinstance(body, bytes):
			return await self._writeBytes(body)
		elif isinstance(body, HTTPBodyBlob):
			return await self._writeBytes(body.payload)
		elif isinstance(body, HTTPBodyFile):
			return await self._writeFile(body)
		elif body is None:
			return True
		else:
			raise ValueError(f"Unsupported body format: {body}")

	async def _writeFile(self, body: HTTPBodyFile, size: int = 64_000) -> bool:
		remaining: int = body.length
		# NOTE: The file is released on every exit path, including when the
		# client goes away in the middle of the transfer.
		with open(body.path, "rb") as f:
			f.seek(body.offset)
			while remaining > 0 and (chunk := f.read(min(size, remaining))):
				remaining -= len(chunk)
				await self._writeBytes(chunk, remaining > 0)
		return True

	@abstractmethod
	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool: ...


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""Represents an HTTP requests, which also acts as a factory for
	responses."""

	__slots__ = ["protocol", "method", "path", "query", "_headers", "_body"]

	@staticmethod
	def Create(
		method: str,
		path: str,
		headers: dict[str, str] | None = None,
		*,
		query: dict[str, str] | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPRequest":
		"""Creates a request with no body, normalizing the header names."""
		return HTTPRequest(
			method=method,
			path=path,
			query=query,
			headers=HTTPHeaders(
				{headername(k): v for k, v in (headers or {}).items()}
			),
			body=HTTPBodyBlob(),
			protocol=protocol,
		)

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None,
		headers: HTTPHeaders,
		body: HTTPBodyBlob | None = None,
		protocol: str = "HTTP/1.1",
	):
		super().__init__()
		self.method: str = method
		self.path: str = path
		self.query: dict[str, str] | None = query
		self.protocol: str = protocol
		self._headers: HTTPHeaders = headers
		self._body: HTTPBodyBlob | None = body

	@property
	def headers(self) -> dict[str, str]:
		return self._headers.headers

	def header(self, name: str) -> str | None:
		return self._headers.headers.get(headername(name))

	def param(self, name: str, default: str | None = None) -> str | None:
		return self.query.get(name, default) if self.query else default

	@property
	def contentType(self) -> str | None:
		return self._headers.contentType

	@property
	def contentLength(self) -> int | None:
		return self._headers.contentLength

	@property
	def body(self) -> HTTPBodyBlob:
		return self._body or HTTPBodyBlob()

	@property
	def hasRemaining(self) -> bool:
		"""Tells if the request announced a body that was not read."""
		return bool(self._body and self._body.remaining)

	@property
	def keepAlive(self) -> bool:
		connection: str = (self.header("Connection") or "").lower()
		if self.protocol == "HTTP/1.0":
			return connection == "keep-alive"
		else:
			return connection != "close"

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			status=status,
			message=message,
			content=content,
			contentType=contentType,
			contentLength=contentLength,
			protocol=self.protocol,
			headers=headers,
		)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path}{f'?{self.query}' if self.query else ''} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response."""

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects."""
		updated_headers: dict[str, str] = {
			headername(k): headervalue(k, v) for k, v in (headers or {}).items()
		}
		body: THTTPBody | None = None
		if content is None:
			pass
		elif isinstance(content, str):
			body = HTTPBodyBlob.FromBytes(content.encode(DEFAULT_ENCODING))
		elif isinstance(content, bytes):
			body = HTTPBodyBlob.FromBytes(content)
		elif isinstance(content, FileSlice):
			body = HTTPBodyFile(content.path, content.offset, content.length)
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		if contentType is not None:
			updated_headers["Content-Type"] = contentType
		# Content Length, which is always given so that connections can
		# be kept alive.
		if isinstance(body, HTTPBodyBlob):
			contentLength = body.length
		elif isinstance(body, HTTPBodyFile):
			contentLength = body.length
		elif "Content-Length" in updated_headers:
			contentLength = int(updated_headers["Content-Length"])
		elif status not in HTTP_NO_BODY:
			contentLength = 0
		if contentLength is not None:
			updated_headers["Content-Length"] = str(contentLength)
		return HTTPResponse(
			status=status,
			message=message or HTTP_STATUS.get(status, "Unknown status"),
			headers=HTTPHeaders(
				updated_headers,
				contentType=updated_headers.get("Content-Type"),
				contentLength=contentLength,
			),
			body=body,
			protocol=protocol,
		)

	__slots__ = [
		"protocol",
		"status",
		"message",
		"headers",
		"body",
		"shouldClose",
	]

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: THTTPBody | None = None,
		shouldClose: bool = False,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		# NOTE: Content-Disposition headers may have a non-ascii value, which
		# is why the head is encoded as latin-1.
		self.headers: HTTPHeaders = headers
		self.body: THTTPBody | None = body
		self.shouldClose: bool = shouldClose

	def header(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		if value is None:
			self.headers.headers.pop(headername(name), None)
		else:
			self.headers.headers[headername(name)] = headervalue(name, value)
		return self

	def setHeaders(self, headers: dict[str, str | int | None]) -> "HTTPResponse":
		for k, v in headers.items():
			self.setHeader(k, v)
		return self

	def head(self) -> bytes:
		"""Serializes the head as a payload."""
		message: str = self.message or HTTP_STATUS.get(self.status, "Unknown status")
		lines: list[str] = [
			f"{headername(k)}: {v}" for k, v in self.headers.headers.items()
		]
		lines.insert(0, f"{self.protocol} {self.status} {message}")
		lines.append("")
		lines.append("")
		return "\r\n".join(lines).encode("latin-1", errors="replace")

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message} {self.headers} {self.body})"


# EOF
