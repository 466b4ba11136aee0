from typing import ClassVar, Iterator, NamedTuple
from urllib.parse import unquote_plus

from ..utils.io import EOH, EOL
from .model import (
	HTTPAtom,
	HTTPBodyBlob,
	HTTPHeaders,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPRequestLine,
	headername,
)


class HTTPHead(NamedTuple):
	"""The request line and headers of a request whose body is pending."""

	line: HTTPRequestLine
	headers: HTTPHeaders


def parseRequestLine(line: bytes) -> HTTPRequestLine | None:
	"""Parses a line like `GET /path?query HTTP/1.1`, returning `None` when
	the line is not a valid request line."""
	try:
		# NOTE: Request targets are ASCII, non-ASCII characters must be
		# percent-encoded.
		text: str = line.decode("ascii")
	except UnicodeDecodeError:
		return None
	chunks = text.split(" ")
	if len(chunks) != 3 or not chunks[0] or not chunks[1]:
		return None
	method, target, protocol = chunks
	if not protocol.startswith("HTTP/"):
		return None
	target = target.split("#", 1)[0]
	path, _, query = target.partition("?")
	return HTTPRequestLine(method.upper(), path, query, protocol)


def parseHeaders(lines: list[bytes]) -> HTTPHeaders | None:
	"""Parses the header lines, returning `None` when one of them is
	malformed."""
	headers: dict[str, str] = {}
	content_type: str | None = None
	content_length: int | None = None
	for line in lines:
		# Headers values are ISO-8859-1 at most
		ln: str = line.decode("latin-1")
		i = ln.find(":")
		if i <= 0:
			return None
		name = ln[:i].strip().lower()
		value = ln[i + 1 :].strip()
		if name == "content-length":
			try:
				content_length = int(value)
			except ValueError:
				return None
			if content_length < 0:
				return None
		elif name == "content-type":
			content_type = value
		headers[headername(name)] = value
	return HTTPHeaders(headers, content_type, content_length)


def parseQuery(text: str) -> dict[str, str]:
	res: dict[str, str] = {}
	for item in text.split("&"):
		if not item:
			continue
		kv = item.split("=", 1)
		res[unquote_plus(kv[0])] = unquote_plus(kv[1]) if len(kv) > 1 else ""
	return res


class HTTPParser:
	"""A stateful, incremental HTTP request parser. Chunks are fed as they
	come from the socket, and complete requests are yielded. A request with a
	body larger than `maxBody` (or a chunked body) is yielded without its
	body and the parser closes, as the connection can't be reused."""

	MAX_HEAD: ClassVar[int] = 64 * 1024
	MAX_BODY: ClassVar[int] = 1024 * 1024

	def __init__(self, maxBody: int = MAX_BODY) -> None:
		self.buffer: bytearray = bytearray()
		self.maxBody: int = maxBody
		self.pending: HTTPHead | None = None
		self.isClosed: bool = False

	def reset(self) -> "HTTPParser":
		self.buffer.clear()
		self.pending = None
		self.isClosed = False
		return self

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		if self.isClosed:
			return
		self.buffer += chunk
		while not self.isClosed:
			if self.pending is None:
				# Empty lines before a request line are to be ignored
				while self.buffer.startswith(EOL):
					del self.buffer[: len(EOL)]
				end = self.buffer.find(EOH)
				if end == -1:
					if len(self.buffer) > self.MAX_HEAD:
						self.isClosed = True
						yield HTTPProcessingStatus.BadFormat
					return
				lines: list[bytes] = bytes(self.buffer[:end]).split(EOL)
				del self.buffer[: end + len(EOH)]
				line = parseRequestLine(lines[0])
				headers = parseHeaders(lines[1:])
				if line is None or headers is None:
					self.isClosed = True
					yield HTTPProcessingStatus.BadFormat
					return
				length: int = headers.contentLength or 0
				# NOTE: Chunked bodies are not supported, so we can't know
				# where the next request starts.
				if length > self.maxBody or "Transfer-Encoding" in headers.headers:
					self.isClosed = True
					yield self.request(line, headers, HTTPBodyBlob(remaining=length))
					return
				self.pending = HTTPHead(line, headers)
			# A request without a `Content-Length` has no body, as we don't
			# support chunked request bodies.
			expected: int = self.pending.headers.contentLength or 0
			if len(self.buffer) < expected:
				return
			body = HTTPBodyBlob.FromBytes(bytes(self.buffer[:expected]))
			del self.buffer[:expected]
			head, self.pending = self.pending, None
			yield self.request(head.line, head.headers, body)
			yield HTTPProcessingStatus.Complete

	def request(
		self, line: HTTPRequestLine, headers: HTTPHeaders, body: HTTPBodyBlob
	) -> HTTPRequest:
		return HTTPRequest(
			method=line.method,
			path=line.path,
			query=parseQuery(line.query),
			headers=headers,
			body=body,
			protocol=line.protocol,
		)


# EOF
