from abc import ABC, abstractmethod
from base64 import b64encode
from pathlib import Path
from typing import Any, Generic, TypeVar

from ..utils.files import contentType as getContentType
from ..utils.json import json
from .ranges import (
	ByteRange,
	FileSlice,
	UnsatisfiableRange,
	httpdate,
	ifRangeMatches,
	isNotModified,
)
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# API
#
# -----------------------------------------------------------------------------

# --
# == HTTP Request Response API
#
# Defines the high level API functions (orthogonal to the underlying model)
# to create responses from a request.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def header(self, name: str) -> str | None: ...

	@abstractmethod
	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	def error(
		self,
		status: int,
		content: str | None = None,
		contentType: str = "text/plain",
		headers: dict[str, str] | None = None,
	) -> T:
		message = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			content=message if content is None else content,
			contentType=contentType,
			status=status,
			message=message,
			headers=headers,
		)

	def notFound(self, content: str | None = None) -> T:
		return self.error(404, content)

	def notAllowed(self, allowed: list[str]) -> T:
		return self.error(405, headers={"Allow": ", ".join(allowed)})

	def fail(self, content: str | None = None, *, status: int = 500) -> T:
		return self.error(status, content)

	def returns(
		self,
		value: Any,
		headers: dict[str, str] | None = None,
		*,
		status: int = 200,
		contentType: str = "application/json",
	) -> T:
		if isinstance(value, bytes):
			try:
				value = value.decode("ascii")
			except UnicodeDecodeError:
				value = f"base64:{b64encode(value).decode('ascii')}"
		payload: bytes = json(value)
		return self.respond(
			payload,
			contentType=contentType,
			contentLength=len(payload),
			headers=headers,
			status=status,
		)

	def respondText(
		self, content: str | bytes, contentType: str = "text/plain", status: int = 200
	) -> T:
		return self.respond(content=content, contentType=contentType, status=status)

	def respondHTML(
		self,
		html: str | bytes,
		status: int = 200,
		headers: dict[str, str] | None = None,
	) -> T:
		return self.respond(
			content=html,
			contentType="text/html; charset=utf-8",
			status=status,
			headers=headers,
		)

	def respondEmpty(self, status: int, headers: dict[str, str] | None = None) -> T:
		return self.respond(content=None, status=status, headers=headers)

	def respondFile(
		self,
		path: Path | str,
		headers: dict[str, str] | None = None,
		status: int = 200,
		contentType: str | None = None,
	) -> T:
		"""Responds with the contents of the file at the given path, honoring
		`Range`, `If-Range` and `If-Modified-Since` request headers. The
		given headers are added to the response, overriding the defaults.

		This raises an `OSError` when the file can't be stat'ed, and responds
		with:

		- `304` when the file is not modified since the given date
		- `206` with the slice of the file for a satisfiable range
		- `416` for a range that does not overlap the file
		- `status` (`200`) with the whole file otherwise
		"""
		p: Path = path if isinstance(path, Path) else Path(path)
		stats = p.stat()
		size: int = stats.st_size
		last_modified: str = httpdate(stats.st_mtime)
		base_headers: dict[str, str] = {
			"Content-Type": contentType or getContentType(p),
			"Accept-Ranges": "bytes",
			"Last-Modified": last_modified,
		} | (headers or {})
		# NOTE: The conditional check comes first, a client that has the
		# resource doesn't need any part of it.
		if isNotModified(self.header("If-Modified-Since"), stats.st_mtime):
			return self.respondEmpty(
				304,
				headers={
					k: v
					for k, v in base_headers.items()
					if k not in ("Content-Type", "Content-Length")
				},
			)
		byte_range: ByteRange | None = None
		if ifRangeMatches(self.header("If-Range"), last_modified):
			try:
				byte_range = ByteRange.Parse(self.header("Range"), size)
			except UnsatisfiableRange:
				return self.respondEmpty(
					416,
					headers={
						"Content-Range": f"bytes */{size}",
						"Accept-Ranges": "bytes",
					},
				)
		if byte_range is None:
			return self.respond(
				content=FileSlice(p, 0, size),
				status=status,
				headers=base_headers | {"Content-Length": str(size)},
			)
		else:
			return self.respond(
				content=FileSlice(p, byte_range.start, byte_range.length),
				status=206,
				headers=base_headers
				| {
					"Content-Range": byte_range.contentRange(size),
					"Content-Length": str(byte_range.length),
				},
			)


# EOF
