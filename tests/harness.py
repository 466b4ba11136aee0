import asyncio
from pathlib import Path
from typing import Any, Literal

from mediaserve.config import MediaConfig
from mediaserve.http.model import HTTPBodyWriter, HTTPRequest, HTTPResponse
from mediaserve.http.parser import parseQuery
from mediaserve.model import Application, mount
from mediaserve.services.media import MediaService


class BufferWriter(HTTPBodyWriter):
	"""Collects whatever is written, in place of a socket."""

	def __init__(self) -> None:
		self.data: bytearray = bytearray()

	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		if chunk:
			self.data += chunk
		return True


def app(root: Path, **options: Any) -> Application:
	return mount(MediaService(MediaConfig(root=root, **options)))


def request(
	application: Application,
	method: str,
	path: str,
	headers: dict[str, str] | None = None,
) -> HTTPResponse:
	"""Processes a request for the given target, which may have a query."""
	path, _, query = path.partition("?")
	return asyncio.run(
		application.process(
			HTTPRequest.Create(method, path, headers, query=parseQuery(query))
		)
	)


def body(response: HTTPResponse) -> bytes:
	writer = BufferWriter()
	asyncio.run(writer.write(response.body))
	return bytes(writer.data)


def media(root: Path) -> Path:
	"""Populates the given directory with a small media tree."""
	(root / "sub").mkdir()
	(root / "sub" / "clip.webm").write_bytes(b"webm")
	(root / "a.txt").write_text("Hello, world!\n")
	(root / "Z.mp4").write_bytes(bytes(range(256)) * 4)
	(root / ".hidden").write_text("secret")
	return root


# EOF
