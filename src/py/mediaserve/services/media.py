import os
import re
import stat
from datetime import datetime
from typing import Pattern
from urllib.parse import quote

from .. import __version__
from ..config import MediaConfig
from ..decorators import on
from ..errors import NotFound
from ..features.cors import cors, setCORSHeaders
from ..http.model import HTTPRequest, HTTPResponse
from ..listing import DirectoryListingBuilder
from ..model import Service
from ..paths import PathResolver, ResolvedPath
from ..render import renderListing
from ..utils.logging import error

ENDPOINTS: dict[str, str] = {
	"health": "/health",
	"api_info": "/api/info",
	"browse": "/",
}


# Control characters, which can't appear in a quoted header parameter
RE_CONTROL: Pattern[str] = re.compile(r"[\x00-\x1f\x7f]")


def contentDisposition(name: str) -> str:
	"""Returns an `inline` content disposition for the given file name. Names
	that are not plain printable ASCII get a sanitized ASCII fallback along
	with the RFC 6266 `filename*` parameter."""
	escaped: str = RE_CONTROL.sub(
		"_", name.replace("\\", "\\\\").replace('"', '\\"')
	)
	if escaped.isascii() and not RE_CONTROL.search(name):
		return f'inline; filename="{escaped}"'
	else:
		fallback: str = escaped.encode("ascii", "replace").decode("ascii")
		return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(name, safe='')}"


def now() -> str:
	return datetime.now().astimezone().isoformat(timespec="seconds")


class MediaService(Service):
	"""Serves the files and directory listings of a media directory."""

	def __init__(self, config: MediaConfig | None = None):
		super().__init__()
		self.config: MediaConfig = config or MediaConfig()
		self.resolver: PathResolver = PathResolver(self.config.root)
		self.listing: DirectoryListingBuilder = DirectoryListingBuilder(
			self.config.name
		)

	@property
	def root(self) -> str:
		return str(self.resolver.root)

	def dispatch(self, request: HTTPRequest, resolved: ResolvedPath) -> HTTPResponse:
		"""Responds with the listing of the directory or the contents of the
		file at the resolved path."""
		try:
			info = os.stat(resolved.path)
		except (FileNotFoundError, NotADirectoryError) as e:
			raise NotFound(f"Path does not exist: {e}", resolved.relative) from e
		except OSError as e:
			error(
				f"Unable to access path: {e}",
				e.errno,
				Path=resolved.relative,
			)
			return request.fail()
		if stat.S_ISDIR(info.st_mode):
			view = self.listing.build(resolved.path, resolved.relative)
			if request.param("format") == "json":
				return request.returns(view)
			else:
				return request.respondHTML(renderListing(view))
		elif stat.S_ISREG(info.st_mode):
			try:
				return request.respondFile(
					resolved.path,
					headers={
						"Cache-Control": f"public, max-age={self.config.cacheMaxAge}",
						"Content-Disposition": contentDisposition(resolved.path.name),
					},
				)
			except FileNotFoundError as e:
				raise NotFound(f"File removed while serving: {e}", resolved.relative) from e
			except OSError as e:
				error(f"Unable to read file: {e}", e.errno, Path=resolved.relative)
				return request.fail()
		else:
			raise NotFound("Path is not a directory or regular file", resolved.relative)

	@cors
	@on(GET_HEAD=("/", "/{path:any}"))
	def browse(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		return self.dispatch(request, self.resolver.resolve(request.path))

	@on(OPTIONS=("/", "/{path:any}"))
	def preflight(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		return setCORSHeaders(request)

	@cors
	@on(GET_HEAD="/health", priority=1)
	def health(self, request: HTTPRequest) -> HTTPResponse:
		try:
			os.stat(self.resolver.root)
		except OSError as e:
			error(f"Media directory is not accessible: {e}", e.errno, Path=self.root)
			return request.returns(
				{"status": "unhealthy", "error": "media directory not accessible"},
				status=503,
			)
		return request.returns(
			{"status": "healthy", "timestamp": now(), "media_directory": self.root}
		)

	@cors
	@on(GET_HEAD="/api/info", priority=1)
	def info(self, request: HTTPRequest) -> HTTPResponse:
		return request.returns(
			{
				"name": self.config.name,
				"version": __version__,
				"media_directory": self.root,
				"server_time": now(),
				"endpoints": ENDPOINTS,
			}
		)


# EOF
