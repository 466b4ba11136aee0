import os.path
import posixpath
import re
from pathlib import Path
from typing import NamedTuple, Pattern
from urllib.parse import unquote

from .errors import MalformedPath, OutsideRoot

# --
# == Path resolution
#
# Maps request paths onto the served root. Everything here is lexical: the
# filesystem is never touched, so that a path is validated before anything
# is done with it.

# A `%` that is not followed by two hexadecimal digits
RE_BAD_ESCAPE: Pattern[str] = re.compile(r"%(?![0-9A-Fa-f]{2})")


class ResolvedPath(NamedTuple):
	"""An absolute path guaranteed to be the served root or nested under it,
	along with the normalized request path (always starting with `/`)."""

	path: Path
	relative: str


def decode(path: str) -> str:
	"""Strictly percent-decodes the given path, raising `MalformedPath` for
	invalid escapes, invalid UTF-8 sequences and NUL characters."""
	if RE_BAD_ESCAPE.search(path):
		raise MalformedPath("Invalid percent escape in path", path)
	try:
		res = unquote(path, encoding="utf-8", errors="strict")
	except UnicodeDecodeError as e:
		raise MalformedPath(f"Path is not valid UTF-8: {e}", path) from e
	if "\x00" in res:
		raise MalformedPath("Path contains a NUL character", path)
	return res


def normalize(path: str) -> str:
	"""Normalizes the decoded path relative to the root: separators are
	collapsed, `.` and `..` are resolved. Unlike an absolute normalization,
	a `..` climbing above the root is kept (`../etc`), so that the
	containment check can catch it. Returns `.` for the root itself."""
	return posixpath.normpath(path.lstrip("/") or ".")


def contains(root: Path, path: Path) -> bool:
	"""Tells if `path` is `root` or nested under it, comparing path
	components so that `/media2` is not within `/media`."""
	parts = root.parts
	return path.parts[: len(parts)] == parts


class PathResolver:
	"""Resolves request paths to absolute paths within the served root."""

	def __init__(self, root: Path | str):
		self.root: Path = Path(os.path.abspath(root))

	def resolve(self, path: str) -> ResolvedPath:
		"""Resolves the raw (percent-encoded) request path, raising
		`MalformedPath` when it can't be decoded and `OutsideRoot` when it
		escapes the served root."""
		candidate = Path(
			os.path.normpath(os.path.join(self.root, normalize(decode(path))))
		)
		if not contains(self.root, candidate):
			raise OutsideRoot("Path resolves outside of the served root", path)
		relative: str = candidate.relative_to(self.root).as_posix()
		return ResolvedPath(candidate, "/" if relative == "." else f"/{relative}")


# EOF
