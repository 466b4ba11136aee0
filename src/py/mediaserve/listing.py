import os
import posixpath
from pathlib import Path
from typing import Any, NamedTuple
from urllib.parse import quote

from .errors import DirectoryUnreadable
from .utils.files import (
	CATEGORY_CLASS,
	CATEGORY_ICON,
	FileCategory,
	category,
	contentType,
)
from .utils.logging import warning

# Entries whose name start with this are never listed
HIDDEN_PREFIX: str = "."
DEFAULT_NAME: str = "HTTP Media Server"


# -----------------------------------------------------------------------------
#
# RECORDS
#
# -----------------------------------------------------------------------------


class DirectoryEntryRecord(NamedTuple):
	"""The projection of a directory entry, as displayed in a listing."""

	name: str
	# The request path of the entry, like `/movies/intro.mp4`
	path: str
	size: int
	# Last modification, as a timestamp
	modified: float
	isDirectory: bool
	contentType: str | None = None
	# The percent-escaped path, to be used as a link target
	href: str = ""

	@property
	def category(self) -> FileCategory:
		return category(self.name, self.contentType, self.isDirectory)

	@property
	def icon(self) -> str:
		return CATEGORY_ICON[self.category]

	@property
	def cssClass(self) -> str:
		return CATEGORY_CLASS[self.category]

	@property
	def formattedSize(self) -> str:
		"""The size in megabytes, like `1.50`"""
		return f"{self.size / 1_048_576:.2f}"

	def asPrimitive(self) -> dict[str, Any]:
		return {
			"name": self.name,
			"path": self.path,
			"href": self.href,
			"size": self.size,
			"modified": self.modified,
			"isDirectory": self.isDirectory,
			"contentType": self.contentType,
			"category": self.category.value,
		}


class DirectoryListingView(NamedTuple):
	"""A directory listing, ready to be rendered."""

	path: str
	parent: str | None
	entries: list[DirectoryEntryRecord]
	name: str = DEFAULT_NAME


def sortKey(record: DirectoryEntryRecord) -> tuple[bool, str, str]:
	"""Directories first, then case-insensitive names. The raw name breaks
	ties so that the order does not depend on the enumeration order."""
	return (not record.isDirectory, record.name.casefold(), record.name)


def parentPath(path: str) -> str | None:
	"""Returns the parent of the given request path, `None` for the root."""
	if path in ("", "/", "."):
		return None
	parent: str = posixpath.dirname(path.rstrip("/"))
	return "/" if parent in ("", ".") else parent


def isHidden(name: str) -> bool:
	return name.startswith(HIDDEN_PREFIX)


# -----------------------------------------------------------------------------
#
# BUILDER
#
# -----------------------------------------------------------------------------


class DirectoryListingBuilder:
	"""Lists the immediate children of a directory as display records."""

	def __init__(self, name: str = DEFAULT_NAME):
		self.name: str = name

	def record(self, entry: os.DirEntry[str], path: str) -> DirectoryEntryRecord:
		"""Creates the record for the given entry, `path` being the request
		path of the listed directory. This raises an `OSError` when the
		entry's metadata can't be read, and a `UnicodeError` when its name
		is not valid UTF-8 (and so can't be linked to)."""
		stats = entry.stat()
		is_dir: bool = entry.is_dir()
		entry_path: str = posixpath.join(path or "/", entry.name)
		return DirectoryEntryRecord(
			name=entry.name,
			path=entry_path,
			size=stats.st_size,
			modified=stats.st_mtime,
			isDirectory=is_dir,
			contentType=None if is_dir else contentType(entry.name),
			href=quote(entry_path, safe="/"),
		)

	def entries(self, directory: Path, path: str) -> list[DirectoryEntryRecord]:
		"""Returns the sorted records for the visible entries of the given
		directory. Entries that can't be read are logged and skipped, while
		a directory that can't be read raises `DirectoryUnreadable`."""
		records: list[DirectoryEntryRecord] = []
		try:
			with os.scandir(directory) as entries:
				for entry in entries:
					if isHidden(entry.name):
						continue
					try:
						records.append(self.record(entry, path))
					except (OSError, UnicodeError) as e:
						warning(
							"Skipping unreadable entry",
							Path=path,
							Entry=repr(entry.name),
							Error=str(e),
						)
		except OSError as e:
			raise DirectoryUnreadable(
				f"Unable to read directory {directory}: {e}", path
			) from e
		return sorted(records, key=sortKey)

	def build(self, directory: Path, path: str) -> DirectoryListingView:
		return DirectoryListingView(
			path=path or "/",
			parent=parentPath(path),
			entries=self.entries(directory, path),
			name=self.name,
		)


# EOF
