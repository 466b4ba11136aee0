import re
from email.utils import mktime_tz, parsedate_tz
from pathlib import Path
from time import gmtime
from typing import NamedTuple, Pattern

# --
# == Byte ranges
#
# Single byte-range support for `Range` request headers, along with the
# HTTP date helpers used for conditional requests.
#
# SEE: https://www.rfc-editor.org/rfc/rfc9110#name-range-requests

DAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTHS: tuple[str, ...] = (
	"Jan",
	"Feb",
	"Mar",
	"Apr",
	"May",
	"Jun",
	"Jul",
	"Aug",
	"Sep",
	"Oct",
	"Nov",
	"Dec",
)


RE_BYTE_RANGE: Pattern[str] = re.compile(r"^\s*(\d*)\s*-\s*(\d*)\s*$")


class UnsatisfiableRange(ValueError):
	"""Raised when a well-formed byte range does not overlap the
	representation."""

	def __init__(self, header: str, size: int):
		super().__init__(f"Range '{header}' cannot be satisfied for size {size}")
		self.header: str = header
		self.size: int = size


class ByteRange(NamedTuple):
	"""An inclusive byte range, as in `bytes=start-end`"""

	start: int
	end: int

	@property
	def length(self) -> int:
		return self.end - self.start + 1

	def contentRange(self, size: int) -> str:
		return f"bytes {self.start}-{self.end}/{size}"

	@classmethod
	def Parse(cls, header: str | None, size: int) -> "ByteRange | None":
		"""Parses the value of a `Range` header for a representation of
		`size` bytes. Returns `None` when the header should be ignored
		(absent, not in bytes, malformed or asking for more than one range),
		and raises `UnsatisfiableRange` when the range does not overlap."""
		if not header:
			return None
		unit, _, ranges = header.partition("=")
		if unit.strip().lower() != "bytes" or not ranges or "," in ranges:
			return None
		match = RE_BYTE_RANGE.match(ranges)
		if not match:
			return None
		first, last = match.group(1), match.group(2)
		if not first and not last:
			return None
		elif not first:
			# A suffix range like `bytes=-500`, the last 500 bytes
			suffix = int(last)
			if suffix == 0 or size == 0:
				raise UnsatisfiableRange(header, size)
			return ByteRange(max(0, size - suffix), size - 1)
		else:
			start = int(first)
			end = int(last) if last else size - 1
			if start >= size or end < start:
				raise UnsatisfiableRange(header, size)
			return ByteRange(start, min(end, size - 1))


class FileSlice(NamedTuple):
	"""A contiguous slice of a file, to be streamed as a response body."""

	path: Path
	offset: int
	length: int


def httpdate(timestamp: float) -> str:
	"""Formats the given timestamp as an HTTP date, like
	`Sat, 29 Oct 1994 19:43:31 GMT`"""
	# NOTE: We don't use strftime as it depends on the locale
	t = gmtime(timestamp)
	return f"{DAYS[t.tm_wday]}, {t.tm_mday:02d} {MONTHS[t.tm_mon - 1]} {t.tm_year} {t.tm_hour:02d}:{t.tm_min:02d}:{t.tm_sec:02d} GMT"


def parsedate(value: str | None) -> float | None:
	"""Parses an HTTP date (any of the three formats HTTP allows), returning
	a timestamp or `None` when the value can't be parsed."""
	if not value:
		return None
	parsed = parsedate_tz(value)
	if parsed is None:
		return None
	try:
		return float(mktime_tz(parsed))
	except (OverflowError, ValueError):
		return None


def isNotModified(ifModifiedSince: str | None, modified: float) -> bool:
	"""Tells if a resource last modified at `modified` is unchanged since the
	`If-Modified-Since` value. HTTP dates have a one second precision, so
	the modification time is truncated."""
	since = parsedate(ifModifiedSince)
	return since is not None and int(modified) <= since


def ifRangeMatches(ifRange: str | None, lastModified: str) -> bool:
	"""A range is only honored when there's no `If-Range` precondition, or
	when it matches the current `Last-Modified` value."""
	return ifRange is None or ifRange.strip() == lastModified


# EOF
