import resource
from enum import Enum
from typing import NamedTuple

# --
# == Process limits
#
# Every connection holds a socket, and every streamed file a file
# descriptor, so the server raises its soft limit on open files at start.


class LimitType(Enum):
	Files = resource.RLIMIT_NOFILE
	FileSize = resource.RLIMIT_FSIZE


# Upper bounds for the soft limits, some systems report hard limits that
# overflow when set.
REASONABLE_LIMITS: dict[LimitType, int] = {
	LimitType.Files: 102_400,
	LimitType.FileSize: int(1e12),
}


class Limit(NamedTuple):
	type: LimitType
	soft: int
	hard: int


def limit(scope: LimitType) -> Limit:
	return Limit(scope, *resource.getrlimit(scope.value))


def unlimit(scope: LimitType, ratio: float = 1.0) -> int | None:
	"""Raises the soft limit of the given type towards its hard limit,
	returning the new limit or `None` if it can't be changed."""
	lm = limit(scope)
	if lm.soft == resource.RLIM_INFINITY:
		return lm.soft
	hard: int = REASONABLE_LIMITS[scope] if lm.hard == resource.RLIM_INFINITY else lm.hard
	target: int = min(REASONABLE_LIMITS[scope], int(lm.soft + ratio * (hard - lm.soft)))
	if target <= lm.soft:
		return lm.soft
	try:
		resource.setrlimit(scope.value, (target, lm.hard))
	except (ValueError, OSError):
		return None
	return target


# EOF
