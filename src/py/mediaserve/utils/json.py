import json as basejson
from typing import Any, TypeAlias, cast

from .primitives import asPrimitive

TJSON: TypeAlias = None | int | float | bool | str | list[Any] | dict[str, Any]


def json(value: Any) -> bytes:
	"""Serializes the given value as UTF-8 encoded JSON."""
	return basejson.dumps(asPrimitive(value), ensure_ascii=False).encode("utf8")


def unjson(value: bytes | str) -> TJSON:
	"""Parses the given JSON-encoded value."""
	return cast(TJSON, basejson.loads(value))


# EOF
