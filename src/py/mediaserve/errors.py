from typing import ClassVar

from .http.model import HTTPRequestError

# --
# == Errors
#
# Errors raised while resolving a request path and dispatching it. Each
# carries the HTTP status it maps to, the message is only ever logged.


class MediaError(HTTPRequestError):
	STATUS: ClassVar[int] = 500

	def __init__(self, message: str, path: str | None = None):
		super().__init__(message, status=self.STATUS)
		self.path: str | None = path


class MalformedPath(MediaError):
	"""The request path can't be percent-decoded."""

	STATUS = 400


class OutsideRoot(MediaError):
	"""The request path resolves outside of the served root."""

	STATUS = 403


class NotFound(MediaError):
	STATUS = 404


class DirectoryUnreadable(MediaError):
	"""A directory can't be opened or enumerated."""

	STATUS = 500


# EOF
