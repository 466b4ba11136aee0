from ..decorators import post
from ..http.model import HTTPRequest, HTTPResponse

CORS_METHODS: list[str] = ["GET", "HEAD", "OPTIONS"]
CORS_HEADERS: list[str] = ["Content-Type", "Range"]
CORS_EXPOSED: list[str] = ["Content-Length", "Content-Range", "Accept-Ranges"]


@post
def cors(request: HTTPRequest, response: HTTPResponse) -> HTTPResponse:
	"""A post decorator that ensures that the CORS headers are set."""
	return setCORSHeaders(response)


def setCORSHeaders(
	request: HTTPRequest | HTTPResponse,
	*,
	origin: str | None = None,
	methods: list[str] | None = None,
	headers: list[str] | None = None,
) -> HTTPResponse:
	"""Takes the given request or response, and return (a response) with the
	CORS headers set. A request gets an empty `200` response, as a reply
	to a preflight `OPTIONS`.

	See <https://en.wikipedia.org/wiki/Cross-origin_resource_sharing>
	"""
	response: HTTPResponse = (
		request.respond(status=200) if isinstance(request, HTTPRequest) else request
	)
	response.setHeaders(
		{
			"Access-Control-Allow-Origin": origin or "*",
			"Access-Control-Allow-Methods": ", ".join(methods or CORS_METHODS),
			"Access-Control-Allow-Headers": ", ".join(headers or CORS_HEADERS),
			"Access-Control-Expose-Headers": ", ".join(CORS_EXPOSED),
		}
	)
	return response


# EOF
