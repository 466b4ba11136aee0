import asyncio

import pytest

from mediaserve.decorators import on, post
from mediaserve.http.model import HTTPRequest, HTTPRequestError, HTTPResponse
from mediaserve.model import Application, Service, mount
from mediaserve.routing import Dispatcher, Handler, Route


@post
def tagged(request: HTTPRequest, response: HTTPResponse) -> HTTPResponse:
	return response.setHeader("X-Tagged", "yes")


class Pages(Service):
	@tagged
	@on(GET=("/", "/{path:any}"))
	def page(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		return request.respondText(f"page:{path}")

	@on(GET="/items/{item:int}", priority=1)
	async def item(self, request: HTTPRequest, item: int) -> HTTPResponse:
		return request.returns({"item": item})

	@tagged
	@on(GET_POST="/fail/{status:int}", priority=1)
	def fail(self, request: HTTPRequest, status: int) -> HTTPResponse:
		raise HTTPRequestError("Failure on purpose", status=status)


def process(app: Application, method: str, path: str) -> HTTPResponse:
	return asyncio.run(app.process(HTTPRequest.Create(method, path)))


def test_route():
	route = Route("/items/{item:int}/{rest:any}")
	assert route.match("/items/10/a/b") == {"item": 10, "rest": "a/b"}
	assert route.match("/items/x/a") is None
	assert Route("/a.b").match("/axb") is None
	with pytest.raises(ValueError):
		Route("/{x:unknown}")
	assert sorted(Route.PATTERNS) == ["any", "int"]
	with pytest.raises(ValueError):
		Route("/{x:segment}")


def test_priority():
	app = mount(Pages())
	assert process(app, "GET", "/items/42").body.raw == b'{"item": 42}'
	assert process(app, "GET", "/items/abc").body.raw == b"page:items/abc"
	assert process(app, "GET", "/").body.raw == b"page:"


def test_errors():
	app = mount(Pages())
	res = process(app, "GET", "/fail/404")
	assert res.status == 404
	assert res.body.raw == b"Not Found"
	# Post transforms apply to error responses
	assert res.header("X-Tagged") == "yes"
	assert process(app, "POST", "/fail/503").status == 503


def test_not_allowed():
	app = mount(Pages())
	res = process(app, "DELETE", "/anything")
	assert res.status == 405
	assert res.header("Allow") == "GET"
	assert process(app, "DELETE", "/fail/500").header("Allow") == "GET, POST"


def test_not_found():
	dispatcher = Dispatcher()
	handler = Handler(lambda request: request.respond("ok"), [("GET", "/only")])
	dispatcher.register(handler)
	assert dispatcher.match("GET", "/only")[0] is not None
	assert dispatcher.match("GET", "/other") == (None, None)
	assert dispatcher.allowed("/other") == []
	app = Application()
	app.dispatcher = dispatcher
	assert process(app, "GET", "/other").status == 404


def test_mount():
	pages = Pages()
	app = mount(pages)
	assert pages.isMounted
	assert pages.app is app
	assert len(pages.handlers) == 3
	with pytest.raises(RuntimeError):
		app.mount(pages)


# EOF
