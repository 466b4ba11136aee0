from typing import ClassVar, Iterable, Optional

from .http.model import HTTPRequest, HTTPResponse
from .routing import Dispatcher, Handler
from .utils.logging import debug, info

# -----------------------------------------------------------------------------
#
# SERVICE
#
# -----------------------------------------------------------------------------


class Service:
	"""A service groups the handlers declared with `@on` as its methods."""

	NO_HANDLER: ClassVar[list[str]] = [
		"name",
		"app",
		"_handlers",
		"isMounted",
		"handlers",
		"start",
		"stop",
	]

	def __init__(self, name: Optional[str] = None) -> None:
		self.name: str = name or self.__class__.__name__
		self.app: Optional[Application] = None
		self._handlers: Optional[list[Handler]] = None

	async def start(self) -> None:
		"""Can be overridden to do asynchronous pre-start work"""
		pass

	async def stop(self) -> None:
		"""Can be overridden to do asynchronous post-stop work"""
		pass

	@property
	def isMounted(self) -> bool:
		return self.app is not None

	@property
	def handlers(self) -> list[Handler]:
		if self._handlers is None:
			self._handlers = list(self.iterHandlers())
		return self._handlers

	def iterHandlers(self) -> Iterable[Handler]:
		for value in (getattr(self, _) for _ in dir(self) if _ not in self.NO_HANDLER):
			handler = Handler.Get(value)
			if handler:
				yield handler

	def __repr__(self) -> str:
		return f"(Service {self.name}{' :mounted' if self.isMounted else ''})"


# -----------------------------------------------------------------------------
#
# APPLICATION
#
# -----------------------------------------------------------------------------


class Application:
	"""Dispatches requests to the handlers of the mounted services."""

	def __init__(self, services: list[Service] | None = None) -> None:
		self.dispatcher: Dispatcher = Dispatcher()
		self.services: list[Service] = []
		for service in services or ():
			self.mount(service)

	async def start(self) -> "Application":
		for service in self.services:
			await service.start()
		return self

	async def stop(self) -> "Application":
		for service in self.services:
			await service.stop()
		return self

	async def process(self, request: HTTPRequest) -> HTTPResponse:
		"""Processes the request, responding with `405` when the path is only
		routed for other methods, and `404` when it is not routed at all."""
		route, params = self.dispatcher.match(request.method, request.path or "/")
		if route:
			if not route.handler:
				raise RuntimeError(f"Route has no handler defined: {route}")
			return await route.handler(request, params or {})
		elif allowed := self.dispatcher.allowed(request.path or "/"):
			debug("Method not allowed", Method=request.method, Path=request.path)
			return request.notAllowed(allowed)
		else:
			debug("No route found", Method=request.method, Path=request.path)
			return request.notFound()

	def mount(self, service: Service) -> Service:
		if service.isMounted:
			raise RuntimeError(f"Cannot mount service, it is already mounted: {service}")
		for handler in service.handlers:
			self.dispatcher.register(handler)
		service.app = self
		self.services.append(service)
		info("Mounted service", Service=service.name, Handlers=len(service.handlers))
		return service


def mount(*components: Application | Service) -> Application:
	"""Mounts the given services into the given application, or into a new
	one when none is given."""
	apps: list[Application] = [_ for _ in components if isinstance(_, Application)]
	app: Application = apps[0] if apps else Application()
	for item in components:
		if isinstance(item, Service):
			app.mount(item)
		elif item is not app:
			raise RuntimeError(f"Unsupported component type {type(item)}: {item}")
	return app


# EOF
