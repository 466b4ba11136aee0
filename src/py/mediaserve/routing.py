import re
from inspect import iscoroutine
from typing import (
    Any,
    Callable,
    ClassVar,
    NamedTuple,
    Optional,
    Pattern,
    Type,
)

from .decorators import Meta, Transform, transforms
from .http.model import HTTPRequest, HTTPRequestError, HTTPResponse
from .utils.logging import debug, error, warning


async def awaited(value: Any) -> Any:
    if iscoroutine(value):
        return await value
    else:
        return value


# -----------------------------------------------------------------------------
#
# ROUTE
#
# -----------------------------------------------------------------------------
#
# Routes are paths where template expressions like `{name}` or `{name:type}`
# match and extract chunks of the request path.


class RoutePattern(NamedTuple):
    """Used in a parameter chunk to extract/match from the give path."""

    expr: str
    extractor: Type[Any] | Callable[[str], Any]


class TextChunk(NamedTuple):
    text: str


class ParameterChunk(NamedTuple):
    """A parameterizable chunk, where the chunk must match the given pattern."""

    name: str
    pattern: RoutePattern


TChunk = TextChunk | ParameterChunk


class Route:
    """Parses a route where template expressions are like `{name}` or
    `{name:type}`. Routes are assigned a handler, which gives them their
    priority, and are registered in the dispatcher to match requests."""

    RE_PATTERN_NAME: ClassVar[Pattern[str]] = re.compile("^[A-Za-z]+$")
    RE_TEMPLATE: ClassVar[Pattern[str]] = re.compile(
        r"\{(?P<name>[\w][_\w\d]*)(:(?P<type>[^}]+))?\}"
    )

    PATTERNS: ClassVar[dict[str, RoutePattern]] = {
        "int": RoutePattern(r"\-?\d+", int),
        "any": RoutePattern(r".*", str),
    }

    @classmethod
    def Parse(cls, expression: str) -> list[TChunk]:
        """Parses routes expressed as strings where patterns are denoted
        as `{name}` or `{name:pattern}`"""
        chunks: list[TChunk] = []
        offset: int = 0
        for match in cls.RE_TEMPLATE.finditer(expression):
            chunks.append(TextChunk(re.escape(expression[offset : match.start()])))
            name: str = match.group("name")
            pattern: str = (match.group("type") or name).lower()
            if pattern in cls.PATTERNS:
                pat = cls.PATTERNS[pattern]
            elif cls.RE_PATTERN_NAME.match(pattern):
                raise ValueError(
                    f"Route pattern '{pattern}' is not registered, pick one of: {', '.join(sorted(cls.PATTERNS.keys()))}"
                )
            else:
                # Anything that is not a pattern name is taken as a regexp
                pat = RoutePattern(pattern, str)
            chunks.append(ParameterChunk(name, pat))
            offset = match.end()
        chunks.append(TextChunk(re.escape(expression[offset:])))
        return chunks

    def __init__(self, text: str, handler: Optional["Handler"] = None):
        self.text: str = text
        self.chunks: list[TChunk] = self.Parse(text)
        self.params: dict[str, ParameterChunk] = {
            _.name: _ for _ in self.chunks if isinstance(_, ParameterChunk)
        }
        self.handler: Handler | None = handler
        self._regexp: Pattern[str] | None = None

    @property
    def priority(self) -> int:
        """Returns the priority of the route, defined by `handler.priority`
        or defaulting to 0."""
        return self.handler.priority if self.handler else 0

    @property
    def regexp(self) -> Pattern[str]:
        if not self._regexp:
            try:
                self._regexp = re.compile(f"^{self.toRegExp()}$")
            except re.error as e:
                raise ValueError(
                    f"Route syntax is malformed: {repr(self.toRegExp())}: {e}"
                ) from e
        return self._regexp

    def toRegExp(self) -> str:
        res: list[str] = []
        for chunk in self.chunks:
            if isinstance(chunk, TextChunk):
                res.append(chunk.text)
            else:
                res.append(f"(?P<{chunk.name}>{chunk.pattern.expr})")
        return "".join(res)

    def match(self, path: str) -> dict[str, Any] | None:
        matches = self.regexp.match(path)
        return (
            {k: v.pattern.extractor(matches.group(k)) for k, v in self.params.items()}
            if matches
            else None
        )

    def __repr__(self) -> str:
        return f"(Route \"{self.toRegExp()}\" ({' '.join(_ for _ in self.params)}))"


# -----------------------------------------------------------------------------
#
# HANDLER
#
# -----------------------------------------------------------------------------


class Handler:
    """A handler wraps a function and maps it to paths for HTTP methods,
    along with a priority. The handler is used by the dispatchers to match
    a request."""

    @staticmethod
    def Has(value: Any) -> bool:
        return hasattr(value, Meta.ON)

    @classmethod
    def Get(cls, value: Any) -> Optional["Handler"]:
        return (
            Handler(
                functor=value,
                methods=getattr(value, Meta.ON),
                priority=getattr(value, Meta.ON_PRIORITY, 0),
                post=getattr(value, Meta.POST, None),
            )
            if cls.Has(value)
            else None
        )

    def __init__(
        self,
        functor: Callable[..., Any],
        methods: list[tuple[str, str]],
        priority: int = 0,
        post: list[Transform] | None = None,
    ):
        self.functor = functor
        self.methods: dict[str, list[str]] = {}
        for method, path in methods:
            self.methods.setdefault(method, []).append(path)
        self.priority: int = priority
        self.post: list[Transform] | None = post

    async def __call__(
        self, request: HTTPRequest, params: dict[str, Any]
    ) -> HTTPResponse:
        try:
            response: HTTPResponse = await awaited(self.functor(request, **params))
        except HTTPRequestError as e:
            status: int = e.status or 500
            if status < 500:
                warning(e.message, Method=request.method, Path=request.path, Status=status)
            else:
                error(e.message, status, Method=request.method, Path=request.path)
            response = request.error(status)
        # Post transforms apply to error responses as well
        return transforms(request, response, self.post) if self.post else response

    def __repr__(self) -> str:
        methods = " ".join(
            f'({k} {" ".join(repr(_) for _ in v)})' for k, v in self.methods.items()
        )
        post = f" :post({len(self.post)})" if self.post else ""
        return f"(Handler {self.priority} ({methods}) '{self.functor}'{post})"


# -----------------------------------------------------------------------------
#
# DISPATCHER
#
# -----------------------------------------------------------------------------


class Dispatcher:
    """A dispatcher registers handlers that respond to HTTP methods
    on a given path/URI."""

    def __init__(self) -> None:
        self.routes: dict[str, list[Route]] = {}

    def register(self, handler: Handler) -> "Dispatcher":
        """Registers the handler's routes for each of its methods."""
        for method, paths in handler.methods.items():
            for path in paths:
                path = f"/{path}" if not path.startswith("/") else path
                route: Route = Route(path, handler)
                debug("Registered route", Method=method, Path=path)
                self.routes.setdefault(method, []).append(route)
        return self

    def match(self, method: str, path: str) -> tuple[Route | None, dict[str, Any] | None]:
        """Matches a given `method` and `path` with the registered route, returning
        the matching route and the extracted parameters. The route with the
        highest priority wins, and the first registered among equals."""
        matched_match: dict[str, Any] | None = None
        matched_route: Route | None = None
        for route in self.routes.get(method, ()):
            if matched_route and route.priority <= matched_route.priority:
                continue
            match: dict[str, Any] | None = route.match(path)
            if match is not None:
                matched_match = match
                matched_route = route
        return (matched_route, matched_match)

    def allowed(self, path: str) -> list[str]:
        """Returns the methods that have a route matching the given path."""
        return sorted(
            method
            for method, routes in self.routes.items()
            if any(_.match(path) is not None for _ in routes)
        )


# EOF
