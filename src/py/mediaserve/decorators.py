from typing import Any, Callable, ClassVar, NamedTuple, TypeVar, cast

from .http.model import HTTPRequest, HTTPResponse

T = TypeVar("T")


class Transform(NamedTuple):
    """Represents a transformation to be applied to a request handler"""

    transform: Callable[..., Any]
    args: tuple[Any, ...]
    kwargs: dict[str, Any]


class Meta:
    """Defines the attributes used by decorators to annotate handlers"""

    ON: ClassVar[str] = "_mediaserve_on"
    ON_PRIORITY: ClassVar[str] = "_mediaserve_on_priority"
    POST: ClassVar[str] = "_mediaserve_post"
    # Values that can't hold attributes get their annotations stored by id
    Annotations: ClassVar[dict[int, dict[str, Any]]] = {}

    @staticmethod
    def Get(scope: Any) -> dict[str, Any]:
        """Returns the dictionary of meta attributes for the given value."""
        if hasattr(scope, "__dict__"):
            return cast(dict[str, Any], scope.__dict__)
        else:
            return Meta.Annotations.setdefault(id(scope), {})


def on(
    priority: int = 0, **methods: str | list[str] | tuple[str, ...]
) -> Callable[[T], T]:
    """The @on decorator marks a method as an HTTP request handler. It takes
    HTTP methods as keyword arguments (`GET`, `HEAD`, or joined like
    `GET_HEAD`) mapping to one or more route patterns:

    >    @on(GET_HEAD=("/", "/{path:any}"))
    >    def read(self, request, path=""):
    >        return request.respond(...)

    The decorated method takes the request and the route parameters, and
    returns a response. When more than one route matches a request, the one
    with the highest priority wins."""

    def decorator(function: T) -> T:
        meta = Meta.Get(function)
        v = meta.setdefault(Meta.ON, [])
        meta.setdefault(Meta.ON_PRIORITY, priority)
        for http_methods, url in list(methods.items()):
            urls = (url,) if isinstance(url, str) else url
            for http_method in http_methods.upper().split("_"):
                for _ in urls:
                    v.append((http_method, _))
        return function

    return decorator


def post(
    transform: Callable[..., HTTPResponse],
) -> Callable[[T], T]:
    """Turns the given `transform(request, response)` into a decorator that
    registers it as a post-processing step of the decorated handler."""

    def decorator(function: T, *args: Any, **kwargs: Any) -> T:
        v = Meta.Get(function).setdefault(Meta.POST, [])
        v.append(Transform(transform, args, kwargs))
        return function

    return decorator


def transforms(request: HTTPRequest, response: HTTPResponse, steps: list[Transform]) -> HTTPResponse:
    """Applies the post-processing steps to the response."""
    for t in steps:
        response = t.transform(request, response, *t.args, **t.kwargs) or response
    return response


# EOF
