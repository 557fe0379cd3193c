"""HTTP routing of keyserver requests to workers."""

from __future__ import annotations

import logging
import queue
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Callable, Iterable

from jinja2 import TemplateError

from hockeypuck.hkp.requests import Add, HashQuery, HttpRequest, Lookup, RequestError
from hockeypuck.hkp.templates import render_add_form, render_search_form

APPLICATION_ERROR = "Application error"

_LOGGER = logging.getLogger("hockeypuck")


class Response(ABC):
    """A worker's answer to a keyserver request."""

    @abstractmethod
    def error(self) -> Exception | None:
        """Return the error that occurred while serving, if any."""

    @abstractmethod
    def write_to(self, writer: Any) -> None:
        """Write status, headers and body through the writer.

        The writer offers ``status``, ``add_header(name, value)`` and ``write(data)``.
        """


@dataclass
class _ResponseWriter:
    status: int = 200
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytearray = field(default_factory=bytearray)

    def add_header(self, name: str, value: str) -> None:
        self.headers.append((name, value))

    def write(self, data: bytes | str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.body.extend(data)

    def fail(self, message: str, status: int) -> None:
        self.status = status
        self.headers = [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("X-Content-Type-Options", "nosniff"),
        ]
        self.body = bytearray((message + "\n").encode("utf-8"))


class Service:
    """Queue of parsed requests waiting for a worker."""

    def __init__(self) -> None:
        self.requests: queue.Queue = queue.Queue()


class Router:
    """WSGI application dispatching keyserver endpoints."""

    def __init__(self, service: Service | None = None) -> None:
        self.service = service if service is not None else Service()
        self._routes: dict[str, Callable[[HttpRequest], _ResponseWriter]] = {
            "/openpgp/add": lambda _req: self._render_page(render_add_form),
            "/openpgp/lookup": lambda _req: self._render_page(render_search_form),
            "/pks/lookup": lambda req: self.respond(Lookup(req)),
            "/pks/add": lambda req: self.respond(Add(req)),
            "/pks/hashquery": lambda req: self.respond(HashQuery(req)),
        }

    def respond(self, request: Lookup | Add | HashQuery) -> _ResponseWriter:
        """Parse a request, hand it to a worker and collect the worker's response."""
        writer = _ResponseWriter()
        try:
            request.parse()
        except RequestError as exc:
            _LOGGER.info("Error parsing request: %s", exc)
            writer.fail(APPLICATION_ERROR, 400)
            return writer
        self.service.requests.put(request)
        response = request.response.get()
        if response.error() is not None:
            _LOGGER.info("Error in response: %s", response.error())
        try:
            response.write_to(writer)
        except Exception as exc:  # a failed write is logged, not propagated
            _LOGGER.info("%r %s", response, exc)
        return writer

    @staticmethod
    def _render_page(render: Callable[[], str]) -> _ResponseWriter:
        writer = _ResponseWriter()
        try:
            page = render()
        except TemplateError as exc:
            _LOGGER.info("Error rendering page: %s", exc)
            writer.fail(APPLICATION_ERROR, 500)
            return writer
        writer.add_header("Content-Type", "text/html; charset=utf-8")
        writer.write(page)
        return writer

    @staticmethod
    def _http_request(environ: dict[str, Any]) -> HttpRequest:
        path = environ.get("PATH_INFO") or "/"
        query = environ.get("QUERY_STRING") or ""
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = environ.get("wsgi.input")
        body = stream.read(length) if stream is not None and length > 0 else b""
        return HttpRequest(
            method=environ.get("REQUEST_METHOD", "GET"),
            url=f"{path}?{query}" if query else path,
            body=body,
            content_type=environ.get("CONTENT_TYPE", ""),
        )

    def __call__(
        self, environ: dict[str, Any], start_response: Callable
    ) -> Iterable[bytes]:
        request = self._http_request(environ)
        handler = self._routes.get(request.path)
        if handler is None:
            writer = _ResponseWriter()
            writer.fail("404 page not found", 404)
        else:
            writer = handler(request)
        status = HTTPStatus(writer.status)
        start_response(f"{status.value} {status.phrase}", list(writer.headers))
        return [bytes(writer.body)]