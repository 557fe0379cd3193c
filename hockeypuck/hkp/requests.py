"""Parsing of HTTP Keyserver Protocol requests."""

from __future__ import annotations

import io
import queue
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import BinaryIO
from urllib.parse import parse_qs, urlsplit

_FORM_METHODS = frozenset({"POST", "PUT", "PATCH"})
_FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


class RequestError(ValueError):
    """A keyserver request could not be interpreted."""


def error_missing_param(param: str) -> RequestError:
    """Error for a required parameter missing from a request."""
    return RequestError(f"Missing required parameter: {param}")


def error_unknown_operation(op: str) -> RequestError:
    """Error for an operation the keyserver does not know."""
    return RequestError(f"Unknown operation: {op}")


def error_invalid_method(method: str) -> RequestError:
    """Error for an HTTP method an endpoint does not accept."""
    return RequestError(f"Invalid HTTP method: {method}")


class Operation(IntEnum):
    """Supported values of the ``op`` parameter."""

    UNKNOWN = 0
    GET = 1
    INDEX = 2
    VINDEX = 3
    STATS = 4
    HASH_GET = 5


class Option(IntFlag):
    """Bits of the ``options`` parameter."""

    NO_OPTION = 0
    MACHINE_READABLE = 1
    NOT_MODIFIABLE = 2
    JSON_FORMAT = 4


_OPERATIONS = {
    "get": Operation.GET,
    "index": Operation.INDEX,
    "vindex": Operation.VINDEX,
    "stats": Operation.STATS,
    "hget": Operation.HASH_GET,
}

_OPTIONS = {
    "mr": Option.MACHINE_READABLE,
    "nm": Option.NOT_MODIFIABLE,
    "json": Option.JSON_FORMAT,
}


def parse_options(options: str) -> Option:
    """Interpret a comma separated ``options`` value; unknown names are ignored."""
    result = Option.NO_OPTION
    for name in options.split(","):
        result |= _OPTIONS.get(name, Option.NO_OPTION)
    return result


def read_int(stream: BinaryIO) -> int:
    """Read a 32-bit big-endian unsigned integer."""
    data = stream.read(4)
    if len(data) < 4:
        raise RequestError("unexpected end of data reading integer")
    return int.from_bytes(data, "big")


@dataclass
class HttpRequest:
    """The parts of an HTTP request that keyserver endpoints look at."""

    method: str = "GET"
    url: str = "/"
    body: bytes = b""
    content_type: str = ""
    form: dict[str, list[str]] | None = None
    post_form: dict[str, list[str]] | None = None

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    def parse_form(self) -> None:
        """Fill ``post_form`` from the body and ``form`` from body and query."""
        if self.post_form is None:
            self.post_form = {}
            media_type = self.content_type.split(";", 1)[0].strip().lower()
            if self.method in _FORM_METHODS and media_type == _FORM_MEDIA_TYPE:
                self.post_form = parse_qs(
                    self.body.decode("utf-8", "replace"), keep_blank_values=True
                )
        if self.form is None:
            merged = {name: list(values) for name, values in self.post_form.items()}
            query = parse_qs(urlsplit(self.url).query, keep_blank_values=True)
            for name, values in query.items():
                merged.setdefault(name, []).extend(values)
            self.form = merged

    def form_value(self, name: str) -> str:
        """Return the first value of a form field, or an empty string."""
        values = (self.form or {}).get(name)
        return values[0] if values else ""


@dataclass
class _KeyserverRequest:
    request: HttpRequest
    response: queue.Queue = field(
        default_factory=queue.Queue, repr=False, compare=False
    )


@dataclass
class Lookup(_KeyserverRequest):
    """An HKP ``/pks/lookup`` request."""

    op: Operation = Operation.UNKNOWN
    search: str = ""
    option: Option = Option.NO_OPTION
    fingerprint: bool = False
    exact: bool = False
    hash: bool = False

    def parse(self) -> None:
        """Interpret the query and form parameters; raise RequestError if invalid."""
        request = self.request
        request.parse_form()
        self.response = queue.Queue()
        op = request.form_value("op")
        if op == "":
            raise error_missing_param("op")
        if op not in _OPERATIONS:
            raise error_unknown_operation(op)
        self.op = _OPERATIONS[op]
        search_required = self.op is not Operation.STATS
        self.search = request.form_value("search")
        if search_required and self.search == "":
            raise error_missing_param("search")
        self.option = parse_options(request.form_value("options"))
        self.fingerprint = request.form_value("fingerprint") == "on"
        self.hash = request.form_value("hash") == "on"
        self.exact = request.form_value("exact") == "on"

    def machine_readable(self) -> bool:
        return bool(self.option & Option.MACHINE_READABLE)


@dataclass
class Add(_KeyserverRequest):
    """An HKP ``/pks/add`` request."""

    keytext: str = ""
    option: Option = Option.NO_OPTION

    def parse(self) -> None:
        """Require POST and a ``keytext`` field; raise RequestError otherwise."""
        request = self.request
        if request.method != "POST":
            raise error_invalid_method(request.method)
        request.parse_form()
        self.response = queue.Queue()
        keytext = request.form_value("keytext")
        if keytext == "":
            raise error_missing_param("keytext")
        self.keytext = keytext
        self.option = parse_options(request.form_value("options"))


@dataclass
class HashQuery(_KeyserverRequest):
    """An SKS ``/pks/hashquery`` request listing key digests."""

    digests: list[str] = field(default_factory=list)

    def parse(self) -> None:
        """Decode the length-prefixed digests in the POST body."""
        request = self.request
        if request.method != "POST":
            raise error_invalid_method(request.method)
        self.response = queue.Queue()
        body = io.BytesIO(request.body)
        count = read_int(body)
        digests = []
        for _ in range(count):
            length = read_int(body)
            data = body.read(length)
            if length > 0 and not data:
                raise RequestError("unexpected end of data reading digest")
            digests.append(data.ljust(length, b"\x00").hex())
        self.digests = digests