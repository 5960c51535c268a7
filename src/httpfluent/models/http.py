from enum import Enum
from typing import Protocol, runtime_checkable


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class ContentType(str, Enum):
    """Media types the builder knows by name.

    Any other media type can be passed as a plain string.
    """

    JSON = "application/json"
    FORM = "application/x-www-form-urlencoded"
    MULTIPART = "multipart/form-data"
    TEXT = "text/plain"
    HTML = "text/html"
    XML = "application/xml"
    OCTET_STREAM = "application/octet-stream"


@runtime_checkable
class FormData(Protocol):
    """A body encoder that declares its own media type.

    Form and multipart helpers live outside the core; anything exposing
    these two members can be posted with :meth:`HTTP.post_form`.
    """

    @property
    def content_type(self) -> str: ...

    def encode(self) -> bytes: ...
