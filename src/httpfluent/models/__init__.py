from .errors import (
    DecodingError,
    HTTPError,
    TransportError,
    UnacceptableStatusCodeError,
)
from .http import ContentType, FormData, HTTPMethod

__all__ = [
    "ContentType",
    "DecodingError",
    "FormData",
    "HTTPError",
    "HTTPMethod",
    "TransportError",
    "UnacceptableStatusCodeError",
]
