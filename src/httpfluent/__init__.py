"""Fluent, immutable HTTP request builder.

Build a request with :class:`HTTP`, dispatch it through a pluggable
:class:`Transport`, and receive either one decoded value or one
:class:`HTTPError`.
"""

from ._config import (
    HTTPConfiguration,
    configure,
    get_configuration,
    reset_configuration,
)
from ._decoders import (
    Decoder,
    DecoderRegistry,
    json_decoder,
    json_encoder,
    passthrough,
    string_decoder,
)
from ._http import HTTP
from ._publisher import CancellationToken, Publisher, Result, Subscription
from ._transport import HttpxTransport, Transport, TransportResponse
from ._utils import PreparedRequest, RequestSpec
from .models import (
    ContentType,
    DecodingError,
    FormData,
    HTTPError,
    HTTPMethod,
    TransportError,
    UnacceptableStatusCodeError,
)

__all__ = [
    "HTTP",
    "CancellationToken",
    "ContentType",
    "Decoder",
    "DecoderRegistry",
    "DecodingError",
    "FormData",
    "HTTPConfiguration",
    "HTTPError",
    "HTTPMethod",
    "HttpxTransport",
    "PreparedRequest",
    "Publisher",
    "RequestSpec",
    "Result",
    "Subscription",
    "Transport",
    "TransportError",
    "TransportResponse",
    "UnacceptableStatusCodeError",
    "configure",
    "get_configuration",
    "json_decoder",
    "json_encoder",
    "passthrough",
    "reset_configuration",
    "string_decoder",
]
