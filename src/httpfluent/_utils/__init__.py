from ._errors import check_status, decode_with, map_decoding_errors, map_transport_errors
from ._request_spec import BodyProducer, PreparedRequest, RequestSpec
from ._ssl_context import get_httpx_client_kwargs

__all__ = [
    "BodyProducer",
    "PreparedRequest",
    "RequestSpec",
    "check_status",
    "decode_with",
    "get_httpx_client_kwargs",
    "map_decoding_errors",
    "map_transport_errors",
]
