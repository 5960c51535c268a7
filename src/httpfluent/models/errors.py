import json
from typing import Optional


class HTTPError(Exception):
    """Base class for every failure surfaced by a terminal call.

    Exactly one of the subclasses below is delivered per failed request:
    :class:`TransportError`, :class:`UnacceptableStatusCodeError` or
    :class:`DecodingError`.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class TransportError(HTTPError):
    """Raised when the transport could not complete the exchange.

    The underlying cause is opaque and passed through untouched.
    """

    def __init__(self, cause: BaseException, content: Optional[bytes] = None):
        self.cause = cause
        self.content = content
        super().__init__(f"Transport failure: {cause!r}")


class UnacceptableStatusCodeError(HTTPError):
    """Raised when a response arrived with a status code outside the permitted set.

    The raw body is retained so callers can inspect error payloads.
    """

    def __init__(self, status_code: int, content: bytes):
        self.status_code = status_code
        self.content = content
        super().__init__(f"Unacceptable status code: {status_code}")

    def json(self):
        """Parse the retained body as JSON."""
        return json.loads(self.content)


class DecodingError(HTTPError):
    """Raised when the body could not be encoded or decoded.

    ``cause`` is ``None`` for pure format mismatches such as bytes that are
    not valid under the requested text encoding.
    """

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        message = "Decoding failure" if cause is None else f"Decoding failure: {cause!r}"
        super().__init__(message)
