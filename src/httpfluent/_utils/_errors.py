from contextlib import contextmanager
from typing import Callable, Generator, TypeVar

from ..models.errors import (
    DecodingError,
    HTTPError,
    TransportError,
    UnacceptableStatusCodeError,
)

T = TypeVar("T")


@contextmanager
def map_transport_errors() -> Generator[None, None, None]:
    """Convert anything the transport raises into a :class:`TransportError`.

    ``HTTPError`` instances raised by the transport itself pass through, and
    ``asyncio.CancelledError`` (a ``BaseException``) is never wrapped.
    """
    try:
        yield
    except HTTPError:
        raise
    except Exception as e:
        raise TransportError(e) from e


@contextmanager
def map_decoding_errors() -> Generator[None, None, None]:
    """Convert encode/decode failures into a :class:`DecodingError`."""
    try:
        yield
    except HTTPError:
        raise
    except Exception as e:
        raise DecodingError(e) from e


def check_status(status_code: int, content: bytes, permitted: frozenset[int]) -> bytes:
    """Return ``content`` unchanged if ``status_code`` is permitted.

    Raises:
        UnacceptableStatusCodeError: For any status code outside ``permitted``,
            whether or not the body would decode.
    """
    if status_code not in permitted:
        raise UnacceptableStatusCodeError(status_code, content)
    return content


def decode_with(decoder: Callable[[bytes], T], content: bytes) -> T:
    with map_decoding_errors():
        return decoder(content)
