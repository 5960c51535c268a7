"""Decoders turn a response body into a typed value.

A decoder is any callable taking ``bytes`` and returning a value; it may
raise, in which case the dispatch pipeline reports a
:class:`~httpfluent.models.errors.DecodingError` carrying the exception.
"""

from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, Optional, TypeVar

from pydantic import TypeAdapter

from ._utils.constants import DEFAULT_ENCODING
from .models.errors import DecodingError

T = TypeVar("T")

Decoder = Callable[[bytes], T]


def passthrough(content: bytes) -> bytes:
    return content


def string_decoder(encoding: str = DEFAULT_ENCODING) -> Decoder[str]:
    """Build a decoder returning the body as text.

    Bytes that are not valid under ``encoding`` raise ``DecodingError(None)``.
    """

    def decode(content: bytes) -> str:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            raise DecodingError(None) from None

    return decode


@lru_cache(maxsize=256)
def _type_adapter(type_: Any) -> TypeAdapter:
    return TypeAdapter(type_)


def json_decoder(type_: type[T]) -> Decoder[T]:
    """Build a decoder validating a JSON body against ``type_``.

    ``type_`` can be anything pydantic can validate: a ``BaseModel``, a
    dataclass, a ``TypedDict`` or builtin containers. Before Python 3.12
    pydantic only accepts ``typing_extensions.TypedDict``.
    """

    def decode(content: bytes) -> T:
        return _type_adapter(type_).validate_json(content)

    return decode


class DecoderRegistry(Mapping[Any, Decoder[Any]]):
    """Immutable mapping from a target type to the decoder producing it.

    Lookups are by exact type. New registries are derived with
    :meth:`with_decoder`; an existing registry never changes.
    """

    def __init__(self, decoders: Optional[Mapping[Any, Decoder[Any]]] = None):
        self._decoders = MappingProxyType(dict(decoders or {}))

    @classmethod
    def default(cls) -> "DecoderRegistry":
        return cls({bytes: passthrough, str: string_decoder()})

    def with_decoder(self, type_: Any, decoder: Decoder[Any]) -> "DecoderRegistry":
        return DecoderRegistry({**self._decoders, type_: decoder})

    def types(self) -> frozenset[Any]:
        return frozenset(self._decoders)

    def without(self, type_: Any) -> "DecoderRegistry":
        return DecoderRegistry(
            {key: value for key, value in self._decoders.items() if key is not type_}
        )

    def __getitem__(self, type_: Any) -> Decoder[Any]:
        return self._decoders[type_]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._decoders)

    def __len__(self) -> int:
        return len(self._decoders)

    def __repr__(self) -> str:
        names = ", ".join(getattr(t, "__name__", repr(t)) for t in self._decoders)
        return f"DecoderRegistry({names})"


def json_encoder(value: Any) -> bytes:
    """Serialize ``value`` to JSON, including pydantic models and dataclasses."""
    return _type_adapter(Any).dump_json(value)
