from concurrent.futures import Executor
from logging import getLogger
from typing import Any, Callable, Mapping, Optional, TypeVar, Union

from ._config import HTTPConfiguration, get_configuration
from ._decoders import Decoder, json_decoder, json_encoder, string_decoder
from ._publisher import CancellationToken, Publisher, Result, Subscription
from ._transport import HttpxTransport, Transport
from ._utils._errors import (
    check_status,
    decode_with,
    map_transport_errors,
)
from ._utils._request_spec import BodyProducer, RequestSpec
from ._utils.constants import DEFAULT_ENCODING, HEADER_ACCEPT, HEADER_CONTENT_TYPE
from .models.http import ContentType, FormData, HTTPMethod

T = TypeVar("T")

MediaType = Union[ContentType, str]

logger = getLogger("httpfluent")


def _media_type(media_type: MediaType) -> str:
    if isinstance(media_type, ContentType):
        return media_type.value
    return media_type


def _missing_decoder(type_: Any) -> Decoder[Any]:
    def decode(content: bytes) -> Any:
        raise LookupError(f"No decoder registered for {type_!r}")

    return decode


class HTTP:
    """Fluent, immutable HTTP request builder.

    Every fluent method returns a new builder with one aspect of the request
    changed; the receiver is never modified, so a builder can be branched and
    reused freely. Nothing is sent until a terminal method (``publisher``,
    ``string_publisher``, ``receive``, ``receive_string``) is called, and each
    terminal call issues exactly one request through the transport.

    Examples:
        ```python
        from httpfluent import HTTP

        widget = await HTTP("https://example.test/widgets/1").publisher(Widget)

        created = await (
            HTTP("https://example.test/widgets")
            .header("Authorization", f"Bearer {token}")
            .post_json({"name": "sprocket"})
            .publisher(Widget)
        )
        ```
    """

    __slots__ = ("_spec", "_transport", "_configuration")

    def __init__(
        self,
        url: str = "",
        *,
        transport: Optional[Transport] = None,
        configuration: Optional[HTTPConfiguration] = None,
        spec: Optional[RequestSpec] = None,
    ) -> None:
        object.__setattr__(
            self, "_spec", spec if spec is not None else RequestSpec(url=url)
        )
        object.__setattr__(
            self,
            "_transport",
            transport if transport is not None else HttpxTransport(),
        )
        object.__setattr__(
            self,
            "_configuration",
            configuration if configuration is not None else get_configuration(),
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"HTTP builders are immutable; cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"HTTP builders are immutable; cannot delete {name!r}")

    @property
    def spec(self) -> RequestSpec:
        return self._spec

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def configuration(self) -> HTTPConfiguration:
        return self._configuration

    def __repr__(self) -> str:
        return f"HTTP(method={self._spec.method!r}, url={self._spec.url!r})"

    def _with_spec(self, spec: RequestSpec) -> "HTTP":
        return HTTP(
            spec=spec, transport=self._transport, configuration=self._configuration
        )

    # Fluent methods

    def method(self, method: Union[HTTPMethod, str]) -> "HTTP":
        if isinstance(method, HTTPMethod):
            value = method.value
        else:
            value = method.upper()
        return self._with_spec(self._spec.replace(method=value))

    def url(self, url: str) -> "HTTP":
        return self._with_spec(self._spec.replace(url=url))

    def query(self, name: str, value: Any) -> "HTTP":
        return self._with_spec(self._spec.with_param(name, str(value)))

    def header(self, name: str, value: str) -> "HTTP":
        return self._with_spec(self._spec.with_header(name, value))

    def headers(self, headers: Mapping[str, str]) -> "HTTP":
        return self._with_spec(self._spec.with_headers(headers))

    def content(self, media_type: MediaType) -> "HTTP":
        """Set the ``Content-Type`` header."""
        return self.header(HEADER_CONTENT_TYPE, _media_type(media_type))

    def accept(self, media_type: MediaType) -> "HTTP":
        """Set the ``Accept`` header."""
        return self.header(HEADER_ACCEPT, _media_type(media_type))

    def body(self, encode: BodyProducer) -> "HTTP":
        """Set the body producer.

        ``encode`` is called once per dispatch, when the request fires. If it
        raises, the terminal call fails with a ``DecodingError``.
        """
        return self._with_spec(self._spec.replace(body=encode))

    def output(self, type_: Any) -> "HTTP":
        """Set the type the bare :meth:`publisher` decodes to.

        The decoder is looked up in the configuration's registry.
        """
        return self._with_spec(self._spec.replace(output=type_))

    def with_transport(self, transport: Transport) -> "HTTP":
        return HTTP(
            spec=self._spec, transport=transport, configuration=self._configuration
        )

    def with_configuration(self, configuration: HTTPConfiguration) -> "HTTP":
        return HTTP(
            spec=self._spec, transport=self._transport, configuration=configuration
        )

    def _post(self, encode: BodyProducer) -> "HTTP":
        return self.body(encode).method(HTTPMethod.POST)

    def post(self, data: bytes) -> "HTTP":
        return self._post(lambda: data)

    def post_encoded(self, value: Any, encoder: Callable[[Any], bytes]) -> "HTTP":
        """POST ``value`` serialized by ``encoder`` at dispatch time."""
        return self._post(lambda: encoder(value))

    def post_json(
        self, value: Any, encoder: Optional[Callable[[Any], bytes]] = None
    ) -> "HTTP":
        """POST ``value`` as JSON.

        Serialization happens when the request fires; a value that cannot be
        serialized fails the terminal call with a ``DecodingError``.
        """
        encode = encoder if encoder is not None else json_encoder
        return self.content(ContentType.JSON).post_encoded(value, encode)

    def post_form(self, form: FormData) -> "HTTP":
        return self.content(form.content_type)._post(form.encode)

    # Terminal methods

    def publisher(
        self,
        decoding: Any = None,
        *,
        decoder: Optional[Decoder[Any]] = None,
        content_type: Optional[MediaType] = None,
    ) -> Publisher[Any]:
        """Publisher of the decoded response body.

        The decoder is chosen in this order:

        1. ``decoder``, when given.
        2. The configuration's registered decoder for ``decoding`` (or for the
           builder's :meth:`output` type when ``decoding`` is omitted).
        3. For an explicit ``decoding`` type, JSON validation into that type.
           Otherwise the call fails with ``DecodingError(LookupError)``.

        A ``content_type`` hint of ``ContentType.JSON``, or falling back to
        the JSON decoder, adds ``Accept: application/json`` to the request.

        Args:
            decoding: Target type of the decoded body.
            decoder: Callable taking the body bytes and returning the value.
            content_type: Media type the decoder expects.
        """
        if decoder is None:
            target = self._spec.output if decoding is None else decoding
            decoder = self._configuration.decoder_for(target)
            if decoder is None and decoding is not None:
                decoder = json_decoder(decoding)
                content_type = content_type or ContentType.JSON
            elif decoder is None:
                decoder = _missing_decoder(target)

        http = self
        if (
            content_type is not None
            and _media_type(content_type) == ContentType.JSON.value
        ):
            http = self.accept(ContentType.JSON)
        return http._publisher(decoder)

    def string_publisher(self, encoding: str = DEFAULT_ENCODING) -> Publisher[str]:
        return self._publisher(string_decoder(encoding))

    def receive(
        self,
        callback: Callable[[Result[Any]], Any],
        *,
        decoding: Any = None,
        decoder: Optional[Decoder[Any]] = None,
        content_type: Optional[MediaType] = None,
        queue: Optional[Executor] = None,
    ) -> Subscription[Any]:
        """Dispatch and invoke ``callback`` once on ``queue`` with a :class:`Result`.

        Decoder selection is the same as for :meth:`publisher`. ``queue``
        defaults to the configuration's queue.
        """
        publisher = self.publisher(
            decoding, decoder=decoder, content_type=content_type
        )
        return publisher.receive(callback, queue or self._configuration.queue)

    def receive_string(
        self,
        callback: Callable[[Result[str]], Any],
        *,
        encoding: str = DEFAULT_ENCODING,
        queue: Optional[Executor] = None,
    ) -> Subscription[str]:
        return self.string_publisher(encoding).receive(
            callback, queue or self._configuration.queue
        )

    def _publisher(self, decoder: Decoder[T]) -> Publisher[T]:
        async def pipeline(token: CancellationToken) -> T:
            return await self._dispatch(decoder, token)

        return Publisher(pipeline)

    async def _dispatch(self, decoder: Decoder[T], token: CancellationToken) -> T:
        with map_transport_errors():
            request = self._spec.prepare(self._configuration)

        token.raise_if_cancelled()
        with map_transport_errors():
            response = await self._transport.execute(request)

        content = check_status(
            response.status_code,
            response.content,
            self._configuration.permitted_status_codes,
        )
        logger.debug(
            f"Decoding {len(content)} bytes from {request.method} {request.url}"
        )

        with token.lock:
            token.raise_if_cancelled()
            return decode_with(decoder, content)
