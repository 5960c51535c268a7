import json
import os
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._decoders import Decoder, DecoderRegistry
from ._utils.constants import (
    DEFAULT_PERMITTED_STATUS_CODES,
    ENV_DEFAULT_HEADERS,
    ENV_PERMITTED_STATUS_CODES,
)

_shared_queue: Optional[ThreadPoolExecutor] = None
_shared_queue_lock = threading.Lock()


def _default_queue() -> Executor:
    global _shared_queue
    with _shared_queue_lock:
        if _shared_queue is None:
            _shared_queue = ThreadPoolExecutor(thread_name_prefix="httpfluent")
        return _shared_queue


def parse_status_codes(raw: str) -> frozenset[int]:
    """Parse a status code list such as ``"200-299,304"``.

    Ranges are inclusive on both ends.
    """
    codes: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start, end = part.split("-", 1)
                codes.update(range(int(start), int(end) + 1))
            else:
                codes.add(int(part))
        except ValueError:
            raise ValueError(f"Invalid status code range: {part}") from None
    return frozenset(codes)


class HTTPConfiguration(BaseModel):
    """Defaults consulted when a builder is created.

    Read-only once constructed, including ``default_headers``; derive
    variants with :meth:`with_decoder` or :func:`configure`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    permitted_status_codes: frozenset[int] = DEFAULT_PERMITTED_STATUS_CODES
    default_headers: Mapping[str, str] = Field(
        default_factory=dict, validate_default=True
    )
    default_queue: Optional[Executor] = None
    decoders: DecoderRegistry = Field(default_factory=DecoderRegistry.default)

    @field_validator("default_headers", mode="after")
    @classmethod
    def freeze_headers(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @classmethod
    def from_env(cls, **overrides: Any) -> "HTTPConfiguration":
        """Build a configuration from ``HTTPFLUENT_*`` environment variables.

        Keyword arguments take precedence over the environment.
        """
        values: dict[str, Any] = {}

        raw_codes = os.environ.get(ENV_PERMITTED_STATUS_CODES)
        if raw_codes:
            values["permitted_status_codes"] = parse_status_codes(raw_codes)

        raw_headers = os.environ.get(ENV_DEFAULT_HEADERS)
        if raw_headers:
            try:
                headers = json.loads(raw_headers)
            except json.JSONDecodeError as e:
                raise ValueError(
                    f"{ENV_DEFAULT_HEADERS} must be a JSON object: {e}"
                ) from e
            if not isinstance(headers, dict):
                raise ValueError(f"{ENV_DEFAULT_HEADERS} must be a JSON object")
            values["default_headers"] = {str(k): str(v) for k, v in headers.items()}

        values.update(overrides)
        return cls(**values)

    @property
    def queue(self) -> Executor:
        return self.default_queue or _default_queue()

    def decoder_for(self, type_: Any) -> Optional[Decoder[Any]]:
        return self.decoders.get(type_)

    def with_decoder(self, type_: Any, decoder: Decoder[Any]) -> "HTTPConfiguration":
        return self.model_copy(
            update={"decoders": self.decoders.with_decoder(type_, decoder)}
        )


_configuration: Optional[HTTPConfiguration] = None


def configure(
    configuration: Optional[HTTPConfiguration] = None, **values: Any
) -> HTTPConfiguration:
    """Install the process-wide default configuration.

    Either pass a ready :class:`HTTPConfiguration` or keyword arguments for
    :meth:`HTTPConfiguration.from_env`. Builders created afterwards pick it
    up; existing builders keep the configuration they were created with.
    """
    global _configuration
    if configuration is None:
        configuration = HTTPConfiguration.from_env(**values)
    elif values:
        configuration = HTTPConfiguration(**{**dict(configuration), **values})
    _configuration = configuration
    return configuration


def get_configuration() -> HTTPConfiguration:
    global _configuration
    if _configuration is None:
        _configuration = HTTPConfiguration.from_env()
    return _configuration


def reset_configuration() -> None:
    """Forget the installed default.  Mainly useful in tests."""
    global _configuration
    _configuration = None
