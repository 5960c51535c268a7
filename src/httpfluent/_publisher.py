"""Single-value asynchronous delivery.

:class:`Publisher` is the one asynchronous primitive terminal calls produce.
It can be awaited directly, subscribed to with callbacks (and cancelled), or
adapted to a queue-scheduled callback with :meth:`Publisher.receive`.
"""

import asyncio
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from logging import getLogger
from typing import (
    Any,
    Awaitable,
    Callable,
    Generator,
    Generic,
    Optional,
    TypeVar,
    Union,
)

from .models.errors import HTTPError

T = TypeVar("T")

logger = getLogger("httpfluent")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome handed to ``receive`` callbacks: a value or an ``HTTPError``."""

    value: Optional[T] = None
    error: Optional[HTTPError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: HTTPError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class CancellationToken:
    """Thread-safe flag checked by the pipeline between stages.

    ``lock`` is held by :meth:`cancel` and by any stage that must not overlap
    with cancellation, such as the check-then-decode step.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.lock = threading.RLock()

    def cancel(self) -> None:
        with self.lock:
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise asyncio.CancelledError()


Pipeline = Callable[[CancellationToken], Awaitable[T]]

_loop: Optional[asyncio.AbstractEventLoop] = None
_running_tasks: set[asyncio.Task] = set()
_loop_lock = threading.Lock()


def _background_loop() -> asyncio.AbstractEventLoop:
    """Event loop used for subscriptions made outside of any running loop."""
    global _loop
    with _loop_lock:
        if _loop is None:
            loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=loop.run_forever, name="httpfluent-loop", daemon=True
            )
            thread.start()
            _loop = loop
        return _loop


class Subscription(Generic[T]):
    """Handle on one running pipeline.

    Exactly one of ``on_value`` / ``on_failure`` is invoked, at most once.
    Once :meth:`cancel` returns, neither is invoked and the decoder is not
    reached.
    """

    def __init__(
        self,
        on_value: Callable[[T], Any],
        on_failure: Optional[Callable[[HTTPError], Any]] = None,
    ) -> None:
        self._on_value = on_value
        self._on_failure = on_failure
        self._token = CancellationToken()
        self._lock = self._token.lock
        self._delivered = False
        self._future: Optional[Union[asyncio.Future, Future]] = None

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    @property
    def delivered(self) -> bool:
        return self._delivered

    def _start(self, pipeline: Pipeline[T]) -> None:
        coro = pipeline(self._token)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            future: Union[asyncio.Future, Future] = asyncio.run_coroutine_threadsafe(
                coro, _background_loop()
            )
        else:
            future = loop.create_task(coro)
            _running_tasks.add(future)
            future.add_done_callback(_running_tasks.discard)
        self._future = future
        future.add_done_callback(self._on_done)

    def _on_done(self, future: Union[asyncio.Future, Future]) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            self._deliver(self._on_value, future.result())
        else:
            self._deliver(self._on_failure, error)

    def _deliver(self, callback: Optional[Callable[[Any], Any]], payload: Any) -> None:
        with self._lock:
            if self._token.cancelled or self._delivered:
                return
            self._delivered = True
            if callback is None:
                logger.debug(f"Unobserved failure: {payload!r}")
                return
            callback(payload)

    def cancel(self) -> None:
        """Stop the pipeline. A no-op once a callback has been invoked."""
        with self._lock:
            if self._delivered or self._token.cancelled:
                return
            self._token.cancel()

        future = self._future
        if future is None:
            return
        if isinstance(future, asyncio.Future):
            future.get_loop().call_soon_threadsafe(future.cancel)
        else:
            future.cancel()


def _log_callback_failure(future: Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.warning("Response callback raised an exception", exc_info=error)


class Publisher(Generic[T]):
    """Cold publisher of a single value.

    Nothing runs until the publisher is awaited or subscribed to, and every
    await or subscription runs the whole pipeline again.
    """

    def __init__(self, pipeline: Pipeline[T]) -> None:
        self._pipeline = pipeline

    def __await__(self) -> Generator[Any, None, T]:
        return self._pipeline(CancellationToken()).__await__()

    def subscribe(
        self,
        on_value: Callable[[T], Any],
        on_failure: Optional[Callable[[HTTPError], Any]] = None,
    ) -> Subscription[T]:
        """Start the pipeline and report its outcome to the callbacks.

        Inside a running event loop the pipeline is scheduled as a task on
        that loop; otherwise it runs on a shared background loop thread.
        """
        subscription = Subscription(on_value, on_failure)
        subscription._start(self._pipeline)
        return subscription

    def receive(
        self, callback: Callable[[Result[T]], Any], queue: Executor
    ) -> Subscription[T]:
        """Subscribe once and submit the :class:`Result` to ``queue``."""

        def dispatch(result: Result[T]) -> None:
            try:
                future = queue.submit(callback, result)
            except RuntimeError as e:
                logger.warning(
                    f"Could not schedule response callback: {e}", exc_info=e
                )
                return
            future.add_done_callback(_log_callback_failure)

        return self.subscribe(
            lambda value: dispatch(Result.success(value)),
            lambda error: dispatch(Result.failure(error)),
        )
