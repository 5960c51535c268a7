"""Tests for the queue-scheduled callback surface."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from httpfluent import (
    HTTP,
    DecodingError,
    HTTPConfiguration,
    Result,
    TransportError,
    UnacceptableStatusCodeError,
)
from tests.utils.stubs import URL, StubTransport, ThreadGatedTransport, Widget


class Collector:
    def __init__(self) -> None:
        self.results: list[Result] = []
        self.threads: list[str] = []
        self.done = threading.Event()

    def __call__(self, result: Result) -> None:
        self.results.append(result)
        self.threads.append(threading.current_thread().name)
        self.done.set()

    def wait(self) -> Result:
        assert self.done.wait(timeout=2)
        assert len(self.results) == 1
        return self.results[0]


class TestReceive:
    def test_receive_bytes(self, queue: ThreadPoolExecutor):
        transport = StubTransport(content=b"raw")
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        collector = Collector()

        http.receive(collector, queue=queue)

        result = collector.wait()
        assert result.is_success
        assert result.unwrap() == b"raw"
        assert collector.threads[0].startswith("test-queue")

    def test_receive_decoding(self, queue: ThreadPoolExecutor, transport):
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        collector = Collector()

        http.receive(collector, decoding=Widget, queue=queue)

        assert collector.wait().unwrap() == Widget(id=1)
        assert transport.request.headers["Accept"] == "application/json"

    def test_receive_failure(self, queue: ThreadPoolExecutor):
        transport = StubTransport(status_code=503, content=b"down")
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        collector = Collector()

        http.receive(collector, decoding=Widget, queue=queue)

        result = collector.wait()
        assert not result.is_success
        assert isinstance(result.error, UnacceptableStatusCodeError)
        assert result.error.content == b"down"
        with pytest.raises(UnacceptableStatusCodeError):
            result.unwrap()

    def test_receive_transport_failure(self, queue: ThreadPoolExecutor):
        transport = StubTransport(error=OSError("unreachable"))
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        collector = Collector()

        http.receive(collector, queue=queue)

        result = collector.wait()
        assert isinstance(result.error, TransportError)
        assert isinstance(result.error.cause, OSError)

    def test_receive_uses_configured_queue(self):
        queue = ThreadPoolExecutor(max_workers=1, thread_name_prefix="configured")
        try:
            transport = StubTransport(content=b"x")
            http = HTTP(
                URL,
                transport=transport,
                configuration=HTTPConfiguration(default_queue=queue),
            )
            collector = Collector()

            http.receive(collector)

            collector.wait()
            assert collector.threads[0].startswith("configured")
        finally:
            queue.shutdown(wait=True)

    def test_receive_default_queue(self):
        transport = StubTransport(content=b"x")
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        collector = Collector()

        http.receive(collector)

        assert collector.wait().unwrap() == b"x"
        assert collector.threads[0].startswith("httpfluent")

    def test_receive_can_be_cancelled(self, queue: ThreadPoolExecutor):
        transport = ThreadGatedTransport(content=b"x")
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        collector = Collector()

        subscription = http.receive(collector, queue=queue)
        assert transport.started.wait(timeout=2)
        subscription.cancel()
        transport.gate.set()

        assert not collector.done.wait(timeout=0.2)
        assert collector.results == []

    def test_callback_exception_does_not_escape(self, queue: ThreadPoolExecutor):
        transport = StubTransport(content=b"x")
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        called = threading.Event()

        def callback(result: Result) -> None:
            called.set()
            raise RuntimeError("callback bug")

        http.receive(callback, queue=queue)

        assert called.wait(timeout=2)

    def test_shut_down_queue_is_logged_not_raised(
        self, caplog: pytest.LogCaptureFixture
    ):
        transport = StubTransport(content=b"x")
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        closed = ThreadPoolExecutor(max_workers=1)
        closed.shutdown()
        collector = Collector()
        caplog.set_level(logging.WARNING, logger="httpfluent")

        subscription = http.receive(collector, queue=closed)
        deadline = time.monotonic() + 2
        while not subscription.delivered and time.monotonic() < deadline:
            time.sleep(0.01)
        time.sleep(0.05)

        assert subscription.delivered
        assert collector.results == []
        assert any(
            record.levelno == logging.WARNING
            and "Could not schedule response callback" in record.getMessage()
            for record in caplog.records
        )


class TestReceiveString:
    def test_receive_string(self, queue: ThreadPoolExecutor):
        transport = StubTransport(content="héllo".encode("utf-8"))
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        collector = Collector()

        http.receive_string(collector, queue=queue)

        assert collector.wait().unwrap() == "héllo"

    def test_receive_string_invalid_encoding(self, queue: ThreadPoolExecutor):
        transport = StubTransport(content=b"\xff\xff")
        http = HTTP(URL, transport=transport, configuration=HTTPConfiguration())
        collector = Collector()

        http.receive_string(collector, encoding="utf-8", queue=queue)

        result = collector.wait()
        assert isinstance(result.error, DecodingError)
        assert result.error.cause is None
