from __future__ import annotations

from concurrent.futures import Future

import pytest

from sqltransport import ConfigurationError, Logger, LogSink, ValidationError


class MemorySink:
    def __init__(self, name: str, level: str = "silly", fail: bool = False) -> None:
        self.name = name
        self.level = level
        self.fail = fail
        self.records = []
        self.closed = False

    def log(self, level, message, metadata=None, callback=None):
        future: Future = Future()
        if self.fail:
            future.set_exception(RuntimeError(f"{self.name} down"))
        else:
            self.records.append((level, message, metadata))
            future.set_result(True)
        if callback is not None:
            future.add_done_callback(lambda f: callback(f.exception(), None))
        return future

    def close(self):
        self.closed = True


def test_memory_sink_satisfies_protocol():
    assert isinstance(MemorySink("m"), LogSink)


def test_dispatch_respects_sink_levels():
    errors_only = MemorySink("errors", level="error")
    everything = MemorySink("all")
    logger = Logger(sinks=[errors_only, everything])

    logger.info("started", {"ip": "1.2.3.4"})
    logger.error("broken")

    assert errors_only.records == [("error", "broken", None)]
    assert everything.records == [("info", "started", {"ip": "1.2.3.4"}), ("error", "broken", None)]


def test_logger_level_filters_before_sinks():
    sink = MemorySink("all")
    logger = Logger(sinks=[sink], level="warn")

    assert logger.debug("noise") == []
    assert len(logger.warn("careful")) == 1
    assert sink.records == [("warn", "careful", None)]


def test_unknown_level_is_rejected():
    logger = Logger(sinks=[MemorySink("all")])

    with pytest.raises(ValidationError):
        logger.log("fatal", "nope")

    with pytest.raises(ValidationError):
        Logger(level="loud")


def test_duplicate_sink_names_are_rejected():
    logger = Logger(sinks=[MemorySink("db")])

    with pytest.raises(ConfigurationError):
        logger.add_sink(MemorySink("db"))


def test_remove_sink_by_name():
    sink = MemorySink("db")
    logger = Logger(sinks=[sink])

    assert logger.remove_sink("db") is sink
    assert logger.sinks == ()
    with pytest.raises(KeyError):
        logger.remove_sink("db")


def test_callback_fires_once_after_all_sinks():
    calls = []
    logger = Logger(sinks=[MemorySink("a"), MemorySink("b", fail=True), MemorySink("c")])

    logger.error("boom", None, lambda error, results: calls.append((error, results)))

    assert len(calls) == 1
    error, results = calls[0]
    assert isinstance(error, RuntimeError)
    assert results == [True, None, True]


def test_callback_fires_when_no_sink_accepts():
    calls = []
    logger = Logger(sinks=[MemorySink("errors", level="error")])

    logger.debug("quiet", None, lambda error, results: calls.append((error, results)))

    assert calls == [(None, [])]


def test_close_closes_every_sink():
    sinks = [MemorySink("a"), MemorySink("b")]
    Logger(sinks=sinks).close()

    assert all(sink.closed for sink in sinks)


def test_logger_writes_through_sql_transport(make_transport, fetch_rows):
    transport = make_transport(level="warn")
    logger = Logger(sinks=[transport])

    assert logger.info("skipped") == []
    (future,) = logger.error("disk full", {"ip": "10.0.0.1"})
    future.result(timeout=5)

    (row,) = fetch_rows()
    assert row["level"] == "error"
    assert row["ip_address"] == "10.0.0.1"
