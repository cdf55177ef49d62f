import io
import logging

from biathlon_core import BufferSink, ConsoleSink, EventKind, LoggingSink, RaceConfig, RaceSystem


def _config():
    return RaceConfig(laps=1, firing_lines=1, start="10:00:00.000", start_delta="00:00:30")


def test_console_sink_writes_to_given_stream():
    stream = io.StringIO()
    sink = ConsoleSink(stream=stream)
    sink.log_event("09:05:59.867", "The competitor(1) registered")
    sink.log_event("09:06:00.000", "33 1")
    assert stream.getvalue() == "[09:05:59.867] The competitor(1) registered\n[09:06:00.000] 33 1\n"


def test_logging_sink_emits_rendered_record(caplog):
    caplog.set_level(logging.INFO, logger="biathlon_core.events")
    rs = RaceSystem(_config(), sink=LoggingSink())
    rs.process_event("09:05:59.867", EventKind.REGISTRATION, 1)

    records = [r for r in caplog.records if r.name == "biathlon_core.events"]
    assert [r.getMessage() for r in records] == ["[09:05:59.867] The competitor(1) registered"]
    assert records[0].levelno == logging.INFO


def test_logging_sink_uses_configured_logger_and_level(caplog):
    caplog.set_level(logging.DEBUG, logger="race.log")
    sink = LoggingSink(logger=logging.getLogger("race.log"), level=logging.WARNING)
    sink.log_event("10:15:00.000", "32 1 NotFinished: cramp")

    records = [r for r in caplog.records if r.name == "race.log"]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
    assert records[0].getMessage() == "[10:15:00.000] 32 1 NotFinished: cramp"


def test_buffer_sink_clear_drops_collected_lines():
    sink = BufferSink()
    rs = RaceSystem(_config(), sink=sink)
    rs.process_event("09:05:59.867", EventKind.REGISTRATION, 1)
    assert sink.lines == ["[09:05:59.867] The competitor(1) registered"]

    sink.clear()
    assert sink.lines == []
    rs.process_event("09:06:00.000", EventKind.REGISTRATION, 2)
    assert sink.lines == ["[09:06:00.000] The competitor(2) registered"]
