"""Tests for Log and WriterResult."""

from kungfu import Ok

from stepwise import Log, TraceEvent, WriterResult


class TestLog:
    def test_of_is_a_detached_copy(self):
        live = Log.of("start")
        snapshot = Log.of(*live)
        live.append("finish")
        assert snapshot == ["start"]
        assert isinstance(snapshot, Log)

    def test_empty(self):
        assert Log.of() == []


class TestWriterResult:
    def test_match_result_and_log(self):
        wr = WriterResult(Ok(1), Log.of(TraceEvent("finish", 1)))
        match wr:
            case WriterResult(Ok(value), [TraceEvent("finish", _)]):
                assert value == 1
            case _:
                raise AssertionError(repr(wr))
