"""
Unit tests for transfer observers.
"""

import json
import logging

import aiofiles.os
import pytest

from conftest import run, RecordingResponse
from httpsend import TransferConfig, TransferResolver
from httpsend.observers import LoggingObserver, ObserverGroup, TransferLog, TransferObserver


class CountingObserver(TransferObserver):

    def __init__(self):
        self.calls = 0

    def on_end(self, request, target, bytes_sent):
        self.calls += 1


def serve(docroot, observer, request):
    resolver = TransferResolver(TransferConfig(root=str(docroot)), observer=observer)
    run(resolver.send(request, RecordingResponse(head_only=request.is_head)))


class TestObserverGroup:

    def test_fan_out(self, docroot, make_request):
        first, second = CountingObserver(), CountingObserver()
        group = ObserverGroup([first]).add(second)

        serve(docroot, group, make_request("/ten.txt"))

        assert (first.calls, second.calls) == (1, 1)

    def test_fan_out_abort(self, docroot, make_request):
        class AbortCounter(TransferObserver):
            def __init__(self):
                self.aborted = []

            def on_abort(self, request, target, bytes_sent):
                self.aborted.append(bytes_sent)

        first, second = AbortCounter(), AbortCounter()
        resolver = TransferResolver(
            TransferConfig(root=str(docroot), chunk_size=4), observer=ObserverGroup([first, second]),
        )

        run(resolver.send(make_request("/ten.txt"), RecordingResponse(fail_after=1)))

        assert first.aborted == second.aborted == [4]

    def test_base_is_noop(self, docroot, make_request):
        serve(docroot, TransferObserver(), make_request("/missing"))


class TestLoggingObserver:

    def test_text_line(self, docroot, make_request, caplog):
        with caplog.at_level(logging.INFO, logger="httpsend.access"):
            serve(docroot, LoggingObserver(), make_request("/ten.txt", range="bytes=0-3"))

        assert len(caplog.records) == 1
        message = caplog.records[0].getMessage()
        assert message.startswith("127.0.0.1 - - [")
        assert '"GET /ten.txt" 206 4 ' in message

    def test_json_line(self, docroot, make_request, caplog):
        with caplog.at_level(logging.INFO, logger="httpsend.access"):
            serve(docroot, LoggingObserver(log_format="json"), make_request("/ten.txt"))

        entry = json.loads(caplog.records[0].getMessage())
        assert entry["status"] == 200
        assert entry["bytes_sent"] == 10
        assert entry["range"] is None
        assert entry["method"] == "GET"

    def test_client_errors_log_warning(self, docroot, make_request, caplog):
        with caplog.at_level(logging.INFO, logger="httpsend.access"):
            serve(docroot, LoggingObserver(), make_request("/missing"))

        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert " 404 0 " in record.getMessage()
        assert "(not found)" in record.getMessage()

    def test_server_errors_log_error(self, docroot, make_request, caplog, monkeypatch):
        async def broken(path, *args, **kwargs):
            raise OSError(5, "Input/output error", path)

        monkeypatch.setattr(aiofiles.os, "stat", broken)
        with caplog.at_level(logging.INFO, logger="httpsend.access"):
            serve(docroot, LoggingObserver(), make_request("/ten.txt"))

        assert caplog.records[0].levelno == logging.ERROR

    def test_directory_is_logged(self, docroot, make_request, caplog):
        """The caller picks the status for a directory, so the line shows "-"."""
        with caplog.at_level(logging.INFO, logger="httpsend.access"):
            serve(docroot, LoggingObserver(), make_request("/docs"))

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO
        assert caplog.records[0].getMessage().endswith('"GET /docs" - 0 0.00ms [directory]')

    def test_head_is_logged(self, docroot, make_request, caplog):
        with caplog.at_level(logging.INFO, logger="httpsend.access"):
            serve(docroot, LoggingObserver(), make_request("/ten.txt", method="HEAD", range="bytes=0-3"))

        assert len(caplog.records) == 1
        assert '"HEAD /ten.txt" 206 0 ' in caplog.records[0].getMessage()

    def test_not_modified_is_logged(self, docroot, make_request, caplog):
        with caplog.at_level(logging.INFO, logger="httpsend.access"):
            serve(docroot, LoggingObserver(log_format="json"), make_request("/ten.txt", if_none_match="*"))

        entry = json.loads(caplog.records[0].getMessage())
        assert entry["status"] == 304
        assert entry["bytes_sent"] == 0

    def test_peer_abort_releases_start_times(self, docroot, make_request, caplog):
        """Repeated hangups must not leave per-request state behind."""
        observer = LoggingObserver()
        resolver = TransferResolver(TransferConfig(root=str(docroot), chunk_size=2), observer=observer)

        with caplog.at_level(logging.INFO, logger="httpsend.access"):
            for _ in range(3):
                run(resolver.send(make_request("/ten.txt"), RecordingResponse(fail_after=1)))

        assert observer._started == {}
        assert len(caplog.records) == 3
        assert all(
            '"GET /ten.txt" 200 2 ' in record.getMessage()
            and record.getMessage().endswith("[aborted by peer]")
            for record in caplog.records
        )

    def test_invalid_format(self):
        with pytest.raises(ValueError):
            LoggingObserver(log_format="xml")


class TestTransferLog:

    def test_to_text_with_error(self):
        entry = TransferLog(
            method="GET", path="/x", client_ip="", status=500, bytes_sent=0,
            duration_ms=1.5, timestamp="18/Oct/2026:10:00:00 +0000", error="boom",
        )

        assert entry.to_text() == '- - - [18/Oct/2026:10:00:00 +0000] "GET /x" 500 0 1.50ms (boom)'

    def test_to_dict_rounds_duration(self):
        entry = TransferLog(
            method="HEAD", path="/x", client_ip="10.0.0.1", status=200, bytes_sent=0,
            duration_ms=1.23456, timestamp="t", byte_range=None,
        )

        assert entry.to_dict()["duration_ms"] == 1.23
