"""Structured logger: context, metrics and secret redaction."""

import pytest

from kraken_client.infrastructure.logging import (
    HFTLogger, LogBackend, LoggingTimer, LogLevel, LogType, redact_context
)


class CaptureBackend(LogBackend):
    def __init__(self):
        super().__init__("capture")
        self.records = []

    def should_handle(self, record):
        return True

    def write(self, record):
        self.records.append(record)


class BrokenBackend(LogBackend):
    def __init__(self):
        super().__init__("broken")

    def should_handle(self, record):
        return True

    def write(self, record):
        raise OSError("disk full")


@pytest.fixture
def backend():
    return CaptureBackend()


class TestRedaction:

    def test_sensitive_keys_masked(self):
        context = redact_context({"token": "t0k3n", "API_SECRET": "s", "signature": "sig", "pair": "XBT/USD"})
        assert context == {"token": "***", "API_SECRET": "***", "signature": "***", "pair": "XBT/USD"}

    def test_extra_keys(self):
        assert redact_context({"otp": "123456"}, extra_keys=["OTP"]) == {"otp": "***"}

    def test_logger_redacts_before_backends(self, backend):
        logger = HFTLogger("test.redact", [backend], propagate=False)
        logger.info("Subscribing", token="abc", channel="ownTrades")
        record = backend.records[0]
        assert record.context == {"token": "***", "channel": "ownTrades"}

    def test_metric_tags_redacted(self, backend):
        logger = HFTLogger("test.redact", [backend], propagate=False)
        logger.metric("signed", 1, secret="s3cr3t")
        assert backend.records[0].metric_tags == {"secret": "***"}


class TestHFTLogger:

    def test_context_merging(self, backend):
        logger = HFTLogger("test.ctx", [backend], propagate=False, default_context={"exchange": "kraken"})
        logger.set_context(session="public")
        logger.warning("Disconnected", reason="reset")
        record = backend.records[0]
        assert record.level == LogLevel.WARNING
        assert record.log_type == LogType.TEXT
        assert record.context == {"exchange": "kraken", "session": "public", "reason": "reset"}

    def test_counter_and_latency_names(self, backend):
        logger = HFTLogger("test.metrics", [backend], propagate=False)
        logger.counter("ws_connections")
        logger.latency("rest_request", 12.5)
        names = [record.metric_name for record in backend.records]
        assert names == ["ws_connections_count", "rest_request_latency_ms"]
        assert backend.records[1].metric_value == 12.5

    def test_timer_logs_latency(self, backend):
        logger = HFTLogger("test.timer", [backend], propagate=False)
        with LoggingTimer(logger, "sign", path="/0/private/Balance") as timer:
            pass
        record = backend.records[0]
        assert record.metric_name == "sign_latency_ms"
        assert record.metric_tags == {"path": "/0/private/Balance"}
        assert timer.elapsed_ms >= 0

    def test_audit_record(self, backend):
        logger = HFTLogger("test.audit", [backend], propagate=False)
        logger.audit("Order submitted", pair="XBTUSD", token="abc")
        record = backend.records[0]
        assert record.log_type == LogType.AUDIT
        assert record.level == LogLevel.INFO
        assert record.context == {"pair": "XBTUSD", "token": "***"}

    def test_failing_backend_gets_disabled(self, backend):
        broken = BrokenBackend()
        logger = HFTLogger("test.broken", [broken, backend], propagate=False)
        for _ in range(12):
            logger.info("still logging")
        assert not broken.enabled
        assert len(backend.records) == 12

    def test_propagates_warnings_to_stdlib(self, caplog):
        logger = HFTLogger("test.propagate", [], propagate=True)
        with caplog.at_level("WARNING", logger="test.propagate"):
            logger.info("quiet")
            logger.error("loud", token="abc")
        assert [r.getMessage() for r in caplog.records] == ["loud {'token': '***'}"]
