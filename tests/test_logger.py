"""
Tests for logger functionality.
"""

import pytest
from jobboard.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["api_calls"] == 0

    def test_log_with_context(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.info("Message with context", url="https://example.com", count=5)

        log_files = list(tmp_path.glob("*.log"))
        content = log_files[0].read_text()
        assert '"url": "https://example.com"' in content

    def test_api_metrics(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        for _ in range(4):
            logger.record_api_call()
        logger.record_api_failure("Timeout")

        metrics = logger.get_metrics()
        assert metrics["api_calls"] == 4
        assert metrics["api_failures"] == 1
        assert metrics["errors_by_type"]["Timeout"] == 1
        assert metrics["api_success_rate"] == pytest.approx(0.75)

    def test_cache_and_optimistic_metrics(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.record_cache_hit()
        logger.record_cache_write()
        logger.record_cache_write(ok=False)
        logger.record_optimistic(reconciled=True)
        logger.record_optimistic(reconciled=False)
        logger.record_optimistic(reconciled=False)

        metrics = logger.get_metrics()
        assert metrics["cache_hits"] == 1
        assert metrics["cache_writes"] == 1
        assert metrics["cache_write_failures"] == 1
        assert metrics["reconciled"] == 1
        assert metrics["optimistic_retained"] == 2

    def test_metrics_summary_written(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.record_api_call()
        logger.record_api_failure("HTTPError_500")

        logger.log_metrics_summary()

        content = list(tmp_path.glob("*.log"))[0].read_text()
        assert "Session Metrics" in content
        assert "HTTPError_500: 1" in content


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_api_call()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)
        assert logger2.metrics["api_calls"] == 0
