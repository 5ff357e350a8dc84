"""
Tests for logger functionality.
"""

import threading

import pytest

from trainjobs.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with empty metrics."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["operations"] == {}
        assert logger.metrics["errors_by_type"] == {}

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context is appended to the message as JSON."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Created training job", job_id="job-001", matched=1)

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert 'Created training job | Context: {"job_id": "job-001", "matched": 1}' in log_content

    def test_context_with_non_json_values(self, tmp_path):
        """Values JSON cannot encode are logged via str()."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("With path", path=tmp_path)

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert str(tmp_path) in log_content

    def test_operation_metrics(self, tmp_path):
        """Calls and failures are tracked per operation."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_operation("create")
        logger.record_operation("create")
        logger.record_operation("get")
        logger.record_failure("get", "NotFoundError")

        metrics = logger.get_metrics()

        assert metrics["operations"]["create"]["calls"] == 2
        assert metrics["operations"]["create"]["failures"] == 0
        assert metrics["operations"]["get"]["failures"] == 1
        assert metrics["operations"]["get"]["failure_rate"] == 1.0
        assert metrics["errors_by_type"]["NotFoundError"] == 1

    def test_failure_rate_calculation(self, tmp_path):
        """Failure rate should be calculated correctly."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # 3 calls, 1 failure = 33.3% failure rate
        for _ in range(3):
            logger.record_operation("update_status")
        logger.record_failure("update_status", "PersistenceError")

        rate = logger.get_metrics()["operations"]["update_status"]["failure_rate"]
        assert rate == pytest.approx(0.333, rel=0.01)

    def test_get_metrics_returns_copy(self, tmp_path):
        """Derived rates do not leak back into the live counters."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )
        logger.record_operation("list")

        logger.get_metrics()

        assert "failure_rate" not in logger.metrics["operations"]["list"]

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )
        logger.record_operation("delete")
        logger.record_failure("delete", "PersistenceError")

        logger.log_metrics_summary()

        log_content = next(tmp_path.glob("*.log")).read_text()
        assert "Operations: 1 (1 failed)" in log_content
        assert "delete: 1 calls, 1 failed (100.0%)" in log_content
        assert "PersistenceError: 1" in log_content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        log_files = list(tmp_path.glob("trainjobs_*.log"))
        assert len(log_files) == 1
        assert "Test message" in log_files[0].read_text()

    def test_metrics_counted_across_threads(self, tmp_path):
        """Concurrent callers do not lose counts."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        def work():
            for _ in range(2000):
                logger.record_operation("get")
                logger.record_failure("get", "NotFoundError")

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        metrics = logger.get_metrics()
        assert metrics["operations"]["get"]["calls"] == 16000
        assert metrics["operations"]["get"]["failures"] == 16000
        assert metrics["errors_by_type"]["NotFoundError"] == 16000


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_operation("create")

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        assert logger2.metrics["operations"] == {}
