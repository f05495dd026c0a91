"""
Tests for jobboard_ats.utils.logger.
"""

from jobboard_ats.utils.logger import LoggerMixin, sanitize_for_logging


class TestSanitizeForLogging:
    def test_redacts_secrets_and_notes(self):
        data = {
            "email": "a@b.c",
            "password": "hunter2",
            "cron_secret": "abc",
            "recruiter_notes": "private",
            "internalNotes": "private",
        }
        assert sanitize_for_logging(data) == {
            "email": "a@b.c",
            "password": "***REDACTED***",
            "cron_secret": "***REDACTED***",
            "recruiter_notes": "***REDACTED***",
            "internalNotes": "***REDACTED***",
        }

    def test_walks_nested_structures(self):
        data = {"items": [{"token": "x", "id": 1}], "path": "$.a"}
        assert sanitize_for_logging(data) == {
            "items": [{"token": "***REDACTED***", "id": 1}],
            "path": "$.a",
        }


class TestLoggerMixin:
    def test_logger_is_cached(self):
        class Worker(LoggerMixin):
            pass

        worker = Worker()
        assert worker.logger is worker.logger
