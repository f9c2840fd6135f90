"""
Celery App Tests
"""

from strava_stats import celery_app


class TestLoggingSetup:
    """Tests for worker logging configuration"""

    def test_worker_signal_configures_logging(self, monkeypatch):
        calls = []
        monkeypatch.setattr(celery_app, "configure_logging", calls.append)
        monkeypatch.setenv("STRAVA_STATS_LOG_LEVEL", "warning")
        monkeypatch.delenv("DEBUG", raising=False)

        celery_app.on_setup_logging(loglevel=None, logfile=None)

        assert calls == ["WARNING"]

    def test_debug_forces_debug_level(self, monkeypatch):
        calls = []
        monkeypatch.setattr(celery_app, "configure_logging", calls.append)
        monkeypatch.setenv("DEBUG", "1")

        celery_app.on_setup_logging()

        assert calls == ["DEBUG"]
