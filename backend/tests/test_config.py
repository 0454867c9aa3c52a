"""Tests for environment configuration and logging setup"""
import logging

import config
import logging_config


class TestIntEnv:
    def test_reads_integer(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL_SECONDS", "120")
        assert config._int_env("CACHE_TTL_SECONDS", 3600) == 120

    def test_missing_uses_default(self, monkeypatch):
        monkeypatch.delenv("CACHE_TTL_SECONDS", raising=False)
        assert config._int_env("CACHE_TTL_SECONDS", 3600) == 3600

    def test_invalid_falls_back_with_warning(self, monkeypatch, caplog):
        monkeypatch.setenv("CACHE_TTL_SECONDS", "1h")
        with caplog.at_level(logging.WARNING, logger="config"):
            assert config._int_env("CACHE_TTL_SECONDS", 3600) == 3600
        assert "CACHE_TTL_SECONDS" in caplog.text


class TestSetupLogging:
    def test_adds_handler_only_once(self, monkeypatch):
        monkeypatch.setattr(logging_config, "_configured", False)
        root = logging.getLogger()
        before = list(root.handlers)
        try:
            logging_config.setup_logging("INFO")
            logging_config.setup_logging("INFO")
            added = [h for h in root.handlers if h not in before]
            assert len(added) == 1
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            for h in root.handlers[:]:
                if h not in before:
                    root.removeHandler(h)
