import logging

import pytest

from settings import DEFAULT_PORT, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LISTEN_PORT", "LISTEN_HOST", "FILES_DIR", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = Settings()

    assert s.LISTEN_PORT == 3030 == DEFAULT_PORT
    assert s.LISTEN_HOST == "0.0.0.0"
    assert str(s.FILES_DIR) == "files"
    assert s.LOG_LEVEL == logging.INFO


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("LISTEN_PORT", "8080")

    assert Settings().LISTEN_PORT == 8080


@pytest.mark.parametrize("value", ["", "abc", "80.5", "-1", "0", "70000"])
def test_bad_port_falls_back_to_default(monkeypatch, value):
    monkeypatch.setenv("LISTEN_PORT", value)

    assert Settings().LISTEN_PORT == DEFAULT_PORT


def test_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings().LOG_LEVEL == logging.DEBUG

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert Settings().LOG_LEVEL == logging.INFO


def test_files_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("FILES_DIR", str(tmp_path))

    assert Settings().FILES_DIR == tmp_path
