# File: tests/conftest.py

import pytest

from main import create_app


@pytest.fixture
def files_root(tmp_path):
    """
    An empty files root. Tests fill it as they need.
    """
    root = tmp_path / "files"
    root.mkdir()
    return root


@pytest.fixture
def app(files_root):
    """
    A fresh app (and therefore a fresh, empty file index) per test.
    """
    app = create_app(files_dir=files_root)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def file_index(app):
    return app.extensions["file_index"]
