import importlib
import os
import sys

import pytest


def _cleanup_app_modules():
    for module in [
        name for name in sys.modules if name == "padelboard" or name.startswith("padelboard.")
    ]:
        sys.modules.pop(module, None)


@pytest.fixture(autouse=True)
def app_import_isolation(monkeypatch):
    app_path = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    saved = {
        name: module
        for name, module in sys.modules.items()
        if name == "padelboard" or name.startswith("padelboard.")
    }
    _cleanup_app_modules()
    monkeypatch.syspath_prepend(app_path)
    try:
        yield
    finally:
        _cleanup_app_modules()
        sys.modules.update(saved)


def test_rejects_wildcard_origins(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "*")
    monkeypatch.setenv("ALLOW_CREDENTIALS", "true")
    with pytest.raises(ValueError):
        importlib.import_module("padelboard.main")


def test_requires_allowed_origins(monkeypatch):
    monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
    monkeypatch.delenv("ALLOW_CREDENTIALS", raising=False)
    with pytest.raises(ValueError):
        importlib.import_module("padelboard.main")


def test_blank_origin_list_is_rejected(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", " , ,")
    with pytest.raises(ValueError):
        importlib.import_module("padelboard.main")


def test_configured_origin_is_allowed(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://scores.example.com")
    main = importlib.import_module("padelboard.main")
    assert main.ALLOWED_ORIGINS == ["https://scores.example.com"]
