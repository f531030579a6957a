"""Tests for tablecheck environment helpers."""

import os

from tablecheck.lib.env import expand_env_vars, load_env_file


def test_expand_env_vars_braced(monkeypatch):
    monkeypatch.setenv("DATA_ROOT", "/srv/exports")
    assert expand_env_vars("${DATA_ROOT}/daily") == "/srv/exports/daily"


def test_expand_env_vars_bare(monkeypatch):
    monkeypatch.setenv("DATA_ROOT", "/srv/exports")
    assert expand_env_vars("$DATA_ROOT/daily") == "/srv/exports/daily"


def test_expand_env_vars_no_match(monkeypatch):
    monkeypatch.delenv("MISSING", raising=False)
    assert expand_env_vars("${MISSING}") == "${MISSING}"


def test_expand_env_vars_mixed(monkeypatch):
    monkeypatch.setenv("DATA_ROOT", "/srv")
    monkeypatch.delenv("MISSING", raising=False)
    assert expand_env_vars("$DATA_ROOT/$MISSING/cost$") == "/srv/$MISSING/cost$"


def test_load_env_file(tmp_path, monkeypatch):
    monkeypatch.delenv("TABLECHECK_TEST_VALUE", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("TABLECHECK_TEST_VALUE=from-file\n", encoding="utf-8")

    try:
        assert load_env_file(env_file) is True
        assert os.environ["TABLECHECK_TEST_VALUE"] == "from-file"
    finally:
        os.environ.pop("TABLECHECK_TEST_VALUE", None)


def test_load_env_file_keeps_existing(tmp_path, monkeypatch):
    monkeypatch.setenv("TABLECHECK_TEST_VALUE", "from-env")
    env_file = tmp_path / ".env"
    env_file.write_text("TABLECHECK_TEST_VALUE=from-file\n", encoding="utf-8")

    load_env_file(env_file)
    assert os.environ["TABLECHECK_TEST_VALUE"] == "from-env"
