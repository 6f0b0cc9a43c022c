from unittest.mock import patch

import pytest

from st import config
from st.__main__ import main


def test_parse_args_defaults():
    args = config.parse_args([])
    assert args.port == config.DEFAULT_PORT
    assert args.db == config.DEFAULT_DB


def test_parse_args_overrides():
    args = config.parse_args(["--port", "9000", "--db", "/tmp/links.db"])
    assert args.port == 9000
    assert args.db == "/tmp/links.db"


def test_main_initializes_db_and_serves(tmp_path):
    db = tmp_path / "st.sqlite3"
    with patch("st.__main__.uvicorn.run") as mock_run:
        main(["--port", "9123", "--db", str(db)])

    assert db.exists()
    mock_run.assert_called_once()
    app = mock_run.call_args.args[0]
    assert app.state.store.path == str(db)
    assert mock_run.call_args.kwargs["port"] == 9123


def test_main_exits_when_db_cannot_be_opened(tmp_path):
    with patch("st.__main__.uvicorn.run") as mock_run:
        with pytest.raises(SystemExit) as excinfo:
            main(["--db", str(tmp_path / "missing" / "st.sqlite3")])
    assert excinfo.value.code == 1
    mock_run.assert_not_called()


def test_main_disables_uvicorn_access_log(tmp_path):
    with patch("st.__main__.uvicorn.run") as mock_run:
        main(["--db", str(tmp_path / "st.sqlite3")])
    assert mock_run.call_args.kwargs["access_log"] is False


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("ST_PORT", "9001")
    assert config._port() == 9001
    monkeypatch.delenv("ST_PORT")
    assert config._port() == 8080


def test_invalid_port_in_environment(monkeypatch):
    monkeypatch.setenv("ST_PORT", "eighty")
    with pytest.raises(ValueError, match="ST_PORT"):
        config._port()


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("ST_LOG_LEVEL", "debug")
    assert config._log_level() == "DEBUG"


def test_invalid_log_level_in_environment(monkeypatch):
    monkeypatch.setenv("ST_LOG_LEVEL", "LOUD")
    with pytest.raises(ValueError, match="ST_LOG_LEVEL"):
        config._log_level()
