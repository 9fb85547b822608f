import logging
import os
from unittest.mock import patch

import pytest

import run


@patch("run.uvicorn.run")
def test_log_level_argument_reaches_app_logger(mock_run, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setattr("sys.argv", ["run.py", "--log-level", "DEBUG", "--port", "3100"])

    run.main()

    assert logging.getLogger("voice_relay").level == logging.DEBUG
    assert os.environ["LOG_LEVEL"] == "DEBUG"
    kwargs = mock_run.call_args.kwargs
    assert mock_run.call_args.args[0] == "voice_relay.main:app"
    assert kwargs["port"] == 3100
    assert kwargs["log_level"] == "debug"


@patch("run.uvicorn.run")
def test_missing_api_key_exits(mock_run, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_KEY", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setattr("sys.argv", ["run.py"])

    with pytest.raises(SystemExit) as exc_info:
        run.main()

    assert exc_info.value.code == 1

    mock_run.assert_not_called()
