import json
import logging

import pytest

from utils import Throttle, load_config, setup_logging


def test_throttle_runs_at_most_once_per_interval():
    calls = []
    throttle = Throttle(150, lambda *args: calls.append(args))

    assert throttle.submit(0, 800, 600)
    assert not throttle.submit(50, 810, 600)
    assert not throttle.submit(100, 820, 600)
    assert calls == [(800, 600)]
    assert throttle.has_pending

    assert not throttle.flush(149)
    assert throttle.flush(150)
    assert calls == [(800, 600), (820, 600)]
    assert not throttle.has_pending
    assert not throttle.flush(1000)


def test_throttle_accepts_call_after_interval():
    calls = []
    throttle = Throttle(50, calls.append)

    throttle.submit(0, "a")
    throttle.submit(60, "b")

    assert calls == ["a", "b"]


def test_load_config_reads_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"simulation_parameters": {"seed": 3}}))

    assert load_config(str(path)) == {"simulation_parameters": {"seed": 3}}


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"))


def test_load_config_malformed(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    with pytest.raises(json.JSONDecodeError):
        load_config(str(path))


def test_setup_logging_writes_rotating_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
        logging.info("hello from the field")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.DEBUG
        assert logging.getLogger("numba").level == logging.WARNING
        assert "hello from the field" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
