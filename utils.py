# utils.py
"""
Utility functions for the particle field framework.

This module provides helpers that are used across different parts of the
application but do not belong to a specific domain like physics or
rendering: logging setup, config loading, and rate-limiting of host event
handlers.
"""
import logging
import logging.handlers
import json
import os
from typing import Any, Callable, Dict, Optional, Tuple

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary with an optional "logging" section holding
#       "level", "format", "log_file", "max_bytes" and "backup_count".
#   - Side Effects: Replaces the root logger's handlers with a console
#     handler and a rotating file handler. Creates the log directory.
#     Caps Numba's own logger at WARNING so JIT compilation chatter does
#     not flood DEBUG output.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed JSON object.
#   - Raises: FileNotFoundError, json.JSONDecodeError (after logging).
#
# class Throttle:
#   - submit(self, now: float, *args) -> bool:
#     - Outputs: True if the callback ran immediately.
#     - Side Effects: Runs the callback at most once per interval. A call
#       dropped inside the interval replaces any earlier pending call.
#   - flush(self, now: float) -> bool:
#     - Side Effects: Runs the pending call once the interval has elapsed.

def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the root logger from the "logging" section of the config.

    Logs go to both the console and a size-rotated file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    log_file_path = log_config.get('log_file', 'logs/particle_field.log')
    max_bytes = int(log_config.get('max_bytes', 1024 * 1024))
    backup_count = int(log_config.get('backup_count', 5))

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(log_level)
    if root.hasHandlers():
        root.handlers.clear()

    formatter = logging.Formatter(log_format)
    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=max_bytes, backupCount=backup_count
        ),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.getLogger('numba').setLevel(logging.WARNING)

    logging.info("Logging system initialized.")
    logging.debug(
        f"Log level {log_level}, file {log_file_path} "
        f"(rotating at {max_bytes} bytes, {backup_count} backups)."
    )


def load_config(path: str) -> Dict[str, Any]:
    """Reads the JSON configuration file at `path`."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"Malformed JSON in {path}: {e}")
        raise
    logging.info(f"Configuration loaded with sections: {', '.join(sorted(config))}.")
    return config


class Throttle:
    """
    Rate-limits a host event handler to at most one call per interval.

    The most recent call dropped inside the interval is kept and delivered
    by `flush`, so the last event of a burst is never lost.
    """
    def __init__(self, interval_ms: float, callback: Callable[..., Any]):
        self.interval_ms = interval_ms
        self.callback = callback
        self._last_call: Optional[float] = None
        self._pending: Optional[Tuple[Any, ...]] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def _ready(self, now: float) -> bool:
        return self._last_call is None or now - self._last_call >= self.interval_ms

    def submit(self, now: float, *args: Any) -> bool:
        if self._ready(now):
            self._last_call = now
            self._pending = None
            self.callback(*args)
            return True
        self._pending = args
        return False

    def flush(self, now: float) -> bool:
        if self._pending is None or not self._ready(now):
            return False
        args = self._pending
        self._pending = None
        self._last_call = now
        self.callback(*args)
        return True
