"""Logging configuration.

The TUI owns the terminal, so logs go to a file under the data directory.
CLI commands can add a stderr handler with --verbose.
"""

import logging
import os
import sys
from typing import Mapping, Optional

LOG_FILE = "omado.log"


def _level_from_env(environ: Mapping[str, str], default: int) -> int:
    raw = (environ.get("OMADO_LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(
    log_dir: Optional[str],
    *,
    verbose: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> None:
    """Configure the "omado" logger. Call once, before the first log call.

    - File handler in log_dir (skipped if the directory is unusable)
    - stderr handler when verbose
    Level comes from OMADO_LOG_LEVEL (default WARNING, DEBUG when verbose).
    """
    env = os.environ if environ is None else environ
    level = _level_from_env(env, logging.DEBUG if verbose else logging.WARNING)

    log = logging.getLogger("omado")
    log.setLevel(level)
    log.propagate = False

    for h in list(log.handlers):
        log.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            fh = logging.FileHandler(os.path.join(log_dir, LOG_FILE), encoding="utf-8")
        except OSError:
            fh = None
        if fh is not None:
            fh.setFormatter(fmt)
            log.addHandler(fh)

    if verbose:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(fmt)
        log.addHandler(ch)

    if not log.handlers:
        log.addHandler(logging.NullHandler())
