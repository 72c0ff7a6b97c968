"""Logging setup for deployment runs.

Staging and production runs emit one JSON object per line so a run can be
replayed from its log. Development runs get a colored single-line format
that appends the contract role / address / tx hash when a record has them.
Every record carries the run id and target chain via :class:`RunContextFilter`.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes passed through ``extra=`` by the pipeline and transaction helpers.
_CONTEXT_FIELDS = ("run_id", "chain", "role", "address", "tx_hash", "method", "proof_type")

_QUIET_LOGGERS = ("web3", "httpx", "httpcore", "urllib3", "aiohttp", "asyncio")


def _context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: getattr(record, key)
        for key in _CONTEXT_FIELDS
        if getattr(record, key, None) not in (None, "")
    }


class JSONFormatter(logging.Formatter):
    """One JSON document per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context(record))

        if record.exc_info and record.exc_info[1]:
            exc_type, exc, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else "Unknown",
                "message": str(exc),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, default=str)


class DevFormatter(logging.Formatter):
    """Colored human-readable formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    DIM = "\033[2m"
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.now(timezone.utc).strftime("%H:%M:%S")
        line = f"{color}{ts} [{record.levelname:>8s}]{self.RESET} {record.name}: "

        run_id = getattr(record, "run_id", None)
        if run_id:
            line += f"[{run_id[:8]}] "
        line += record.getMessage()

        # role / address / tx hash, when the record is about a contract
        tags = [
            f"{key}={getattr(record, key)}"
            for key in ("role", "address", "tx_hash")
            if getattr(record, key, None)
        ]
        if tags:
            line += f" {self.DIM}({', '.join(tags)}){self.RESET}"

        if record.exc_info and record.exc_info[1]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(env: str = "development", log_level: str = "INFO") -> None:
    """Install a single stdout handler on the root logger.

    Args:
        env: development, staging or production
        log_level: Minimum log level name
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if env in ("staging", "production") else DevFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class RunContextFilter(logging.Filter):
    """Stamp the deployment run id and target chain on every record."""

    def __init__(self, run_id: str = "", chain: str = "") -> None:
        super().__init__()
        self.run_id = run_id
        self.chain = chain

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id  # type: ignore[attr-defined]
        if self.chain and not getattr(record, "chain", None):
            record.chain = self.chain  # type: ignore[attr-defined]
        return True
