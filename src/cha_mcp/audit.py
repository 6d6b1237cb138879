"""Audit logging for dispatched requests.

Append-only JSON Lines log of every tools/call and resources/read handled by
the server, with sensitive argument values redacted.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Patterns for sensitive argument keys
SENSITIVE_PATTERNS = [
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"api[_-]?key", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
    re.compile(r"credential", re.IGNORECASE),
]


def _is_sensitive_key(key: str) -> bool:
    return any(pattern.search(key) for pattern in SENSITIVE_PATTERNS)


def _sanitize_arguments(arguments: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of arguments with sensitive values redacted."""
    sanitized = {}
    for key, value in arguments.items():
        if _is_sensitive_key(key):
            sanitized[key] = "[REDACTED]"
        else:
            sanitized[key] = _sanitize_value(value)
    return sanitized


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return _sanitize_arguments(value)
    if isinstance(value, list):
        return [_sanitize_value(item) for item in value]
    return value


def _get_timestamp() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class AuditLogger:
    """Append-only audit logger with JSON Lines format.

    The log file is flushed after each write.
    """

    def __init__(self, log_path: Path) -> None:
        """Initialize the audit logger.

        Args:
            log_path: Path to the audit log file.
        """
        self._log_path = log_path
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(log_path, "a", encoding="utf-8")  # noqa: SIM115

    def _write_line(self, data: dict[str, Any]) -> None:
        self._file.write(json.dumps(data, ensure_ascii=False) + "\n")
        self._file.flush()

    def log_call(
        self,
        request_id: int | str,
        method: str,
        target: str,
        arguments: dict[str, Any],
        status: str,
        duration_ms: float,
    ) -> None:
        """Log one dispatched request.

        Args:
            request_id: JSON-RPC id of the request.
            method: Method name (tools/call or resources/read).
            target: Tool name or resource URI.
            arguments: Tool arguments (will be sanitized).
            status: "success" or "error".
            duration_ms: Handling time in milliseconds.
        """
        self._write_line(
            {
                "timestamp": _get_timestamp(),
                "request_id": request_id,
                "method": method,
                "target": target,
                "arguments": _sanitize_arguments(arguments),
                "result_status": status,
                "execution_time_ms": round(duration_ms, 3),
            }
        )

    def close(self) -> None:
        """Close the log file."""
        if self._file and not self._file.closed:
            self._file.close()

    def __enter__(self) -> AuditLogger:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
