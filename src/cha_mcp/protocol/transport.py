"""STDIO transport layer for MCP communication.

Frames JSON-RPC messages as newline-delimited UTF-8 JSON, one document per
line, in both directions. Diagnostics go to stderr so they never corrupt the
protocol stream.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterator
from typing import IO, Any, TextIO

LOG_PREFIX = "[cha-mcp]"

Logger = Callable[[str], None]


def encode(message: Any) -> bytes:
    """Serialize a message to a single newline-terminated JSON document.

    Args:
        message: A message dataclass (anything with ``to_dict``) or a plain
            JSON-serializable value.

    Returns:
        UTF-8 encoded JSON followed by exactly one newline.
    """
    if hasattr(message, "to_dict"):
        message = message.to_dict()
    body = json.dumps(message, ensure_ascii=False, separators=(",", ":"))
    return body.encode("utf-8") + b"\n"


def decode(stream: IO[Any], log: Logger | None = None) -> Iterator[Any]:
    """Lazily decode a stream of newline-delimited JSON documents.

    Corrupt lines are skipped (and reported through ``log``) without ending
    the sequence. Blank lines are ignored, and a final line that was never
    terminated by a newline is dropped.

    Args:
        stream: Binary or text stream to read lines from.
        log: Optional diagnostic callback.

    Yields:
        Each successfully parsed JSON value, in stream order.
    """
    while True:
        try:
            line = stream.readline()
        except (OSError, ValueError) as e:
            if log:
                log(f"Read failed: {e}")
            return

        if not line:  # EOF
            return

        if isinstance(line, bytes):
            terminated = line.endswith(b"\n")
            try:
                text = line.decode("utf-8")
            except UnicodeDecodeError as e:
                if terminated and log:
                    log(f"Skipping undecodable line: {e}")
                continue
        else:
            terminated = line.endswith("\n")
            text = line

        if not terminated:
            if text.strip() and log:
                log("Dropping partial line at end of stream")
            return

        text = text.strip()
        if not text:
            continue

        try:
            yield json.loads(text)
        except json.JSONDecodeError as e:
            if log:
                log(f"Skipping malformed line: {e}")


class StdioTransport:
    """Newline-delimited JSON over a pair of byte streams.

    The server reads requests from stdin and writes replies to stdout; the
    client uses the same class over the server process' pipes, reversed.
    """

    def __init__(
        self,
        stdin: IO[bytes] | None = None,
        stdout: IO[bytes] | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            stdin: Inbound stream (defaults to sys.stdin.buffer).
            stdout: Outbound stream (defaults to sys.stdout.buffer).
            stderr: Log stream (defaults to sys.stderr).
        """
        self._stdin = stdin or sys.stdin.buffer
        self._stdout = stdout or sys.stdout.buffer
        self._stderr = stderr or sys.stderr

    def messages(self) -> Iterator[Any]:
        """Iterate over inbound JSON documents until EOF."""
        return decode(self._stdin, log=self.log)

    def write_message(self, message: Any) -> None:
        """Write a message to the outbound stream and flush it.

        Args:
            message: Message dataclass or JSON-serializable value.
        """
        self._stdout.write(encode(message))
        self._stdout.flush()

    def log(self, message: str) -> None:
        """Write a log message to stderr.

        Args:
            message: Log message.
        """
        self._stderr.write(f"{LOG_PREFIX} {message}\n")
        self._stderr.flush()

    def close(self) -> None:
        """Close the outbound stream, signalling EOF to the peer."""
        if not self._stdout.closed:
            self._stdout.close()
