"""
Structured logging for the formula parser.

Provides configurable log levels (silent, normal, verbose, debug)
with consistent formatting for token traces, parse results and
parse failures.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """
    Logging levels for the parser.

    SILENT:  No output at all.
    NORMAL:  Parse failures only.
    VERBOSE: Input text and parsed formula for every call.
    DEBUG:   Every token produced by the lexer.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class ParserLogger:
    """
    Structured logger for the formula parser.

    Output is filtered by the configured log level and written
    one line at a time to the configured stream.

    Attributes:
        level: The minimum log level to display.
        stream: The output stream (defaults to stdout).
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        stream: TextIO = sys.stdout,
    ) -> None:
        """
        Initialize logger with level and output stream.

        Args:
            level: Minimum log level to display.
            stream: Output stream (default: sys.stdout).
        """
        self.level: LogLevel = level
        self.stream: TextIO = stream

    def enabled(self, level: LogLevel) -> bool:
        """Return True if messages at ``level`` are written."""
        return self.level.value >= level.value

    def debug(self, message: str, **kwargs: Any) -> None:
        """
        Log a debug message (only shown at DEBUG level).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.DEBUG):
            self._write(f"[DEBUG] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log an info message (shown at VERBOSE and DEBUG levels).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.VERBOSE):
            self._write(f"[INFO] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def error(self, message: str, **kwargs: Any) -> None:
        """
        Log a parse failure (shown at NORMAL level and above).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.NORMAL):
            self._write(f"[ERROR] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def token(self, kind: str, value: str, offset: int) -> None:
        """
        Log a single lexer token (shown at DEBUG level).

        Args:
            kind: Token kind name.
            value: Literal text of the token.
            offset: Character offset of the token in the input.
        """
        if self.enabled(LogLevel.DEBUG):
            self._write(f"[TOKEN] {kind} {value!r} @ {offset}")

    def parsed(self, text: str, formula: object) -> None:
        """Log a successful parse (shown at VERBOSE level)."""
        if self.enabled(LogLevel.VERBOSE):
            self._write(f"[INFO] Parsed {text!r}")
            self._write(f"  formula: {formula}")

    def _write(self, message: str) -> None:
        """Write a line to the output stream."""
        self.stream.write(message + "\n")
