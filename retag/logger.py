"""
Console logger - implements LoggerProtocol by printing to stdout.
"""

from __future__ import annotations

from datetime import UTC, datetime


class ConsoleLogger:
    """
    Logger implementation for interactive use (implements LoggerProtocol).

    Outputs messages to stdout with optional verbose mode.
    """

    def __init__(self, verbose: bool = False, timestamps: bool = False) -> None:
        """
        Initialize console logger.

        Args:
            verbose: If True, show info messages. If False, only warnings/errors.
            timestamps: If True, prefix every line with a UTC timestamp.
        """
        self.verbose = verbose
        self.timestamps = timestamps

    def _prefix(self, level: str) -> str:
        if self.timestamps:
            return f'[{datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")}] [{level}]'
        return f'[{level}]'

    def info(self, message: str) -> None:
        """Log info message (only if verbose)."""
        if self.verbose:
            print(f'{self._prefix("INFO")} {message}')

    def warning(self, message: str) -> None:
        """Log warning message."""
        print(f'{self._prefix("WARNING")} {message}')

    def error(self, message: str) -> None:
        """Log error message."""
        print(f'{self._prefix("ERROR")} {message}')
