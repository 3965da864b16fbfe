"""Root of the matrixsync error hierarchy.

Every error carries two messages: ``user_message`` is what the CLI prints
and what ends up in ErrorStatus events, ``technical_message`` is what gets
logged. ``recoverable`` tells the transport whether another connection
attempt can help, and errors that surface as status events name their
``error_code``.
"""

import logging
from typing import ClassVar, Optional

from matrixsync.protocols.events import ErrorCode


class MatrixSyncError(Exception):
    """
    Base exception for all matrixsync errors.

    Attributes:
        user_message: Short message for the CLI and for status events
        technical_message: Detailed message for logs
        recoverable: True if retrying (reconnecting, fixing input) can succeed
        recovery_hint: Optional next step for the user
        error_code: ErrorCode used when the error is reported as a status event
    """

    error_code: ClassVar[Optional[ErrorCode]] = None

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recoverable: bool = False,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message

    def describe(self) -> str:
        """Message followed by the indented recovery hint, as the CLI prints it."""
        if not self.recovery_hint:
            return self.user_message
        hint = self.recovery_hint.replace("\n", "\n  ")
        return f"{self.user_message}\n  {hint}"

    def log(self, target: logging.Logger) -> None:
        """Log the technical message: WARNING if recoverable, ERROR otherwise."""
        target.log(logging.WARNING if self.recoverable else logging.ERROR, self.technical_message)
