"""Pattern file exceptions."""

from typing import Optional

from .base import MatrixSyncError


class PatternValidationError(MatrixSyncError):
    """A pattern document failed validation and was not applied."""

    def __init__(self, location: str, reason: str, file_path: Optional[str] = None):
        """
        Initialize pattern validation error.

        Args:
            location: JSON path of the first violation (e.g. "rows[3].columns")
            reason: What is wrong at that location
            file_path: File the document came from (optional)
        """
        where = location or "document"
        recovery = "Export a pattern from a working matrix to see the expected layout"
        if file_path:
            recovery += f"\nFile: {file_path}"

        super().__init__(
            user_message=f"Invalid pattern at {where}: {reason}",
            technical_message=f"Pattern validation failed at {where}: {reason}"
            + (f" ({file_path})" if file_path else ""),
            recoverable=True,
            recovery_hint=recovery,
        )
        self.location = location
        self.reason = reason
        self.file_path = file_path
