"""
Centralized error handling utilities.

| Scenario | Use This |
|----------|----------|
| Config file fails to load | `wrap_pydantic_error(e, path)` |
| Pattern document rejected | `pattern_error_from_pydantic(e)` |
| Critical section with auto-logging | `with ErrorContext("connect to broker"): ...` |
"""

import logging
from typing import Optional

from .base import MatrixSyncError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .pattern import PatternValidationError

logger = logging.getLogger(__name__)


class ErrorContext:
    """
    Context manager for error handling with automatic logging.

    Example:
        ```python
        with ErrorContext("connect to broker", re_raise=False) as ctx:
            connection.start()

        if ctx.error:
            print(f"Failed: {ctx.error}")
        ```
    """

    def __init__(
        self,
        operation: str,
        logger_instance: Optional[logging.Logger] = None,
        re_raise: bool = True
    ):
        """
        Initialize error context.

        Args:
            operation: Description of the operation
            logger_instance: Logger to use (defaults to module logger)
            re_raise: Whether to re-raise exceptions
        """
        self.operation = operation
        self.logger = logger_instance or logger
        self.re_raise = re_raise
        self.error: Optional[BaseException] = None

    def __enter__(self):
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.debug(f"Completed: {self.operation}")
            return False

        self.error = exc_val

        if isinstance(exc_val, MatrixSyncError):
            self.logger.error(f"Failed to {self.operation}: {exc_val.technical_message}")
        else:
            self.logger.error(f"Failed to {self.operation}: {exc_val}", exc_info=True)

        return not self.re_raise


def _format_loc(loc: tuple) -> str:
    """Render a pydantic error location as a JSON path like rows[3].columns."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path


def wrap_pydantic_error(error: Exception, file_path: str) -> ConfigurationError:
    """
    Convert Pydantic validation errors to configuration exceptions.

    Args:
        error: The Pydantic ValidationError
        file_path: Path to the config file that failed validation

    Returns:
        A ConfigurationError with appropriate type and message
    """
    from pydantic import ValidationError

    error_msg = str(error)

    if "Invalid JSON" in error_msg or "json_invalid" in error_msg:
        if "Invalid JSON:" in error_msg:
            parse_error = error_msg.split("Invalid JSON:")[1].split("[type=")[0].strip()
        else:
            parse_error = error_msg
        return ConfigFileInvalidError(file_path, parse_error)

    if isinstance(error, ValidationError):
        errors = error.errors()
        if len(errors) == 1:
            first_error = errors[0]
            return ConfigValidationError(
                field=_format_loc(first_error.get("loc", ("unknown",))),
                value=first_error.get("input"),
                error_msg=first_error.get("msg", "validation failed"),
                file_path=file_path,
            )
        if errors:
            lines = [
                f"  - {_format_loc(err.get('loc', ('unknown',)))}: {err.get('msg', 'validation failed')}"
                for err in errors
            ]
            return ConfigValidationError(
                field="multiple fields",
                value=None,
                error_msg=f"{len(errors)} validation errors:\n" + "\n".join(lines),
                file_path=file_path,
            )

    return ConfigurationError(
        user_message="Configuration could not be loaded",
        technical_message=f"Config error in {file_path}: {error_msg}",
        recoverable=True,
        recovery_hint=f"Check {file_path}",
    )


def pattern_error_from_pydantic(error: Exception, file_path: Optional[str] = None) -> PatternValidationError:
    """
    Convert a Pydantic validation error into a PatternValidationError.

    Only the first violation is reported, so the message points at exactly
    one place in the document.
    """
    from pydantic import ValidationError

    if isinstance(error, ValidationError):
        errors = error.errors(include_url=False)
        if errors:
            first = errors[0]
            return PatternValidationError(
                _format_loc(first.get("loc", ())),
                first.get("msg", "validation failed"),
                file_path,
            )
    return PatternValidationError("", str(error), file_path)
