"""
Custom exception hierarchy for matrixsync.

## Exception Hierarchy

```
MatrixSyncError (base)
├── InvalidCoordinateError   (also ValueError)
├── InvalidIndexError        (also ValueError)
├── InvalidBrightnessError   (also ValueError)
├── PatternValidationError
├── PayloadParseError
├── TransportError
│   ├── NotConnectedError
│   ├── PublishError
│   └── ReconnectExhaustedError
└── ConfigurationError
    ├── ConfigFileInvalidError
    └── ConfigValidationError
```

Contract errors (coordinates, indices, brightness) fail fast at the call
site. Pattern errors surface to the caller and never partially apply.
Transport errors are retried by the reconnect policy unless they are marked
not recoverable, in which case the client gives up at once. Errors with an
``error_code`` reach listeners as ErrorStatus events (see
``ErrorStatus.from_error``) rather than being raised to application code;
PayloadParseError is logged and the message dropped.

See `matrixsync.exceptions.handlers` for conversion helpers.
"""

from .base import MatrixSyncError
from .config import ConfigFileInvalidError, ConfigurationError, ConfigValidationError
from .handlers import (
    ErrorContext,
    pattern_error_from_pydantic,
    wrap_pydantic_error,
)
from .matrix import InvalidBrightnessError, InvalidCoordinateError, InvalidIndexError
from .pattern import PatternValidationError
from .transport import (
    NotConnectedError,
    PayloadParseError,
    PublishError,
    ReconnectExhaustedError,
    TransportError,
)

__all__ = [
    "ConfigFileInvalidError",
    "ConfigValidationError",
    "ConfigurationError",
    "ErrorContext",
    "InvalidBrightnessError",
    "InvalidCoordinateError",
    "InvalidIndexError",
    "MatrixSyncError",
    "NotConnectedError",
    "PatternValidationError",
    "PayloadParseError",
    "PublishError",
    "ReconnectExhaustedError",
    "TransportError",
    "pattern_error_from_pydantic",
    "wrap_pydantic_error",
]
