"""Custom exceptions for jsondelta.

Input problems (empty, malformed or oversized JSON) are reported as values,
never raised. The exceptions below signal programming or configuration
mistakes by the caller.
"""


class JsonDeltaError(Exception):
    """Base exception for jsondelta errors."""
    pass


class UnwrapError(JsonDeltaError):
    """Raised when ``unwrap()`` is called on an error result."""
    def __init__(self, error):
        super().__init__(f"Unwrap called on error result: {error}")
        self.error = error


class PathSyntaxError(JsonDeltaError):
    """Raised when a display path string cannot be parsed."""
    def __init__(self, path: str, position: int, reason: str):
        super().__init__(f"Invalid path '{path}' at position {position}: {reason}")
        self.path = path
        self.position = position
        self.reason = reason


class ConfigError(JsonDeltaError):
    """Raised when comparison settings are invalid or cannot be loaded."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
