"""Domain-specific errors for bluectl."""


class BluectlError(Exception):
    """Base error for bluectl."""


class ConfigLoadError(BluectlError):
    """Raised when the settings file exists but cannot be read."""


class ConfigValidationError(BluectlError):
    """Raised when the settings file does not conform to schema or semantics."""


class CommandError(BluectlError):
    """Base error for external command invocation."""


class CommandSpawnError(CommandError):
    """Raised when an external tool cannot be started at all."""


class CommandTimeoutError(CommandError):
    """Raised when an external tool does not finish within the timeout."""


class MalformedOutputError(BluectlError):
    """Raised when tool output does not have the expected shape."""


class DeviceSelectionError(BluectlError):
    """Raised when a resolved device cannot be acted upon."""
