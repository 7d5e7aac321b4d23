"""Custom exceptions for configuration management."""


class ConfigError(Exception):
    """Raised when configuration data cannot be processed."""


class AnalysisRootError(ConfigError):
    """Raised when an analysis root does not resolve inside its workspace root."""
