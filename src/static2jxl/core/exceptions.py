"""Exception types shared across the converter."""


class Static2JxlError(Exception):
    """Base exception type."""


class InvalidConfigurationError(Static2JxlError):
    """Raised when run options are out of range."""


class UnsafeTargetError(Static2JxlError):
    """Raised when the target directory is missing or protected."""


class MissingDependencyError(Static2JxlError):
    """Raised when a required external tool cannot be found."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__("missing required tools: " + ", ".join(self.missing))