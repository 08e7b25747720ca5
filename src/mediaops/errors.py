"""Exception hierarchy shared by the media server tools."""


class MediaOpsError(Exception):
    """Base exception for all tool errors."""

    pass


class ConfigurationError(MediaOpsError):
    """A required setting is missing or invalid. Fatal for the invocation."""

    pass


class ToolMissingError(ConfigurationError):
    """A required external binary is not installed."""

    def __init__(self, binary: str):
        super().__init__(f"'{binary}' not found on PATH. Install it first.")
        self.binary = binary


class ProbeError(MediaOpsError):
    """An external tool ran but produced no usable output."""

    pass


class ApiError(MediaOpsError):
    """An API response could not be decoded."""

    pass
