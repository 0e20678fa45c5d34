"""Exception taxonomy for configuration resolution and server lifecycle."""


class ConfigurationError(Exception):
    """Base class for configuration problems."""


class ConfigurationLoadError(ConfigurationError):
    """The configuration source could not be read or has the wrong shape."""


class MalformedURLError(ConfigurationError):
    """An endpoint field is configured but does not hold a valid URL."""

    def __init__(self, field: str, cause: Exception) -> None:
        super().__init__(f"failed to parse {field} URL: {cause}")
        self.field = field
        self.cause = cause


class LifecycleError(Exception):
    """Base class for server lifecycle problems."""


class LifecycleStateError(LifecycleError):
    """An operation was requested in a state that does not allow it."""


class ShutdownError(LifecycleError):
    """Graceful shutdown did not complete before the deadline."""

    def __init__(self, cause: Exception) -> None:
        super().__init__(f"failed to gracefully shut down the server: {cause}")
        self.cause = cause
