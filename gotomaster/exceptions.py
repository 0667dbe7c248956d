class GoToMasterError(Exception):
    pass


class ConfigurationError(GoToMasterError):
    """Raised when the proxy configuration is missing or invalid."""


class PortBindError(GoToMasterError):
    """Raised when a listening port cannot be bound."""

    def __init__(self, port: int, message: str):
        self.port = port
        super().__init__(f"Can't open listening socket for port {port}: {message}")


class NotifyError(GoToMasterError):
    """Raised when a supervisor notification cannot be delivered."""
