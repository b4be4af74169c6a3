"""Startup failures raised while the application is being assembled."""


class StartupError(Exception):
    """The server cannot be built and must not start accepting requests."""


class MissingConnectionStringError(StartupError):
    def __init__(self, name: str):
        super().__init__(f"Connection string '{name}' is not configured")
        self.name = name


class InvalidConnectionStringError(StartupError):
    def __init__(self, context: str, reason: str):
        super().__init__(f"{context}: invalid connection string ({reason})")
        self.context = context
        self.reason = reason
