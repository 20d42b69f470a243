"""Error type shared by the engine and the exporter."""


class InvalidInput(ValueError):
    """Raised when a loan request or a schedule fails validation.

    ``reason`` holds the human-readable explanation; it is also the string
    form of the exception so callers can show it directly.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
