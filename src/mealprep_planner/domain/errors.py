"""Error types raised by the planning pipeline."""


class InputValidationError(ValueError):
    """Raised when request fields fail validation before any side effect."""


class InvalidDeviceIdError(InputValidationError):
    """Raised when a device identifier does not match the allowed pattern."""

    def __init__(self) -> None:
        super().__init__("Invalid device ID")


class RateLimiterUnavailableError(RuntimeError):
    """Raised when the rate-limit store cannot be reached."""


class MalformedResponseError(ValueError):
    """Raised when model output for a batch cannot be turned into a plan."""

    def __init__(self, batch_label: str, reason: str) -> None:
        super().__init__(f"{reason} ({batch_label})")
        self.batch_label = batch_label
        self.reason = reason
