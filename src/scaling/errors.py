"""Errors raised by the rescaling policy."""


class RescalerError(ValueError):
    """Base class for rescaling policy errors."""


class ConfigurationError(RescalerError):
    """Resource sizing is absent or malformed."""


class InvalidIntervalError(RescalerError):
    """The elapsed interval between two rescale cycles is not positive."""

    def __init__(self, interval_secs: float):
        self.interval_secs = interval_secs
        super().__init__(f"invalid interval: {interval_secs!r} seconds (must be positive)")


class StateDecodeError(RescalerError):
    """A persisted scaling state could not be decoded."""
