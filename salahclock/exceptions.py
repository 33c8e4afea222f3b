# salahclock/exceptions.py


class SalahClockError(Exception):
    """Base class for every error raised by the prayer clock engine."""


class FetchFailure(SalahClockError):
    """The prayer data provider could not deliver usable data."""


class NetworkError(FetchFailure):
    """Timeout, connection problem or HTTP error status from the provider."""


class MalformedResponseError(FetchFailure):
    """The provider answered, but the payload is not what we expect."""


class MalformedTimeFormat(SalahClockError, ValueError):
    """A prayer time string does not parse as HH:MM."""

    def __init__(self, text, reason=None):
        self.text = text
        message = f"Invalid prayer time {text!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PreconditionViolation(SalahClockError, RuntimeError):
    """The engine was invoked in a state the caller should have gated against."""
