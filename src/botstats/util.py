"""Common utilities and exception classes."""


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class BotstatsError(Exception):
    """Base exception for botstats."""


class FetchError(BotstatsError):
    """HTTP fetch failure after retries."""


class SourceError(BotstatsError):
    """Input source missing or unreadable."""
