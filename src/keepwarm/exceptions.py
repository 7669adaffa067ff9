"""Custom exceptions for keepwarm package."""


class KeepwarmError(Exception):
    """Base exception class for all keepwarm errors."""


class KeepaliveError(KeepwarmError):
    """Raised when a keepalive probe or strategy selection fails.

    These errors are raised by the probe helpers and always caught at the
    keepalive boundary. They never reach callers of the wrapped session's
    ordinary operations.
    """


class StrategyUnavailableError(KeepaliveError):
    """Raised when a probe is attempted with a strategy that cannot probe.

    Attributes:
        strategy: Value of the strategy that was attempted.
    """

    def __init__(self, strategy: str) -> None:
        """Initialize StrategyUnavailableError.

        Args:
            strategy: Value of the strategy that was attempted.
        """
        super().__init__(f"Strategy {strategy!r} cannot issue probes")
        self.strategy = strategy
