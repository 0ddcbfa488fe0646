from __future__ import annotations

DEFAULT_FAILURE_MESSAGE = "Failed to load stock data."


class AggregateError(RuntimeError):
    """Raised when at least one quote retrieval in a batch failed."""

    def __init__(self, failures: list[tuple[str, BaseException]]) -> None:
        if not failures:
            raise ValueError("failures must not be empty")
        self.failures = list(failures)
        super().__init__(self._build_message())

    @property
    def symbols(self) -> list[str]:
        return [symbol for symbol, _ in self.failures]

    def _build_message(self) -> str:
        return f"Failed to fetch {', '.join(self.symbols)}"


class InvalidStateTransitionError(RuntimeError):
    """Raised when a dashboard state transition leaves a terminal state."""


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing or invalid."""
