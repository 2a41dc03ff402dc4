"""Exceptions raised by the agent coordinator."""


class CoordinatorError(Exception):
    """Base exception for all coordinator errors."""


class NoAvailableAgentError(CoordinatorError, ValueError):
    """Raised when an agent restriction list leaves no agent to select."""

    def __init__(self, message: str, requested: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.requested = requested or []


class UnknownAgentError(CoordinatorError, KeyError):
    """Raised when an agent name is not part of the registry."""

    def __init__(self, agent: object) -> None:
        super().__init__(agent)
        self.agent = agent

    def __str__(self) -> str:
        return f"Unknown agent: {self.agent!r}"


class ConfigurationError(CoordinatorError, ValueError):
    """Raised when heuristic configuration values are invalid."""
