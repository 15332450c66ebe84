"""Exception types raised inside the service layer.

Handlers translate these into HTTP responses; the cache and queue layers
never raise them to callers.
"""


class PortfolioError(Exception):
    """Base class for application errors."""


class EmptyMessageError(PortfolioError, ValueError):
    """A chat message was empty or whitespace-only."""


class CompletionError(PortfolioError):
    """The AI completion provider failed or is not configured."""


class PersistenceError(PortfolioError):
    """A repository could not read or write its backing store."""
