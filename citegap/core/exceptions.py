"""Exceptions raised by citegap services."""


class CitegapError(Exception):
    """Base class for citegap errors."""


class OperationCancelledError(CitegapError):
    """Raised when a cancellation token is triggered mid-computation."""

    def __init__(self, operation: str, reason: str | None = None):
        self.operation = operation
        self.reason = reason
        message = f"{operation} cancelled"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ArticleEmbeddingNotFoundError(CitegapError):
    """Raised when an article has no embedding in the project graph."""

    def __init__(self, article_id: str):
        self.article_id = article_id
        super().__init__(f"Article embedding not found: {article_id}")
