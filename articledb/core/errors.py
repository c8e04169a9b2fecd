"""Error taxonomy shared by the orchestrator, the stores and the providers."""
from typing import Optional


class ArticleDBError(Exception):
    """Base class for all articledb errors."""


class InvalidIdentifierError(ArticleDBError):
    """A caller-supplied or queried identifier is malformed."""

    def __init__(self, identifier: Optional[str] = None):
        self.identifier = identifier
        super().__init__(f"invalid id: {identifier!r}")


class NotFoundError(ArticleDBError):
    """A well-formed identifier is not present in the store."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"article not found: {identifier}")


class StoreFailure(ArticleDBError):
    """The store layer failed unexpectedly."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        message = f"store {operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class UpstreamFailure(ArticleDBError):
    """An analysis capability failed while enriching an article."""

    def __init__(self, branch: str, cause: BaseException):
        self.branch = branch
        self.cause = cause
        super().__init__(f"{branch} failed: {cause}")


class ProviderError(ArticleDBError):
    """Base class for errors raised by concrete analysis providers."""


class EmptyTextError(ProviderError):
    """The provider was asked to analyse an empty text."""


class InvalidResponseError(ProviderError):
    """The provider returned a response that could not be interpreted."""


class InvalidResultError(ProviderError):
    """The provider returned an empty result."""
