from typing import List, Optional, Tuple


class DomainError(Exception):
    """Base class for domain-level exceptions."""


class ValidationError(DomainError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.errors: List[Tuple[str, str]] = [(field, message)]


class NotFoundError(DomainError):
    pass


class PostNotFound(NotFoundError):
    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Post not found")


class CommentNotFound(NotFoundError):
    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Comment does not exist")


class Unauthorized(DomainError):
    pass


class DuplicateAction(DomainError):
    pass


class InvalidState(DomainError):
    pass


class UserExists(DomainError):
    pass


class ConcurrencyConflict(DomainError):
    pass


class StoreUnavailable(DomainError):
    pass


class StoreTimeout(DomainError):
    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "Service temporarily unavailable")
