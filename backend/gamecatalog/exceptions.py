"""
Game Catalog API — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions, one per failure kind the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py translate them into JSON
       bodies with a ``message`` key and the matching HTTP status.
Who:   Raised by repositories and services; caught by the global handlers.

Exception Hierarchy:
    GameCatalogError (base)
    ├── ValidationError              → 400 Bad Request
    │   └── DocumentValidationError  → 400 (raised by the storage layer)
    ├── BadRequestError              → 400 Bad Request (request shape)
    ├── NotFoundError                → 404 Not Found
    ├── StorageError                 → 500 Internal Server Error
    │   └── InvalidIdentifierError   → 500 (malformed document id)
    └── RateLimitExceededError       → 429 Too Many Requests

Routes never inspect message text to pick a status code: the exception type
alone decides it.
"""

from typing import Any, Dict, List, Optional


class GameCatalogError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged, returned only for 400/429)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GameCatalogError):
    """
    Raised when client input fails validation.

    When:    Malformed request body, invalid game document, malformed id on a
             write route.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "rating: Input should be less than or equal to 10",
            "details": {"errors": [...]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DocumentValidationError(ValidationError):
    """
    Raised by a repository when a document would violate the Game schema.

    Carries the individual field errors so the handler can return them as
    ``details.errors``.
    """

    def __init__(
        self,
        message: str = "Game validation failed",
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message=message, context={"errors": errors or []})
        self.errors = errors or []


class BadRequestError(GameCatalogError):
    """
    Raised when the request is well-formed JSON but asks for something the
    API does not serve (e.g. a property outside the accessor allowlist).

    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Bad request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(GameCatalogError):
    """
    Raised when a game, or a sub-resource of a game, does not exist.

    HTTP:    404 Not Found

    The message is resource specific ("Game not found",
    "No screenshots found for this game", ...) and is returned verbatim.
    """

    def __init__(
        self,
        message: str = "Game not found",
        resource: str = "game",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class StorageError(GameCatalogError):
    """
    Raised when the storage backend fails for operational reasons.

    When:    Connection lost, query failed, unexpected driver exception.
    HTTP:    500 Internal Server Error

    The message is the underlying error text; the API returns it as-is.
    """

    def __init__(
        self,
        message: str = "A storage error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidIdentifierError(StorageError):
    """
    Raised by a repository when a game id is not a valid identifier.

    Read and delete routes surface it as a 500 like any other storage
    failure; write routes convert it to a ValidationError first.
    """

    def __init__(self, game_id: str):
        super().__init__(
            message=f'Cast to UUID failed for value "{game_id}"',
            context={"game_id": game_id},
        )
        self.game_id = game_id


class RateLimitExceededError(GameCatalogError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with a Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
