"""
Storefront Backend - Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for every error scenario a handler
       can hit.
How:   Each exception carries a user-facing message, a private context dict
       (logged, never returned) and a public payload dict (merged into the
       JSON envelope, e.g. `invalidProducts`). Global exception handlers
       registered in main.py map each class to its HTTP status code.
Who:   Raised by services, dependencies and routes; caught by global handlers.

Exception Hierarchy:
    StorefrontError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── EncryptionError          → 500 Internal Server Error
    ├── ImageHostError           → 500 Internal Server Error
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional


class StorefrontError(Exception):
    """
    Base exception for all Storefront application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        payload:      Extra public fields merged into the error envelope
        status_code:  HTTP status the global handler responds with
        error_code:   Machine-readable code in the envelope's `error` field
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.payload = payload or {}
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """
    Raised when client input fails a business rule.

    When:    Missing required fields, bad lengths, password mismatch,
             unsupported upload types, references to missing products.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types) are caught earlier by FastAPI
    and are also answered with 400 by the RequestValidationError handler.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx, payload=payload)
        self.field = field


class InvalidReferenceError(ValidationError):
    """
    Raised when a collection names product ids that do not exist.

    The missing ids are returned to the client under `invalidProducts`,
    in the order they appeared in the request.
    """

    def __init__(self, invalid_ids: List[str]):
        super().__init__(
            message="One or more product IDs do not exist",
            field="products",
            payload={"invalidProducts": list(invalid_ids)},
        )
        self.invalid_ids = list(invalid_ids)


class AuthenticationError(StorefrontError):
    """
    Raised when credentials or a session token are rejected.

    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Authentication failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StorefrontError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE on a product or collection id that is not stored.
    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(StorefrontError):
    """
    Raised when a write would break a uniqueness rule.

    When:    Duplicate product name, collection name or user email, whether
             caught by the pre-write lookup or by the unique index.
    HTTP:    409 Conflict
    """

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class EncryptionError(StorefrontError):
    """
    Raised when the credential codec cannot encrypt or decrypt.

    When:    AES settings are missing, the counter is not an integer, or the
             stored ciphertext is malformed.
    HTTP:    500 Internal Server Error

    Never degrades to returning plaintext: a request that needs an
    encrypted value fails instead.
    """

    def __init__(
        self,
        message: str = "Encryption is not available",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ImageHostError(StorefrontError):
    """
    Raised when the image host rejects an upload or stays unreachable
    after all retries.

    HTTP:    500 Internal Server Error
    """

    error_code = "image_host_error"

    def __init__(
        self,
        message: str = "Error uploading file",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(StorefrontError):
    """
    Raised when local file system operations fail.

    When:    Disk full, permission denied, unwritable upload or registry path.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(StorefrontError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver error
    is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
