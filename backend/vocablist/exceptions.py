"""
VocabList Backend - Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for the list & sharing core.
How:   An error is a message for the client plus a context dict for the
       logs. main.py maps each class to one HTTP status and a JSON body.
Who:   Raised by services and stores; caught by global handlers.

Exception Hierarchy:
    VocabListError (base)
    ├── InvalidArgumentError       → 400 Bad Request (client can fix)
    ├── UnauthenticatedError       → 401 Unauthorized (no X-Owner-Id)
    ├── NotFoundError              → 404 Not Found
    ├── AlreadyExistsError         → 409 Conflict
    ├── ExternalServiceError       → 502 Bad Gateway
    │   ├── AssetStorageError      → 502 (blob store upload/delete failed)
    │   └── TranslationLookupError → 502 (word/translation lookup failed)
    └── DatabaseError              → 500 Internal Server Error

Per-target failures inside a multi-list add are NOT raised; they are
reported in the result payload (see services/multi_list_inserter.py).
"""

from typing import Any, Dict, Optional


class VocabListError(Exception):
    """
    Base exception for all VocabList application errors.

    Attributes:
        message:  Text sent to the client as-is
        context:  Structured details; echoed to the client for 4xx, logged for 5xx
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidArgumentError(VocabListError):
    """
    Raised when caller input fails validation.

    When:    Missing required field, blank list name, target-list count out of bounds.
    HTTP:    400 Bad Request

    Always raised before any write is issued to the document store.
    """

    def __init__(
        self,
        message: str = "Invalid argument",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthenticatedError(VocabListError):
    """
    Raised when a request arrives without an owner identity.

    When:    The gateway did not set X-Owner-Id.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Missing owner identity",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(VocabListError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown list, item, share code, word or capture.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class AlreadyExistsError(VocabListError):
    """
    Raised when a record with the same deterministic id already exists.

    When:    Creating a list whose normalized name is taken, importing the
             same shared list twice, a conditional create inside a batch.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The {resource} already exists"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' already exists"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ExternalServiceError(VocabListError):
    """
    Raised when an external collaborator (blob store, translation lookup) fails.

    HTTP:    502 Bad Gateway
    """

    def __init__(
        self,
        message: str = "An external service failed",
        service: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if service:
            ctx["service"] = service
        super().__init__(message=message, context=ctx)
        self.service = service


class AssetStorageError(ExternalServiceError):
    """Raised when storing or deleting a cover image fails."""

    def __init__(
        self,
        message: str = "Asset storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, service="asset_store", context=context)


class TranslationLookupError(ExternalServiceError):
    """Raised when the word/translation lookup cannot be completed."""

    def __init__(
        self,
        message: str = "Translation lookup failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, service="translation_lookup", context=context)


class DatabaseError(VocabListError):
    """
    Raised when document store operations fail unexpectedly.

    When:    Connection lost mid-query, compare-and-swap exhausted, driver error.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; details stay in logs.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
