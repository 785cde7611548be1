"""
Helium — Custom Exception Hierarchy
=====================================

What:  Defines application-specific exceptions for the error scenarios of the API.
Why:   Typed exceptions let the global handlers map failures to HTTP status codes
       without every route repeating try/except blocks, and keep store internals
       out of response bodies.
How:   Each exception carries a user-facing message and an optional context dict.
       Handlers registered in main.py catch them and return the small
       {"message", "status"} JSON body clients expect.
Who:   Raised by the store client, services and startup code; caught by handlers.

Exception Hierarchy:
    HeliumError (base)          → 500 Internal Server Error
    ├── ValidationError         → 400 Bad Request (one message per failed constraint)
    ├── NotFoundError           → 404 Not Found
    ├── StoreError              → 500 Internal Server Error (store message passed through)
    └── StartupConfigError      → fatal at startup, never raised while serving

Design Decision:
    The store client never returns sentinel strings. A store call either returns
    a document / list, or raises NotFoundError or StoreError. Services let those
    propagate untouched.
"""

from typing import Any, Dict, List, Optional


class HeliumError(Exception):
    """
    Base exception for all Helium application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(HeliumError):
    """
    Raised when a request payload fails validation.

    Carries a list of messages, one per failed field constraint, so the client
    can fix every problem in one round trip.

    Example response:
        {
            "message": ["\"name\" is required", "\"textSearch\" is required"],
            "status": 400
        }
    """

    status_code = 400

    def __init__(
        self,
        messages: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.messages = list(messages or ["Validation failed"])
        super().__init__(message="; ".join(self.messages), context=context)


class NotFoundError(HeliumError):
    """
    Raised when a requested document does not exist.

    When:  GET/PUT/DELETE on an id with no matching document, or a point read
           that the store answers with its not-found status.
    """

    status_code = 404

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


class StoreError(HeliumError):
    """
    Raised when a document store operation fails for any reason other than
    "not found".

    Wraps the SDK exception; its message is passed through to the client.
    Store errors are never retried.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A document store error occurred",
        status: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status is not None:
            ctx["store_status"] = status
        super().__init__(message=message, context=ctx)
        self.status = status


class StartupConfigError(HeliumError):
    """
    Raised while resolving configuration when a required value is missing.

    Not a request-time error: the lifespan re-raises it and the process exits.
    """

    def __init__(
        self,
        message: str = "Required configuration is missing",
        setting: Optional[str] = None,
    ):
        ctx = {"setting": setting} if setting else {}
        super().__init__(message=message, context=ctx)
        self.setting = setting
