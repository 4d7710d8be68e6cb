"""
Snippetbox - Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for the error taxonomy of the site.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) map the HTTP-facing
       ones to status codes; handlers translate the form-facing ones
       (DuplicateEmailError, InvalidCredentialsError) into inline form errors.
Who:   Raised by models, forms and interceptors; caught by handlers.

Exception Hierarchy:
    SnippetboxError (base)
    ├── NotFoundError            → 404 Not Found (missing or expired record)
    ├── DuplicateEmailError      → form error on signup
    ├── InvalidCredentialsError  → form error on login / password update
    ├── BadRequestError          → 400 Bad Request (bad form, bad CSRF token)
    ├── DatabaseError            → 500 Internal Server Error
    └── TemplateNotFoundError    → 500 Internal Server Error

Validation failures are not exceptions: they are normal control flow that
re-renders the form with status 422.
"""

from typing import Any, Dict, Optional


class SnippetboxError(Exception):
    """
    Base exception for all Snippetbox application errors.

    Attributes:
        message:  Short description (safe to log; client only sees status text)
        context:  Additional debug info (logged, never returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(SnippetboxError):
    """
    Raised when a requested record does not exist (or has expired).

    HTTP: 404 Not Found
    """

    def __init__(
        self,
        resource: str = "record",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"no matching {resource} found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DuplicateEmailError(SnippetboxError):
    """Raised when signup hits the unique constraint on users.email."""

    def __init__(self, email: Optional[str] = None):
        super().__init__(message="duplicate email", context={"email": email} if email else None)


class InvalidCredentialsError(SnippetboxError):
    """Raised when an email/password pair (or a current password) does not verify."""

    def __init__(self, message: str = "invalid credentials"):
        super().__init__(message=message)


class BadRequestError(SnippetboxError):
    """
    Raised for requests the client must not retry unchanged.

    When:  Undecodable form bodies, CSRF token mismatch.
    HTTP:  400 Bad Request
    """

    def __init__(
        self,
        message: str = "Bad Request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(SnippetboxError):
    """
    Raised when database operations fail unexpectedly.

    HTTP: 500 Internal Server Error

    The client only ever sees the generic status text. The SQL error,
    constraint name and query context are logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TemplateNotFoundError(SnippetboxError):
    """Raised when a handler asks the template cache for a page it does not hold."""

    def __init__(self, page: str):
        super().__init__(message=f"the template {page} does not exist", context={"page": page})
        self.page = page
