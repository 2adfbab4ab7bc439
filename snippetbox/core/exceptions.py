# core/exceptions.py
"""
Error kinds raised by the data-access layer

Handlers catch the specific kinds to choose a status code; anything else is
left to the application-wide error handler and becomes an opaque 500.

    SnippetboxError
    ├── NotFoundError            -> 404
    ├── DuplicateEmailError      -> 422, form re-rendered
    ├── InvalidCredentialsError  -> 422, form re-rendered
    └── DataAccessError          -> 500
"""

from typing import Any, Dict, Optional


class SnippetboxError(Exception):
    """Base class for application errors"""

    def __init__(self, message: str = 'An unexpected error occurred',
                 context: Optional[Dict[str, Any]] = None):
        self.message = message
        # logged, never rendered
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(SnippetboxError):
    """No matching record (or the snippet has expired)"""

    def __init__(self, resource: str = 'record', context: Optional[Dict[str, Any]] = None):
        super().__init__(f'no matching {resource} found', context)
        self.resource = resource


class DuplicateEmailError(SnippetboxError):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__('duplicate email', context)


class InvalidCredentialsError(SnippetboxError):
    """Unknown email or wrong password; the two are deliberately indistinguishable"""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__('invalid credentials', context)


class DataAccessError(SnippetboxError):
    """Connectivity, timeout or SQL failure"""

    def __init__(self, operation: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f'database error while {operation}', context)
        self.operation = operation
