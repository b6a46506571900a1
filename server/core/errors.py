# server/core/errors.py


class WorkspaceError(Exception):
    """Base class for every error raised by the workspace stores and codecs."""


class ValidationError(WorkspaceError):
    """A required form field is missing or inconsistent."""


class DuplicateIdentity(WorkspaceError):
    """The email address is already registered."""


class AuthFailure(WorkspaceError):
    """Unknown email or wrong password. The two cases are never distinguished."""


class NotFound(WorkspaceError):
    """A well-formed id does not name an existing record."""


class InvalidReference(WorkspaceError):
    """An id that cannot possibly name a record."""
