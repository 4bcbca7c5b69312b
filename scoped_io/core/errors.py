"""
Typed error conditions for scoped writers and their backends.

**Conceptual**: Every failure the library can report has its own exception
class, so callers can react to a specific condition (a lifecycle bug, a path
that cannot be opened, an upload that failed to commit) instead of parsing a
generic error message.

**Hierarchy**:
  - ScopedIOError: base class for everything raised by this package.
    - AlreadyWrittenError: header written twice on one writer.
    - NotInitializedError: write attempted outside an active scope.
    - AcquisitionError: transport could not be opened.
    - ReleaseError: transport failed to close/flush cleanly.
    - ScopeStateError: a Scope object entered a second time.

SchemaValidationError lives with the schema helpers in scoped_io.data.schemas
and also derives from ScopedIOError.
"""

from typing import Optional


class ScopedIOError(Exception):
    """
    Base exception for all scoped_io errors.

    Catch this to handle every condition raised by the library, or catch a
    subclass for fine-grained handling.
    """
    pass


class AlreadyWrittenError(ScopedIOError):
    """
    Raised when write_header() is called a second time on the same writer.

    **Recovery**: Non-fatal. The writer stays usable for rows; the caller
    should simply not emit the header again.
    """
    pass


class NotInitializedError(ScopedIOError):
    """
    Raised when a write operation runs outside an active scope.

    This covers writers that were never bound to a transport and writers whose
    scope has already exited. It always signals a lifecycle-usage bug.
    """
    pass


class AcquisitionError(ScopedIOError):
    """
    Raised when a backend cannot open its underlying transport.

    **Conceptual**: Permission problems, missing directories, unsupported URI
    schemes and network failures during open all surface as this error. The
    scope is never entered, so no release call happens.

    Attributes:
        target: Path or URI the backend tried to open.
    """

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.target = target


class ReleaseError(ScopedIOError):
    """
    Raised when a transport fails to close or flush cleanly.

    **Conceptual**: For local files this is a failed close; for remote streams
    it is a failed upload/commit. When the scope is already exiting because of
    an error raised inside it, the release failure is logged and recorded on
    the Scope instead of being raised, so the original error is what the caller
    sees.

    Attributes:
        target: Path or URI being released.
        status_code: HTTP status returned by a remote transport, if any.
    """

    def __init__(
        self,
        message: str,
        target: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.target = target
        self.status_code = status_code


class ScopeStateError(ScopedIOError):
    """Raised when a single-use Scope is entered more than once."""
    pass
