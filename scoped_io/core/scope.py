"""
Scoped acquisition and guaranteed release.

**Conceptual**: This module is the `with`-statement contract in one place. A
resource owner (a "backend") offers two operations:

    acquire() -> handle     open the transport, hand back something usable
    release(handle)         close the transport again

Scope wraps any such owner in a context manager that calls release exactly
once per successful acquire, on every exit path:

    with Scope(backend) as writer:
        writer.write_rows(rows)
    # release has run here, whether the block finished or raised

**Exit rules**:
  - acquire() raises: the error propagates unchanged, the block never runs,
    release is never called.
  - Block finishes, release raises: the caller gets a ReleaseError.
  - Block raises, release also raises: the block's error is what the caller
    sees. The release failure is logged and kept on scope.release_error.
  - Block raises, release succeeds: the block's error propagates.

Scope never suppresses an exception raised inside the block.

**Teaching note**: The textbook way to write this is a generator decorated
with contextlib.contextmanager. Spelling out __enter__/__exit__ instead keeps
the acquire/release protocol visible as plain methods, so backends can be
exercised directly in tests and swapped without touching the writer.
"""

from types import TracebackType
from typing import Generic, Optional, Protocol, TypeVar

from scoped_io.core.errors import ReleaseError, ScopeStateError
from scoped_io.utils.logging import get_logger

logger = get_logger(__name__)

R = TypeVar("R")


class ScopedResource(Protocol[R]):
    """
    Protocol for anything that can be scoped-acquired.

    **Implementation requirements**:
      1. acquire() returns a usable handle or raises AcquisitionError.
      2. release(handle) closes whatever acquire() opened.
      3. release() tolerates a handle whose transport is already closed.
      4. release() raises ReleaseError if the transport fails to close/flush.
    """

    def acquire(self) -> R:
        ...

    def release(self, handle: R) -> None:
        ...


class Scope(Generic[R]):
    """
    Single-use context manager around a ScopedResource.

    Attributes:
        resource: The resource owner being scoped.
        release_error: Release failure suppressed in favour of an error raised
                       inside the block, if one happened.

    Example:
        >>> from scoped_io.backends.memory import MemoryBackend
        >>> backend = MemoryBackend(["id", "name"])
        >>> with Scope(backend) as writer:
        ...     writer.write_header()
        ...     writer.write_rows([{"id": 1, "name": "Ann"}])
        1
        >>> backend.text
        'id,name\\n1,Ann\\n'
    """

    def __init__(self, resource: ScopedResource[R]):
        self.resource = resource
        self.release_error: Optional[BaseException] = None
        self._handle: Optional[R] = None
        self._entered = False
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def handle(self) -> Optional[R]:
        """The acquired handle while the scope is active, else None."""
        return self._handle if self._active else None

    def __enter__(self) -> R:
        if self._entered:
            raise ScopeStateError(
                "This scope has already been used. "
                "Create a new Scope (or call open_writer again) for each with-block."
            )
        self._entered = True

        # AcquisitionError propagates; nothing to release
        handle = self.resource.acquire()
        self._handle = handle
        self._active = True
        logger.debug("Acquired %r", self.resource)
        return handle

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        handle = self._handle
        self._active = False
        self._handle = None

        try:
            self.resource.release(handle)
        except Exception as release_exc:
            if exc is not None:
                self.release_error = release_exc
                logger.warning(
                    "Release of %r failed while handling %s: %s",
                    self.resource,
                    exc_type.__name__ if exc_type else "error",
                    release_exc,
                )
                return False
            if isinstance(release_exc, ReleaseError):
                raise
            raise ReleaseError(
                f"Failed to release {self.resource!r}: {release_exc}"
            ) from release_exc

        logger.debug("Released %r", self.resource)
        return False
