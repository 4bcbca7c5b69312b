"""
Base abstractions for writer backends.

**Conceptual**: A backend is a concrete acquisition/release strategy for a
transport. It is also the backend *descriptor*: an immutable description of
where the transport lives (a local path, a remote URI plus transport
parameters, or nothing at all for an in-memory buffer) together with the field
schema and the codec. The descriptor is built before entering a scope and has
no behaviour beyond producing and releasing a RowWriter.

**Protocols over inheritance**: Backends share a capability set
(acquire/release), not a base class. LocalBackend, RemoteBackend and
MemoryBackend are unrelated classes that each satisfy the Backend protocol;
a test double only needs the same two methods.

**Backend guarantees**:
  1. acquire() opens a fresh, independently owned transport every call.
  2. acquire() raises AcquisitionError (never a bare OSError) on failure.
  3. release() detaches the writer and closes its transport exactly once.
  4. release() on an already-closed transport is a no-op.
  5. release() raises ReleaseError if closing/flushing fails.

**Precondition**: One writer per target at a time. Two scopes writing the
same path or URI concurrently are not coordinated.
"""

from typing import Protocol

from scoped_io.core.errors import ReleaseError
from scoped_io.writers.writer import RowWriter


class Backend(Protocol):
    """Protocol for backends producing RowWriters."""

    def acquire(self) -> RowWriter:
        ...

    def release(self, writer: RowWriter) -> None:
        ...


def close_writer_transport(writer: RowWriter, target: str) -> None:
    """
    Detach writer and close its transport, tolerating an already-closed one.

    Args:
        writer: Writer returned by a backend's acquire().
        target: Path or URI, used in error messages.

    Raises:
        ReleaseError: If closing the transport raises. A ReleaseError raised by
                      the transport itself is re-raised unchanged.
    """
    transport = writer.detach()
    if transport is None or getattr(transport, "closed", False):
        return

    try:
        transport.close()
    except ReleaseError:
        raise
    except Exception as e:
        raise ReleaseError(
            f"{target}: Failed to close transport. Error: {e}",
            target=target,
        ) from e
