"""
Row writers: the object a caller holds inside a scope.

**Conceptual**: A RowWriter combines three things:
  1. A FieldSchema (which fields, in which order).
  2. A RowCodec (how rows become text).
  3. A transport (where the text goes), bound for the duration of one scope.

The writer knows nothing about files, URLs or buffers; backends open the
transport, bind it, and detach it again on release. This is what lets a local
file, an HTTP upload stream and an in-memory buffer share one writer type.

**Lifecycle**:
    unbound --bind()--> active --detach()--> released
  - Writes are only legal while active; otherwise NotInitializedError.
  - A released writer cannot be bound again.

**Header state**: header_written starts False and flips to True on the first
write_header() call. There is no way back; a second call raises
AlreadyWrittenError whether or not rows were written in between. Rows may be
written before the header; the order is the caller's business.

**Thread-safety**: A writer must be used from one thread at a time. This is a
precondition, not something the writer checks.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Optional, Protocol, TextIO

from scoped_io.core.errors import AlreadyWrittenError, NotInitializedError
from scoped_io.data.codecs import CsvCodec, RowCodec
from scoped_io.data.schemas import FieldSchema, Row


class Writer(Protocol):
    """Anything offering write_header/write_rows qualifies as a writer."""

    def write_header(self, aliases: Optional[Mapping[str, str]] = None) -> None:
        ...

    def write_rows(self, rows: Iterable[Row]) -> int:
        ...


class RowWriter:
    """
    Schema-projecting writer over a bound text transport.

    Example:
        >>> import io
        >>> writer = RowWriter(["id", "name"])
        >>> writer.bind(io.StringIO())
        >>> writer.write_header({"id": "ID", "name": "Full Name"})
        >>> writer.write_rows([{"id": 1, "name": "Ann", "extra": "x"}])
        1
        >>> writer.detach().getvalue()
        'ID,Full Name\\n1,Ann\\n'
    """

    def __init__(
        self,
        fieldnames: Sequence[str],
        codec: Optional[RowCodec] = None,
        transport: Optional[TextIO] = None,
    ):
        self.schema = fieldnames if isinstance(fieldnames, FieldSchema) else FieldSchema.of(fieldnames)
        self.codec = codec if codec is not None else CsvCodec()
        self._transport: Optional[TextIO] = None
        self._released = False
        self._header_written = False
        if transport is not None:
            self.bind(transport)

    @property
    def fieldnames(self) -> tuple[str, ...]:
        return self.schema.fieldnames

    @property
    def active(self) -> bool:
        """True while a transport is bound."""
        return self._transport is not None

    @property
    def header_written(self) -> bool:
        return self._header_written

    def bind(self, transport: TextIO) -> None:
        """
        Attach the transport this writer will write to.

        Raises:
            NotInitializedError: If the writer was already released.
            ValueError: If a transport is already bound.
        """
        if self._released:
            raise NotInitializedError(
                "Writer has been released and cannot be reused. "
                "Acquire a new writer from its backend."
            )
        if self._transport is not None:
            raise ValueError("Writer already has a bound transport")
        self._transport = transport

    def detach(self) -> Optional[TextIO]:
        """
        Unbind and return the transport; the writer becomes unusable.

        Calling detach() on an already released writer returns None.
        """
        transport = self._transport
        self._transport = None
        self._released = True
        return transport

    def write_header(self, aliases: Optional[Mapping[str, str]] = None) -> None:
        """
        Emit the header row, at most once.

        Args:
            aliases: Optional mapping of field name to display label. Without
                     it, the declared field names are emitted.

        Raises:
            NotInitializedError: If no transport is bound.
            AlreadyWrittenError: If the header was already written.
            SchemaValidationError: If aliases name unknown fields.
        """
        transport = self._require_transport("write_header")
        if self._header_written:
            raise AlreadyWrittenError(
                "Header has already been written for this writer. "
                "A header may be written at most once."
            )
        labels = self.schema.header_labels(aliases)
        self.codec.write_header(transport, labels)
        self._header_written = True

    def write_rows(self, rows: Iterable[Row]) -> int:
        """
        Append rows in input order.

        Fields outside the schema are ignored; missing fields are written as
        empty values. A failure partway through a batch leaves whatever the
        codec already emitted on the transport.

        Args:
            rows: Iterable of mappings from field name to value.

        Returns:
            Number of rows written.

        Raises:
            NotInitializedError: If no transport is bound.
            SchemaValidationError: If any row is not a mapping.
        """
        transport = self._require_transport("write_rows")
        records = self.schema.project_many(rows)
        self.codec.write_rows(transport, self.schema.fieldnames, records)
        return len(records)

    def _require_transport(self, operation: str) -> Any:
        if self._transport is None:
            state = "released" if self._released else "not yet acquired"
            raise NotInitializedError(
                f"{operation}() called outside an active scope (writer is {state}). "
                f"Use the writer inside 'with open_writer(backend) as writer:'."
            )
        return self._transport
