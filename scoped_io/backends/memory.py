"""
In-memory backend.

Acquires a fresh StringIO per scope; release captures the text and closes the
buffer. Useful as a test double and for building small payloads without
touching disk.

The backend keeps every payload it captures for its whole lifetime, so a
long-lived instance grows by one entry per scope. Create one per test or
per payload rather than sharing it.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from io import StringIO
from typing import Optional

from scoped_io.data.codecs import CsvCodec, RowCodec
from scoped_io.data.schemas import FieldSchema
from scoped_io.writers.writer import RowWriter


@dataclass(frozen=True, eq=False)
class MemoryBackend:
    """
    Backend writing to an in-memory text buffer.

    Attributes:
        fieldnames: Declared fields, in output order.
        codec: Format codec. Defaults to CsvCodec.
        contents: Captured text, one entry per released scope. Never trimmed;
                  the frozen dataclass fixes the list object, not its items.
    """
    fieldnames: Sequence[str]
    codec: Optional[RowCodec] = None
    contents: list[str] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "fieldnames", FieldSchema.of(self.fieldnames).fieldnames)

    @property
    def text(self) -> Optional[str]:
        """Text captured by the most recent scope, or None if none released yet."""
        return self.contents[-1] if self.contents else None

    def acquire(self) -> RowWriter:
        codec = self.codec if self.codec is not None else CsvCodec()
        return RowWriter(self.fieldnames, codec=codec, transport=StringIO())

    def release(self, writer: RowWriter) -> None:
        buffer = writer.detach()
        if buffer is None or buffer.closed:
            return
        self.contents.append(buffer.getvalue())
        buffer.close()
