"""
Local filesystem backend.

**Conceptual**: Acquiring opens a path for writing with create-or-truncate
semantics (any existing file is overwritten); releasing closes the handle. The
file is opened with newline="" so the codec's line terminator reaches disk
unchanged on every platform.

**Example usage**:
    >>> from scoped_io import LocalBackend, open_writer
    >>> backend = LocalBackend("out/people.csv", ["id", "name"])
    >>> with open_writer(backend) as writer:
    ...     writer.write_header({"id": "ID", "name": "Full Name"})
    ...     writer.write_rows([{"id": 1, "name": "Ann"}])
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from scoped_io.backends.base import close_writer_transport
from scoped_io.config.settings import get_settings
from scoped_io.core.errors import AcquisitionError
from scoped_io.data.codecs import CsvCodec, RowCodec
from scoped_io.data.schemas import FieldSchema
from scoped_io.utils.logging import get_logger
from scoped_io.writers.writer import RowWriter

logger = get_logger(__name__)


@dataclass(frozen=True)
class LocalBackend:
    """
    Backend writing to a file on the local filesystem.

    Attributes:
        path: Destination file. Overwritten if it exists.
        fieldnames: Declared fields, in output order.
        codec: Format codec. Defaults to CsvCodec with the configured line
               terminator.
        encoding: File encoding. Defaults to SCOPED_IO_ENCODING.
        create_parents: Create missing parent directories before opening.
                        Defaults to SCOPED_IO_CREATE_PARENTS.
    """
    path: Union[Path, str]
    fieldnames: Sequence[str]
    codec: Optional[RowCodec] = field(default=None, compare=False)
    encoding: Optional[str] = None
    create_parents: Optional[bool] = None

    def __post_init__(self):
        # Normalise to immutable types and validate the schema up front
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "fieldnames", FieldSchema.of(self.fieldnames).fieldnames)

    def acquire(self) -> RowWriter:
        """
        Open the file and return a writer bound to it.

        Raises:
            AcquisitionError: If the parent directory can't be created or the
                              file can't be opened for writing,
                              including unknown encodings and invalid paths.
        """
        settings = get_settings().writer
        encoding = self.encoding or settings.encoding
        create_parents = settings.create_parents if self.create_parents is None else self.create_parents
        codec = self.codec if self.codec is not None else CsvCodec(lineterminator=settings.line_terminator)

        try:
            if create_parents:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(self.path, "w", newline="", encoding=encoding)
        except (OSError, LookupError, ValueError) as e:
            raise AcquisitionError(
                f"{self.path}: Failed to open for writing. "
                f"Check that the directory exists and is writable. Error: {e}",
                target=str(self.path),
            ) from e

        logger.debug("Opened %s for writing (encoding=%s)", self.path, encoding)
        return RowWriter(self.fieldnames, codec=codec, transport=handle)

    def release(self, writer: RowWriter) -> None:
        """Close the file handle. Already-closed handles are ignored."""
        close_writer_transport(writer, str(self.path))
