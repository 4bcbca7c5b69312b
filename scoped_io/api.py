"""
Convenience entrypoints.

open_writer() is the normal way to use a backend:

    with open_writer(LocalBackend("people.csv", ["id", "name"])) as writer:
        writer.write_header()
        writer.write_rows(rows)

write_csv() covers the one-shot case of dumping a list of rows to a local
file.
"""

from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Optional, Union

from scoped_io.backends.base import Backend
from scoped_io.backends.local import LocalBackend
from scoped_io.core.scope import Scope
from scoped_io.data.schemas import Row
from scoped_io.writers.writer import RowWriter


def open_writer(backend: Backend) -> Scope[RowWriter]:
    """
    Scoped acquisition of a writer from backend.

    Returns:
        A single-use Scope; entering it acquires, exiting it releases.
    """
    return Scope(backend)


def write_csv(
    path: Union[Path, str],
    fieldnames: Sequence[str],
    rows: Iterable[Row],
    aliases: Optional[Mapping[str, str]] = None,
    header: bool = True,
) -> int:
    """
    Write rows to a local CSV file in one call.

    Args:
        path: Destination file (overwritten).
        fieldnames: Declared fields, in output order.
        rows: Rows to write.
        aliases: Optional header labels by field name.
        header: Write a header line first (default True).

    Returns:
        Number of rows written.

    Raises:
        AcquisitionError: If the file can't be opened.
        ReleaseError: If the file can't be closed cleanly.

    Example:
        >>> write_csv("people.csv", ["id", "name"], [{"id": 1, "name": "Ann"}])
        1
    """
    with open_writer(LocalBackend(path, fieldnames)) as writer:
        if header:
            writer.write_header(aliases)
        return writer.write_rows(rows)
