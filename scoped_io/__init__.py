"""
scoped_io: scoped row writers with pluggable backends.

A backend describes where rows go (local file, remote object, memory buffer);
open_writer() acquires a writer from it for the duration of a with-block and
guarantees the transport is released on every exit path.
"""

from scoped_io.api import open_writer, write_csv
from scoped_io.backends.base import Backend
from scoped_io.backends.local import LocalBackend
from scoped_io.backends.memory import MemoryBackend
from scoped_io.backends.remote import HttpUploadStream, RemoteBackend, open_http_stream
from scoped_io.core.errors import (
    AcquisitionError,
    AlreadyWrittenError,
    NotInitializedError,
    ReleaseError,
    ScopedIOError,
    ScopeStateError,
)
from scoped_io.core.scope import Scope, ScopedResource
from scoped_io.data.codecs import CsvCodec, JsonLinesCodec, RowCodec
from scoped_io.data.io import read_csv_rows
from scoped_io.data.schemas import FieldSchema, SchemaValidationError
from scoped_io.writers.writer import RowWriter, Writer

__version__ = "0.1.0"

__all__ = [
    "AcquisitionError",
    "AlreadyWrittenError",
    "Backend",
    "CsvCodec",
    "FieldSchema",
    "HttpUploadStream",
    "JsonLinesCodec",
    "LocalBackend",
    "MemoryBackend",
    "NotInitializedError",
    "ReleaseError",
    "RemoteBackend",
    "RowCodec",
    "RowWriter",
    "SchemaValidationError",
    "Scope",
    "ScopeStateError",
    "ScopedIOError",
    "ScopedResource",
    "Writer",
    "open_http_stream",
    "open_writer",
    "read_csv_rows",
    "write_csv",
]
