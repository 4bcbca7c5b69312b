"""
Tests for LocalBackend, including the reference scenarios:
  A: no aliases          -> "id,name\\n1,Ann\\n"
  B: header aliases      -> "ID,Full Name\\n1,Ann\\n"
  C: extra field in row  -> identical to A
  D: unwritable path     -> AcquisitionError before any write is reachable
"""

from unittest.mock import Mock

import pytest

from scoped_io.api import open_writer
from scoped_io.backends.local import LocalBackend
from scoped_io.core.errors import (
    AcquisitionError,
    NotInitializedError,
    ReleaseError,
)
from scoped_io.data.codecs import JsonLinesCodec
from scoped_io.data.schemas import SchemaValidationError
from scoped_io.writers.writer import RowWriter

FIELDS = ["id", "name"]


# ============================================================================
# Scenarios
# ============================================================================

def test_scenario_a_plain_header(tmp_path):
    path = tmp_path / "a.csv"
    with open_writer(LocalBackend(path, FIELDS)) as writer:
        writer.write_header()
        writer.write_rows([{"id": 1, "name": "Ann"}])

    assert path.read_text() == "id,name\n1,Ann\n"


def test_scenario_b_aliased_header(tmp_path):
    path = tmp_path / "b.csv"
    with open_writer(LocalBackend(path, FIELDS)) as writer:
        writer.write_header({"id": "ID", "name": "Full Name"})
        writer.write_rows([{"id": 1, "name": "Ann"}])

    assert path.read_text() == "ID,Full Name\n1,Ann\n"


def test_scenario_c_extra_field_dropped(tmp_path):
    path = tmp_path / "c.csv"
    with open_writer(LocalBackend(path, FIELDS)) as writer:
        writer.write_header()
        writer.write_rows([{"id": 1, "name": "Ann", "extra": "x"}])

    assert path.read_text() == "id,name\n1,Ann\n"


def test_scenario_d_unwritable_path(tmp_path):
    """
    Test that a path under a regular file can't be acquired, and the block
    is never reached.
    """
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied")
    reached = []

    with pytest.raises(AcquisitionError) as exc_info:
        with open_writer(LocalBackend(blocker / "out.csv", FIELDS)) as writer:
            reached.append(writer)

    assert reached == []
    assert exc_info.value.target == str(blocker / "out.csv")
    assert isinstance(exc_info.value.__cause__, OSError)


def test_scenario_d_without_parent_creation(tmp_path):
    """Test that a missing directory is an AcquisitionError when parents aren't created."""
    backend = LocalBackend(tmp_path / "missing" / "out.csv", FIELDS, create_parents=False)

    with pytest.raises(AcquisitionError, match="Failed to open for writing"):
        backend.acquire()


def test_directory_as_target_is_acquisition_error(tmp_path):
    with pytest.raises(AcquisitionError):
        LocalBackend(tmp_path, FIELDS).acquire()


# ============================================================================
# File semantics
# ============================================================================

def test_existing_file_is_truncated(tmp_path):
    path = tmp_path / "out.csv"
    path.write_text("old content that is much longer than the new one\n" * 10)

    with open_writer(LocalBackend(path, FIELDS)) as writer:
        writer.write_rows([{"id": 1, "name": "Ann"}])

    assert path.read_text() == "1,Ann\n"


def test_parent_directories_created_by_default(tmp_path):
    path = tmp_path / "nested" / "deeper" / "out.csv"

    with open_writer(LocalBackend(path, FIELDS)) as writer:
        writer.write_header()

    assert path.read_text() == "id,name\n"


def test_encoding_override(tmp_path):
    path = tmp_path / "latin.csv"

    with open_writer(LocalBackend(path, FIELDS, encoding="latin-1")) as writer:
        writer.write_rows([{"id": 1, "name": "Zoë"}])

    assert path.read_bytes() == "1,Zoë\n".encode("latin-1")


def test_unknown_encoding_is_acquisition_error(tmp_path):
    with pytest.raises(AcquisitionError):
        LocalBackend(tmp_path / "x.csv", FIELDS, encoding="no-such-codec").acquire()


def test_null_byte_in_path_is_acquisition_error(tmp_path):
    """Test that a path the OS can't represent fails as AcquisitionError, not ValueError."""
    with pytest.raises(AcquisitionError) as exc_info:
        LocalBackend(tmp_path / "bad\0name.csv", FIELDS).acquire()

    assert isinstance(exc_info.value.__cause__, ValueError)


def test_crlf_terminator_from_settings(tmp_path, monkeypatch):
    """Test that SCOPED_IO_LINE_TERMINATOR=CRLF reaches disk unchanged."""
    monkeypatch.setenv("SCOPED_IO_LINE_TERMINATOR", "CRLF")
    path = tmp_path / "crlf.csv"

    with open_writer(LocalBackend(path, FIELDS)) as writer:
        writer.write_header()
        writer.write_rows([{"id": 1, "name": "Ann"}])

    assert path.read_bytes() == b"id,name\r\n1,Ann\r\n"


def test_custom_codec(tmp_path):
    path = tmp_path / "out.jsonl"

    with open_writer(LocalBackend(path, FIELDS, codec=JsonLinesCodec())) as writer:
        writer.write_header()
        writer.write_rows([{"id": 1, "name": "Ann"}])

    assert path.read_text() == '{"id":1,"name":"Ann"}\n'


# ============================================================================
# Lifecycle and release
# ============================================================================

def test_writer_unusable_after_scope(tmp_path):
    """Test that writes after the scope exits raise NotInitializedError."""
    with open_writer(LocalBackend(tmp_path / "out.csv", FIELDS)) as writer:
        writer.write_header()

    with pytest.raises(NotInitializedError):
        writer.write_rows([{"id": 1}])
    with pytest.raises(NotInitializedError):
        writer.write_header()


def test_file_closed_when_block_raises(tmp_path):
    """Test that the handle is released and partial output kept when the block fails."""
    path = tmp_path / "partial.csv"
    backend = LocalBackend(path, FIELDS)

    with pytest.raises(RuntimeError, match="mid-write"):
        with open_writer(backend) as writer:
            writer.write_header()
            writer.write_rows([{"id": 1, "name": "Ann"}])
            raise RuntimeError("mid-write")

    assert not writer.active
    assert path.read_text() == "id,name\n1,Ann\n"


def test_release_tolerates_closed_handle(tmp_path):
    handle = open(tmp_path / "out.csv", "w")
    handle.close()
    writer = RowWriter(FIELDS, transport=handle)

    LocalBackend(tmp_path / "out.csv", FIELDS).release(writer)

    assert not writer.active


def test_release_failure_is_release_error(tmp_path):
    """Test that a failing close() surfaces as ReleaseError with the path."""
    transport = Mock()
    transport.closed = False
    transport.close.side_effect = OSError("disk full")
    writer = RowWriter(FIELDS, transport=transport)

    with pytest.raises(ReleaseError) as exc_info:
        LocalBackend(tmp_path / "out.csv", FIELDS).release(writer)

    assert "disk full" in str(exc_info.value)
    assert exc_info.value.target == str(tmp_path / "out.csv")


def test_each_acquire_opens_independent_transport(tmp_path):
    backend = LocalBackend(tmp_path / "out.csv", FIELDS)

    with open_writer(backend) as first:
        first.write_header()
    with open_writer(backend) as second:
        second.write_rows([{"id": 2, "name": "Bob"}])

    assert first is not second
    assert (tmp_path / "out.csv").read_text() == "2,Bob\n"


# ============================================================================
# Descriptor
# ============================================================================

def test_backend_descriptor_is_immutable(tmp_path):
    backend = LocalBackend(str(tmp_path / "out.csv"), FIELDS)

    assert backend.path == tmp_path / "out.csv"
    assert backend.fieldnames == ("id", "name")
    with pytest.raises(AttributeError):
        backend.path = tmp_path / "other.csv"


def test_backend_rejects_invalid_schema(tmp_path):
    with pytest.raises(SchemaValidationError):
        LocalBackend(tmp_path / "out.csv", ["id", "id"])
