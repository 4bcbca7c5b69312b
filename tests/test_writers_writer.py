"""
Tests for RowWriter: header state, projection and lifecycle.

**Testing philosophy**: The writer is bound directly to an io.StringIO, so
these tests cover writer semantics without any backend involved.
"""

import io

import pytest

from scoped_io.core.errors import AlreadyWrittenError, NotInitializedError
from scoped_io.data.codecs import JsonLinesCodec
from scoped_io.data.schemas import FieldSchema, SchemaValidationError
from scoped_io.writers.writer import RowWriter


@pytest.fixture
def buffer():
    return io.StringIO()


@pytest.fixture
def writer(buffer):
    """Writer for fields id,name bound to an in-memory buffer."""
    return RowWriter(["id", "name"], transport=buffer)


# ============================================================================
# Header
# ============================================================================

def test_header_defaults_to_field_names(writer, buffer):
    writer.write_header()
    assert buffer.getvalue() == "id,name\n"
    assert writer.header_written


def test_header_uses_aliases(writer, buffer):
    writer.write_header({"id": "ID", "name": "Full Name"})
    assert buffer.getvalue() == "ID,Full Name\n"


def test_second_header_raises(writer, buffer):
    """Test that the header can be written at most once."""
    writer.write_header()

    with pytest.raises(AlreadyWrittenError):
        writer.write_header()

    assert buffer.getvalue() == "id,name\n"


def test_second_header_raises_even_after_rows(writer):
    """Test that rows written between two header calls don't reset the flag."""
    writer.write_header()
    writer.write_rows([{"id": 1, "name": "Ann"}])

    with pytest.raises(AlreadyWrittenError):
        writer.write_header({"id": "ID"})


def test_rows_before_header_are_allowed(writer, buffer):
    """Test that ordering between rows and header is not enforced."""
    writer.write_rows([{"id": 1, "name": "Ann"}])
    writer.write_header()
    assert buffer.getvalue() == "1,Ann\nid,name\n"


def test_unknown_alias_leaves_header_unwritten(writer, buffer):
    """Test that a rejected alias mapping doesn't consume the single header write."""
    with pytest.raises(SchemaValidationError):
        writer.write_header({"age": "Age"})

    assert not writer.header_written
    writer.write_header()
    assert buffer.getvalue() == "id,name\n"


# ============================================================================
# Rows
# ============================================================================

def test_write_rows_projects_and_counts(writer, buffer):
    """Test that extras are dropped, missing fields are empty and order is kept."""
    count = writer.write_rows([
        {"id": 1, "name": "Ann", "extra": "x"},
        {"name": "Bob"},
        {"id": 3},
    ])

    assert count == 3
    assert buffer.getvalue() == "1,Ann\n,Bob\n3,\n"


def test_write_rows_accepts_generators(writer, buffer):
    count = writer.write_rows({"id": i, "name": f"n{i}"} for i in range(3))
    assert count == 3
    assert buffer.getvalue() == "0,n0\n1,n1\n2,n2\n"


def test_write_rows_empty_batch(writer, buffer):
    assert writer.write_rows([]) == 0
    assert buffer.getvalue() == ""


def test_bad_row_rejects_whole_batch(writer, buffer):
    """Test that a non-mapping row fails before anything from the batch is written."""
    with pytest.raises(SchemaValidationError):
        writer.write_rows([{"id": 1, "name": "Ann"}, "not a row"])

    assert buffer.getvalue() == ""


def test_writer_uses_given_codec(buffer):
    writer = RowWriter(["id"], codec=JsonLinesCodec(), transport=buffer)
    writer.write_header()
    writer.write_rows([{"id": 5}])
    assert buffer.getvalue() == '{"id":5}\n'


# ============================================================================
# Lifecycle
# ============================================================================

def test_unbound_writer_rejects_writes():
    """Test that a writer whose scope was never entered raises NotInitializedError."""
    writer = RowWriter(["id", "name"])
    assert not writer.active

    with pytest.raises(NotInitializedError, match="not yet acquired"):
        writer.write_header()
    with pytest.raises(NotInitializedError, match="not yet acquired"):
        writer.write_rows([{"id": 1}])


def test_detached_writer_rejects_writes(writer, buffer):
    """Test that a released writer raises NotInitializedError and can't be rebound."""
    assert writer.detach() is buffer
    assert not writer.active

    with pytest.raises(NotInitializedError, match="released"):
        writer.write_rows([{"id": 1}])
    with pytest.raises(NotInitializedError, match="released"):
        writer.write_header()
    with pytest.raises(NotInitializedError):
        writer.bind(io.StringIO())


def test_detach_twice_returns_none(writer):
    writer.detach()
    assert writer.detach() is None


def test_bind_twice_raises(writer):
    with pytest.raises(ValueError, match="already has a bound transport"):
        writer.bind(io.StringIO())


def test_writer_accepts_prebuilt_schema(buffer):
    schema = FieldSchema.of(["a", "b"])
    writer = RowWriter(schema, transport=buffer)
    assert writer.schema is schema
    assert writer.fieldnames == ("a", "b")
