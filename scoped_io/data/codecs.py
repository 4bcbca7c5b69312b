"""
Format codecs: turning projected rows into bytes on a transport.

**Conceptual**: A codec knows one serialized format and nothing else. It does
not open or close transports, it does not track whether a header was already
written, and it does not look at the caller's dictionaries. It receives header
labels or already-projected value lists (see FieldSchema.project) plus a
writable text transport, and renders them.

**Codecs in this module**:
  - CsvCodec: RFC 4180-style CSV (minimal quoting, doubled quotes, embedded
    separators and newlines quoted), one line per row.
  - JsonLinesCodec: one JSON object per line, keyed by field name.

Both are rendered through pandas so values keep their natural text form:
integers stay integers ("1", not "1.0") because frames are built with object
dtype, and None renders as an empty CSV cell or a JSON null.

Any object with write_header(transport, labels) and
write_rows(transport, fieldnames, records) is a codec (see RowCodec).
"""

from collections.abc import Sequence
from typing import Any, Protocol, TextIO

import pandas as pd


class RowCodec(Protocol):
    """
    Protocol for serializing a header and rows onto a text transport.

    **Implementation requirements**:
      1. write_header emits the labels once per call, in the given order.
      2. write_rows emits one record per entry of records, in input order.
      3. Neither method opens, flushes or closes the transport.
    """

    def write_header(self, transport: TextIO, labels: Sequence[str]) -> None:
        ...

    def write_rows(
        self,
        transport: TextIO,
        fieldnames: Sequence[str],
        records: Sequence[Sequence[Any]],
    ) -> None:
        ...


class CsvCodec:
    """
    CSV codec built on pandas.DataFrame.to_csv.

    Attributes:
        delimiter: Field separator (default ",").
        lineterminator: Record terminator (default "\\n").

    Example:
        >>> import io
        >>> buf = io.StringIO()
        >>> codec = CsvCodec()
        >>> codec.write_header(buf, ["id", "name"])
        >>> codec.write_rows(buf, ["id", "name"], [[1, "Ann"]])
        >>> buf.getvalue()
        'id,name\\n1,Ann\\n'
    """

    media_type = "text/csv"

    def __init__(self, delimiter: str = ",", lineterminator: str = "\n"):
        if len(delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got: {delimiter!r}")
        if not lineterminator:
            raise ValueError("lineterminator cannot be empty")
        self.delimiter = delimiter
        self.lineterminator = lineterminator

    def write_header(self, transport: TextIO, labels: Sequence[str]) -> None:
        """Emit a single header line containing labels."""
        # An empty frame with columns renders as just its header line
        pd.DataFrame(columns=list(labels)).to_csv(
            transport,
            index=False,
            sep=self.delimiter,
            lineterminator=self.lineterminator,
        )

    def write_rows(
        self,
        transport: TextIO,
        fieldnames: Sequence[str],
        records: Sequence[Sequence[Any]],
    ) -> None:
        """Emit one line per record. None values become empty cells."""
        if not records:
            return

        df = pd.DataFrame(
            [list(record) for record in records],
            columns=list(fieldnames),
            dtype=object,
        )
        df.to_csv(
            transport,
            index=False,
            header=False,
            sep=self.delimiter,
            lineterminator=self.lineterminator,
            na_rep="",
        )


class JsonLinesCodec:
    """
    JSON Lines codec built on pandas.DataFrame.to_json.

    JSON Lines records carry their own keys, so write_header emits nothing.
    Records are keyed by declared field name.

    to_json escapes "/" as "\\/"; the escape is undone so paths and URLs
    are written as-is. Both forms decode to the same string.
    """

    media_type = "application/x-ndjson"

    def write_header(self, transport: TextIO, labels: Sequence[str]) -> None:
        return None

    def write_rows(
        self,
        transport: TextIO,
        fieldnames: Sequence[str],
        records: Sequence[Sequence[Any]],
    ) -> None:
        if not records:
            return

        df = pd.DataFrame(
            [list(record) for record in records],
            columns=list(fieldnames),
            dtype=object,
        )
        text = df.to_json(orient="records", lines=True, force_ascii=False)
        # Backslashes come out doubled and every slash is escaped, so this only hits slashes
        text = text.replace("\\/", "/")
        if not text.endswith("\n"):
            text += "\n"
        transport.write(text)
