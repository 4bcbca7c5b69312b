"""
Field schemas, header aliases and row projection.

**Conceptual**: This module defines the "data contract" every writer enforces.
A writer is constructed with an ordered set of field names; every row written
through it is projected onto exactly those fields, in exactly that order, no
matter what the caller's dictionaries contain.

**Schema rules**:
  - At least one field name.
  - Field names are non-empty strings.
  - Field names are unique (order is significant, duplicates are not allowed).
  - Header aliases may only name declared fields.

**Projection rules**:
  - Keys outside the declared set are silently dropped.
  - Declared keys missing from a row become None (emitted as an empty cell).
  - Values are passed through unchanged; rendering is the codec's job.

**Teaching note**: Projecting at the writer boundary means codecs never see
ragged rows. A CSV file with one extra column on line 40 is much harder to
debug than one that simply never contains it.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from scoped_io.core.errors import ScopedIOError


# A row value as accepted by the codecs. None means "absent".
RowValue = Union[str, int, float, bool, None]
Row = Mapping[str, Any]


class SchemaValidationError(ScopedIOError):
    """
    Raised when a schema, alias mapping, row or CSV input is malformed.

    **Conceptual**: This exception signals contract violations (empty or
    duplicate field names, aliases for unknown fields, non-mapping rows,
    unreadable CSV) and carries enough context to locate the problem.
    """
    pass


@dataclass(frozen=True)
class FieldSchema:
    """
    Immutable, ordered set of declared field names.

    Attributes:
        fieldnames: Field names in output order.

    Example:
        >>> schema = FieldSchema.of(["id", "name"])
        >>> schema.project({"id": 1, "name": "Ann", "extra": "x"})
        [1, 'Ann']
        >>> schema.header_labels({"name": "Full Name"})
        ['id', 'Full Name']
    """
    fieldnames: tuple[str, ...]

    def __post_init__(self):
        """Validate field names after initialization."""
        validate_fieldnames(self.fieldnames)

    @classmethod
    def of(cls, fieldnames: Iterable[str]) -> "FieldSchema":
        """Build a schema from any iterable of field names."""
        if isinstance(fieldnames, str):
            raise SchemaValidationError(
                f"fieldnames must be a sequence of names, not a single string: {fieldnames!r}"
            )
        return cls(tuple(fieldnames))

    def project(self, row: Row) -> list[RowValue]:
        """
        Project a row onto the declared fields.

        Args:
            row: Mapping from field name to value.

        Returns:
            Values in field order. Missing fields are None.

        Raises:
            SchemaValidationError: If row is not a mapping.
        """
        if not isinstance(row, Mapping):
            raise SchemaValidationError(
                f"Rows must be mappings of field name to value, got {type(row).__name__}."
            )
        return [row.get(name) for name in self.fieldnames]

    def project_many(self, rows: Iterable[Row]) -> list[list[RowValue]]:
        """
        Project every row, in input order.

        The whole batch is projected before anything is returned, so a bad row
        rejects the batch without a partial write.
        """
        records = []
        for index, row in enumerate(rows):
            try:
                records.append(self.project(row))
            except SchemaValidationError as e:
                raise SchemaValidationError(f"Row {index}: {e}") from e
        return records

    def header_labels(self, aliases: Optional[Mapping[str, str]] = None) -> list[str]:
        """
        Resolve the header line for this schema.

        Args:
            aliases: Optional mapping of field name to display label. Fields
                     without an alias keep their declared name.

        Returns:
            Header labels in field order.

        Raises:
            SchemaValidationError: If aliases name fields outside the schema.
        """
        if not aliases:
            return list(self.fieldnames)

        unknown = set(aliases) - set(self.fieldnames)
        if unknown:
            raise SchemaValidationError(
                f"Header aliases reference unknown fields: {sorted(unknown)}. "
                f"Declared fields: {list(self.fieldnames)}."
            )
        return [str(aliases.get(name, name)) for name in self.fieldnames]


def validate_fieldnames(fieldnames: Iterable[str]) -> None:
    """
    Validate a sequence of declared field names.

    Raises:
        SchemaValidationError: If the sequence is empty, contains a non-string
                              or empty name, or repeats a name.
    """
    names = list(fieldnames)
    if not names:
        raise SchemaValidationError("At least one field name is required.")

    bad = [name for name in names if not isinstance(name, str) or not name]
    if bad:
        raise SchemaValidationError(
            f"Field names must be non-empty strings. Invalid entries: {bad}."
        )

    seen = set()
    duplicates = []
    for name in names:
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise SchemaValidationError(
            f"Duplicate field names: {duplicates}. Each field may be declared once."
        )
