"""
Reading CSV output back into rows.

**Conceptual**: Writers are one half of the CSV contract; this module is the
other half. It reads a produced file (or any text buffer) back into a list of
dictionaries so output can be inspected, verified and fed into further
processing without each caller re-deciding how to parse it.

**Reading rules**:
  - Every value is returned as a string, exactly as it appears in the file.
  - Empty cells are returned as "" (never NaN, never None).
  - A completely empty input yields [].
  - With fieldnames, the input is treated as headerless (rows written without
    a header) and columns take those names.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Optional, TextIO, Union

import pandas as pd

from scoped_io.data.schemas import SchemaValidationError, validate_fieldnames


def read_csv_rows(
    source: Union[Path, str, TextIO],
    fieldnames: Optional[Sequence[str]] = None,
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> list[dict[str, str]]:
    """
    Read a CSV file or text buffer into a list of row dictionaries.

    Args:
        source: Path to a CSV file, or an open text buffer positioned at the
                start of the CSV data.
        fieldnames: Optional column names for headerless input. When omitted,
                    the first line is the header.
        delimiter: Field separator (default ",").
        encoding: Text encoding used when source is a path.

    Returns:
        Rows in file order, each a dict of column name to string value.

    Raises:
        FileNotFoundError: If source is a path that doesn't exist.
        SchemaValidationError: If the input can't be parsed as CSV, or
                              fieldnames is invalid.

    Example:
        >>> import io
        >>> read_csv_rows(io.StringIO("id,name\\n1,Ann\\n"))
        [{'id': '1', 'name': 'Ann'}]
    """
    if fieldnames is not None:
        validate_fieldnames(fieldnames)

    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(
                f"CSV not found: {path}. "
                f"Ensure the file exists and the path is correct."
            )
        context = str(path)
    else:
        context = "<buffer>"

    read_kwargs = {
        "sep": delimiter,
        "dtype": str,
        "keep_default_na": False,
    }
    if fieldnames is not None:
        read_kwargs["header"] = None
        read_kwargs["names"] = list(fieldnames)
    if isinstance(source, (str, Path)):
        read_kwargs["encoding"] = encoding

    try:
        df = pd.read_csv(source, **read_kwargs)
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        raise SchemaValidationError(
            f"{context}: Failed to read CSV. Error: {e}"
        ) from e

    return df.to_dict(orient="records")
