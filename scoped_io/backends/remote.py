"""
Remote object-store backend.

**Conceptual**: Acquiring opens a write stream to a URI through a pluggable
transport ("opener"); releasing closes the stream, which is where a remote
transport flushes and commits. The default opener targets HTTP(S) object
stores that accept a whole object per request (S3 pre-signed URLs, GCS signed
URLs, WebDAV, most blob gateways):

  1. Writes are buffered in memory while the scope is open.
  2. close() sends the buffered text in one request (PUT by default).
  3. A network error or an HTTP status >= 400 raises ReleaseError.

**Transport parameters**: `params` is an open-ended mapping owned by the
transport, not by this library. The default opener passes it verbatim as
keyword arguments to requests.Session.request (headers, auth, timeout, verify,
cert, proxies, ...). Configured defaults (timeout, bearer token) only apply
where params says nothing.

**Custom transports**: Any callable opener(uri, params) -> writable text
stream can replace the default, e.g. a cloud SDK's streaming writer. The
stream's close() must commit the object and raise on failure.

**Example usage**:
    >>> backend = RemoteBackend(
    ...     "https://bucket.example.com/reports/people.csv",
    ...     ["id", "name"],
    ...     params={"headers": {"x-amz-acl": "private"}, "timeout": 10},
    ... )
    >>> with open_writer(backend) as writer:
    ...     writer.write_header()
    ...     writer.write_rows(rows)
    >>> # object uploaded when the with-block exits
"""

import codecs
import io
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import partial
from types import MappingProxyType
from typing import Any, Optional, TextIO
from urllib.parse import urlparse

import requests

from scoped_io.backends.base import close_writer_transport
from scoped_io.config.settings import RemoteSettings, get_settings
from scoped_io.core.errors import AcquisitionError, ReleaseError
from scoped_io.data.codecs import CsvCodec, RowCodec
from scoped_io.data.schemas import FieldSchema
from scoped_io.utils.logging import get_logger
from scoped_io.writers.writer import RowWriter

logger = get_logger(__name__)

Opener = Callable[[str, Mapping[str, Any]], TextIO]

HTTP_SCHEMES = ("http", "https")


class HttpUploadStream:
    """
    Writable text stream that uploads its contents over HTTP on close().

    **Responsibilities**:
      - Buffer text written by the codec.
      - On the first close(), send one request with the buffered payload.
      - Map transport failures and HTTP error statuses to ReleaseError.
      - Close the requests.Session it owns.

    Later close() calls do nothing.
    """

    def __init__(
        self,
        uri: str,
        session: requests.Session,
        params: Optional[Mapping[str, Any]] = None,
        method: str = "PUT",
        encoding: str = "utf-8",
    ):
        self.uri = uri
        self.session = session
        self.params = dict(params or {})
        self.method = method.upper()
        self.encoding = encoding
        self.status_code: Optional[int] = None
        self._buffer = io.StringIO()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return not self._closed

    def write(self, text: str) -> int:
        if self._closed:
            raise ValueError("I/O operation on closed upload stream")
        return self._buffer.write(text)

    def flush(self) -> None:
        # Nothing leaves the process until close()
        return None

    def getvalue(self) -> str:
        return self._buffer.getvalue()

    def close(self) -> None:
        """
        Upload the buffered payload and release the session.

        Raises:
            ReleaseError: If the payload can't be encoded, the request fails
                          or returns status >= 400.
        """
        if self._closed:
            return
        self._closed = True

        try:
            try:
                payload = self._buffer.getvalue().encode(self.encoding)
            except (UnicodeEncodeError, LookupError) as e:
                raise ReleaseError(
                    f"{self.uri}: Failed to encode payload as {self.encoding}. Error: {e}",
                    target=self.uri,
                ) from e

            try:
                response = self.session.request(
                    self.method,
                    self.uri,
                    data=payload,
                    **self.params,
                )
            except requests.RequestException as e:
                raise ReleaseError(
                    f"{self.uri}: Upload failed. Check network connection and URI. Error: {e}",
                    target=self.uri,
                ) from e

            self.status_code = response.status_code
            if response.status_code >= 400:
                raise ReleaseError(
                    f"{self.uri}: Upload rejected (status {response.status_code}). "
                    f"Response: {response.text}",
                    target=self.uri,
                    status_code=response.status_code,
                )
            logger.debug(
                "Uploaded %d bytes to %s (status %d)",
                len(payload),
                self.uri,
                response.status_code,
            )
        finally:
            self._buffer.close()
            self.session.close()


def open_http_stream(
    uri: str,
    params: Mapping[str, Any],
    content_type: str = "text/csv",
    encoding: str = "utf-8",
    settings: Optional[RemoteSettings] = None,
) -> HttpUploadStream:
    """
    Default opener: an HttpUploadStream for an http(s) URI.

    Args:
        uri: Destination object URL.
        params: Keyword arguments for requests.Session.request, passed verbatim.
        content_type: Content-Type header sent with the upload.
        encoding: Text encoding of the payload.
        settings: Remote defaults. Defaults to the global settings.

    Returns:
        An open HttpUploadStream.

    Raises:
        ValueError: If the URI isn't an http(s) URL with a host,
                    or the encoding is unknown.
    """
    parsed = urlparse(uri)
    if parsed.scheme.lower() not in HTTP_SCHEMES or not parsed.netloc:
        raise ValueError(
            f"Unsupported URI {uri!r}: expected an http:// or https:// URL with a host."
        )

    # Unknown encodings fail here rather than at upload time
    codecs.lookup(encoding)

    settings = settings or get_settings().remote
    session = requests.Session()
    session.headers.update({
        "Content-Type": f"{content_type}; charset={encoding}",
        "User-Agent": "scoped-io/0.1",
    })
    if settings.token and "auth" not in params:
        session.headers["Authorization"] = f"Bearer {settings.token}"

    request_params = dict(params)
    request_params.setdefault("timeout", settings.timeout_seconds)

    return HttpUploadStream(
        uri,
        session,
        params=request_params,
        method=settings.method,
        encoding=encoding,
    )


@dataclass(frozen=True)
class RemoteBackend:
    """
    Backend writing to a remote object through a pluggable opener.

    Attributes:
        uri: Destination URI.
        fieldnames: Declared fields, in output order.
        params: Transport parameters, passed through verbatim to the opener.
                Stored read-only.
        codec: Format codec. Defaults to CsvCodec.
        opener: Callable (uri, params) -> writable text stream. Defaults to
                open_http_stream.
        encoding: Payload encoding for the default opener. Defaults to
                  SCOPED_IO_ENCODING.
    """
    uri: str
    fieldnames: Sequence[str]
    params: Mapping[str, Any] = field(default_factory=dict, compare=False)
    codec: Optional[RowCodec] = field(default=None, compare=False)
    opener: Optional[Opener] = field(default=None, compare=False)
    encoding: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "fieldnames", FieldSchema.of(self.fieldnames).fieldnames)
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    def __repr__(self) -> str:
        # params may hold credentials; keep them out of logs
        return f"RemoteBackend(uri={self.uri!r}, fieldnames={self.fieldnames!r})"

    def acquire(self) -> RowWriter:
        """
        Open a write stream to the URI and return a writer bound to it.

        Raises:
            AcquisitionError: If the opener rejects the URI or fails to open.
        """
        codec = self.codec if self.codec is not None else CsvCodec()
        opener = self.opener
        if opener is None:
            opener = partial(
                open_http_stream,
                content_type=getattr(codec, "media_type", "application/octet-stream"),
                encoding=self.encoding or get_settings().writer.encoding,
            )

        try:
            stream = opener(self.uri, self.params)
        except AcquisitionError:
            raise
        except Exception as e:
            raise AcquisitionError(
                f"{self.uri}: Failed to open remote stream. Error: {e}",
                target=self.uri,
            ) from e

        logger.debug("Opened remote stream to %s", self.uri)
        return RowWriter(self.fieldnames, codec=codec, transport=stream)

    def release(self, writer: RowWriter) -> None:
        """
        Close the stream, committing the upload.

        Raises:
            ReleaseError: If the commit fails.
        """
        close_writer_transport(writer, self.uri)
