"""
Configuration settings for scoped writers.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). All settings are validated
when loaded, so a bad value fails at startup with a clear message instead of
halfway through writing a file.

**Subsystems**:
  - WriterSettings: encoding, line terminator, parent directory creation.
  - RemoteSettings: HTTP method, timeout and bearer token for remote uploads.
  - LoggingSettings: log level and format.

**Teaching note**: Backends read their defaults from here, but every default
can also be overridden per backend instance. Settings describe the
environment; constructor arguments describe one particular write.

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


_TRUE_VALUES = ("true", "1", "yes")
_FALSE_VALUES = ("false", "0", "no")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_HTTP_UPLOAD_METHODS = ("PUT", "POST", "PATCH")


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(
        f"{name} must be one of {_TRUE_VALUES + _FALSE_VALUES}, got: {value}"
    )


@dataclass(frozen=True)
class WriterSettings:
    """
    Defaults for writers backed by local files.

    Attributes:
        encoding: Text encoding for files opened by LocalBackend (default utf-8).
        line_terminator: Record terminator used by the default CSV codec.
        create_parents: If True, LocalBackend creates missing parent
                        directories before opening the file.
    """
    encoding: str = "utf-8"
    line_terminator: str = "\n"
    create_parents: bool = True

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.encoding:
            raise ValueError(
                "SCOPED_IO_ENCODING cannot be empty. "
                "Please set it in your .env file or environment variables."
            )
        if self.line_terminator not in ("\n", "\r\n"):
            raise ValueError(
                f"SCOPED_IO_LINE_TERMINATOR must be '\\n' or '\\r\\n', got: {self.line_terminator!r}"
            )

    @classmethod
    def from_env(cls) -> "WriterSettings":
        """
        Load writer settings from environment variables.

        **Environment variables**:
          - SCOPED_IO_ENCODING (optional): defaults to "utf-8".
          - SCOPED_IO_LINE_TERMINATOR (optional): "LF" or "CRLF"; defaults to LF.
          - SCOPED_IO_CREATE_PARENTS (optional): defaults to "true".

        Raises:
            ValueError: If a value can't be parsed.
        """
        encoding = os.getenv("SCOPED_IO_ENCODING", "utf-8")
        terminator_str = os.getenv("SCOPED_IO_LINE_TERMINATOR", "LF").strip().upper()
        create_parents_str = os.getenv("SCOPED_IO_CREATE_PARENTS", "true")

        terminators = {"LF": "\n", "CRLF": "\r\n"}
        if terminator_str not in terminators:
            raise ValueError(
                f"SCOPED_IO_LINE_TERMINATOR must be LF or CRLF, got: {terminator_str}"
            )

        return cls(
            encoding=encoding,
            line_terminator=terminators[terminator_str],
            create_parents=_parse_bool("SCOPED_IO_CREATE_PARENTS", create_parents_str),
        )


@dataclass(frozen=True)
class RemoteSettings:
    """
    Defaults for the HTTP upload transport used by RemoteBackend.

    **Security note**: The token is a secret. Load it from SCOPED_IO_REMOTE_TOKEN
    and never hardcode it; it is sent as a Bearer Authorization header unless a
    backend's params supply their own headers or auth.

    Attributes:
        method: HTTP method used to commit the upload (PUT, POST or PATCH).
        timeout_seconds: Request timeout applied when params has no "timeout".
        token: Optional bearer token.
    """
    method: str = "PUT"
    timeout_seconds: float = 30
    token: Optional[str] = None

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.method.upper() not in _HTTP_UPLOAD_METHODS:
            raise ValueError(
                f"SCOPED_IO_REMOTE_METHOD must be one of {_HTTP_UPLOAD_METHODS}, got: {self.method}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got: {self.timeout_seconds}"
            )

    @classmethod
    def from_env(cls) -> "RemoteSettings":
        """
        Load remote upload settings from environment variables.

        **Environment variables**:
          - SCOPED_IO_REMOTE_METHOD (optional): defaults to "PUT".
          - SCOPED_IO_REMOTE_TIMEOUT_SECONDS (optional): defaults to 30.
          - SCOPED_IO_REMOTE_TOKEN (optional): bearer token, unset by default.
        """
        method = os.getenv("SCOPED_IO_REMOTE_METHOD", "PUT").strip().upper()
        timeout_str = os.getenv("SCOPED_IO_REMOTE_TIMEOUT_SECONDS", "30")
        token = os.getenv("SCOPED_IO_REMOTE_TOKEN") or None

        try:
            timeout_seconds = float(timeout_str)
        except ValueError:
            raise ValueError(
                f"SCOPED_IO_REMOTE_TIMEOUT_SECONDS must be a number, got: {timeout_str}"
            )

        return cls(method=method, timeout_seconds=timeout_seconds, token=token)


@dataclass(frozen=True)
class LoggingSettings:
    """
    Logging configuration.

    Attributes:
        level: Root log level name.
        format: logging.Formatter format string.
    """
    level: str = "INFO"
    format: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    def __post_init__(self):
        if self.level not in _LOG_LEVELS:
            raise ValueError(
                f"SCOPED_IO_LOG_LEVEL must be one of {_LOG_LEVELS}, got: {self.level}"
            )

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        level = os.getenv("SCOPED_IO_LOG_LEVEL", "INFO").strip().upper()
        fmt = os.getenv("SCOPED_IO_LOG_FORMAT") or cls.format
        return cls(level=level, format=fmt)


@dataclass(frozen=True)
class Settings:
    """
    Top-level settings aggregating every subsystem.

    **Usage pattern**:
      ```python
      from scoped_io.config.settings import get_settings

      settings = get_settings()
      encoding = settings.writer.encoding
      ```

    Attributes:
        writer: Local writer defaults.
        remote: Remote upload defaults.
        logging: Logging configuration.
    """
    writer: WriterSettings = field(default_factory=WriterSettings)
    remote: RemoteSettings = field(default_factory=RemoteSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load all subsystem settings from environment variables.

        Raises:
            ValueError: If any subsystem has an invalid value.
        """
        return cls(
            writer=WriterSettings.from_env(),
            remote=RemoteSettings.from_env(),
            logging=LoggingSettings.from_env(),
        )


# Global settings instance (lazy-loaded)
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings singleton.

    Settings are loaded from environment on first call, then cached for reuse.
    Call reset_settings() to force a reload (tests do this after changing
    environment variables).
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env()

    return _default_settings


def reset_settings():
    """
    Reset the global settings singleton (for testing).

    **Testing pattern**:
      ```python
      def test_something(monkeypatch):
          monkeypatch.setenv("SCOPED_IO_ENCODING", "latin-1")
          reset_settings()
          assert get_settings().writer.encoding == "latin-1"
      ```
    """
    global _default_settings
    _default_settings = None
