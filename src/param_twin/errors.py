"""
Exception hierarchy for param-twin.

The CLI maps these onto process exit codes:

* ``ConfigurationError`` -> 1 (invalid settings or a missing credential).
* ``InputNotFoundError`` -> 2.

``NamingServiceError`` never reaches the CLI during a transformation: the
similarity-based naming strategy catches it and degrades to "no candidates".
"""


class ParamTwinError(Exception):
  """Base class for all errors raised by param-twin."""


class ConfigurationError(ParamTwinError):
  """Raised when the runtime configuration is invalid or incomplete."""


class InputNotFoundError(ParamTwinError):
  """Raised when the file to transform does not exist."""

  def __init__(self, path) -> None:
    super().__init__(f"Input file not found: {path}")
    self.path = path


class NamingServiceError(ParamTwinError):
  """Raised when the embedding function or the similarity index fails."""
