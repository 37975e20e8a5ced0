"""
Terminal output and logging setup.

Everything param-twin shows to a user is emitted either through
``console.print`` (results, tables) or through the ``param_twin`` logger
(progress, warnings, errors). Both end up on the same Rich console.

The module-level ``console`` never changes identity: it forwards to a backend
``rich.console.Console`` that can be replaced at runtime with ``set_console``
(tests install a recording console this way). Replacing the backend also moves
the ``RichHandler`` of the ``param_twin`` logger, so log records and printed
output stay in one stream.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

LOGGER_NAME = "param_twin"

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme({"logging.level.success": "green", "path": "bold blue"})

_logger = logging.getLogger(LOGGER_NAME)


def _new_console() -> Console:
  return Console(theme=_THEME)


class _ConsoleProxy:
  """
  Stable handle on a replaceable Rich console.

  Attribute access not defined here (``export_text``, ``width``, ...) is
  delegated to the backend.
  """

  def __init__(self) -> None:
    self._backend: Console = _new_console()
    self._attach_handler()

  @property
  def backend(self) -> Console:
    return self._backend

  def set_backend(self, new_console: Console) -> None:
    """
    Sends all further output to ``new_console``.

    Args:
        new_console: Console receiving prints and log records.
    """
    self._backend = new_console
    self._attach_handler()

  def reset(self) -> None:
    """Goes back to a fresh stdout console."""
    self.set_backend(_new_console())

  def _attach_handler(self) -> None:
    # One RichHandler at a time, bound to the current backend
    for handler in list(_logger.handlers):
      if isinstance(handler, RichHandler):
        _logger.removeHandler(handler)
    _logger.addHandler(
      RichHandler(
        console=self._backend,
        show_time=False,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
      )
    )
    _logger.setLevel(logging.INFO)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """Installs ``new_console`` as the destination of prints and logs."""
  console.set_backend(new_console)


def reset_console() -> None:
  """Restores the default stdout console."""
  console.reset()


def get_console() -> Console:
  """Returns the Rich console currently receiving output."""
  return console.backend


def log_info(msg: str) -> None:
  """
  Reports progress.

  Args:
      msg: Message text; Rich markup such as ``[path]...[/path]`` is rendered.
  """
  _logger.info(f"ℹ️  {msg}")


def log_success(msg: str) -> None:
  """Reports a completed step at the custom SUCCESS level."""
  _logger.log(SUCCESS_LEVEL_NUM, f"✅ {msg}")


def log_warning(msg: str) -> None:
  _logger.warning(f"⚠️  {msg}")


def log_error(msg: str) -> None:
  _logger.error(f"❌ {msg}")
