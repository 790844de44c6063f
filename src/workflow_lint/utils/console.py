"""
Console and Logging Utilities.

Two Rich consoles are managed here:

*   ``console``: report output (stdout). Machine-readable formats are written
    through it, so nothing else may print there.
*   the diagnostics console (stderr), which backs the ``RichHandler`` attached
    to the root logger. ``log_*`` helpers and ``logging.getLogger(__name__)``
    calls both land there.

Either backend can be swapped at runtime (tests capture into ``io.StringIO``).
"""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Between INFO and WARNING
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
  }
)


class _ConsoleProxy:
  """
  Stable module-level handle around a swappable ``rich.console.Console``.

  Attributes:
      _backend (Console): Report output console.
      _diagnostics (Console): Console the logging handler writes to.
  """

  def __init__(self) -> None:
    self._backend: Console = Console(theme=_THEME)
    self._diagnostics: Console = Console(theme=_THEME, stderr=True)
    self._configure_logging()

  def set_backend(self, new_console: Console, diagnostics: Optional[Console] = None) -> None:
    """
    Injects new consoles and re-attaches the logging handler.

    Args:
        new_console (Console): Report output console.
        diagnostics (Optional[Console]): Log console. Defaults to ``new_console``.
    """
    self._backend = new_console
    self._diagnostics = diagnostics or new_console
    self._configure_logging()

  def reset(self) -> None:
    self._backend = Console(theme=_THEME)
    self._diagnostics = Console(theme=_THEME, stderr=True)
    self._configure_logging()

  @property
  def backend(self) -> Console:
    return self._backend

  @property
  def diagnostics(self) -> Console:
    return self._diagnostics

  def _configure_logging(self) -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
      if isinstance(handler, RichHandler):
        root_logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._diagnostics,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    if root_logger.level == logging.NOTSET or root_logger.level > logging.INFO:
      root_logger.setLevel(logging.INFO)
    root_logger.addHandler(rich_handler)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def write_raw(self, text: str) -> None:
    """
    Writes text verbatim (no markup, emoji codes, highlighting or wrapping).

    Args:
        text (str): Serialized report.
    """
    self._backend.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console, diagnostics: Optional[Console] = None) -> None:
  """
  Redirects report output (and optionally logs) to other consoles.

  Args:
      new_console (Console): Report output console.
      diagnostics (Optional[Console]): Log console. Defaults to ``new_console``.
  """
  console.set_backend(new_console, diagnostics)


def reset_console() -> None:
  console.reset()


def set_verbosity(verbose: bool = False, quiet: bool = False) -> None:
  """
  Adjusts the root logger level.

  Args:
      verbose (bool): Show DEBUG records (per-file progress).
      quiet (bool): Only show errors.
  """
  level = logging.INFO
  if verbose:
    level = logging.DEBUG
  if quiet:
    level = logging.ERROR
  logging.getLogger().setLevel(level)


def log_info(msg: str) -> None:
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  logging.error(f"❌ {msg}", extra={"markup": True})
