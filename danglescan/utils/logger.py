"""Logging for DANGLESCAN.

Console records go through a rich handler on stderr so they never mix with the
report lines on stdout. A scan can also keep a plain-text log file, which is
where the per-subdomain verdicts end up when the console is kept quiet.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "danglescan"

_FILE_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

_console = Console(stderr=True)
_configured = False


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the ``danglescan`` logger for one run.

    Args:
        verbose: Log per-subdomain verdicts (``DEBUG``) to the console.
        quiet: Only show warnings and errors on the console.
        log_file: Also write every record at ``DEBUG`` and above to this file.

    Returns:
        The configured root ``danglescan`` logger.
    """
    global _configured

    console_level = logging.INFO
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=_console,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(console_level)
    root.addHandler(console_handler)

    root_level = console_level
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(file_handler)
        root_level = logging.DEBUG

    root.setLevel(root_level)
    root.propagate = False
    _configured = True
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``danglescan`` hierarchy.

    Installs the default console handler the first time it is called.
    """
    if not _configured:
        configure_logging()
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
