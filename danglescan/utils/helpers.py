"""Input file helpers for DANGLESCAN.

Subdomain and fingerprint lists are newline-delimited text: blank lines are
dropped, each line is stripped, and there is no comment syntax.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple, Union

from danglescan.core.errors import InputFileError
from danglescan.utils.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def read_lines(path: PathLike) -> List[str]:
    """Return the non-blank, stripped lines of *path* in file order.

    Raises:
        InputFileError: When the file cannot be opened or decoded.
    """
    file_path = Path(path)
    try:
        with file_path.open("r", encoding="utf-8") as fh:
            lines = [line.strip() for line in fh]
    except (OSError, UnicodeDecodeError) as exc:
        raise InputFileError(str(file_path), exc) from exc
    return [line for line in lines if line]


def load_subdomains(path: PathLike) -> List[str]:
    """Load the subdomain list. Duplicates are kept."""
    subdomains = read_lines(path)
    logger.info("Loaded %d subdomains from %s", len(subdomains), path)
    return subdomains


def load_fingerprints(path: PathLike) -> Tuple[str, ...]:
    """Load fingerprint substrings as an immutable, ordered tuple."""
    fingerprints = tuple(read_lines(path))
    if not fingerprints:
        logger.warning("No fingerprints loaded from %s; nothing can match.", path)
    else:
        logger.info("Loaded %d fingerprints from %s", len(fingerprints), path)
    return fingerprints
