"""Scoped temporary files.

Temp files (staged uploads, downloaded audio) are deleted on every exit path.
Deletion is best effort: a failure is logged and reported back as a warning
string, never raised.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


def discard_path(path: str) -> str | None:
    """Remove a file or directory tree; returns a warning message on failure."""
    try:
        if os.path.isdir(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except FileNotFoundError:
        return None
    except OSError as ex:
        logger.warning("Could not remove temporary path %s: %s", path, ex)
        return f"cleanup failed for {os.path.basename(path)}: {ex}"
    logger.debug("Removed temporary path %s", path)
    return None


@contextmanager
def scoped_path(path: str, warnings: list[str] | None = None) -> Iterator[str]:
    try:
        yield path
    finally:
        warning = discard_path(path)
        if warning and warnings is not None:
            warnings.append(warning)
