"""
Scoped temporary directory for a photo run's intermediate files.
"""

import os
import shutil
import tempfile
from typing import Optional

from cartouche.core.config import settings
from cartouche.core.errors import ResourceError
from cartouche.core.logger import logger


class WorkingDirectory:
    """
    Exclusively owned temporary directory, released exactly once.

    Usable as a context manager; ``release`` is a no-op after the first call.
    """

    def __init__(self, prefix: str = "cartouche_", root: Optional[str] = None):
        root = root or settings.TMP_DIR
        try:
            self.path = tempfile.mkdtemp(prefix=prefix, dir=root)
        except OSError as e:
            raise ResourceError(f"Cannot create working directory: {e}") from e
        self.released = False
        logger.debug(f"Created working directory {self.path}")

    def join(self, filename: str) -> str:
        if self.released:
            raise ResourceError(f"Working directory {self.path} was already released")
        return os.path.join(self.path, filename)

    def release(self):
        """Remove the directory and everything in it."""
        if self.released:
            return
        self.released = True
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            raise ResourceError(f"Cannot release working directory {self.path}: {e}") from e
        logger.debug(f"Released working directory {self.path}")

    def __enter__(self) -> "WorkingDirectory":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    def __str__(self) -> str:
        return self.path
