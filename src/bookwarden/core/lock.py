# ABOUTME: Advisory lock file preventing two bookwarden processes from editing one library.
# ABOUTME: The lock is held by file existence; acquire fails fast if another process holds it.

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class LibraryLockedError(RuntimeError):
    """Raised when the library lock file already exists."""


@dataclass
class LibraryLock:
    """Exclusive-by-existence lock file holding the owner's pid.

    Use as a context manager so the file is removed on every exit path.
    """

    path: Path
    _held: bool = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(str(self.path), os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        except FileExistsError as exc:
            raise LibraryLockedError(
                f"Library is locked by another process ({self.path}). "
                "Remove the file if no other bookwarden is running."
            ) from exc
        with os.fdopen(fd, "w") as f:
            f.write(str(os.getpid()))
        self._held = True
        logger.debug("Acquired lock %s", self.path)

    def release(self) -> None:
        if not self._held:
            return
        self.path.unlink(missing_ok=True)
        self._held = False
        logger.debug("Released lock %s", self.path)

    def __enter__(self) -> "LibraryLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
