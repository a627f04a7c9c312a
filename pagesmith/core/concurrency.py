"""Named concurrency groups — at most one publish per deployment target.

A group is an exclusive ``flock`` on ``{lock_dir}/{name}.lock``. A second
publisher for the same group waits until the first releases it; nothing
is cancelled. The lock is tied to the open file descriptor, so a crashed
process releases it automatically.
"""

from __future__ import annotations

import fcntl
import logging
import os
import time
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.1


class ConcurrencyTimeoutError(RuntimeError):
    """Raised when a group lock is not acquired within the timeout."""


class ConcurrencyGroup:
    """Context manager holding the lock for one named group.

    Parameters
    ----------
    name:
        Group name, e.g. ``"pages"``.
    lock_dir:
        Directory holding lock files.
    timeout:
        Seconds to wait; ``None`` waits indefinitely.
    """

    def __init__(self, name: str, lock_dir: Path, *, timeout: float | None = None) -> None:
        self.name = name
        self.path = Path(lock_dir) / f"{name}.lock"
        self.timeout = timeout
        self._fd: int | None = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        if self._fd is not None:
            raise RuntimeError(f"Concurrency group {self.name!r} already held")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o644)
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        waited = False
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if not waited:
                    logger.info("Waiting for in-flight run in group %r", self.name)
                    waited = True
                if deadline is not None and time.monotonic() >= deadline:
                    os.close(fd)
                    raise ConcurrencyTimeoutError(
                        f"Timed out after {self.timeout}s waiting for group {self.name!r}"
                    ) from None
                time.sleep(_POLL_INTERVAL)
        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode("ascii"))
        self._fd = fd
        logger.debug("Acquired concurrency group %r", self.name)

    def release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        logger.debug("Released concurrency group %r", self.name)

    def __enter__(self) -> "ConcurrencyGroup":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
