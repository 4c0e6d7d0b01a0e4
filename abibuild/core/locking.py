"""
Output directory locking.

cargo-ndk writes every ABI into the same output tree, so two driver runs in
the same project must not overlap. The lock is a hidden file next to the
output directory (``./.jniLibs.abibuild.lock`` for ``./jniLibs``), held for
the whole run. Nothing is written into the output tree itself.

Usage:
    from abibuild.core.locking import output_lock

    with output_lock(Path("jniLibs"), timeout=0):
        # build all ABIs
        pass
"""

import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout as LockTimeout

from abibuild.core.exceptions import BuildLockedError

logger = logging.getLogger(__name__)

LOCK_FILE_SUFFIX = ".abibuild.lock"


def lock_file_path(output_dir: Path) -> Path:
    """Lock file guarding ``output_dir``, placed beside it."""
    output_dir = Path(output_dir)
    return output_dir.parent / f".{output_dir.name}{LOCK_FILE_SUFFIX}"


@contextmanager
def output_lock(output_dir: Path, timeout: float = 0):
    """
    Acquire an exclusive lock on the output directory.

    The directory is created if it does not exist yet.

    Args:
        output_dir: Output directory shared by all ABIs
        timeout: Maximum wait time in seconds (0 fails immediately)

    Yields:
        Path of the lock file

    Raises:
        BuildLockedError: If the lock can't be acquired within timeout
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    lock_path = lock_file_path(output_dir)
    lock = FileLock(str(lock_path), timeout=timeout)

    try:
        lock.acquire()
    except LockTimeout as e:
        raise BuildLockedError(
            f"Could not lock {output_dir} after {timeout}s. "
            "Another abibuild run may be writing to it."
        ) from e

    logger.debug(f"Acquired output lock: {lock_path}")
    try:
        yield lock_path
    finally:
        lock.release()
        logger.debug(f"Released output lock: {lock_path}")
