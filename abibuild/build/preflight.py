"""
Precondition checks run before cargo-ndk is invoked.
"""

import logging
import os
import shutil
from pathlib import Path

from abibuild.core.exceptions import (
    HostToolNotExecutableError,
    MissingDirectoryError,
    ToolNotFoundError,
)
from abibuild.cross.context import BuildContext

logger = logging.getLogger(__name__)

# program -> installation hint
HOST_TOOLS = {
    "cargo": "",
    "cargo-ndk": "Install with: cargo install cargo-ndk",
}


def check_host_tools() -> None:
    """
    Ensure cargo and the cargo-ndk subcommand are on PATH.

    Raises:
        ToolNotFoundError: For the first program that can't be found
    """
    for tool, hint in HOST_TOOLS.items():
        path = shutil.which(tool)
        if path is None:
            raise ToolNotFoundError(tool, hint)
        logger.debug(f"Found {tool}: {path}")


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def check_context(context: BuildContext, protoc: Path) -> None:
    """
    Verify the filesystem layout for one ABI.

    The six include/lib directories are checked in order, then the host
    protoc. Checking stops at the first failure.

    Args:
        context: Build context of the ABI about to be built
        protoc: Host protoc executable

    Raises:
        MissingDirectoryError: If an include or lib directory does not exist
        HostToolNotExecutableError: If protoc is missing or not executable
    """
    for directory in context.required_directories():
        if not directory.is_dir():
            raise MissingDirectoryError(directory)

    if not is_executable(protoc):
        raise HostToolNotExecutableError(protoc)

    logger.debug(f"Preconditions satisfied for {context.abi.name}")
