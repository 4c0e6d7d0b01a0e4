"""
cargo-ndk invocation.

Each invocation blocks until cargo exits. Output is streamed to the console
as it arrives and the tail of it is kept on the result for error reports.
"""

import logging
import subprocess
import sys
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TextIO

from abibuild.core.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)

OUTPUT_TAIL_LINES = 50


@dataclass
class InvocationResult:
    """Outcome of one cargo-ndk run."""

    command: List[str]
    returncode: int
    output_tail: List[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CargoNdkInvoker:
    """
    Runs ``cargo ndk`` for a single ABI.

    Attributes:
        cargo: cargo executable to launch
        output_dir: Directory cargo-ndk copies the built libraries into
        stream: Where subprocess output is echoed (default: stdout)
    """

    def __init__(
        self,
        output_dir: str,
        cargo: str = "cargo",
        stream: Optional[TextIO] = None,
    ):
        self.output_dir = output_dir
        self.cargo = cargo
        self.stream = stream

    def command(self, abi: str, api: int) -> List[str]:
        """
        Build the cargo-ndk command line for one ABI.

        Args:
            abi: ABI identifier (e.g., 'arm64-v8a')
            api: Android API level

        Returns:
            Command as an argument list

        Example:
            >>> CargoNdkInvoker("./jniLibs").command("x86_64", 21)
            ['cargo', 'ndk', '--platform', '21', '-t', 'x86_64', '-o', './jniLibs', 'build', '--release']
        """
        return [
            self.cargo,
            "ndk",
            "--platform",
            str(api),
            "-t",
            abi,
            "-o",
            self.output_dir,
            "build",
            "--release",
        ]

    def run(self, command: List[str], env: Dict[str, str]) -> InvocationResult:
        """
        Run a command to completion.

        Args:
            command: Argument list from :meth:`command`
            env: Complete environment for the subprocess

        Returns:
            InvocationResult with the exit status and the last output lines

        Raises:
            ToolNotFoundError: If the executable can't be launched
        """
        stream = self.stream or sys.stdout
        tail = deque(maxlen=OUTPUT_TAIL_LINES)

        logger.debug(f"Running: {' '.join(command)}")
        start = time.monotonic()

        try:
            with subprocess.Popen(
                command,
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            ) as process:
                for line in process.stdout:
                    stream.write(line)
                    tail.append(line.rstrip("\n"))
                returncode = process.wait()
        except FileNotFoundError:
            raise ToolNotFoundError(command[0])

        duration = time.monotonic() - start
        logger.debug(f"{command[0]} exited with {returncode} after {duration:.1f}s")

        return InvocationResult(
            command=command,
            returncode=returncode,
            output_tail=list(tail),
            duration=duration,
        )
