"""
Centralized exception hierarchy for abibuild.

Every failure the driver can report is fatal: the CLI prints the message,
stops processing further ABIs and exits with status 1.
"""

from pathlib import Path


# ============================================================================
# Base Exceptions
# ============================================================================


class AbiBuildError(Exception):
    """Base exception for all abibuild errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(AbiBuildError):
    """Raised when options are missing, unknown or malformed."""

    pass


class UnsupportedAbiError(AbiBuildError):
    """Raised when an ABI identifier is not in the architecture table."""

    def __init__(self, abi: str):
        self.abi = abi
        super().__init__(f"Unsupported ABI: {abi}")


# ============================================================================
# Precondition Exceptions
# ============================================================================


class PreconditionError(AbiBuildError):
    """Base exception for failed filesystem or host tool checks."""

    pass


class ToolNotFoundError(PreconditionError):
    """Raised when a required host program is not on PATH."""

    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        msg = f"{tool} not found"
        if hint:
            msg += f". {hint}"
        super().__init__(msg)


class MissingDirectoryError(PreconditionError):
    """Raised when an expected per-ABI library directory does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"expected directory not found: {path}")


class HostToolNotExecutableError(PreconditionError):
    """Raised when the host protoc is missing or not executable."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"protoc not executable: {path}")


# ============================================================================
# Build Exceptions
# ============================================================================


class BuildInvocationError(AbiBuildError):
    """Raised when the cross-compilation helper exits with a non-zero status."""

    def __init__(self, abi: str, result):
        self.abi = abi
        self.result = result
        super().__init__(
            f"cargo ndk failed for {abi} with exit code {result.returncode}"
        )


class BuildLockedError(AbiBuildError):
    """Raised when another run holds the output directory lock."""

    pass
