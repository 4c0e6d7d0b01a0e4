"""
Per-ABI build context and environment projection.

A BuildContext describes where the Boost, Protobuf and LZ4 installs for one
ABI live and projects them onto the environment variables read by the
crate's build script. Variable names are modeled as an enum and only turned
into strings when the environment for the subprocess is assembled.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from abibuild.cross.abis import AndroidAbi

if TYPE_CHECKING:
    from abibuild.config.settings import BuildSettings

logger = logging.getLogger(__name__)

PROTOBUF_LITE_LIBRARY = "libprotobuf-lite.a"
PROTOBUF_LIBRARY = "libprotobuf.a"
LZ4_LIBRARY = "liblz4.a"


class EnvVar(Enum):
    """Per-ABI variables understood by the downstream build script."""

    BOOST_ROOT = "Boost_ROOT"
    BOOST_INCLUDE_DIR = "Boost_INCLUDE_DIR"
    BOOST_LIBRARY_DIR = "Boost_LIBRARY_DIR"
    PROTOBUF_DIR = "Protobuf_DIR"
    PROTOBUF_INCLUDE_DIR = "Protobuf_INCLUDE_DIR"
    PROTOBUF_LIBRARY = "Protobuf_LIBRARY"
    PROTOBUF_LIBRARIES = "Protobuf_LIBRARIES"
    LZ4_DIR = "LZ4_DIR"
    LZ4_INCLUDE_DIR = "LZ4_INCLUDE_DIR"
    LZ4_LIBRARY = "LZ4_LIBRARY"
    CMAKE_PREFIX_PATH = "CMAKE_PREFIX_PATH"
    CXX_STDLIB = "CXX_STDLIB"

    def qualified(self, abi: AndroidAbi) -> str:
        """Name of the triple-qualified form, e.g. ``Boost_ROOT_aarch64_linux_android``."""
        return f"{self.value}_{abi.triple_suffix}"


@dataclass(frozen=True)
class BuildContext:
    """
    Library locations for a single ABI.

    Attributes:
        abi: ABI being built
        boost_dir: ``<boost-base>/<abi>``
        protobuf_dir: ``<protobuf-base>/<abi>``
        lz4_dir: ``<lz4-base>/<abi>``
        cxx_stdlib: C++ standard library linkage mode
    """

    abi: AndroidAbi
    boost_dir: Path
    protobuf_dir: Path
    lz4_dir: Path
    cxx_stdlib: str

    @classmethod
    def for_abi(cls, settings: "BuildSettings", abi: AndroidAbi) -> "BuildContext":
        """
        Create the context for one ABI from the run settings.

        Args:
            settings: Resolved run settings
            abi: ABI to build

        Returns:
            BuildContext rooted under each library base directory
        """
        return cls(
            abi=abi,
            boost_dir=settings.boost_base / abi.name,
            protobuf_dir=settings.protobuf_base / abi.name,
            lz4_dir=settings.lz4_base / abi.name,
            cxx_stdlib=settings.cxx_stdlib,
        )

    def required_directories(self) -> List[Path]:
        """Directories that must exist, in the order they are checked."""
        dirs = []
        for base in (self.boost_dir, self.protobuf_dir, self.lz4_dir):
            dirs.append(base / "include")
            dirs.append(base / "lib")
        return dirs

    @property
    def protobuf_library(self) -> Path:
        """
        Static Protobuf library to link.

        The lite runtime is preferred when it has been built; otherwise the
        full runtime is used.
        """
        lib_dir = self.protobuf_dir / "lib"
        lite = lib_dir / PROTOBUF_LITE_LIBRARY
        if lite.is_file():
            return lite
        return lib_dir / PROTOBUF_LIBRARY

    @property
    def lz4_library(self) -> Path:
        return self.lz4_dir / "lib" / LZ4_LIBRARY

    def variables(self) -> Dict[EnvVar, str]:
        """
        Project the context onto the build script's variables.

        Returns:
            Mapping of variable to value for this ABI
        """
        protobuf_library = str(self.protobuf_library)
        return {
            EnvVar.BOOST_ROOT: str(self.boost_dir),
            EnvVar.BOOST_INCLUDE_DIR: str(self.boost_dir / "include"),
            EnvVar.BOOST_LIBRARY_DIR: str(self.boost_dir / "lib"),
            EnvVar.PROTOBUF_DIR: str(self.protobuf_dir / "lib" / "cmake" / "protobuf"),
            EnvVar.PROTOBUF_INCLUDE_DIR: str(self.protobuf_dir / "include"),
            EnvVar.PROTOBUF_LIBRARY: protobuf_library,
            EnvVar.PROTOBUF_LIBRARIES: protobuf_library,
            EnvVar.LZ4_DIR: str(self.lz4_dir),
            EnvVar.LZ4_INCLUDE_DIR: str(self.lz4_dir / "include"),
            EnvVar.LZ4_LIBRARY: str(self.lz4_library),
            EnvVar.CMAKE_PREFIX_PATH: os.pathsep.join(
                [str(self.boost_dir), str(self.protobuf_dir)]
            ),
            EnvVar.CXX_STDLIB: self.cxx_stdlib,
        }

    def to_environment(self) -> Dict[str, str]:
        """
        Serialize the variables to environment variable names.

        Every variable is emitted twice: under its generic name and under the
        name qualified with the target triple.

        Returns:
            Dictionary of environment variable names to values
        """
        env = {}
        for var, value in self.variables().items():
            env[var.value] = value
            env[var.qualified(self.abi)] = value
        return env


def host_environment(settings: "BuildSettings") -> Dict[str, str]:
    """
    Variables that are the same for every ABI of a run.

    Args:
        settings: Resolved run settings

    Returns:
        NDK root variables and the host protoc location
    """
    ndk = str(settings.ndk)
    return {
        "ANDROID_NDK_ROOT": ndk,
        "ANDROID_NDK_HOME": ndk,
        "Protobuf_PROTOC_EXECUTABLE": str(settings.protoc),
    }


def build_environment(
    context: BuildContext,
    settings: "BuildSettings",
    base: Dict[str, str],
    projected: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """
    Assemble the complete environment for one cargo-ndk invocation.

    The result is a fresh copy of ``base`` overlaid with the host and per-ABI
    variables; ``base`` itself is never modified.

    Args:
        context: Build context of the ABI about to be built
        settings: Resolved run settings
        base: Environment inherited from the caller (usually ``os.environ``)
        projected: Result of ``context.to_environment()`` if the caller already
            has it

    Returns:
        Environment mapping for the subprocess
    """
    if projected is None:
        projected = context.to_environment()
    env = dict(base)
    env.update(host_environment(settings))
    env.update(projected)
    logger.debug(f"Projected {len(projected)} variable(s) for {context.abi.name}")
    return env
