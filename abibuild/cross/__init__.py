"""
Android cross-compilation support for abibuild.

This module provides the ABI to target triple table and the per-ABI build
context that is projected onto the build script's environment variables.
"""

from abibuild.cross.abis import AndroidAbi, parse_abi_list, resolve_abi
from abibuild.cross.context import BuildContext, EnvVar

__all__ = [
    "AndroidAbi",
    "BuildContext",
    "EnvVar",
    "parse_abi_list",
    "resolve_abi",
]
