"""
Android ABI to Rust target triple resolution.

The table is closed: only the four ABIs shipped by the NDK are accepted.
"""

from dataclasses import dataclass
from typing import List

from abibuild.core.exceptions import UnsupportedAbiError

DEFAULT_ABI = "armeabi-v7a"

ABI_TRIPLES = {
    "armeabi-v7a": "armv7-linux-androideabi",
    "arm64-v8a": "aarch64-linux-android",
    "x86": "i686-linux-android",
    "x86_64": "x86_64-linux-android",
}


@dataclass(frozen=True)
class AndroidAbi:
    """
    An Android ABI together with its compilation target triple.

    Attributes:
        name: ABI identifier as used by the NDK (e.g., 'arm64-v8a')
        triple: Rust/Clang target triple (e.g., 'aarch64-linux-android')
    """

    name: str
    triple: str

    @property
    def triple_suffix(self) -> str:
        """Triple with hyphens replaced, usable as an environment variable suffix."""
        return self.triple.replace("-", "_")


def parse_abi_list(value: str) -> List[str]:
    """
    Split a comma separated ABI list.

    Surrounding whitespace is trimmed from every entry. Order and duplicates
    are preserved. Empty fields at the end of the list are dropped, so a
    trailing comma or an empty value is harmless; empty entries between two
    ABIs are kept and reported as unsupported when their turn comes.

    Args:
        value: Raw value of ``--abis`` (e.g., "armeabi-v7a, arm64-v8a")

    Returns:
        List of ABI identifiers

    Example:
        >>> parse_abi_list("armeabi-v7a, arm64-v8a")
        ['armeabi-v7a', 'arm64-v8a']
        >>> parse_abi_list("x86,")
        ['x86']
    """
    entries = value.split(",")
    while entries and not entries[-1]:
        entries.pop()
    return [entry.strip() for entry in entries]


def resolve_abi(name: str) -> AndroidAbi:
    """
    Look up the target triple for an ABI.

    Args:
        name: ABI identifier

    Returns:
        AndroidAbi for the identifier

    Raises:
        UnsupportedAbiError: If the ABI is not one of the four known ABIs
    """
    abi = name.strip()
    triple = ABI_TRIPLES.get(abi)
    if triple is None:
        raise UnsupportedAbiError(abi)
    return AndroidAbi(name=abi, triple=triple)


def supported_abis() -> List[str]:
    return list(ABI_TRIPLES)
