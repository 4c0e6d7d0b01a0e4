"""
abibuild - build a Rust crate for Android ABIs with cargo-ndk.

Maps a handful of command-line options onto the Boost, Protobuf and LZ4
environment variables a crate's build script reads, checks that every
per-ABI install exists, and runs ``cargo ndk`` once per ABI.
"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("abibuild")
except PackageNotFoundError:
    __version__ = "0.1.0"
