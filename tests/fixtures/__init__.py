"""Test fixtures for abibuild tests.

Fixtures are organized by type:

- libraries: per-ABI Boost/Protobuf/LZ4 install trees, NDK root and host protoc
- tools: fake cargo / cargo-ndk executables on PATH

Import fixtures in your tests using:
    from tests.fixtures.libraries import library_tree
    from tests.fixtures.tools import fake_cargo
"""

__all__ = [
    "libraries",
    "tools",
]
