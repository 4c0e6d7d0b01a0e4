"""
Tests for per-ABI build contexts and environment projection.
"""

import os
from pathlib import Path

import pytest

from abibuild.cross.abis import resolve_abi
from abibuild.cross.context import (
    BuildContext,
    EnvVar,
    build_environment,
    host_environment,
)


@pytest.fixture
def arm64_context(library_tree):
    settings = library_tree.settings(abis=["arm64-v8a"])
    return BuildContext.for_abi(settings, resolve_abi("arm64-v8a"))


class TestBuildContext:
    def test_for_abi_paths(self, library_tree, arm64_context):
        """Test each base is scoped to the ABI directory."""
        assert arm64_context.boost_dir == library_tree.boost_base / "arm64-v8a"
        assert arm64_context.protobuf_dir == library_tree.protobuf_base / "arm64-v8a"
        assert arm64_context.lz4_dir == library_tree.lz4_base / "arm64-v8a"
        assert arm64_context.cxx_stdlib == "c++_shared"

    def test_required_directories_order(self, library_tree, arm64_context):
        """Test the six directories are listed Boost, Protobuf, LZ4."""
        expected = []
        for base in (library_tree.boost_base, library_tree.protobuf_base, library_tree.lz4_base):
            expected.append(base / "arm64-v8a" / "include")
            expected.append(base / "arm64-v8a" / "lib")

        assert arm64_context.required_directories() == expected

    def test_protobuf_full_library_when_no_lite(self, arm64_context):
        """Test the full runtime is used when the lite one is absent."""
        assert arm64_context.protobuf_library.name == "libprotobuf.a"

    def test_protobuf_lite_library_preferred(self, library_tree, arm64_context):
        """Test the lite runtime wins when present."""
        library_tree.add_abi("arm64-v8a", lite=True)

        assert arm64_context.protobuf_library == (
            library_tree.protobuf_base / "arm64-v8a" / "lib" / "libprotobuf-lite.a"
        )

    def test_protobuf_lite_directory_ignored(self, library_tree, arm64_context):
        """Test a directory named like the lite library does not count."""
        (library_tree.protobuf_base / "arm64-v8a" / "lib" / "libprotobuf-lite.a").mkdir()

        assert arm64_context.protobuf_library.name == "libprotobuf.a"

    def test_protobuf_full_library_path_even_if_missing(self, tmp_path):
        """Test the full library path is returned without checking it exists."""
        context = BuildContext(
            abi=resolve_abi("x86"),
            boost_dir=tmp_path / "b",
            protobuf_dir=tmp_path / "p",
            lz4_dir=tmp_path / "l",
            cxx_stdlib="c++_static",
        )

        assert context.protobuf_library == tmp_path / "p" / "lib" / "libprotobuf.a"


class TestEnvironmentProjection:
    def test_variables_values(self, arm64_context):
        variables = arm64_context.variables()
        boost = arm64_context.boost_dir
        pb = arm64_context.protobuf_dir
        lz4 = arm64_context.lz4_dir

        assert variables[EnvVar.BOOST_ROOT] == str(boost)
        assert variables[EnvVar.BOOST_INCLUDE_DIR] == str(boost / "include")
        assert variables[EnvVar.BOOST_LIBRARY_DIR] == str(boost / "lib")
        assert variables[EnvVar.PROTOBUF_DIR] == str(pb / "lib" / "cmake" / "protobuf")
        assert variables[EnvVar.PROTOBUF_INCLUDE_DIR] == str(pb / "include")
        assert variables[EnvVar.PROTOBUF_LIBRARY] == str(pb / "lib" / "libprotobuf.a")
        assert variables[EnvVar.PROTOBUF_LIBRARIES] == variables[EnvVar.PROTOBUF_LIBRARY]
        assert variables[EnvVar.LZ4_DIR] == str(lz4)
        assert variables[EnvVar.LZ4_INCLUDE_DIR] == str(lz4 / "include")
        assert variables[EnvVar.LZ4_LIBRARY] == str(lz4 / "lib" / "liblz4.a")
        assert variables[EnvVar.CXX_STDLIB] == "c++_shared"

    def test_cmake_prefix_path_joins_boost_and_protobuf(self, arm64_context):
        value = arm64_context.variables()[EnvVar.CMAKE_PREFIX_PATH]

        assert value == f"{arm64_context.boost_dir}{os.pathsep}{arm64_context.protobuf_dir}"

    def test_every_variable_projected(self, arm64_context):
        assert set(arm64_context.variables()) == set(EnvVar)

    def test_generic_and_qualified_forms(self, arm64_context):
        """Test each variable appears under both names with the same value."""
        env = arm64_context.to_environment()

        assert len(env) == 2 * len(EnvVar)
        for var in EnvVar:
            assert env[var.value] == env[f"{var.value}_aarch64_linux_android"]

    def test_qualified_name(self):
        abi = resolve_abi("armeabi-v7a")

        assert EnvVar.BOOST_ROOT.qualified(abi) == "Boost_ROOT_armv7_linux_androideabi"
        assert EnvVar.LZ4_LIBRARY.qualified(abi) == "LZ4_LIBRARY_armv7_linux_androideabi"

    def test_lite_library_in_environment(self, library_tree, arm64_context):
        library_tree.add_abi("arm64-v8a", lite=True)
        env = arm64_context.to_environment()

        assert env["Protobuf_LIBRARY"].endswith("libprotobuf-lite.a")
        assert env["Protobuf_LIBRARIES_aarch64_linux_android"].endswith(
            "libprotobuf-lite.a"
        )


class TestBuildEnvironment:
    def test_host_environment(self, library_tree):
        settings = library_tree.settings()

        env = host_environment(settings)

        assert env == {
            "ANDROID_NDK_ROOT": str(library_tree.ndk),
            "ANDROID_NDK_HOME": str(library_tree.ndk),
            "Protobuf_PROTOC_EXECUTABLE": str(library_tree.protoc),
        }

    def test_base_not_modified(self, library_tree, arm64_context):
        """Test the caller's environment mapping is left untouched."""
        base = {"PATH": "/usr/bin", "HOME": "/home/user"}
        snapshot = dict(base)

        env = build_environment(arm64_context, library_tree.settings(), base)

        assert base == snapshot
        assert env["PATH"] == "/usr/bin"
        assert env["Boost_ROOT"] == str(arm64_context.boost_dir)

    def test_generic_values_overwritten(self, library_tree, arm64_context):
        """Test stale generic values from the base environment are replaced."""
        base = {"Boost_ROOT": "/stale/boost", "CXX_STDLIB": "c++_static"}

        env = build_environment(arm64_context, library_tree.settings(), base)

        assert env["Boost_ROOT"] == str(arm64_context.boost_dir)
        assert env["CXX_STDLIB"] == "c++_shared"

    def test_precomputed_projection_used(self, library_tree, arm64_context):
        """Test an already projected mapping is layered as given."""
        projected = {"Boost_ROOT": "/from/caller"}

        env = build_environment(arm64_context, library_tree.settings(), {}, projected)

        assert env["Boost_ROOT"] == "/from/caller"
        assert "Boost_ROOT_aarch64_linux_android" not in env
        assert env["ANDROID_NDK_HOME"] == str(library_tree.ndk)

    def test_previous_abi_not_carried_over(self, library_tree):
        """Test environments of two ABIs built from the same base are independent."""
        settings = library_tree.settings(abis=["armeabi-v7a", "x86"])
        base = {"PATH": "/usr/bin"}
        first = build_environment(
            BuildContext.for_abi(settings, resolve_abi("armeabi-v7a")), settings, base
        )
        second = build_environment(
            BuildContext.for_abi(settings, resolve_abi("x86")), settings, base
        )

        assert "Boost_ROOT_armv7_linux_androideabi" in first
        assert "Boost_ROOT_armv7_linux_androideabi" not in second
        assert Path(second["Boost_ROOT"]).name == "x86"
