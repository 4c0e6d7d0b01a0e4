"""
Invocation settings for abibuild.

Settings are merged from several layers, lowest precedence first:

1. built-in defaults
2. a YAML file passed with ``--config``
3. the ``ABIS``, ``API`` and ``CXX_STDLIB`` environment variables
4. command-line flags

Only the optional settings have defaults or environment fallbacks; the five
mandatory paths must come from the YAML file or the command line.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from abibuild.core.exceptions import ConfigurationError
from abibuild.cross.abis import DEFAULT_ABI, parse_abi_list

logger = logging.getLogger(__name__)

DEFAULT_API = 21
DEFAULT_CXX_STDLIB = "c++_shared"
CXX_STDLIB_CHOICES = ("c++_shared", "c++_static")
DEFAULT_OUTPUT_DIR = "./jniLibs"

# setting name -> command-line flag, in the order they are reported
REQUIRED_SETTINGS = {
    "ndk": "--ndk",
    "boost_base": "--boost-base",
    "protobuf_base": "--protobuf-base",
    "protoc": "--protoc",
    "lz4_base": "--lz4-base",
}

OPTIONAL_SETTINGS = ("abis", "api", "cxx_stdlib")

# setting name -> environment variable consulted for its default
ENVIRONMENT_DEFAULTS = {
    "abis": "ABIS",
    "api": "API",
    "cxx_stdlib": "CXX_STDLIB",
}


@dataclass
class BuildSettings:
    """
    Fully resolved configuration of one driver run.

    Attributes:
        ndk: Android NDK root
        boost_base: Directory holding ``<abi>/{include,lib}`` Boost installs
        protobuf_base: Directory holding ``<abi>/{include,lib}`` Protobuf installs
        protoc: Host protoc executable
        lz4_base: Directory holding ``<abi>/{include,lib}`` LZ4 installs
        abis: ABI identifiers in the order given, duplicates preserved
        api: Android API level passed to cargo-ndk
        cxx_stdlib: C++ standard library linkage mode
        output_dir: Output directory handed to cargo-ndk
        dry_run: Validate and print, but do not invoke cargo-ndk
        lock_timeout: Seconds to wait for the output directory lock
    """

    ndk: Path
    boost_base: Path
    protobuf_base: Path
    protoc: Path
    lz4_base: Path
    abis: List[str] = field(default_factory=lambda: [DEFAULT_ABI])
    api: int = DEFAULT_API
    cxx_stdlib: str = DEFAULT_CXX_STDLIB
    output_dir: str = DEFAULT_OUTPUT_DIR
    dry_run: bool = False
    lock_timeout: float = 0


def _coerce_api(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid API level: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid API level: {value!r}")


def _coerce_abis(value: Any) -> List[str]:
    if isinstance(value, str):
        return parse_abi_list(value)
    if isinstance(value, (list, tuple)):
        return [str(entry).strip() for entry in value]
    raise ConfigurationError(f"Invalid ABI list: {value!r}")


def _coerce_cxx_stdlib(value: Any) -> str:
    if value not in CXX_STDLIB_CHOICES:
        raise ConfigurationError(
            f"Invalid C++ stdlib: {value!r}. "
            f"Supported: {', '.join(CXX_STDLIB_CHOICES)}"
        )
    return value


def normalize_file_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize keys read from a YAML configuration file.

    Hyphenated keys (``boost-base``) are accepted as well as underscored ones.

    Args:
        config: Parsed YAML mapping

    Returns:
        Mapping keyed by setting name

    Raises:
        ConfigurationError: If the file contains keys abibuild does not know
    """
    known = set(REQUIRED_SETTINGS) | set(OPTIONAL_SETTINGS)
    normalized = {}
    unknown = []

    for key, value in config.items():
        name = str(key).replace("-", "_")
        if name not in known:
            unknown.append(str(key))
            continue
        normalized[name] = value

    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}"
        )

    return normalized


def resolve_settings(
    overrides: Mapping[str, Any],
    file_config: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    dry_run: bool = False,
    lock_timeout: float = 0,
) -> BuildSettings:
    """
    Merge all configuration layers into BuildSettings.

    Args:
        overrides: Values given on the command line; ``None`` means not given
        file_config: Normalized values from a YAML configuration file
        environ: Environment to read optional defaults from
        dry_run: Whether the run should stop short of invoking cargo-ndk
        lock_timeout: Seconds to wait for the output directory lock

    Returns:
        Resolved BuildSettings

    Raises:
        ConfigurationError: If a mandatory setting is missing or a value is
            malformed
    """
    file_config = file_config or {}
    environ = environ if environ is not None else {}
    merged: Dict[str, Any] = {}

    for name, value in file_config.items():
        if value is not None:
            merged[name] = value

    for name in OPTIONAL_SETTINGS:
        env_value = environ.get(ENVIRONMENT_DEFAULTS[name])
        if env_value:
            logger.debug(f"Using {ENVIRONMENT_DEFAULTS[name]} from environment")
            merged[name] = env_value

    for name, value in overrides.items():
        if value is not None:
            merged[name] = value

    missing = [
        flag for name, flag in REQUIRED_SETTINGS.items() if not merged.get(name)
    ]
    if missing:
        raise ConfigurationError(f"Missing required args: {', '.join(missing)}")

    settings = BuildSettings(
        ndk=Path(str(merged["ndk"])).expanduser(),
        boost_base=Path(str(merged["boost_base"])).expanduser(),
        protobuf_base=Path(str(merged["protobuf_base"])).expanduser(),
        protoc=Path(str(merged["protoc"])).expanduser(),
        lz4_base=Path(str(merged["lz4_base"])).expanduser(),
        dry_run=dry_run,
        lock_timeout=lock_timeout,
    )

    if "abis" in merged:
        settings.abis = _coerce_abis(merged["abis"])
    if "api" in merged:
        settings.api = _coerce_api(merged["api"])
    if "cxx_stdlib" in merged:
        settings.cxx_stdlib = _coerce_cxx_stdlib(merged["cxx_stdlib"])

    logger.debug(f"Resolved settings: {settings}")
    return settings
