"""
abibuild command-line interface.

This module implements the argument parser and the entry point that turns
parsed arguments into a BuildOrchestrator run.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from abibuild import __version__
from abibuild.build.orchestrator import BuildOrchestrator
from abibuild.config.settings import (
    CXX_STDLIB_CHOICES,
    DEFAULT_API,
    DEFAULT_CXX_STDLIB,
    DEFAULT_OUTPUT_DIR,
    BuildSettings,
    normalize_file_config,
    resolve_settings,
)
from abibuild.core.exceptions import AbiBuildError, ConfigurationError
from abibuild.cross.abis import DEFAULT_ABI, supported_abis
from abibuild.cli.utils import (
    format_success_message,
    load_yaml_config,
    print_error,
    print_warning,
)

logger = logging.getLogger(__name__)

EPILOG = f"""\
Supported ABIs: {', '.join(supported_abis())}

Expected layout of every library base directory:
  <base>/<abi>/include
  <base>/<abi>/lib

Optional settings fall back to the ABIS, API and CXX_STDLIB environment
variables before their built-in defaults.

Example:
  abibuild --ndk /opt/android-ndk-r26d \\
     --boost-base /path/Boost-for-Android/build/out \\
     --protobuf-base /path/protobuf-install \\
     --protoc /path/protobuf-install/host/bin/protoc \\
     --lz4-base /path/lz4-install \\
     --abis "armeabi-v7a,arm64-v8a"

Output .so files are written under {DEFAULT_OUTPUT_DIR}/<abi>/.
"""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports errors instead of exiting with status 2."""

    def error(self, message):
        raise ConfigurationError(message)


class CLI:
    """abibuild command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create the argument parser.

        The five library/tool paths are mandatory but not marked required
        here, because a ``--config`` file may supply them.

        Returns:
            Configured ArgumentParser instance
        """
        parser = _ArgumentParser(
            prog="abibuild",
            description="Build a Rust crate for Android ABIs with cargo-ndk",
            epilog=EPILOG,
            formatter_class=argparse.RawDescriptionHelpFormatter,
            allow_abbrev=False,
        )

        required = parser.add_argument_group("required")
        required.add_argument(
            "--ndk",
            metavar="PATH",
            help="Path to Android NDK root (e.g. /opt/android-ndk-r26d)",
        )
        required.add_argument(
            "--boost-base",
            metavar="DIR",
            help="Directory that contains per-ABI subdirs for Boost",
        )
        required.add_argument(
            "--protobuf-base",
            metavar="DIR",
            help="Directory that contains per-ABI protobuf installs",
        )
        required.add_argument(
            "--protoc",
            metavar="FILE",
            help="Host protoc executable",
        )
        required.add_argument(
            "--lz4-base",
            metavar="DIR",
            help="Directory that contains per-ABI LZ4 installs",
        )

        optional = parser.add_argument_group("optional")
        optional.add_argument(
            "--abis",
            metavar="LIST",
            help=f"Comma separated ABIs (default: {DEFAULT_ABI})",
        )
        optional.add_argument(
            "--api",
            type=int,
            metavar="INT",
            help=f"Android API level (default: {DEFAULT_API})",
        )
        optional.add_argument(
            "--cxx-stdlib",
            choices=CXX_STDLIB_CHOICES,
            metavar="STDLIB",
            help=f"c++_shared or c++_static (default: {DEFAULT_CXX_STDLIB})",
        )
        optional.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="YAML file providing any of the options above",
        )
        optional.add_argument(
            "--dry-run",
            action="store_true",
            help="Validate and print the build environment without running cargo",
        )
        optional.add_argument(
            "--lock-timeout",
            type=float,
            default=0,
            metavar="SECONDS",
            help="Wait this long for another run to release the output directory",
        )

        parser.add_argument(
            "--version", action="version", version=f"abibuild {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )

        return parser

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace

        Raises:
            ConfigurationError: On unknown flags or malformed values
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        try:
            parsed_args = self.parse_args(args)
            self._configure_logging(parsed_args)
            settings = self._load_settings(parsed_args)
        except ConfigurationError as e:
            print_error(str(e))
            self.parser.print_help(sys.stderr)
            return 1

        self._warn_duplicates(settings)

        try:
            report = BuildOrchestrator(settings).run()
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except AbiBuildError as e:
            logger.debug("Run aborted", exc_info=True)
            print_error(str(e))
            return 1

        if not report.success:
            failed = report.outcomes[-1]
            details = None
            if report.completed:
                details = f"Already built (left in place): {', '.join(report.completed)}"
            logger.debug(f"{failed.abi} failed during {failed.stage.value}")
            print_error(str(report.failure), details)
            return 1

        if report.dry_run:
            title = "Dry run complete"
        else:
            title = f"Done. Output .so per ABI should be under {settings.output_dir}/<abi>/"
        print(format_success_message(title, {"ABIs": ", ".join(report.completed)}))
        return 0

    def _load_settings(self, args) -> BuildSettings:
        """
        Merge the config file, environment and flags into BuildSettings.

        Args:
            args: Parsed arguments

        Raises:
            ConfigurationError: If the config file is unusable or a mandatory
                option is missing
        """
        file_config = {}
        if args.config:
            try:
                file_config = load_yaml_config(args.config, required=True)
            except (FileNotFoundError, ValueError) as e:
                raise ConfigurationError(str(e))
            file_config = normalize_file_config(file_config)

        overrides = {
            "ndk": args.ndk,
            "boost_base": args.boost_base,
            "protobuf_base": args.protobuf_base,
            "protoc": args.protoc,
            "lz4_base": args.lz4_base,
            "abis": args.abis,
            "api": args.api,
            "cxx_stdlib": args.cxx_stdlib,
        }

        return resolve_settings(
            overrides,
            file_config=file_config,
            environ=os.environ,
            dry_run=args.dry_run,
            lock_timeout=args.lock_timeout,
        )

    def _warn_duplicates(self, settings: BuildSettings):
        seen = set()
        for abi in settings.abis:
            if abi in seen:
                print_warning(f"ABI listed more than once, it will be built again: {abi}")
            seen.add(abi)

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
