"""
Whole-run build orchestration.

The orchestrator walks the configured ABIs in order. For each one it
resolves the target triple, validates the library layout, projects the
environment and runs cargo-ndk. The first failure ends the run; ABIs built
before it keep their output.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from abibuild.build.invoker import CargoNdkInvoker, InvocationResult
from abibuild.build.preflight import check_context, check_host_tools
from abibuild.config.settings import BuildSettings
from abibuild.core.exceptions import (
    AbiBuildError,
    BuildInvocationError,
    PreconditionError,
    UnsupportedAbiError,
)
from abibuild.core.locking import output_lock
from abibuild.cross.abis import resolve_abi
from abibuild.cross.context import BuildContext, build_environment

logger = logging.getLogger(__name__)


class Stage(Enum):
    """Per-ABI steps, in execution order."""

    RESOLVE = "resolve"
    VALIDATE = "validate"
    PROJECT = "project"
    INVOKE = "invoke"


@dataclass
class AbiOutcome:
    """What happened to one entry of the ABI list."""

    abi: str
    success: bool
    stage: Stage
    triple: Optional[str] = None
    environment: Dict[str, str] = field(default_factory=dict)
    result: Optional[InvocationResult] = None
    error: Optional[AbiBuildError] = None


@dataclass
class RunReport:
    """Aggregated outcome of a driver run."""

    outcomes: List[AbiOutcome] = field(default_factory=list)
    failure: Optional[AbiBuildError] = None
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return self.failure is None and all(o.success for o in self.outcomes)

    @property
    def completed(self) -> List[str]:
        return [o.abi for o in self.outcomes if o.success]

    def add(self, outcome: AbiOutcome):
        self.outcomes.append(outcome)
        if not outcome.success and self.failure is None:
            self.failure = outcome.error


class BuildOrchestrator:
    """
    Drives cargo-ndk once per configured ABI.

    Args:
        settings: Resolved run settings
        invoker: cargo-ndk invoker (default: one writing to settings.output_dir)
        environ: Base environment for subprocesses (default: snapshot of os.environ)
    """

    def __init__(
        self,
        settings: BuildSettings,
        invoker: Optional[CargoNdkInvoker] = None,
        environ: Optional[Dict[str, str]] = None,
    ):
        self.settings = settings
        self.invoker = invoker or CargoNdkInvoker(settings.output_dir)
        self.environ = environ

    def run(self) -> RunReport:
        """
        Build every configured ABI.

        Returns:
            RunReport; ``report.failure`` holds the error that stopped the run

        Raises:
            ToolNotFoundError: If cargo or cargo-ndk is not installed
            BuildLockedError: If another run holds the output directory
        """
        check_host_tools()

        base_env = dict(os.environ) if self.environ is None else dict(self.environ)
        report = RunReport(dry_run=self.settings.dry_run)

        self._print_banner()

        if self.settings.dry_run:
            self._build_all(report, base_env)
        else:
            with output_lock(Path(self.settings.output_dir), self.settings.lock_timeout):
                self._build_all(report, base_env)

        return report

    def _build_all(self, report: RunReport, base_env: Dict[str, str]):
        for name in self.settings.abis:
            outcome = self.build_abi(name, base_env)
            report.add(outcome)
            if not outcome.success:
                logger.debug(f"Stopping after {outcome.stage.value} failure on {name!r}")
                break

    def build_abi(self, name: str, base_env: Dict[str, str]) -> AbiOutcome:
        """
        Run all steps for a single ABI.

        Args:
            name: ABI identifier as listed in the settings
            base_env: Environment the projected variables are layered over

        Returns:
            AbiOutcome describing the last step reached
        """
        try:
            abi = resolve_abi(name)
        except UnsupportedAbiError as e:
            return AbiOutcome(abi=name, success=False, stage=Stage.RESOLVE, error=e)

        context = BuildContext.for_abi(self.settings, abi)

        try:
            check_context(context, self.settings.protoc)
        except PreconditionError as e:
            return AbiOutcome(
                abi=abi.name,
                success=False,
                stage=Stage.VALIDATE,
                triple=abi.triple,
                error=e,
            )

        projected = context.to_environment()
        self._print_context(context)

        command = self.invoker.command(abi.name, self.settings.api)
        if self.settings.dry_run:
            for key in sorted(projected):
                print(f"  {key}={projected[key]}")
            print(f"  $ {' '.join(command)}")
            print()
            return AbiOutcome(
                abi=abi.name,
                success=True,
                stage=Stage.PROJECT,
                triple=abi.triple,
                environment=projected,
            )

        env = build_environment(context, self.settings, base_env, projected)
        try:
            result = self.invoker.run(command, env)
        except PreconditionError as e:
            return AbiOutcome(
                abi=abi.name,
                success=False,
                stage=Stage.INVOKE,
                triple=abi.triple,
                error=e,
            )

        outcome = AbiOutcome(
            abi=abi.name,
            success=result.success,
            stage=Stage.INVOKE,
            triple=abi.triple,
            environment=projected,
            result=result,
        )
        if not result.success:
            outcome.error = BuildInvocationError(abi.name, result)
        return outcome

    def _print_banner(self):
        settings = self.settings
        print(
            f"==> Building for ABIs: {','.join(settings.abis)} (API {settings.api})"
        )
        print(f"    NDK:        {settings.ndk}")
        print(f"    BOOST_BASE: {settings.boost_base}")
        print(f"    PB_BASE:    {settings.protobuf_base}")
        print(f"    LZ4_BASE:   {settings.lz4_base}")
        print(f"    protoc:     {settings.protoc}")
        print(f"    CXX_STDLIB: {settings.cxx_stdlib}")
        print()

    def _print_context(self, context: BuildContext):
        print(f"---- ABI: {context.abi.name}  (TRIPLE: {context.abi.triple}) ----")
        print(f"Boost:    {context.boost_dir}")
        print(
            f"Proto:    {context.protobuf_dir / 'include'} ; "
            f"{context.protobuf_library.name}"
        )
        print(f"LZ4:      {context.lz4_dir / 'include'} ; {context.lz4_library.name}")
        print()
