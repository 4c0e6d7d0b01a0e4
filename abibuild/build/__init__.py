"""Precondition checks, cargo-ndk invocation and run orchestration."""

from abibuild.build.invoker import CargoNdkInvoker, InvocationResult
from abibuild.build.orchestrator import BuildOrchestrator, RunReport

__all__ = [
    "BuildOrchestrator",
    "CargoNdkInvoker",
    "InvocationResult",
    "RunReport",
]
