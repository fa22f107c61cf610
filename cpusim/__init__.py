"""8-register teaching CPU simulator core package."""

from .assembler import assemble, AssembledProgram
from .interpreter import execute, ExecutionResult
from .state import CpuState, Flags, REGISTER_NAMES
from .runner import run_program, RunOptions, RunResult, Session, HistoryEntry
from .errors import CPUSimError, StepLimitExceeded, InvalidState

__all__ = [
    "assemble",
    "AssembledProgram",
    "execute",
    "ExecutionResult",
    "CpuState",
    "Flags",
    "REGISTER_NAMES",
    "run_program",
    "RunOptions",
    "RunResult",
    "Session",
    "HistoryEntry",
    "CPUSimError",
    "StepLimitExceeded",
    "InvalidState",
]
