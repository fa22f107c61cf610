"""Stepping session with execution history for the CPU simulator."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .assembler import AssembledProgram, assemble
from .errors import CPUSimError, ErrorInfo, StepLimitExceeded
from .interpreter import execute
from .state import CpuState


logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Options for program execution."""
    max_steps: int = 10000
    history: bool = True
    initial_registers: dict[str, int] = field(default_factory=dict)
    initial_memory: dict[int, int] = field(default_factory=dict)

    def initial_state(self) -> CpuState:
        return CpuState(registers=self.initial_registers, memory=self.initial_memory)


@dataclass
class HistoryEntry:
    """Single row of execution history."""
    step: int
    ip: int  # Index of the executed instruction
    instruction: str
    state: CpuState
    description: str
    touched: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "ip": self.ip,
            "instruction": self.instruction,
            "state": self.state.to_dict(),
            "description": self.description,
            "touched": self.touched,
        }


def touched_addresses(before: CpuState, after: CpuState) -> list[int]:
    """Memory addresses whose value differs between two states."""
    addresses = set(before.memory) | set(after.memory)
    return sorted(
        addr for addr in addresses
        if before.read_memory(addr) != after.read_memory(addr)
        or (addr in before.memory) != (addr in after.memory)
    )


class Session:
    """Caller-side loop around the interpreter.

    Holds the assembled program, the current state and the accumulated
    history. ``ip`` indexes the instruction list; the session is finished
    once it points outside of it.
    """

    def __init__(self, source: str = "", options: Optional[RunOptions] = None):
        self.options = options or RunOptions()
        self.program: AssembledProgram = assemble(source)
        self.state: CpuState = self.options.initial_state()
        self.history: list[HistoryEntry] = []
        self.steps_executed = 0

    def load(self, source: str) -> AssembledProgram:
        """Re-assemble ``source`` and reset execution."""
        self.program = assemble(source)
        self.reset()
        return self.program

    def reset(self) -> None:
        """Return to the initial state and drop history."""
        self.state = self.options.initial_state()
        self.history = []
        self.steps_executed = 0

    @property
    def finished(self) -> bool:
        return self.state.ip >= len(self.program)

    def step(self) -> Optional[HistoryEntry]:
        """Execute the instruction at ``ip``; None once finished."""
        if self.finished:
            return None

        ip = self.state.ip
        instr = self.program.instructions[ip]
        before = self.state
        self.state, description = execute(before, instr)
        self.steps_executed += 1

        entry = HistoryEntry(
            step=self.steps_executed,
            ip=ip,
            instruction=instr.text,
            state=self.state,
            description=description,
            touched=touched_addresses(before, self.state),
        )
        if self.options.history:
            self.history.append(entry)
        return entry

    def run(self, max_steps: Optional[int] = None) -> int:
        """Step until finished.

        Returns:
            Number of steps executed by this call

        Raises:
            StepLimitExceeded: the limit was reached before finishing
        """
        limit = self.options.max_steps if max_steps is None else max_steps
        executed = 0
        while not self.finished:
            if executed >= limit:
                logger.warning("Step limit %d reached at ip %d", limit, self.state.ip)
                raise StepLimitExceeded(
                    f"Step limit exceeded: {limit}",
                    step=self.steps_executed,
                    ip=self.state.ip,
                    instruction=self.program.instructions[self.state.ip].text,
                )
            self.step()
            executed += 1
        logger.info("Program finished after %d steps", self.steps_executed)
        return executed


@dataclass
class RunResult:
    """Result of program execution."""
    status: str  # "ok" | "error"
    steps_executed: int
    final_state: CpuState
    program: AssembledProgram
    history: list[HistoryEntry]
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "steps_executed": self.steps_executed,
            "final_state": self.final_state.to_dict(),
            "history": [entry.to_dict() for entry in self.history],
        }
        result.update(self.program.to_dict())
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def run_program(
    program_text: str,
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Assemble and run a program until it steps past its last instruction.

    Args:
        program_text: Program source code
        options: Execution options

    Returns:
        RunResult with status, final state and history
    """
    session = Session(program_text, options)
    error_info: Optional[ErrorInfo] = None

    try:
        session.run()
    except CPUSimError as e:
        error_info = e.to_error_info()

    return RunResult(
        status="ok" if error_info is None else "error",
        steps_executed=session.steps_executed,
        final_state=session.state,
        program=session.program,
        history=session.history,
        error=error_info,
    )
