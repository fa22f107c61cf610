"""Single-step instruction execution for the CPU simulator."""

import logging
from typing import Callable, NamedTuple, Optional, Union

from .parser import (
    ArithmeticInstruction,
    Cmp,
    Instruction,
    JumpInstruction,
    Mov,
    Unknown,
    IMMEDIATE,
    MEMORY,
    REGISTER,
    parse_instruction,
)
from .state import CpuState, Flags, REGISTER_NAMES


logger = logging.getLogger(__name__)


class ExecutionResult(NamedTuple):
    """New state and a human-readable account of what the step did."""
    state: CpuState
    description: str


# Instruction executor type; receives the state with ip already advanced
InstructionExecutor = Callable[[Instruction, CpuState], tuple[CpuState, str]]


def _invalid_register(instr: Instruction) -> Optional[str]:
    """Return the first register operand outside R1..R8, if any."""
    for op in instr.operands:
        if op.kind == REGISTER and op.register_name not in REGISTER_NAMES:
            return op.register_name
    return None


def _all_registers(instr: Instruction) -> bool:
    return all(op.kind == REGISTER for op in instr.operands)


def execute_unknown(instr: Instruction, state: CpuState) -> tuple[CpuState, str]:
    """Anything unsupported: no effect beyond the ip increment."""
    return state, f"Unknown instruction: {instr.text}"


def execute_mov(instr: Mov, state: CpuState) -> tuple[CpuState, str]:
    """MOV Rd, n | MOV Rd, Rs | MOV [a], Rs | MOV Rd, [a]"""
    dest, src = instr.dest, instr.src
    kinds = (dest.kind, src.kind)

    if kinds == (REGISTER, IMMEDIATE):
        state = state.with_register(dest.register_name, src.value)
        return state, f"Moved value {src.value} into register {dest.register_name}"

    if kinds == (REGISTER, REGISTER):
        value = state.registers[src.register_name]
        state = state.with_register(dest.register_name, value)
        return state, (
            f"Copied value from register {src.register_name} ({value}) "
            f"to register {dest.register_name}"
        )

    if kinds == (MEMORY, REGISTER):
        value = state.registers[src.register_name]
        state = state.with_memory(dest.value, value)
        logger.debug("Memory updated: address %d = %d", dest.value, value)
        return state, (
            f"Stored value from register {src.register_name} ({value}) "
            f"to memory address {dest.value}"
        )

    if kinds == (REGISTER, MEMORY):
        value = state.read_memory(src.value)
        state = state.with_register(dest.register_name, value)
        return state, (
            f"Loaded value from memory address {src.value} ({value}) "
            f"to register {dest.register_name}"
        )

    return execute_unknown(instr, state)


def _arithmetic(
    instr: ArithmeticInstruction,
    state: CpuState,
    compute: Callable[[int, int], int],
    template: str,
) -> tuple[CpuState, str]:
    if not _all_registers(instr):
        return execute_unknown(instr, state)
    dest, src1, src2 = (op.register_name for op in instr.operands)
    a = state.registers[src1]
    b = state.registers[src2]
    result = compute(a, b)
    state = state.with_register(dest, result).with_flags(Flags.from_result(result))
    description = template.format(dest=dest, src1=src1, src2=src2, a=a, b=b, result=result)
    return state, description


def execute_add(instr: ArithmeticInstruction, state: CpuState) -> tuple[CpuState, str]:
    """ADD Rd, Rs1, Rs2: Rd := Rs1 + Rs2"""
    return _arithmetic(
        instr, state, lambda a, b: a + b,
        "Added {src1} ({a}) and {src2} ({b}), stored result {result} in {dest}",
    )


def execute_sub(instr: ArithmeticInstruction, state: CpuState) -> tuple[CpuState, str]:
    """SUB Rd, Rs1, Rs2: Rd := Rs1 - Rs2"""
    return _arithmetic(
        instr, state, lambda a, b: a - b,
        "Subtracted {src2} ({b}) from {src1} ({a}), stored result {result} in {dest}",
    )


def execute_mul(instr: ArithmeticInstruction, state: CpuState) -> tuple[CpuState, str]:
    """MUL Rd, Rs1, Rs2: Rd := Rs1 * Rs2"""
    return _arithmetic(
        instr, state, lambda a, b: a * b,
        "Multiplied {src1} ({a}) by {src2} ({b}), stored result {result} in {dest}",
    )


def execute_div(instr: ArithmeticInstruction, state: CpuState) -> tuple[CpuState, str]:
    """DIV Rd, Rs1, Rs2: Rd := floor(Rs1 / Rs2); a zero divisor changes nothing."""
    if not _all_registers(instr):
        return execute_unknown(instr, state)
    src1 = instr.src1.register_name
    src2 = instr.src2.register_name
    if state.registers[src2] == 0:
        logger.debug("Division by zero in %s", instr.text)
        return state, (
            f"Division by zero error: cannot divide {src1} "
            f"({state.registers[src1]}) by {src2} (0)"
        )
    return _arithmetic(
        instr, state, lambda a, b: a // b,
        "Divided {src1} ({a}) by {src2} ({b}), stored result {result} in {dest}",
    )


def execute_cmp(instr: Cmp, state: CpuState) -> tuple[CpuState, str]:
    """CMP Ra, Rb: flags from Ra - Rb"""
    if not _all_registers(instr):
        return execute_unknown(instr, state)
    reg_a = instr.a.register_name
    reg_b = instr.b.register_name
    a = state.registers[reg_a]
    b = state.registers[reg_b]
    flags = Flags.from_result(a - b)
    state = state.with_flags(flags)
    return state, (
        f"Compared {reg_a} ({a}) with {reg_b} ({b}), "
        f"set flags: Z={int(flags.zero)}, N={int(flags.negative)}"
    )


def execute_jmp(instr: JumpInstruction, state: CpuState) -> tuple[CpuState, str]:
    """JMP n: ip := n"""
    return state.with_ip(instr.target), f"Jumped to instruction at address {instr.target}"


def execute_jz(instr: JumpInstruction, state: CpuState) -> tuple[CpuState, str]:
    """JZ n: if zero flag, ip := n"""
    if state.flags.zero:
        return state.with_ip(instr.target), (
            f"Zero flag was set, jumped to instruction at address {instr.target}"
        )
    return state, "Zero flag was not set, continued execution"


def execute_jnz(instr: JumpInstruction, state: CpuState) -> tuple[CpuState, str]:
    """JNZ n: if not zero flag, ip := n"""
    if not state.flags.zero:
        return state.with_ip(instr.target), (
            f"Zero flag was not set, jumped to instruction at address {instr.target}"
        )
    return state, "Zero flag was set, continued execution"


# Instruction dispatch table
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "MOV": execute_mov,
    "ADD": execute_add,
    "SUB": execute_sub,
    "MUL": execute_mul,
    "DIV": execute_div,
    "CMP": execute_cmp,
    "JMP": execute_jmp,
    "JZ": execute_jz,
    "JNZ": execute_jnz,
}


def execute(state: CpuState, instruction: Union[Instruction, str]) -> ExecutionResult:
    """Execute a single instruction against ``state``.

    The instruction pointer is incremented first; taken jumps then overwrite
    it. ``state`` itself is left untouched.

    Args:
        state: Current CPU state
        instruction: Parsed instruction or its normalized text

    Returns:
        ExecutionResult with the new state and a description
    """
    if isinstance(instruction, str):
        instr = parse_instruction(instruction)
    else:
        instr = instruction

    new_state = state.with_ip(state.ip + 1)

    if isinstance(instruction, str) and isinstance(instr, Unknown):
        return ExecutionResult(new_state, f"Unknown instruction: {instruction.strip()}")

    bad_register = _invalid_register(instr)
    if bad_register is not None:
        return ExecutionResult(
            new_state, f"Unknown register {bad_register} in instruction: {instr.text}"
        )

    executor = INSTRUCTION_EXECUTORS.get(instr.opcode, execute_unknown)
    new_state, description = executor(instr, new_state)
    return ExecutionResult(new_state, description)
