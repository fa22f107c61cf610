"""16-bit display encoding of parsed instructions.

The encoding is one-way and lossy: every field keeps only the low-order bits
that fit its width, and words are never decoded back into instructions.

Layouts (most significant bit first)::

    MOV          opcode(4) dest(3) kind(1) payload(8)
    ADD/SUB/...  opcode(4) 000 dest(3) src1(3) src2(3)
    CMP          opcode(4) 000000 a(3) b(3)
    JMP/JZ/JNZ   opcode(4) target(12)
"""

from .parser import (
    ArithmeticInstruction,
    Cmp,
    Instruction,
    JumpInstruction,
    Mov,
    MEMORY,
    REGISTER,
    IMMEDIATE,
)


WORD_BITS = 16
OPCODE_BITS = 4

OPCODES: dict[str, str] = {
    "MOV": "0001",
    "ADD": "0010",
    "SUB": "0011",
    "MUL": "0100",
    "DIV": "0101",
    "CMP": "0110",
    "JMP": "0111",
    "JZ": "1000",
    "JNZ": "1001",
}
UNKNOWN_OPCODE = "0000"

# MOV destination field when the destination is a memory address
MEMORY_DEST_MARKER = "000"


def bits(value: int, width: int) -> str:
    """Render the low ``width`` bits of ``value`` as a binary string."""
    return format(value & ((1 << width) - 1), f"0{width}b")


def _encode_mov(instr: Mov) -> str:
    dest, src = instr.dest, instr.src
    if dest.kind == MEMORY:
        # Source is always a register here
        return MEMORY_DEST_MARKER + "0" + bits(src.value, 3) + bits(dest.value, 5)

    dest_field = bits(dest.value, 3)
    if src.kind == REGISTER:
        return dest_field + "0" + bits(src.value, 3) + "00000"
    if src.kind == IMMEDIATE:
        return dest_field + "1" + "00" + bits(src.value, 6)
    return dest_field + "1" + bits(src.value, 8)


def _encode_fields(instr: Instruction) -> str:
    payload_bits = WORD_BITS - OPCODE_BITS
    if isinstance(instr, Mov):
        return _encode_mov(instr)
    if isinstance(instr, (ArithmeticInstruction, Cmp)):
        registers = "".join(bits(op.value, 3) for op in instr.operands)
        return registers.rjust(payload_bits, "0")
    if isinstance(instr, JumpInstruction):
        return bits(instr.target, payload_bits)
    return "0" * payload_bits


def encode(instr: Instruction) -> str:
    """Encode an instruction as a 16-character string of 0/1."""
    opcode = OPCODES.get(instr.opcode, UNKNOWN_OPCODE)
    if opcode == UNKNOWN_OPCODE:
        return "0" * WORD_BITS
    return opcode + _encode_fields(instr)
