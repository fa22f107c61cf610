"""Program parser for the 8-register teaching assembly language."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, ClassVar, Optional


logger = logging.getLogger(__name__)

# Operand kinds
REGISTER = "register"
MEMORY = "memory"
IMMEDIATE = "immediate"

# Longest integer literal accepted; matches the interpreter default for int()
MAX_LITERAL_DIGITS = 4300

_DIGITS = rf"\d{{1,{MAX_LITERAL_DIGITS}}}"
_OPERAND = rf"([Rr]{_DIGITS}|\[{_DIGITS}\]|{_DIGITS})"
_SEP = r"\s*,\s*"
_UNKNOWN_MARKER_RE = re.compile(r"^UNKNOWN:\s*(.*)$")


@dataclass(frozen=True)
class Operand:
    """Classified instruction operand."""
    kind: str  # "register", "memory", "immediate"
    value: int  # Register number, address or literal

    @classmethod
    def parse(cls, token: str) -> "Operand":
        """Classify a token by its shape alone; values are not range-checked."""
        token = token.strip()
        if token[:1] in ("R", "r"):
            return cls(REGISTER, int(token[1:]))
        if token.startswith("[") and token.endswith("]"):
            return cls(MEMORY, int(token[1:-1]))
        return cls(IMMEDIATE, int(token))

    @property
    def register_name(self) -> str:
        return f"R{self.value}"

    def __str__(self) -> str:
        if self.kind == REGISTER:
            return self.register_name
        if self.kind == MEMORY:
            return f"[{self.value}]"
        return str(self.value)


@dataclass(frozen=True)
class Instruction:
    """Base for parsed instructions; ``text`` is the normalized form."""
    opcode: ClassVar[str] = ""

    @property
    def operands(self) -> tuple:
        return ()

    @property
    def text(self) -> str:
        operands = ", ".join(str(op) for op in self.operands)
        return f"{self.opcode} {operands}" if operands else self.opcode

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Mov(Instruction):
    opcode: ClassVar[str] = "MOV"
    dest: Operand
    src: Operand

    @property
    def operands(self) -> tuple:
        return (self.dest, self.src)


@dataclass(frozen=True)
class ArithmeticInstruction(Instruction):
    dest: Operand
    src1: Operand
    src2: Operand

    @property
    def operands(self) -> tuple:
        return (self.dest, self.src1, self.src2)


@dataclass(frozen=True)
class Add(ArithmeticInstruction):
    opcode: ClassVar[str] = "ADD"


@dataclass(frozen=True)
class Sub(ArithmeticInstruction):
    opcode: ClassVar[str] = "SUB"


@dataclass(frozen=True)
class Mul(ArithmeticInstruction):
    opcode: ClassVar[str] = "MUL"


@dataclass(frozen=True)
class Div(ArithmeticInstruction):
    opcode: ClassVar[str] = "DIV"


@dataclass(frozen=True)
class Cmp(Instruction):
    opcode: ClassVar[str] = "CMP"
    a: Operand
    b: Operand

    @property
    def operands(self) -> tuple:
        return (self.a, self.b)


@dataclass(frozen=True)
class JumpInstruction(Instruction):
    target: int  # Index into the instruction list

    @property
    def text(self) -> str:
        return f"{self.opcode} {self.target}"


@dataclass(frozen=True)
class Jmp(JumpInstruction):
    opcode: ClassVar[str] = "JMP"


@dataclass(frozen=True)
class Jz(JumpInstruction):
    opcode: ClassVar[str] = "JZ"


@dataclass(frozen=True)
class Jnz(JumpInstruction):
    opcode: ClassVar[str] = "JNZ"


@dataclass(frozen=True)
class Unknown(Instruction):
    """Placeholder for a line that matched no instruction shape."""
    opcode: ClassVar[str] = "UNKNOWN"
    source: str

    @property
    def text(self) -> str:
        return f"UNKNOWN: {self.source}"


@dataclass
class ParsedProgram:
    """Result of parsing a program."""
    instructions: list[Instruction]
    labels: dict[str, int]  # label -> line index


# Valid MOV (dest, src) operand kinds
MOV_COMBINATIONS = {
    (REGISTER, IMMEDIATE),
    (REGISTER, REGISTER),
    (MEMORY, REGISTER),
    (REGISTER, MEMORY),
}


def _shape(keyword: str, arity: int) -> re.Pattern:
    operands = _SEP.join([_OPERAND] * arity)
    return re.compile(rf"^{keyword}\s+{operands}$", re.IGNORECASE)


def _jump_shape(keyword: str) -> re.Pattern:
    return re.compile(rf"^{keyword}\s+({_DIGITS})$", re.IGNORECASE)


def _build_mov(dest: str, src: str) -> Optional[Instruction]:
    instr = Mov(Operand.parse(dest), Operand.parse(src))
    if (instr.dest.kind, instr.src.kind) not in MOV_COMBINATIONS:
        return None
    return instr


def _build_operands(cls: type) -> Callable[..., Instruction]:
    def build(*tokens: str) -> Instruction:
        return cls(*(Operand.parse(token) for token in tokens))
    return build


def _build_jump(cls: type) -> Callable[[str], Instruction]:
    def build(target: str) -> Instruction:
        return cls(int(target))
    return build


# Instruction shapes in match priority order
INSTRUCTION_SHAPES: list[tuple[re.Pattern, Callable[..., Optional[Instruction]]]] = [
    (_shape("MOV", 2), _build_mov),
    (_shape("ADD", 3), _build_operands(Add)),
    (_shape("SUB", 3), _build_operands(Sub)),
    (_shape("MUL", 3), _build_operands(Mul)),
    (_shape("DIV", 3), _build_operands(Div)),
    (_shape("CMP", 2), _build_operands(Cmp)),
    (_jump_shape("JMP"), _build_jump(Jmp)),
    (_jump_shape("JZ"), _build_jump(Jz)),
    (_jump_shape("JNZ"), _build_jump(Jnz)),
]


def parse_line(line: str) -> Optional[Instruction]:
    """Parse one source line.

    Returns:
        The matched instruction, ``Unknown`` when no shape matches, or None
        for a MOV whose operand combination is unsupported.
    """
    stripped = line.strip()
    for pattern, build in INSTRUCTION_SHAPES:
        match = pattern.match(stripped)
        if match:
            try:
                return build(*match.groups())
            except ValueError:
                # int() digit limit lowered below MAX_LITERAL_DIGITS
                return Unknown(stripped)
    return Unknown(stripped)


def parse_instruction(text: str) -> Instruction:
    """Parse a normalized instruction, including ``UNKNOWN:`` markers.

    Unlike ``parse_line`` this always yields an instruction; a dropped MOV
    comes back as ``Unknown``.
    """
    stripped = text.strip()
    marker = _UNKNOWN_MARKER_RE.match(stripped)
    if marker:
        return Unknown(marker.group(1))
    instr = parse_line(stripped)
    if instr is None:
        return Unknown(stripped)
    return instr


def parse_program(text: str) -> ParsedProgram:
    """Parse program text into an ordered instruction list.

    Args:
        text: Program source code

    Returns:
        ParsedProgram with instructions and labels
    """
    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]

    # First pass: collect labels
    labels: dict[str, int] = {}
    for index, line in enumerate(lines):
        if line.endswith(":"):
            labels[line[:-1]] = index

    # Second pass: parse instructions
    instructions: list[Instruction] = []
    for index, line in enumerate(lines):
        if line.endswith(":"):
            continue
        instr = parse_line(line)
        if instr is None:
            logger.debug("Dropped unsupported MOV operands at line %d: %s", index, line)
            continue
        instructions.append(instr)

    return ParsedProgram(instructions=instructions, labels=labels)
