"""Assembler: source text to normalized instructions and binary words."""

from dataclasses import dataclass

from .encoder import encode
from .parser import Instruction, parse_program


@dataclass
class AssembledProgram:
    """Assembly output; ``instructions`` and ``binary_words`` are parallel."""
    instructions: list[Instruction]
    binary_words: list[str]
    labels: dict[str, int]

    @property
    def texts(self) -> list[str]:
        """Normalized instruction strings."""
        return [instr.text for instr in self.instructions]

    def __len__(self) -> int:
        return len(self.instructions)

    def to_dict(self) -> dict:
        return {
            "instructions": self.texts,
            "binary": list(self.binary_words),
            "labels": dict(self.labels),
        }


def assemble(source: str) -> AssembledProgram:
    """Assemble program text.

    Unrecognized lines become ``UNKNOWN:`` placeholders and MOV lines with an
    unsupported operand pair are dropped; nothing here raises.
    """
    program = parse_program(source)
    return AssembledProgram(
        instructions=program.instructions,
        binary_words=[encode(instr) for instr in program.instructions],
        labels=program.labels,
    )
