"""CPU state model for the CPU simulator."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from .errors import InvalidState


REGISTER_NAMES = ("R1", "R2", "R3", "R4", "R5", "R6", "R7", "R8")


@dataclass(frozen=True)
class Flags:
    """Condition flags set by arithmetic and compare instructions."""
    zero: bool = False
    negative: bool = False

    @classmethod
    def from_result(cls, result: int) -> "Flags":
        return cls(zero=result == 0, negative=result < 0)

    def to_dict(self) -> dict:
        return {"zero": self.zero, "negative": self.negative}


@dataclass(frozen=True)
class CpuState:
    """Immutable snapshot of registers, memory, instruction pointer and flags.

    Every transition builds a new state through the ``with_*`` helpers, so a
    state handed to the interpreter is never changed by it. ``registers``
    always holds exactly the eight names in ``REGISTER_NAMES``; ``memory`` is
    sparse and absent addresses read as 0.
    """
    registers: Mapping[str, int] = field(default_factory=dict)
    memory: Mapping[int, int] = field(default_factory=dict)
    ip: int = 0
    flags: Flags = field(default_factory=Flags)

    def __post_init__(self):
        registers = dict.fromkeys(REGISTER_NAMES, 0)
        for name, value in self.registers.items():
            if name not in registers:
                raise InvalidState(f"Unknown register: {name}")
            registers[name] = int(value)

        memory: dict[int, int] = {}
        for addr, value in self.memory.items():
            addr = int(addr)
            if addr < 0:
                raise InvalidState(f"Negative memory address: {addr}")
            memory[addr] = int(value)

        if self.ip < 0:
            raise InvalidState(f"Negative instruction pointer: {self.ip}")

        object.__setattr__(self, "registers", MappingProxyType(registers))
        object.__setattr__(self, "memory", MappingProxyType(memory))

    @classmethod
    def initial(cls) -> "CpuState":
        """All registers zero, empty memory, ip 0, flags cleared."""
        return cls()

    def read_memory(self, addr: int) -> int:
        return self.memory.get(addr, 0)

    def with_register(self, name: str, value: int) -> "CpuState":
        registers = dict(self.registers)
        registers[name] = value
        return replace(self, registers=registers)

    def with_memory(self, addr: int, value: int) -> "CpuState":
        memory = dict(self.memory)
        memory[addr] = value
        return replace(self, memory=memory)

    def with_ip(self, ip: int) -> "CpuState":
        return replace(self, ip=ip)

    def with_flags(self, flags: Flags) -> "CpuState":
        return replace(self, flags=flags)

    def to_dict(self) -> dict:
        """JSON-friendly dict; memory keys become strings."""
        return {
            "registers": dict(self.registers),
            "memory": {str(addr): value for addr, value in sorted(self.memory.items())},
            "ip": self.ip,
            "flags": self.flags.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CpuState":
        """Build a state from the shape produced by ``to_dict``.

        Missing keys fall back to the initial state values.
        """
        try:
            flags = data.get("flags") or {}
            return cls(
                registers=data.get("registers") or {},
                memory={int(addr): value for addr, value in (data.get("memory") or {}).items()},
                ip=int(data.get("ip", 0)),
                flags=Flags(
                    zero=bool(flags.get("zero", False)),
                    negative=bool(flags.get("negative", False)),
                ),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise InvalidState(f"Invalid CPU state: {e}") from e
