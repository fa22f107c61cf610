"""Exceptions for the session layer of the CPU simulator.

The assembler and interpreter never raise for program content; these are
used by the stepping loop and by state deserialization only.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    step: int
    ip: int
    instruction: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "step": self.step,
            "ip": self.ip,
            "instruction": self.instruction,
        }


class CPUSimError(Exception):
    """Base exception for all simulator errors."""

    def __init__(
        self,
        message: str,
        step: int = 0,
        ip: int = 0,
        instruction: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.ip = ip
        self.instruction = instruction

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            step=self.step,
            ip=self.ip,
            instruction=self.instruction,
        )


class StepLimitExceeded(CPUSimError):
    """Maximum step count exceeded."""
    pass


class InvalidState(CPUSimError):
    """CPU state payload could not be converted."""
    pass
