"""Tests for the CPU state module."""

import pytest
from cpusim.state import CpuState, Flags, REGISTER_NAMES
from cpusim.errors import InvalidState


class TestCpuState:
    """CPU state tests."""

    def test_default_initialization(self):
        """Initial state is all zero."""
        state = CpuState.initial()
        assert dict(state.registers) == {name: 0 for name in REGISTER_NAMES}
        assert dict(state.memory) == {}
        assert state.ip == 0
        assert state.flags == Flags(zero=False, negative=False)

    def test_registers_always_complete(self):
        """Partial register maps are filled up to eight entries."""
        state = CpuState(registers={"R3": 7})
        assert len(state.registers) == 8
        assert state.registers["R3"] == 7
        assert state.registers["R8"] == 0

    def test_unknown_register_rejected(self):
        """Registers outside R1..R8 cannot be created."""
        with pytest.raises(InvalidState):
            CpuState(registers={"R9": 1})

    def test_negative_address_rejected(self):
        """Memory addresses are non-negative."""
        with pytest.raises(InvalidState):
            CpuState(memory={-1: 5})

    def test_read_absent_memory(self):
        """Unwritten memory reads as zero."""
        state = CpuState(memory={100: 15})
        assert state.read_memory(100) == 15
        assert state.read_memory(101) == 0

    def test_with_register_returns_new_state(self):
        """Updating a register leaves the original untouched."""
        state = CpuState.initial()
        updated = state.with_register("R1", 42)
        assert updated.registers["R1"] == 42
        assert state.registers["R1"] == 0

    def test_with_memory_returns_new_state(self):
        """Writing memory leaves the original untouched."""
        state = CpuState.initial()
        updated = state.with_memory(100, 15)
        assert updated.memory == {100: 15}
        assert state.memory == {}

    def test_mappings_are_read_only(self):
        """Registers and memory cannot be mutated in place."""
        state = CpuState.initial()
        with pytest.raises(TypeError):
            state.registers["R1"] = 1
        with pytest.raises(TypeError):
            state.memory[0] = 1

    def test_to_dict(self):
        """to_dict uses string memory keys."""
        state = CpuState(registers={"R1": 10}, memory={100: 15}, ip=3, flags=Flags(zero=True))
        data = state.to_dict()
        assert data["registers"]["R1"] == 10
        assert data["memory"] == {"100": 15}
        assert data["ip"] == 3
        assert data["flags"] == {"zero": True, "negative": False}

    def test_from_dict(self):
        """from_dict accepts the to_dict shape."""
        state = CpuState.from_dict({
            "registers": {"R2": -4},
            "memory": {"7": 9},
            "ip": 2,
            "flags": {"negative": True},
        })
        assert state.registers["R2"] == -4
        assert state.read_memory(7) == 9
        assert state.ip == 2
        assert state.flags.negative is True
        assert state.flags.zero is False

    def test_from_dict_invalid_address(self):
        """Non-numeric memory keys are rejected."""
        with pytest.raises(InvalidState):
            CpuState.from_dict({"memory": {"abc": 1}})

    def test_equality(self):
        """States compare by value."""
        assert CpuState(registers={"R1": 1}) == CpuState.initial().with_register("R1", 1)


class TestFlags:
    """Flags tests."""

    @pytest.mark.parametrize("result,zero,negative", [
        (0, True, False),
        (5, False, False),
        (-3, False, True),
    ])
    def test_from_result(self, result, zero, negative):
        """Flags derive from a result value."""
        flags = Flags.from_result(result)
        assert flags.zero is zero
        assert flags.negative is negative
