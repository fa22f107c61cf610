"""Tests for the binary encoder."""

import pytest
from cpusim.encoder import encode, bits, OPCODES
from cpusim.parser import parse_line, Unknown


class TestBits:
    """Field rendering tests."""

    def test_zero_padded(self):
        assert bits(5, 3) == "101"
        assert bits(1, 6) == "000001"

    def test_truncates_high_bits(self):
        """Values wider than the field keep their low-order bits."""
        assert bits(8, 3) == "000"
        assert bits(70, 6) == "000110"


class TestEncoder:
    """Encoder tests."""

    @pytest.mark.parametrize("line,word", [
        ("MOV R1, 10", "0001" "001" "1" "00001010"),
        ("MOV R2, R1", "0001" "010" "0" "001" "00000"),
        ("MOV [100], R3", "0001" "000" "0" "011" "00100"),
        ("MOV R7, [100]", "0001" "111" "1" "01100100"),
        ("ADD R3, R1, R2", "0010" "000" "011" "001" "010"),
        ("SUB R4, R1, R2", "0011" "000" "100" "001" "010"),
        ("MUL R5, R1, R2", "0100" "000" "101" "001" "010"),
        ("DIV R6, R1, R2", "0101" "000" "110" "001" "010"),
        ("CMP R1, R2", "0110" "000000" "001" "010"),
        ("JMP 0", "0111" "000000000000"),
        ("JZ 12", "1000" "000000001100"),
        ("JNZ 3", "1001" "000000000011"),
    ])
    def test_layout(self, line, word):
        """Each instruction shape has a fixed layout."""
        assert encode(parse_line(line)) == word

    def test_unknown_is_zero(self):
        """Unknown instructions encode as all zeros."""
        assert encode(Unknown("HLT")) == "0" * 16

    @pytest.mark.parametrize("line,word", [
        ("MOV R1, 70", "0001" "001" "1" "00" "000110"),
        ("JMP 4097", "0111" "000000000001"),
        ("ADD R8, R1, R9", "0010" "000" "000" "001" "001"),
        ("MOV R1, [300]", "0001" "001" "1" "00101100"),
    ])
    def test_truncation(self, line, word):
        """Oversized fields are silently truncated."""
        assert encode(parse_line(line)) == word

    @pytest.mark.parametrize("line", [
        "MOV R1, 65535",
        "MOV [99999], R8",
        "ADD R1, [4000], 77",
        "CMP 1, 2",
        "JNZ 123456",
        "what is this",
    ])
    def test_always_sixteen_bits(self, line):
        """Every word is sixteen 0/1 characters."""
        word = encode(parse_line(line))
        assert len(word) == 16
        assert set(word) <= {"0", "1"}

    def test_opcode_prefix(self):
        """Words start with the opcode from the table."""
        for keyword, opcode in OPCODES.items():
            line = {
                "MOV": "MOV R1, R2",
                "CMP": "CMP R1, R2",
                "JMP": "JMP 1",
                "JZ": "JZ 1",
                "JNZ": "JNZ 1",
            }.get(keyword, f"{keyword} R1, R2, R3")
            assert encode(parse_line(line)).startswith(opcode)

    def test_immediate_and_memory_source_share_word(self):
        """A one-bit source kind cannot separate immediate from memory."""
        assert encode(parse_line("MOV R1, 10")) == encode(parse_line("MOV R1, [10]"))
