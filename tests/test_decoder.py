"""Tests for the instruction table and decoder."""

import pytest
from chip8.decoder import (
    INSTRUCTIONS,
    INSTRUCTIONS_BY_ID,
    VALID_IDS,
    decode,
    arguments_of,
    encode,
    disassemble,
)
from chip8.errors import DecodeError


def _sample_args(instr):
    # Distinct non-zero values per field
    values = {"x": 0xA, "y": 0x5, "n": 0x7, "nnn": 0x3BC, "kk": 0xD4}
    return {rule.name: values[rule.name] for rule in instr.arguments}


class TestDecode:
    """Decoding tests."""

    def test_decode_cls(self):
        assert decode(0x00E0).id == "CLS"

    def test_decode_ret(self):
        assert decode(0x00EE).id == "RET"

    def test_decode_ld_vx_kk(self):
        instr = decode(0x62BE)
        assert instr.id == "LD_VX_KK"
        assert arguments_of(0x62BE, instr) == {"x": 2, "kk": 0xBE}

    def test_decode_drw(self):
        instr = decode(0xD01F)
        assert instr.id == "DRW_VX_VY_N"
        assert arguments_of(0xD01F, instr) == {"x": 0, "y": 1, "n": 0xF}

    def test_decode_arithmetic_family(self):
        """The 8xyN family is selected on the low nibble."""
        assert decode(0x8120).id == "LD_VX_VY"
        assert decode(0x8124).id == "ADD_VX_VY"
        assert decode(0x8125).id == "SUB_VX_VY"
        assert decode(0x8127).id == "SUBN_VX_VY"
        assert decode(0x812E).id == "SHL_VX_VY"

    def test_decode_invalid(self):
        """0xFFFF matches nothing."""
        with pytest.raises(DecodeError) as exc:
            decode(0xFFFF)
        assert exc.value.opcode == 0xFFFF

    @pytest.mark.parametrize("opcode", [0x5121, 0x8128, 0x9121, 0xF0FF, 0xE09E, 0x0123])
    def test_decode_unknown_variants(self, opcode):
        with pytest.raises(DecodeError):
            decode(opcode)

    def test_table_unambiguous(self):
        """No definition's pattern is also matched by another definition."""
        for instr in INSTRUCTIONS:
            opcode = encode(instr, **_sample_args(instr))
            matching = [other.id for other in INSTRUCTIONS if other.matches(opcode)]
            assert matching == [instr.id]

    def test_ids_unique(self):
        assert len(VALID_IDS) == len(INSTRUCTIONS)


class TestEncode:
    """Encoding tests."""

    @pytest.mark.parametrize("instr", INSTRUCTIONS, ids=lambda instr: instr.id)
    def test_round_trip(self, instr):
        """Decoding an encoded opcode recovers the id and arguments."""
        args = _sample_args(instr)
        opcode = encode(instr, **args)
        decoded = decode(opcode)
        assert decoded.id == instr.id
        assert arguments_of(opcode, decoded) == args

    def test_round_trip_every_opcode(self):
        """Every decodable opcode re-encodes from its own arguments."""
        decoded = 0
        for opcode in range(0x10000):
            try:
                instr = decode(opcode)
            except DecodeError:
                continue
            decoded += 1
            assert encode(instr, **arguments_of(opcode, instr)) == opcode, f"{opcode:04x}"
        assert decoded > 0

    def test_encode_missing_argument(self):
        with pytest.raises(ValueError):
            encode(INSTRUCTIONS_BY_ID["LD_VX_KK"], x=1)

    def test_encode_out_of_range(self):
        with pytest.raises(ValueError):
            encode(INSTRUCTIONS_BY_ID["LD_VX_KK"], x=16, kk=0)

    def test_encode_unexpected_argument(self):
        with pytest.raises(ValueError):
            encode(INSTRUCTIONS_BY_ID["CLS"], x=1)


class TestDisassemble:
    """Mnemonic formatting tests."""

    def test_no_arguments(self):
        assert disassemble(0x00E0) == "CLS"

    def test_address(self):
        assert disassemble(0xA22A) == "LD I, 0x22A"

    def test_register_and_byte(self):
        assert disassemble(0x6C0C) == "LD VC, 0x0C"

    def test_draw(self):
        assert disassemble(0xD01F) == "DRW V0, V1, 0xF"

    def test_with_definition(self):
        instr = INSTRUCTIONS_BY_ID["ADD_I_VX"]
        assert disassemble(0xF31E, instr) == "ADD I, V3"

    def test_invalid(self):
        with pytest.raises(DecodeError):
            disassemble(0xFFFF)
