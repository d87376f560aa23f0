"""Tests for instruction decoding and control word derivation."""

from __future__ import annotations

import pytest

from pyucpu.cpu.alu import AluOp
from pyucpu.cpu.decoder import (
    DEFAULT_INSTRUCTIONS,
    INSTRUCTION_TABLE,
    MNEMONIC_TABLE,
    NOP_CONTROL,
    Condition,
    ControlWord,
    Instruction,
    InstructionTable,
    Opcode,
    OperandKind,
    build_instruction_table,
    decode,
    disassemble,
    operand_field,
)


def test_table_covers_all_sixteen_codes() -> None:
    assert len(INSTRUCTION_TABLE) == 16
    assert [instruction.code for instruction in INSTRUCTION_TABLE] == list(range(16))
    assert MNEMONIC_TABLE["LDI"].code == 0xD


def test_decode_splits_word_fields() -> None:
    instruction = decode(0xD05)

    assert instruction.mnemonic == "LDI"
    assert instruction.opcode is Opcode.LOAD
    assert instruction.immediate
    assert operand_field(0xD05) == 0x05


def test_accumulator_ops_write_zero_flag() -> None:
    for mnemonic in ("ANA", "ANI", "XRA", "XRI", "ADA", "ADI", "SBA", "SBI"):
        assert MNEMONIC_TABLE[mnemonic].control.zf_write, mnemonic


def test_only_add_and_subtract_write_carry() -> None:
    writers = {instruction.mnemonic for instruction in INSTRUCTION_TABLE if instruction.control.cf_write}
    assert writers == {"ADA", "ADI", "SBA", "SBI"}


def test_accumulator_write_enables() -> None:
    writers = {instruction.mnemonic for instruction in INSTRUCTION_TABLE if instruction.control.acc_write}
    assert writers == {"ANA", "ANI", "XRA", "XRI", "ADA", "ADI", "SBA", "LDA", "LDI"}


def test_control_word_for_register_add() -> None:
    assert MNEMONIC_TABLE["ADA"].control == ControlWord(
        alu_op=AluOp.ADD,
        immediate=False,
        acc_write=True,
        zf_write=True,
        cf_write=True,
    )


def test_compare_is_subtract_without_accumulator_write() -> None:
    compare = MNEMONIC_TABLE["SBI"].control

    assert compare.alu_op is AluOp.SUB
    assert compare.immediate
    assert not compare.acc_write


def test_memory_and_jump_control_bits() -> None:
    assert MNEMONIC_TABLE["LDA"].control.load
    assert MNEMONIC_TABLE["STA"].control.store
    assert not MNEMONIC_TABLE["STA"].control.acc_write
    assert MNEMONIC_TABLE["JPR"].control.register_jump
    assert not MNEMONIC_TABLE["JMP"].control.register_jump


def test_redirect_conditions() -> None:
    assert MNEMONIC_TABLE["BNC"].condition is Condition.CARRY_CLEAR
    assert MNEMONIC_TABLE["BNZ"].condition is Condition.ZERO_CLEAR
    assert MNEMONIC_TABLE["JMP"].condition is Condition.ALWAYS
    assert MNEMONIC_TABLE["JPR"].condition is Condition.NEVER


def test_reserved_store_is_nop() -> None:
    reserved = decode(0xF30)

    assert reserved.mnemonic == "STX"
    assert reserved.reserved
    assert reserved.control == NOP_CONTROL
    assert not reserved.uses_index_registers


def test_index_modes_apply_to_register_operands_only() -> None:
    assert MNEMONIC_TABLE["STA"].uses_index_registers
    assert MNEMONIC_TABLE["JPR"].uses_index_registers
    assert not MNEMONIC_TABLE["LDI"].uses_index_registers
    assert not MNEMONIC_TABLE["BNC"].uses_index_registers


@pytest.mark.parametrize(
    ("word", "text"),
    [
        (0xD05, "LDI 05"),
        (0x410, "ADA %10"),
        (0xEFC, "STA @IX+"),
        (0xCF9, "LDA %IY"),
        (0xAFF, "JPR @-IY"),
        (0x8FE, "BNC FE"),
        (0xB04, "JMP 04"),
    ],
)
def test_disassemble(word: int, text: str) -> None:
    assert disassemble(word) == text


def test_encode_masks_operand() -> None:
    assert MNEMONIC_TABLE["STA"].encode(0x1FC) == 0xEFC


def test_duplicate_registration_rejected() -> None:
    table = InstructionTable()
    table.register(Instruction(0x0, "ANA", OperandKind.REGISTER))

    with pytest.raises(ValueError):
        table.register(Instruction(0x0, "AND", OperandKind.REGISTER))


def test_incomplete_table_rejected() -> None:
    with pytest.raises(ValueError):
        build_instruction_table(DEFAULT_INSTRUCTIONS[:-1])


def test_instruction_validates_code() -> None:
    with pytest.raises(ValueError):
        Instruction(0x10, "BAD", OperandKind.IMMEDIATE)
