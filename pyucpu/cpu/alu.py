"""Four-function 8-bit ALU."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class AluOp(IntEnum):
    """Operation selected by the low two opcode bits."""

    AND = 0b00
    XOR = 0b01
    ADD = 0b10
    SUB = 0b11


@dataclass(frozen=True)
class AluResult:
    value: int
    carry: bool

    @property
    def zero(self) -> bool:
        return self.value == 0


def alu(op: AluOp, a: int, b: int) -> AluResult:
    """Combine accumulator ``a`` with operand ``b``.

    AND and XOR force the carry low, ADD reports the carry out of bit 7 and
    SUB reports a borrow as carry.
    """

    a &= 0xFF
    b &= 0xFF
    if op == AluOp.AND:
        return AluResult(a & b, False)
    if op == AluOp.XOR:
        return AluResult(a ^ b, False)
    if op == AluOp.ADD:
        total = a + b
        return AluResult(total & 0xFF, total > 0xFF)
    return AluResult((a - b) & 0xFF, a < b)
