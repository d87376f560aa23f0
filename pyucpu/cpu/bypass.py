"""Execute-stage writeback values and the forwarding paths that observe them.

The execute stage computes what it is about to commit before anything is
committed. Decode reads those pending values through the muxes below, so a
branch right after a flag producer, or a store to ``%IX``/``%IY`` right after
an accumulator write, needs no stall.
"""

from __future__ import annotations

from dataclasses import dataclass

from .alu import alu
from .decoder import ControlWord


@dataclass(frozen=True)
class Writeback:
    """Values the execute stage commits at the next clock edge."""

    value: int
    carry: bool
    zero: bool
    acc_write: bool = False
    cf_write: bool = False
    zf_write: bool = False

    def accumulator(self, registered: int) -> int:
        return self.value if self.acc_write else registered

    def carry_flag(self, registered: bool) -> bool:
        return self.carry if self.cf_write else registered

    def zero_flag(self, registered: bool) -> bool:
        return self.zero if self.zf_write else registered


def execute(control: ControlWord, acc: int, immediate: int, data: int, *, enabled: bool = True) -> Writeback:
    """Run the execute stage for ``control``.

    ``immediate`` is the latched operand field and ``data`` the byte read at
    the executive address; the immediate flag picks between them. With
    ``enabled`` false every write enable is dropped.
    """

    operand = immediate if control.immediate else data
    result = alu(control.alu_op, acc, operand)
    return Writeback(
        value=operand & 0xFF if control.load else result.value,
        carry=result.carry,
        zero=result.zero,
        acc_write=enabled and control.acc_write,
        cf_write=enabled and control.cf_write,
        zf_write=enabled and control.zf_write,
    )
