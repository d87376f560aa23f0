"""Bubble controller resolving control hazards.

The pipeline fetches one instruction per cycle without knowing whether the
instruction ahead of it redirects the program counter. Wrong-path
instructions are turned into bubbles by suppressing the commits of the stage
holding them:

* an immediate jump or taken branch is resolved in decode, so only the single
  instruction fetched behind it has to be dropped (``SKIP_STAGE2_ONLY``);
* a register-indirect jump learns its target from the data memory read in
  execute, by which time two wrong-path instructions are in flight. The
  younger one is dropped in decode while the jump executes, then both are
  walked out through ``SKIP_BOTH_NEXT`` and ``SKIP_STAGE3_ONLY``.

The program counter itself is never suppressed.
"""

from __future__ import annotations

from enum import Enum


class SkipState(Enum):
    """Two-bit bubble state register."""

    NO_SKIP = 0b00
    SKIP_BOTH_NEXT = 0b01
    SKIP_STAGE3_ONLY = 0b10
    # Transient one-cycle skip behind an immediate jump or taken branch.
    SKIP_STAGE2_ONLY = 0b11

    @property
    def suppresses_decode(self) -> bool:
        return self in (SkipState.SKIP_STAGE2_ONLY, SkipState.SKIP_BOTH_NEXT)

    @property
    def suppresses_execute(self) -> bool:
        return self in (SkipState.SKIP_BOTH_NEXT, SkipState.SKIP_STAGE3_ONLY)


def next_skip_state(state: SkipState, *, register_jump: bool, jump_taken: bool) -> SkipState:
    """Advance the bubble state by one cycle.

    ``register_jump`` and ``jump_taken`` must already be gated by the
    suppression of the stage that produced them. A register-indirect jump
    wins over a branch taken in the same cycle.
    """

    if state is SkipState.SKIP_BOTH_NEXT:
        return SkipState.SKIP_STAGE3_ONLY
    if register_jump:
        return SkipState.SKIP_BOTH_NEXT
    if jump_taken:
        return SkipState.SKIP_STAGE2_ONLY
    return SkipState.NO_SKIP
