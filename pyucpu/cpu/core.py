"""Three-stage pipelined uCPU core.

Each clock edge advances Fetch, Decode+Address and Execute+Writeback at
once. ``tick`` computes every next-state value from the pre-tick
``CoreState`` alone and returns a fresh state; the execute stage's data
memory write is handed back as well, so a write is only visible to reads of
the following cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pyucpu.bus import ADDRESS_SPACE, DataMemory, InstructionMemory
from pyucpu.utils import TraceRecorder, debug_enabled, debug_log

from .addressing import IndexRegisters, resolve, store_index
from .bubble import SkipState, next_skip_state
from .bypass import Writeback, execute
from .decoder import NOP_CONTROL, Condition, ControlWord, Instruction, decode, disassemble, operand_field

RESET_INSTRUCTION = 0xB00  # JMP 00


class CPUError(Exception):
    """Base error for core failures."""


@dataclass(frozen=True)
class CoreState:
    """Architectural registers; the defaults are the reset values."""

    pc: int = 0x00
    ir: int = RESET_INSTRUCTION
    operand: int = 0x00  # ID latch
    ix: int = 0x00
    iy: int = 0x00
    ea: int = 0x00
    acc: int = 0x00
    cf: bool = False
    zf: bool = False
    control: ControlWord = NOP_CONTROL
    skip: SkipState = SkipState.NO_SKIP

    @property
    def index_registers(self) -> IndexRegisters:
        return IndexRegisters(self.ix, self.iy)


@dataclass(frozen=True)
class MemoryWrite:
    address: int
    value: int


@dataclass(frozen=True)
class TickResult:
    """Outcome of one clock edge."""

    state: CoreState
    write: MemoryWrite | None
    instruction: Instruction
    decode_suppressed: bool
    execute_suppressed: bool
    register_jump: bool
    jump_taken: bool


def _redirects(condition: Condition, writeback: Writeback, state: CoreState) -> bool:
    if condition is Condition.ALWAYS:
        return True
    if condition is Condition.CARRY_CLEAR:
        return not writeback.carry_flag(state.cf)
    if condition is Condition.ZERO_CLEAR:
        return not writeback.zero_flag(state.zf)
    return False


def tick(state: CoreState, rom: InstructionMemory, ram: DataMemory) -> TickResult:
    """Compute the state after one clock edge.

    Neither memory is modified. The caller commits ``TickResult.write`` to
    ``ram`` and swaps in ``TickResult.state``.
    """

    # Execute + writeback
    control = state.control
    execute_suppressed = state.skip.suppresses_execute
    data = ram.load8(state.ea)
    writeback = execute(control, state.acc, state.operand, data, enabled=not execute_suppressed)
    write = None
    if control.store and not execute_suppressed:
        write = MemoryWrite(state.ea, state.acc)
    register_jump = control.register_jump and not execute_suppressed

    # Decode + address; a register jump in execute squashes the instruction behind it
    instruction = decode(state.ir)
    operand = operand_field(state.ir)
    decode_suppressed = state.skip.suppresses_decode or register_jump
    registers = state.index_registers
    ea = operand
    next_control = NOP_CONTROL
    jump_taken = False
    if not decode_suppressed:
        next_control = instruction.control
        if instruction.uses_index_registers:
            resolution = resolve(operand, registers)
            ea = resolution.address
            registers = resolution.registers
            if next_control.store:
                registers = store_index(operand, writeback.accumulator(state.acc), registers)
        jump_taken = _redirects(instruction.condition, writeback, state)

    # Fetch
    if register_jump:
        next_pc = data
    elif jump_taken:
        next_pc = operand
    else:
        next_pc = (state.pc + 1) & 0xFF

    next_state = CoreState(
        pc=next_pc,
        ir=rom.load12(state.pc),
        operand=operand,
        ix=registers.ix,
        iy=registers.iy,
        ea=ea,
        acc=writeback.accumulator(state.acc),
        cf=writeback.carry_flag(state.cf),
        zf=writeback.zero_flag(state.zf),
        control=next_control,
        skip=next_skip_state(state.skip, register_jump=register_jump, jump_taken=jump_taken),
    )
    return TickResult(
        state=next_state,
        write=write,
        instruction=instruction,
        decode_suppressed=decode_suppressed,
        execute_suppressed=execute_suppressed,
        register_jump=register_jump,
        jump_taken=jump_taken,
    )


@dataclass
class UCPU:
    """Clocked uCPU attached to its instruction and data memories."""

    rom: InstructionMemory
    ram: DataMemory
    trace: TraceRecorder | None = None

    state: CoreState = field(default_factory=CoreState)
    cycle_count: int = 0

    def __post_init__(self) -> None:
        if self.rom.length != ADDRESS_SPACE or self.ram.length != ADDRESS_SPACE:
            raise CPUError("the core addresses 256 instruction words and 256 data bytes")

    def reset(self) -> None:
        """Drive the reset line: registers cleared, ``JMP 00`` in the pipeline."""

        self.state = CoreState()
        self.cycle_count = 0
        if debug_enabled("cpu"):
            debug_log("cpu", "reset")

    def step(self) -> TickResult:
        """Advance the pipeline by one clock edge."""

        before = self.state
        result = tick(before, self.rom, self.ram)
        if result.write is not None:
            self.ram.store8(result.write.address, result.write.value)
        self.state = result.state

        if self.trace is not None:
            write = None if result.write is None else (result.write.address, result.write.value)
            self.trace.record_cycle(
                self.cycle_count,
                before,
                mnemonic=disassemble(before.ir),
                decode_suppressed=result.decode_suppressed,
                execute_suppressed=result.execute_suppressed,
                write=write,
                note="jpr" if result.register_jump else ("jump" if result.jump_taken else ""),
            )
        if debug_enabled("cpu"):
            debug_log(
                "cpu",
                "cycle=%d pc=%02x ir=%03x %s acc=%02x cf=%d zf=%d",
                self.cycle_count,
                before.pc,
                before.ir,
                disassemble(before.ir),
                result.state.acc,
                result.state.cf,
                result.state.zf,
            )
        if debug_enabled("pipeline") and result.state.skip is not before.skip:
            debug_log("pipeline", "cycle=%d skip %s -> %s", self.cycle_count, before.skip.name, result.state.skip.name)

        self.cycle_count += 1
        return result

    def run(self, cycles: int) -> int:
        """Clock the core ``cycles`` times and return the total cycle count."""

        if cycles < 0:
            raise CPUError(f"cycle count must not be negative: {cycles}")
        for _ in range(cycles):
            self.step()
        return self.cycle_count
